# productstore/domain/__init__.py
# Makes 'domain' a package. Exports the entities.

from .product import Product
from .order import Order

__all__ = [
    "Product",
    "Order",
]
