# productstore/services/__init__.py
# Makes 'services' a package. Exports service classes.

from .product_service import ProductService
from .order_service import OrderService

__all__ = [
    "ProductService",
    "OrderService",
]
