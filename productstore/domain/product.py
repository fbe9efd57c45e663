# productstore/domain/product.py
# Defines the Product entity.

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .order import Order

@dataclass
class Product:
    """
    A product that can belong to many orders.

    `orders` holds the in-memory side of the Product<->Order association. It is
    excluded from equality and repr: the graph is cyclic (each order points back
    at its products), and two products are equal when their scalar fields are.
    """
    name: str
    price: float
    id: Optional[int] = None
    orders: List['Order'] = field(default_factory=list, compare=False, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        """Converts the Product to a dictionary; orders are rendered as summaries."""
        return {
            'id': self.id,
            'name': self.name,
            'price': self.price,
            'orders': [order.to_summary() for order in self.orders],
        }

    def to_summary(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'price': self.price}
