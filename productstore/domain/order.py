# productstore/domain/order.py
# Defines the Order entity.

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .product import Product

@dataclass
class Order:
    """
    An order grouping many products. The owning user is only referenced by id.

    Like Product, the association list is left out of equality and repr.
    """
    id: Optional[int] = None
    user_id: Optional[int] = None
    products: List['Product'] = field(default_factory=list, compare=False, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        """Converts the Order to a dictionary; products are rendered as summaries."""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'products': [product.to_summary() for product in self.products],
        }

    def to_summary(self) -> Dict[str, Any]:
        return {'id': self.id, 'user_id': self.user_id}
