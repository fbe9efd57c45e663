# productstore/database/associations.py
# Describes the two sides of the Product <-> Order association.

from dataclasses import dataclass
from typing import Any, List, Type, Union

from productstore.domain import Product, Order
from .tables import JOIN_TABLE

@dataclass(frozen=True)
class AssociationSide:
    """
    One direction of the association, seen from its owner.

    owner_column / related_column: join-table columns pointing at the owner and at the related entity.
    owner_attr: attribute on the owner holding the related entities.
    reciprocal_attr: attribute on a related entity holding its owners.
    """
    owner_type: Type
    related_type: Type
    owner_column: str
    related_column: str
    owner_attr: str
    reciprocal_attr: str

    def related_of(self, owner) -> List[Any]:
        return getattr(owner, self.owner_attr)

    def owners_of(self, related) -> List[Any]:
        return getattr(related, self.reciprocal_attr)

PRODUCT_SIDE = AssociationSide(
    owner_type=Product,
    related_type=Order,
    owner_column="product_id",
    related_column="order_id",
    owner_attr="orders",
    reciprocal_attr="products",
)

ORDER_SIDE = AssociationSide(
    owner_type=Order,
    related_type=Product,
    owner_column="order_id",
    related_column="product_id",
    owner_attr="products",
    reciprocal_attr="orders",
)

def side_for(owner: Union[Product, Order]) -> AssociationSide:
    """Returns the association side for which `owner` is the owning entity."""
    if isinstance(owner, Product):
        return PRODUCT_SIDE
    if isinstance(owner, Order):
        return ORDER_SIDE
    raise TypeError(f"No association side for {type(owner).__name__}")

__all__ = ["AssociationSide", "PRODUCT_SIDE", "ORDER_SIDE", "side_for", "JOIN_TABLE"]
