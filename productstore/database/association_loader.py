# productstore/database/association_loader.py
# Secondary lookups fetching the entities related to an owner through the join table.

from collections import OrderedDict
from typing import Dict, Iterable, List, Optional
from sqlalchemy import bindparam, text
from sqlalchemy.orm import Session

from productstore.domain import Product, Order
from productstore.utils.logger import logger
from productstore.api.errors import AssociationLookupError
from .executor import execute_query
from .graph_builder import EntityArena
from .row_mapper import map_order_row, map_product_row

ORDERS_BY_PRODUCT_SQL = """
    SELECT o.id AS order_id, o.user_id
    FROM orders o
    JOIN orders_products op ON o.id = op.order_id
    WHERE op.product_id = :product_id
    ORDER BY o.id
"""

PRODUCTS_BY_ORDER_SQL = """
    SELECT p.id AS product_id, p.name, p.price
    FROM products p
    JOIN orders_products op ON p.id = op.product_id
    WHERE op.order_id = :order_id
    ORDER BY p.id
"""

ORDERS_BY_PRODUCTS_SQL = text("""
    SELECT op.product_id AS owner_id, o.id AS order_id, o.user_id
    FROM orders o
    JOIN orders_products op ON o.id = op.order_id
    WHERE op.product_id IN :owner_ids
    ORDER BY op.product_id, o.id
""").bindparams(bindparam("owner_ids", expanding=True))

PRODUCTS_BY_ORDERS_SQL = text("""
    SELECT op.order_id AS owner_id, p.id AS product_id, p.name, p.price
    FROM products p
    JOIN orders_products op ON p.id = op.product_id
    WHERE op.order_id IN :owner_ids
    ORDER BY op.order_id, p.id
""").bindparams(bindparam("owner_ids", expanding=True))

def _map_order(row) -> Order:
    return map_order_row(row, id_column="order_id")

def _map_product(row) -> Product:
    return map_product_row(row, id_column="product_id")

def _resolve(entity, arena: Optional[EntityArena]):
    return arena.resolve(entity) if arena is not None else entity

def load_associated_orders(db: Session, product_id: int, arena: Optional[EntityArena] = None) -> List[Order]:
    """
    Loads the orders linked to `product_id`. The orders come back with empty
    `products` lists (unless an arena hands back an instance already linked in
    this operation). No rows means an empty list.
    """
    logger.debug(f"Loading orders associated with product {product_id}")
    return execute_query(
        db, ORDERS_BY_PRODUCT_SQL, {"product_id": product_id},
        lambda rs: [_resolve(_map_order(row), arena) for row in rs],
        error_cls=AssociationLookupError,
    )

def load_associated_products(db: Session, order_id: int, arena: Optional[EntityArena] = None) -> List[Product]:
    """Symmetric to load_associated_orders, for the products of an order."""
    logger.debug(f"Loading products associated with order {order_id}")
    return execute_query(
        db, PRODUCTS_BY_ORDER_SQL, {"order_id": order_id},
        lambda rs: [_resolve(_map_product(row), arena) for row in rs],
        error_cls=AssociationLookupError,
    )

def _load_grouped(db: Session, sql, owner_ids: Iterable[int], mapper, arena: Optional[EntityArena]) -> Dict[int, list]:
    grouped: Dict[int, list] = OrderedDict((owner_id, []) for owner_id in owner_ids)
    if not grouped:
        return grouped

    def consume(rs):
        for row in rs:
            grouped[row._mapping["owner_id"]].append(_resolve(mapper(row), arena))
        return grouped

    return execute_query(db, sql, {"owner_ids": list(grouped)}, consume, error_cls=AssociationLookupError)

def load_orders_for_products(db: Session, product_ids: Iterable[int],
                             arena: Optional[EntityArena] = None) -> Dict[int, List[Order]]:
    """
    Loads the orders of many products in one query. Every requested product id
    is a key of the result, with an empty list when it has no orders.
    """
    logger.debug("Batch loading orders for products")
    return _load_grouped(db, ORDERS_BY_PRODUCTS_SQL, product_ids, _map_order, arena)

def load_products_for_orders(db: Session, order_ids: Iterable[int],
                             arena: Optional[EntityArena] = None) -> Dict[int, List[Product]]:
    """Batch counterpart of load_associated_products."""
    logger.debug("Batch loading products for orders")
    return _load_grouped(db, PRODUCTS_BY_ORDERS_SQL, order_ids, _map_product, arena)
