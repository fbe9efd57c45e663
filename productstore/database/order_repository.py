# productstore/database/order_repository.py
# Handles database operations for orders and their side of the product association.

from typing import List, Optional
from sqlalchemy.orm import Session

from productstore.domain import Order, Product
from productstore.utils.logger import logger
from productstore.api.errors import ValidationError
from .associations import ORDER_SIDE
from .association_loader import load_associated_products, load_products_for_orders
from .base_repository import BaseRepository
from .executor import execute_insert, execute_query, execute_update, single_generated_key
from .graph_builder import build_from_joined_rows, link
from .row_mapper import map_order_row, map_product_row
from .tables import ORDERS_TABLE

ORDER_WITH_PRODUCTS_SQL = """
    SELECT o.id, o.user_id, p.id AS product_id, p.name, p.price
    FROM orders o
    LEFT JOIN orders_products op ON o.id = op.order_id
    LEFT JOIN products p ON op.product_id = p.id
    WHERE o.id = :id
    ORDER BY p.id
"""

class OrderRepository(BaseRepository):
    """Repository for orders; mirror image of ProductRepository."""
    side = ORDER_SIDE
    table = ORDERS_TABLE
    select_sql = "SELECT id, user_id FROM orders"
    row_mapper = staticmethod(map_order_row)
    load_one = staticmethod(load_associated_products)
    load_many = staticmethod(load_products_for_orders)

    def add(self, db: Session, order: Order) -> Order:
        """Inserts the order and assigns its generated id. Join rows are not written."""
        if order.id is not None:
            raise ValidationError(f"Order already has an ID ({order.id}); use update instead.")

        logger.debug(f"Adding order for user {order.user_id}")
        order.id = execute_insert(
            db,
            "INSERT INTO orders (user_id) VALUES (:user_id) RETURNING id",
            {"user_id": order.user_id},
            single_generated_key,
        )
        if order.products is None:
            order.products = []
        link(order, list(order.products))
        logger.info(f"Order added (ID: {order.id}). Commit pending.")
        return order

    def update(self, db: Session, order: Order) -> bool:
        """Updates the order's scalar fields. Returns False when no order has that id."""
        if order.id is None:
            raise ValidationError("Cannot update an order without an ID.")
        logger.debug(f"Updating order ID {order.id}")
        updated = execute_update(
            db,
            "UPDATE orders SET user_id = :user_id WHERE id = :id",
            {"user_id": order.user_id, "id": order.id},
        )
        if updated:
            logger.info(f"Order ID {order.id} updated. Commit pending.")
        else:
            logger.warning(f"Attempted to update order ID {order.id}, but it was not found.")
        return bool(updated)

    def find_with_products(self, db: Session, order_id: int) -> Optional[Order]:
        """Loads an order and its products with a single LEFT JOIN query."""
        logger.debug(f"Finding order {order_id} with products (joined query)")
        return execute_query(
            db, ORDER_WITH_PRODUCTS_SQL, {"id": order_id},
            lambda rs: build_from_joined_rows(
                rs, map_order_row, lambda row: map_product_row(row, id_column="product_id"), "product_id"
            ),
        )

    def get_associated_products(self, db: Session, order_id: int) -> List[Product]:
        return self.get_associated(db, order_id)
