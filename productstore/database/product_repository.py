# productstore/database/product_repository.py
# Handles database operations for products and their side of the order association.

from typing import List, Optional
from sqlalchemy.orm import Session

from productstore.domain import Product, Order
from productstore.utils.logger import logger
from productstore.api.errors import ValidationError
from .associations import PRODUCT_SIDE
from .association_loader import load_associated_orders, load_orders_for_products
from .base_repository import BaseRepository
from .executor import execute_insert, execute_query, execute_update, single_generated_key
from .graph_builder import build_from_joined_rows, link
from .row_mapper import map_order_row, map_product_row
from .tables import PRODUCTS_TABLE

PRODUCT_WITH_ORDERS_SQL = """
    SELECT p.id, p.name, p.price, o.id AS order_id, o.user_id
    FROM products p
    LEFT JOIN orders_products op ON p.id = op.product_id
    LEFT JOIN orders o ON op.order_id = o.id
    WHERE p.id = :id
    ORDER BY o.id
"""

class ProductRepository(BaseRepository):
    """
    Repository for products. Reads return products with their orders linked in
    both directions; writes touch only the products table, except
    replace_associations which rewrites the product's join rows.
    """
    side = PRODUCT_SIDE
    table = PRODUCTS_TABLE
    select_sql = "SELECT id, name, price FROM products"
    row_mapper = staticmethod(map_product_row)
    load_one = staticmethod(load_associated_orders)
    load_many = staticmethod(load_orders_for_products)

    def add(self, db: Session, product: Product) -> Product:
        """
        Inserts the product's scalar fields and assigns the generated id.

        Orders already attached in memory get the product appended to their
        `products` list; no join rows are written here.
        """
        if product.id is not None:
            raise ValidationError(f"Product already has an ID ({product.id}); use update instead.")

        logger.debug(f"Adding product '{product.name}'")
        product.id = execute_insert(
            db,
            "INSERT INTO products (name, price) VALUES (:name, :price) RETURNING id",
            {"name": product.name, "price": product.price},
            single_generated_key,
        )
        if product.orders is None:
            product.orders = []
        link(product, list(product.orders))
        logger.info(f"Product '{product.name}' added (ID: {product.id}). Commit pending.")
        return product

    def update(self, db: Session, product: Product) -> bool:
        """Updates name and price. Returns False when no product has that id."""
        if product.id is None:
            raise ValidationError("Cannot update a product without an ID.")
        logger.debug(f"Updating product ID {product.id}")
        updated = execute_update(
            db,
            "UPDATE products SET name = :name, price = :price WHERE id = :id",
            {"name": product.name, "price": product.price, "id": product.id},
        )
        if updated:
            logger.info(f"Product ID {product.id} updated. Commit pending.")
        else:
            logger.warning(f"Attempted to update product ID {product.id}, but it was not found.")
        return bool(updated)

    def find_with_orders(self, db: Session, product_id: int) -> Optional[Product]:
        """Loads a product and its orders with a single LEFT JOIN query."""
        logger.debug(f"Finding product {product_id} with orders (joined query)")
        return execute_query(
            db, PRODUCT_WITH_ORDERS_SQL, {"id": product_id},
            lambda rs: build_from_joined_rows(
                rs, map_product_row, lambda row: map_order_row(row, id_column="order_id"), "order_id"
            ),
        )

    def get_associated_orders(self, db: Session, product_id: int) -> List[Order]:
        return self.get_associated(db, product_id)
