# productstore/services/order_service.py
# Business logic for orders and their product associations.

from typing import Any, Iterable, List, Optional

from productstore.database import get_db_session
from productstore.database.order_repository import OrderRepository
from productstore.database.product_repository import ProductRepository
from productstore.domain import Order, Product
from productstore.utils.logger import logger
from productstore.api.errors import OrderNotFoundError, ProductNotFoundError
from .decorators import service_operation
from .validation import validate_id, validate_ids, validate_optional_id

class OrderService:
    """Service layer for orders; same session and error policy (service_operation) as ProductService."""

    def __init__(self, order_repository: OrderRepository, product_repository: ProductRepository):
        self.order_repository = order_repository
        self.product_repository = product_repository
        logger.info("OrderService initialized.")

    @service_operation("creating the order")
    def create_order(self, user_id: Any = None, product_ids: Optional[Iterable[Any]] = None) -> Order:
        """
        Creates an order. With `product_ids` the new order's product set is
        written in the same transaction; otherwise it starts empty.
        """
        order = Order(user_id=validate_optional_id(user_id, "user ID"))
        new_product_ids = validate_ids(product_ids, "product ID") if product_ids is not None else None
        logger.info(f"Creating order for user {order.user_id}.")
        with get_db_session() as db:
            created = self.order_repository.add(db, order)
            if new_product_ids:
                products = self._load_products(db, new_product_ids)
                self.order_repository.replace_associations(db, created, products)
        logger.info(f"Order created with ID {created.id}.")
        return created

    @service_operation("fetching the order")
    def get_order(self, order_id: Any) -> Order:
        """Returns the order with its products linked in both directions."""
        order_id = validate_id(order_id, "order ID")
        with get_db_session() as db:
            order = self.order_repository.find_by_id(db, order_id)
        if order is None:
            raise OrderNotFoundError(f"Order with ID {order_id} not found.")
        return order

    @service_operation("fetching the order with its products")
    def get_order_with_products(self, order_id: Any) -> Order:
        order_id = validate_id(order_id, "order ID")
        with get_db_session() as db:
            order = self.order_repository.find_with_products(db, order_id)
        if order is None:
            raise OrderNotFoundError(f"Order with ID {order_id} not found.")
        return order

    @service_operation("fetching a page of orders")
    def get_orders_page(self, page_number: int, page_size: int) -> List[Order]:
        logger.debug(f"Fetching orders page {page_number} (size {page_size}).")
        with get_db_session() as db:
            return self.order_repository.get_page(db, page_number, page_size)

    @service_operation("listing orders")
    def get_all_orders(self) -> List[Order]:
        with get_db_session() as db:
            return self.order_repository.get_all(db)

    @service_operation("updating the order")
    def update_order(self, order_id: Any, user_id: Any = None,
                     product_ids: Optional[Iterable[Any]] = None) -> Order:
        """Updates the order's user reference; `product_ids`, when given, replaces the product set."""
        order_id = validate_id(order_id, "order ID")
        order = Order(id=order_id, user_id=validate_optional_id(user_id, "user ID"))
        new_product_ids = validate_ids(product_ids, "product ID") if product_ids is not None else None

        logger.info(f"Updating order {order_id}.")
        with get_db_session() as db:
            if not self.order_repository.update(db, order):
                raise OrderNotFoundError(f"Order with ID {order_id} not found.")
            if new_product_ids is not None:
                products = self._load_products(db, new_product_ids)
                self.order_repository.replace_associations(db, order, products)
            else:
                order = self.order_repository.find_by_id(db, order_id)
        return order

    @service_operation("deleting the order")
    def delete_order(self, order_id: Any) -> None:
        order_id = validate_id(order_id, "order ID")
        logger.info(f"Deleting order {order_id}.")
        with get_db_session() as db:
            if not self.order_repository.delete(db, order_id):
                raise OrderNotFoundError(f"Order with ID {order_id} not found.")

    @service_operation("fetching the products of the order")
    def get_products_for_order(self, order_id: Any) -> List[Product]:
        order_id = validate_id(order_id, "order ID")
        with get_db_session() as db:
            order = self.order_repository.find_by_id(db, order_id)
        if order is None:
            raise OrderNotFoundError(f"Order with ID {order_id} not found.")
        return list(order.products)

    @service_operation("replacing the products of the order")
    def replace_order_products(self, order_id: Any, product_ids: Iterable[Any]) -> Order:
        """Makes `product_ids` the complete product set of the order (full replace)."""
        order_id = validate_id(order_id, "order ID")
        new_product_ids = validate_ids(product_ids, "product ID")
        logger.info(f"Replacing products of order {order_id} with {new_product_ids}.")
        with get_db_session() as db:
            order = self.order_repository.find_by_id(db, order_id)
            if order is None:
                raise OrderNotFoundError(f"Order with ID {order_id} not found.")
            products = self._load_products(db, new_product_ids)
            return self.order_repository.replace_associations(db, order, products)

    def _load_products(self, db, product_ids: List[int]) -> List[Product]:
        missing = self.product_repository.find_missing_ids(db, product_ids)
        if missing:
            raise ProductNotFoundError(f"Products not found: {missing}.", payload={"missing_ids": missing})
        return self.product_repository.load_by_ids(db, product_ids)
