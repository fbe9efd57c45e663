# productstore/services/product_service.py
# Business logic for products and their order associations.

from typing import Any, Iterable, List, Optional

from productstore.database import get_db_session
from productstore.database.product_repository import ProductRepository
from productstore.database.order_repository import OrderRepository
from productstore.domain import Product, Order
from productstore.utils.logger import logger
from productstore.api.errors import ProductNotFoundError, OrderNotFoundError
from .decorators import service_operation
from .validation import validate_id, validate_ids, validate_name, validate_price

class ProductService:
    """
    Service layer for products. Each public method runs in its own database
    session (committed on success, rolled back on failure).

    Error policy: ValidationError for bad input, ProductNotFoundError /
    OrderNotFoundError for unknown ids, PersistenceError and MappingError are
    propagated as raised by the data layer. Every public operation wraps
    unexpected exceptions into ServiceError (see service_operation).
    """

    def __init__(self, product_repository: ProductRepository, order_repository: OrderRepository):
        self.product_repository = product_repository
        self.order_repository = order_repository
        logger.info("ProductService initialized.")

    @service_operation("creating the product")
    def create_product(self, name: Any, price: Any) -> Product:
        """Creates a product with an empty order list and returns it with its new id."""
        product = Product(name=validate_name(name), price=validate_price(price))
        logger.info(f"Creating product '{product.name}' (price {product.price}).")
        with get_db_session() as db:
            created = self.product_repository.add(db, product)
        logger.info(f"Product created with ID {created.id}.")
        return created

    @service_operation("fetching the product")
    def get_product(self, product_id: Any) -> Product:
        """Returns the product with its orders linked in both directions."""
        product_id = validate_id(product_id, "product ID")
        with get_db_session() as db:
            product = self.product_repository.find_by_id(db, product_id)
        if product is None:
            raise ProductNotFoundError(f"Product with ID {product_id} not found.")
        return product

    @service_operation("fetching the product with its orders")
    def get_product_with_orders(self, product_id: Any) -> Product:
        """Same result as get_product, loaded with a single joined query."""
        product_id = validate_id(product_id, "product ID")
        with get_db_session() as db:
            product = self.product_repository.find_with_orders(db, product_id)
        if product is None:
            raise ProductNotFoundError(f"Product with ID {product_id} not found.")
        return product

    @service_operation("fetching a page of products")
    def get_products_page(self, page_number: int, page_size: int) -> List[Product]:
        logger.debug(f"Fetching products page {page_number} (size {page_size}).")
        with get_db_session() as db:
            return self.product_repository.get_page(db, page_number, page_size)

    @service_operation("listing products")
    def get_all_products(self) -> List[Product]:
        with get_db_session() as db:
            return self.product_repository.get_all(db)

    @service_operation("updating the product")
    def update_product(self, product_id: Any, name: Any, price: Any,
                       order_ids: Optional[Iterable[Any]] = None) -> Product:
        """
        Updates name and price. When `order_ids` is given (even empty) the
        product's order set is fully replaced in the same transaction.
        """
        product_id = validate_id(product_id, "product ID")
        product = Product(id=product_id, name=validate_name(name), price=validate_price(price))
        new_order_ids = validate_ids(order_ids, "order ID") if order_ids is not None else None

        logger.info(f"Updating product {product_id}.")
        with get_db_session() as db:
            if not self.product_repository.update(db, product):
                raise ProductNotFoundError(f"Product with ID {product_id} not found.")
            if new_order_ids is not None:
                orders = self._load_orders(db, new_order_ids)
                self.product_repository.replace_associations(db, product, orders)
            else:
                product = self.product_repository.find_by_id(db, product_id)
        return product

    @service_operation("deleting the product")
    def delete_product(self, product_id: Any) -> None:
        product_id = validate_id(product_id, "product ID")
        logger.info(f"Deleting product {product_id}.")
        with get_db_session() as db:
            if not self.product_repository.delete(db, product_id):
                raise ProductNotFoundError(f"Product with ID {product_id} not found.")

    @service_operation("fetching the orders of the product")
    def get_orders_for_product(self, product_id: Any) -> List[Order]:
        """Orders of the product; each order's `products` holds the product."""
        product_id = validate_id(product_id, "product ID")
        with get_db_session() as db:
            product = self.product_repository.find_by_id(db, product_id)
        if product is None:
            raise ProductNotFoundError(f"Product with ID {product_id} not found.")
        return list(product.orders)

    @service_operation("replacing the orders of the product")
    def replace_product_orders(self, product_id: Any, order_ids: Iterable[Any]) -> Product:
        """
        Makes `order_ids` the complete order set of the product (full replace).
        Every id must exist; duplicates are collapsed.
        """
        product_id = validate_id(product_id, "product ID")
        new_order_ids = validate_ids(order_ids, "order ID")
        logger.info(f"Replacing orders of product {product_id} with {new_order_ids}.")
        with get_db_session() as db:
            product = self.product_repository.find_by_id(db, product_id)
            if product is None:
                raise ProductNotFoundError(f"Product with ID {product_id} not found.")
            orders = self._load_orders(db, new_order_ids)
            return self.product_repository.replace_associations(db, product, orders)

    def _load_orders(self, db, order_ids: List[int]) -> List[Order]:
        missing = self.order_repository.find_missing_ids(db, order_ids)
        if missing:
            raise OrderNotFoundError(f"Orders not found: {missing}.", payload={"missing_ids": missing})
        return self.order_repository.load_by_ids(db, order_ids)
