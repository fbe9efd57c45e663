"""Shared pytest fixtures and helpers for the productstore tests."""

import os
import tempfile

# Keep test logs out of the project tree; must be set before productstore is imported
os.environ.setdefault("LOG_DIRECTORY", os.path.join(tempfile.gettempdir(), "productstore-test-logs"))
os.environ.setdefault("LOG_LEVEL", "INFO")

from pathlib import Path
from typing import Iterable, Optional

import pytest
from sqlalchemy import text
from sqlalchemy.engine import Engine

from productstore.config import Config
from productstore.database import init_sqlalchemy, dispose_sqlalchemy_engine
from productstore.database.order_repository import OrderRepository
from productstore.database.product_repository import ProductRepository
from productstore.domain import Order, Product
from productstore.services import OrderService, ProductService


@pytest.fixture
def database_uri(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'store.db'}"


@pytest.fixture
def db_engine(database_uri: str) -> Engine:
    """Initialized SQLite engine + session factory with all tables created."""
    engine = init_sqlalchemy(database_uri)
    try:
        yield engine
    finally:
        dispose_sqlalchemy_engine()


@pytest.fixture(params=["batch", "per_entity"])
def association_strategy(request) -> str:
    return request.param


@pytest.fixture
def product_repo(db_engine: Engine, association_strategy: str) -> ProductRepository:
    return ProductRepository(db_engine, association_strategy=association_strategy)


@pytest.fixture
def order_repo(db_engine: Engine, association_strategy: str) -> OrderRepository:
    return OrderRepository(db_engine, association_strategy=association_strategy)


@pytest.fixture
def product_service(product_repo: ProductRepository, order_repo: OrderRepository) -> ProductService:
    return ProductService(product_repo, order_repo)


@pytest.fixture
def order_service(order_repo: OrderRepository, product_repo: ProductRepository) -> OrderService:
    return OrderService(order_repo, product_repo)


@pytest.fixture
def app(database_uri: str):
    """Flask application bound to a temporary SQLite database."""
    from productstore.app import create_app

    config = Config(
        SQLALCHEMY_DATABASE_URI=database_uri,
        APP_DEBUG=True,
        LOG_LEVEL="INFO",
        DEFAULT_PAGE_SIZE=2,
        MAX_PAGE_SIZE=5,
        ASSOCIATION_LOAD_STRATEGY="batch",
    )
    flask_app = create_app(config)
    flask_app.config.update(TESTING=True)
    try:
        yield flask_app
    finally:
        dispose_sqlalchemy_engine()


@pytest.fixture
def client(app):
    return app.test_client()


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def seed_products(service: ProductService, count: int) -> list[Product]:
    return [service.create_product(f"Product {i}", float(i)) for i in range(1, count + 1)]


def seed_orders(service: OrderService, count: int) -> list[Order]:
    return [service.create_order(user_id=i) for i in range(1, count + 1)]


def join_rows(engine: Engine, product_id: Optional[int] = None) -> set[tuple[int, int]]:
    """(order_id, product_id) pairs currently stored in the join table."""
    sql = "SELECT order_id, product_id FROM orders_products"
    params = {}
    if product_id is not None:
        sql += " WHERE product_id = :product_id"
        params["product_id"] = product_id
    with engine.connect() as conn:
        return {(row.order_id, row.product_id) for row in conn.execute(text(sql), params)}


def ids(entities: Iterable) -> list[int]:
    return [entity.id for entity in entities]
