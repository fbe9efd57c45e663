"""Tests for the row mapper."""

import pytest
from sqlalchemy import text
from sqlalchemy.engine import Engine

from productstore.api.errors import MappingError
from productstore.database.row_mapper import map_order_row, map_product_row, map_rows
from productstore.domain import Order, Product


def _row(engine: Engine, sql: str):
    with engine.connect() as conn:
        return conn.execute(text(sql)).one()


class TestMapProductRow:
    def test_maps_scalar_fields(self, db_engine: Engine) -> None:
        product = map_product_row(_row(db_engine, "SELECT 1 AS id, 'Widget' AS name, 9.99 AS price"))
        assert product == Product(id=1, name="Widget", price=9.99)

    def test_orders_initialized_empty(self, db_engine: Engine) -> None:
        product = map_product_row(_row(db_engine, "SELECT 1 AS id, 'Widget' AS name, 9.99 AS price"))
        assert product.orders == []

    def test_aliased_id_column(self, db_engine: Engine) -> None:
        row = _row(db_engine, "SELECT 7 AS product_id, 'Bolt' AS name, 0 AS price")
        product = map_product_row(row, id_column="product_id")
        assert product.id == 7
        assert product.price == 0.0

    def test_numeric_string_price(self, db_engine: Engine) -> None:
        product = map_product_row(_row(db_engine, "SELECT 2 AS id, 'Nut' AS name, '1.50' AS price"))
        assert product.price == 1.5

    def test_missing_column(self, db_engine: Engine) -> None:
        with pytest.raises(MappingError, match="price"):
            map_product_row(_row(db_engine, "SELECT 1 AS id, 'Widget' AS name"))

    def test_malformed_price(self, db_engine: Engine) -> None:
        with pytest.raises(MappingError, match="malformed price"):
            map_product_row(_row(db_engine, "SELECT 1 AS id, 'Widget' AS name, 'abc' AS price"))

    def test_negative_price(self, db_engine: Engine) -> None:
        with pytest.raises(MappingError):
            map_product_row(_row(db_engine, "SELECT 1 AS id, 'Widget' AS name, -1 AS price"))

    def test_null_price(self, db_engine: Engine) -> None:
        with pytest.raises(MappingError):
            map_product_row(_row(db_engine, "SELECT 1 AS id, 'Widget' AS name, NULL AS price"))

    def test_empty_name(self, db_engine: Engine) -> None:
        with pytest.raises(MappingError, match="name"):
            map_product_row(_row(db_engine, "SELECT 1 AS id, '  ' AS name, 1 AS price"))

    def test_non_integer_id(self, db_engine: Engine) -> None:
        with pytest.raises(MappingError, match="integer identifier"):
            map_product_row(_row(db_engine, "SELECT 'x' AS id, 'Widget' AS name, 1 AS price"))


class TestMapOrderRow:
    def test_maps_user_id(self, db_engine: Engine) -> None:
        order = map_order_row(_row(db_engine, "SELECT 3 AS id, 42 AS user_id"))
        assert order == Order(id=3, user_id=42)
        assert order.products == []

    def test_null_user_id(self, db_engine: Engine) -> None:
        order = map_order_row(_row(db_engine, "SELECT 3 AS id, NULL AS user_id"))
        assert order.user_id is None

    def test_user_id_column_optional(self, db_engine: Engine) -> None:
        order = map_order_row(_row(db_engine, "SELECT 5 AS order_id"), id_column="order_id")
        assert order.id == 5
        assert order.user_id is None

    def test_malformed_user_id(self, db_engine: Engine) -> None:
        with pytest.raises(MappingError, match="user_id"):
            map_order_row(_row(db_engine, "SELECT 3 AS id, 'someone' AS user_id"))

    def test_missing_id(self, db_engine: Engine) -> None:
        with pytest.raises(MappingError, match="'id'"):
            map_order_row(_row(db_engine, "SELECT 42 AS user_id"))


class TestMapRows:
    def test_one_entity_per_row(self, db_engine: Engine) -> None:
        with db_engine.connect() as conn:
            result = conn.execute(text("SELECT 1 AS id, 10 AS user_id UNION ALL SELECT 2, 20 ORDER BY id"))
            orders = map_rows(result, map_order_row)
        assert [(o.id, o.user_id) for o in orders] == [(1, 10), (2, 20)]

    def test_empty_result(self, db_engine: Engine) -> None:
        with db_engine.connect() as conn:
            result = conn.execute(text("SELECT id, user_id FROM orders"))
            assert map_rows(result, map_order_row) == []
