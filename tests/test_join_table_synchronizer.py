"""Tests for full-replace synchronization of the join table."""

import pytest
from sqlalchemy import text
from sqlalchemy.engine import Engine

from productstore.api.errors import PersistenceError, ValidationError
from productstore.database import get_db_session
from productstore.database import join_table_synchronizer as sync_module
from productstore.database.associations import ORDER_SIDE, PRODUCT_SIDE
from productstore.database.graph_builder import link
from productstore.database.join_table_synchronizer import JoinTableSynchronizer
from productstore.domain import Order, Product
from tests.conftest import join_rows


@pytest.fixture
def seeded(db_engine: Engine) -> Engine:
    with db_engine.begin() as conn:
        conn.execute(text("INSERT INTO products (id, name, price) VALUES (1, 'Widget', 9.99), (2, 'Gadget', 5.0)"))
        conn.execute(text("INSERT INTO orders (id, user_id) VALUES (1, NULL), (2, NULL), (3, NULL)"))
    return db_engine


@pytest.fixture
def synchronizer() -> JoinTableSynchronizer:
    return JoinTableSynchronizer()


class TestSynchronizeIds:
    def test_writes_exactly_the_new_set(self, seeded: Engine, synchronizer: JoinTableSynchronizer) -> None:
        with get_db_session() as db:
            synchronizer.synchronize_ids(db, PRODUCT_SIDE, 1, [1, 3])
        assert join_rows(seeded, product_id=1) == {(1, 1), (3, 1)}

    def test_replaces_previous_set(self, seeded: Engine, synchronizer: JoinTableSynchronizer) -> None:
        with get_db_session() as db:
            synchronizer.synchronize_ids(db, PRODUCT_SIDE, 1, [1, 2])
        with get_db_session() as db:
            synchronizer.synchronize_ids(db, PRODUCT_SIDE, 1, [2])
        assert join_rows(seeded, product_id=1) == {(2, 1)}

    def test_empty_set_clears(self, seeded: Engine, synchronizer: JoinTableSynchronizer) -> None:
        with get_db_session() as db:
            synchronizer.synchronize_ids(db, PRODUCT_SIDE, 1, [1, 2])
        with get_db_session() as db:
            assert synchronizer.synchronize_ids(db, PRODUCT_SIDE, 1, []) == []
        assert join_rows(seeded, product_id=1) == set()

    def test_duplicates_collapsed(self, seeded: Engine, synchronizer: JoinTableSynchronizer) -> None:
        with get_db_session() as db:
            written = synchronizer.synchronize_ids(db, PRODUCT_SIDE, 1, [2, 1, 2])
        assert written == [2, 1]
        assert join_rows(seeded, product_id=1) == {(1, 1), (2, 1)}

    def test_other_owners_untouched(self, seeded: Engine, synchronizer: JoinTableSynchronizer) -> None:
        with get_db_session() as db:
            synchronizer.synchronize_ids(db, PRODUCT_SIDE, 2, [1])
            synchronizer.synchronize_ids(db, PRODUCT_SIDE, 1, [2])
        assert join_rows(seeded) == {(1, 2), (2, 1)}

    def test_order_side(self, seeded: Engine, synchronizer: JoinTableSynchronizer) -> None:
        with get_db_session() as db:
            synchronizer.synchronize_ids(db, ORDER_SIDE, 3, [1, 2])
        assert join_rows(seeded) == {(3, 1), (3, 2)}

    def test_unknown_related_id_fails(self, seeded: Engine, synchronizer: JoinTableSynchronizer) -> None:
        with pytest.raises(PersistenceError):
            with get_db_session() as db:
                synchronizer.synchronize_ids(db, PRODUCT_SIDE, 1, [999])

    def test_failed_insert_keeps_old_links(self, seeded: Engine, synchronizer: JoinTableSynchronizer,
                                           monkeypatch: pytest.MonkeyPatch) -> None:
        with get_db_session() as db:
            synchronizer.synchronize_ids(db, PRODUCT_SIDE, 1, [1])

        real_update = sync_module.execute_update

        def failing_insert(db, sql, params):
            if sql.startswith("INSERT"):
                raise PersistenceError("Update failed: injected")
            return real_update(db, sql, params)

        monkeypatch.setattr(sync_module, "execute_update", failing_insert)
        with pytest.raises(PersistenceError, match="injected"):
            with get_db_session() as db:
                synchronizer.synchronize_ids(db, PRODUCT_SIDE, 1, [2, 3])

        assert join_rows(seeded, product_id=1) == {(1, 1)}


class TestSynchronize:
    def test_links_in_memory(self, seeded: Engine, synchronizer: JoinTableSynchronizer) -> None:
        product = Product(id=1, name="Widget", price=9.99)
        orders = [Order(id=1), Order(id=2)]
        with get_db_session() as db:
            synchronizer.synchronize(db, product, orders)
        assert product.orders == orders
        assert all(order.products[0] is product for order in orders)

    def test_dropped_entities_unlinked(self, seeded: Engine, synchronizer: JoinTableSynchronizer) -> None:
        product = Product(id=1, name="Widget", price=9.99)
        old, kept = Order(id=1), Order(id=2)
        link(product, [old, kept])
        with get_db_session() as db:
            synchronizer.synchronize(db, product, [kept])
        assert product.orders == [kept]
        assert old.products == []
        assert kept.products == [product]

    def test_stale_same_id_copy_replaced(self, seeded: Engine, synchronizer: JoinTableSynchronizer) -> None:
        product = Product(id=1, name="Widget", price=9.99)
        stale = Order(id=2)
        link(product, [stale])
        fresh = Order(id=2)
        with get_db_session() as db:
            synchronizer.synchronize(db, product, [fresh])
        assert len(product.orders) == 1
        assert product.orders[0] is fresh
        assert stale.products == []

    def test_duplicate_entities_collapsed(self, seeded: Engine, synchronizer: JoinTableSynchronizer) -> None:
        product = Product(id=1, name="Widget", price=9.99)
        order = Order(id=1)
        with get_db_session() as db:
            synchronizer.synchronize(db, product, [order, Order(id=1)])
        assert product.orders == [order]
        assert join_rows(seeded, product_id=1) == {(1, 1)}

    def test_unsaved_owner(self, synchronizer: JoinTableSynchronizer) -> None:
        with pytest.raises(ValidationError, match="unsaved"):
            synchronizer.synchronize(None, Product(name="New", price=1.0), [])

    def test_unsaved_related(self, synchronizer: JoinTableSynchronizer) -> None:
        with pytest.raises(ValidationError, match="unsaved"):
            synchronizer.synchronize(None, Product(id=1, name="Widget", price=1.0), [Order()])

    def test_wrong_related_type(self, synchronizer: JoinTableSynchronizer) -> None:
        with pytest.raises(ValidationError, match="can only be associated"):
            synchronizer.synchronize(None, Product(id=1, name="Widget", price=1.0),
                                     [Product(id=2, name="Gadget", price=1.0)])

    def test_failure_leaves_memory_untouched(self, seeded: Engine, synchronizer: JoinTableSynchronizer,
                                             monkeypatch: pytest.MonkeyPatch) -> None:
        product = Product(id=1, name="Widget", price=9.99)
        old = Order(id=1)
        link(product, [old])

        def failing_update(db, sql, params):
            raise PersistenceError("Update failed: injected")

        monkeypatch.setattr(sync_module, "execute_update", failing_update)
        with pytest.raises(PersistenceError):
            with get_db_session() as db:
                synchronizer.synchronize(db, product, [Order(id=2)])
        assert product.orders == [old]
        assert old.products == [product]
