"""Tests for the Flask routes and error handlers."""

import pytest

from productstore.api.errors import (
    ApiError,
    AssociationLookupError,
    InconsistentGraphError,
    MappingError,
    OrderNotFoundError,
    PersistenceError,
    ValidationError,
)


def _create_product(client, name="Widget", price=9.99) -> dict:
    response = client.post("/api/products", json={"name": name, "price": price})
    assert response.status_code == 201
    return response.get_json()


def _create_order(client, **body) -> dict:
    response = client.post("/api/orders", json=body)
    assert response.status_code == 201
    return response.get_json()


class TestHealth:
    def test_ok(self, client) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.get_json()["database"] == "ok"


class TestProductRoutes:
    def test_create_and_get(self, client) -> None:
        created = _create_product(client)
        assert created == {"id": 1, "name": "Widget", "price": 9.99, "orders": []}

        response = client.get(f"/api/products/{created['id']}")
        assert response.status_code == 200
        assert response.get_json() == created

    def test_create_validation_error(self, client) -> None:
        response = client.post("/api/products", json={"name": "", "price": 1})
        assert response.status_code == 400
        assert "error" in response.get_json()

    def test_create_requires_json_object(self, client) -> None:
        response = client.post("/api/products", data="not json", content_type="text/plain")
        assert response.status_code == 400

    def test_get_missing(self, client) -> None:
        response = client.get("/api/products/42")
        assert response.status_code == 404
        assert response.get_json() == {"error": "Product with ID 42 not found."}

    @pytest.mark.parametrize("path", ["/api/products/99999999999999999999", "/api/products/2147483648/orders",
                                      "/api/orders/99999999999999999999"])
    def test_out_of_range_id_is_400(self, client, path: str) -> None:
        response = client.get(path)
        assert response.status_code == 400
        assert "between 1 and 2147483647" in response.get_json()["error"]

    def test_create_rejects_sub_cent_price(self, client) -> None:
        response = client.post("/api/products", json={"name": "Widget", "price": 9.999})
        assert response.status_code == 400
        assert client.get("/api/products").get_json() == []

    def test_list_pages(self, client) -> None:
        for i in range(3):
            _create_product(client, f"P{i}", i)
        first = client.get("/api/products").get_json()
        second = client.get("/api/products?page=2").get_json()
        assert [p["id"] for p in first] == [1, 2]
        assert [p["id"] for p in second] == [3]

    def test_list_size_capped(self, client) -> None:
        for i in range(6):
            _create_product(client, f"P{i}", i)
        response = client.get("/api/products?size=50")
        assert len(response.get_json()) == 5

    @pytest.mark.parametrize("query", ["page=0", "size=0", "page=abc", "page=99999999999999999999&size=2"])
    def test_list_bad_pagination(self, client, query: str) -> None:
        response = client.get(f"/api/products?{query}")
        assert response.status_code == 400

    def test_replace_orders(self, client) -> None:
        product = _create_product(client)
        order = _create_order(client, user_id=3)

        response = client.put(f"/api/products/{product['id']}/orders", json={"order_ids": [order["id"]]})
        assert response.status_code == 204

        orders = client.get(f"/api/products/{product['id']}/orders").get_json()
        assert orders == [{"id": order["id"], "user_id": 3,
                           "products": [{"id": product["id"], "name": "Widget", "price": 9.99}]}]

    def test_replace_orders_requires_field(self, client) -> None:
        product = _create_product(client)
        response = client.put(f"/api/products/{product['id']}/orders", json={})
        assert response.status_code == 400

    def test_replace_orders_unknown_ids(self, client) -> None:
        product = _create_product(client)
        response = client.put(f"/api/products/{product['id']}/orders", json={"order_ids": [7, 8]})
        assert response.status_code == 404
        assert response.get_json()["missing_ids"] == [7, 8]

    def test_update(self, client) -> None:
        product = _create_product(client)
        response = client.put(f"/api/products/{product['id']}", json={"name": "Gizmo", "price": 1.5})
        assert response.status_code == 204
        assert client.get(f"/api/products/{product['id']}").get_json()["name"] == "Gizmo"

    def test_delete(self, client) -> None:
        product = _create_product(client)
        assert client.delete(f"/api/products/{product['id']}").status_code == 204
        assert client.get(f"/api/products/{product['id']}").status_code == 404


class TestOrderRoutes:
    def test_create_without_body(self, client) -> None:
        response = client.post("/api/orders")
        assert response.status_code == 201
        assert response.get_json() == {"id": 1, "user_id": None, "products": []}

    def test_create_with_products(self, client) -> None:
        product = _create_product(client)
        order = _create_order(client, user_id=9, product_ids=[product["id"]])
        assert [p["id"] for p in order["products"]] == [product["id"]]

        fetched = client.get(f"/api/orders/{order['id']}").get_json()
        assert fetched == order

    def test_replace_products_and_list(self, client) -> None:
        first = _create_product(client, "A", 1)
        second = _create_product(client, "B", 2)
        order = _create_order(client)

        response = client.put(f"/api/orders/{order['id']}/products",
                              json={"product_ids": [second["id"], first["id"]]})
        assert response.status_code == 204
        products = client.get(f"/api/orders/{order['id']}/products").get_json()
        assert [p["id"] for p in products] == [first["id"], second["id"]]

    def test_update(self, client) -> None:
        order = _create_order(client, user_id=1)
        response = client.put(f"/api/orders/{order['id']}", json={"user_id": 2, "product_ids": []})
        assert response.status_code == 204
        assert client.get(f"/api/orders/{order['id']}").get_json()["user_id"] == 2

    def test_delete_missing(self, client) -> None:
        response = client.delete("/api/orders/5")
        assert response.status_code == 404


class TestErrorHandlers:
    def test_unknown_route(self, client) -> None:
        response = client.get("/api/nothing")
        assert response.status_code == 404
        assert "error" in response.get_json()

    def test_method_not_allowed(self, client) -> None:
        response = client.patch("/api/products")
        assert response.status_code == 405

    def test_persistence_error_is_500(self, app, client) -> None:
        service = app.config["product_service"]

        def broken(*args, **kwargs):
            raise AssociationLookupError("Query failed: injected")

        service.get_products_page = broken
        response = client.get("/api/products")
        assert response.status_code == 500
        assert response.get_json() == {"error": "Query failed: injected"}


class TestErrorHierarchy:
    def test_status_codes(self) -> None:
        assert ValidationError().status_code == 400
        assert OrderNotFoundError().status_code == 404
        assert PersistenceError().status_code == 500
        assert MappingError().status_code == 500

    def test_lookup_error_is_persistence_error(self) -> None:
        assert issubclass(AssociationLookupError, PersistenceError)

    def test_inconsistent_graph_is_mapping_error(self) -> None:
        assert issubclass(InconsistentGraphError, MappingError)
        assert InconsistentGraphError().status_code == 500

    def test_to_dict_includes_payload(self) -> None:
        error = OrderNotFoundError("Orders not found: [3].", payload={"missing_ids": [3]})
        assert error.to_dict() == {"missing_ids": [3], "error": "Orders not found: [3]."}
        assert str(error) == "Orders not found: [3]."

    def test_default_message(self) -> None:
        assert str(ApiError()) == "An internal server error occurred."
