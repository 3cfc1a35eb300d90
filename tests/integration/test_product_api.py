"""Integration tests for the catalog endpoints."""

import uuid
from decimal import Decimal

import pytest

from modules.products.models import Product

pytestmark = pytest.mark.integration

PRODUCTS_URL = "/api/v1/products/"


@pytest.fixture()
def catalog(make_product):
    return {
        "lamp": make_product(name="Desk Lamp", price=Decimal("49.90"), stock_quantity=4),
        "chair": make_product(name="Office Chair", price=Decimal("199.00"), stock_quantity=0),
        "retired": make_product(name="Old Lamp", price=Decimal("5.00"), is_active=False),
    }


class TestBrowse:
    def test_anonymous_can_list_active_products(self, api_client, catalog):
        response = api_client.get(PRODUCTS_URL)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        names = [p["name"] for p in body["data"]]
        assert names == ["Desk Lamp", "Office Chair"]

    def test_price_serialized_as_decimal_string(self, api_client, catalog):
        response = api_client.get(f"{PRODUCTS_URL}{catalog['lamp'].id}/")
        assert response.json()["data"]["price"] == "49.90"

    def test_include_inactive_honoured_for_admin(self, admin_client, catalog):
        response = admin_client.get(PRODUCTS_URL, {"include_inactive": "true"})
        assert len(response.json()["data"]) == 3

    def test_include_inactive_ignored_for_customer(self, customer_client, catalog):
        response = customer_client.get(PRODUCTS_URL, {"include_inactive": "true"})
        assert len(response.json()["data"]) == 2

    def test_filters(self, api_client, catalog):
        response = api_client.get(PRODUCTS_URL, {"in_stock": "true"})
        assert [p["name"] for p in response.json()["data"]] == ["Desk Lamp"]

        response = api_client.get(PRODUCTS_URL, {"min_price": "100"})
        assert [p["name"] for p in response.json()["data"]] == ["Office Chair"]

    def test_active_endpoint(self, api_client, catalog):
        response = api_client.get(f"{PRODUCTS_URL}active/")

        assert response.status_code == 200
        assert len(response.json()["data"]) == 2

    def test_search(self, api_client, catalog):
        response = api_client.get(f"{PRODUCTS_URL}search/", {"q": "lamp"})

        assert response.status_code == 200
        assert [p["name"] for p in response.json()["data"]] == ["Desk Lamp"]

    def test_search_requires_term(self, api_client):
        response = api_client.get(f"{PRODUCTS_URL}search/")

        assert response.status_code == 400
        assert "q" in response.json()["errors"]

    def test_retrieve_unknown_is_404(self, api_client):
        response = api_client.get(f"{PRODUCTS_URL}{uuid.uuid4()}/")

        assert response.status_code == 404
        assert response.json()["success"] is False


class TestCatalogAdministration:
    def test_admin_creates_product(self, admin_client):
        response = admin_client.post(
            PRODUCTS_URL,
            {"name": "Standing Desk", "price": "899.00", "stock_quantity": 3},
            format="json",
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Product created successfully"
        assert body["data"]["is_active"] is True
        assert Product.objects.filter(name="Standing Desk").exists()

    def test_customer_cannot_create(self, customer_client):
        response = customer_client.post(
            PRODUCTS_URL, {"name": "Sneaky", "price": "1.00"}, format="json"
        )

        assert response.status_code == 403
        assert not Product.objects.filter(name="Sneaky").exists()

    def test_anonymous_cannot_create(self, api_client):
        response = api_client.post(PRODUCTS_URL, {"name": "Anon", "price": "1.00"}, format="json")
        assert response.status_code == 401

    def test_negative_price_rejected(self, admin_client):
        response = admin_client.post(
            PRODUCTS_URL, {"name": "Broken", "price": "-1.00"}, format="json"
        )

        assert response.status_code == 400
        assert "price" in response.json()["errors"]

    def test_duplicate_name_conflicts(self, admin_client, catalog):
        response = admin_client.post(
            PRODUCTS_URL, {"name": "desk lamp", "price": "1.00"}, format="json"
        )
        assert response.status_code == 409

    def test_update_changes_supplied_fields_only(self, admin_client, catalog):
        lamp = catalog["lamp"]
        response = admin_client.put(
            f"{PRODUCTS_URL}{lamp.id}/", {"stock_quantity": 40}, format="json"
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["stock_quantity"] == 40
        assert data["price"] == "49.90"

    def test_deactivate(self, admin_client, catalog):
        lamp = catalog["lamp"]
        response = admin_client.put(f"{PRODUCTS_URL}{lamp.id}/deactivate/")

        assert response.status_code == 200
        lamp.refresh_from_db()
        assert lamp.is_active is False

    def test_delete(self, admin_client, catalog):
        response = admin_client.delete(f"{PRODUCTS_URL}{catalog['chair'].id}/")

        assert response.status_code == 200
        assert response.json()["message"] == "Product deleted successfully"
        assert not Product.objects.filter(id=catalog["chair"].id).exists()

    def test_delete_ordered_product_conflicts(
        self, admin_client, customer_client, catalog
    ):
        lamp = catalog["lamp"]
        customer_client.post(
            "/api/v1/orders/",
            {"items": [{"product_id": str(lamp.id), "quantity": 1}]},
            format="json",
        )

        response = admin_client.delete(f"{PRODUCTS_URL}{lamp.id}/")

        assert response.status_code == 409
        assert "deactivating" in response.json()["message"]

        response = admin_client.put(f"{PRODUCTS_URL}{lamp.id}/deactivate/")
        assert response.status_code == 200
        assert response.json()["data"]["is_active"] is False
        assert Product.objects.filter(id=lamp.id).exists()

        for url in (PRODUCTS_URL, f"{PRODUCTS_URL}active/"):
            listed = customer_client.get(url).json()["data"]
            assert str(lamp.id) not in [p["id"] for p in listed]
