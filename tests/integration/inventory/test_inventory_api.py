"""Integration tests for the inventory endpoints.

Covers item creation, listing with filters, retrieval, price and stock
count updates, the category tree and path validation, all scoped to the
authenticated user.
"""

import uuid
from decimal import Decimal

import pytest

from modules.inventory.models import InventoryItem

pytestmark = pytest.mark.integration

ITEMS_URL = "/api/v1/items/"


def _item_url(item_id, suffix=""):
    return f"{ITEMS_URL}{item_id}/{suffix}"


# ==========================================================================
# Create
# ==========================================================================


class TestCreateItem:
    def test_create_returns_201(self, auth_client, categories, user):
        response = auth_client.post(
            ITEMS_URL,
            {
                "category_path": ["shirts", "t-shirts", "womens"],
                "description": "Camiseta básica",
                "quantity": 10,
                "price": "50.00",
            },
            format="json",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["description"] == "Camiseta básica"
        assert data["quantity"] == 10
        assert data["price"] == "50.00"
        assert data["category_path"] == ["shirts", "t-shirts", "womens"]
        assert data["category_id"] == "womens"
        assert InventoryItem.objects.get(id=data["id"]).user_id == user.id

    def test_defaults(self, auth_client, categories):
        response = auth_client.post(
            ITEMS_URL,
            {"category_path": ["pants", "pants-jeans"], "description": "Jeans"},
            format="json",
        )
        assert response.status_code == 201
        assert response.json()["quantity"] == 1
        assert response.json()["price"] == "0.00"

    def test_empty_path(self, auth_client, categories):
        response = auth_client.post(
            ITEMS_URL, {"category_path": [], "description": "X"}, format="json"
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "empty_path"

    def test_unknown_category(self, auth_client, categories):
        response = auth_client.post(
            ITEMS_URL, {"category_path": ["hats"], "description": "X"}, format="json"
        )
        assert response.status_code == 404
        assert response.json()["errors"][0]["code"] == "category_not_found"

    def test_broken_hierarchy(self, auth_client, categories):
        response = auth_client.post(
            ITEMS_URL,
            {"category_path": ["pants", "t-shirts", "womens"], "description": "X"},
            format="json",
        )
        assert response.status_code == 409
        assert response.json()["errors"][0]["code"] == "broken_hierarchy"

    def test_negative_price(self, auth_client, categories):
        response = auth_client.post(
            ITEMS_URL,
            {"category_path": ["pants", "pants-jeans"], "description": "X", "price": "-1.00"},
            format="json",
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "negative_price"


# ==========================================================================
# List / Retrieve
# ==========================================================================


class TestListItems:
    def test_paginated_and_scoped(self, auth_client, user, other_user, item_factory):
        item_factory(user, ["pants", "pants-jeans"], description="Mine")
        item_factory(other_user, ["pants", "pants-jeans"], description="Theirs")

        response = auth_client.get(ITEMS_URL)
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert [i["description"] for i in data["results"]] == ["Mine"]

    def test_category_filter(self, auth_client, user, item_factory):
        item_factory(user, ["shirts", "t-shirts", "womens"], description="Camiseta")
        item_factory(user, ["pants", "pants-jeans"], description="Jeans")

        data = auth_client.get(ITEMS_URL, {"category": "t-shirts"}).json()
        assert [i["description"] for i in data["results"]] == ["Camiseta"]

    def test_in_stock_filter(self, auth_client, user, item_factory):
        item_factory(user, ["pants", "pants-jeans"], description="Available", quantity=3)
        item_factory(user, ["pants", "pants-jeans"], description="Sold out", quantity=0)

        data = auth_client.get(ITEMS_URL, {"in_stock": "true"}).json()
        assert [i["description"] for i in data["results"]] == ["Available"]
        data = auth_client.get(ITEMS_URL, {"in_stock": "false"}).json()
        assert [i["description"] for i in data["results"]] == ["Sold out"]

    def test_search_and_price_filters(self, auth_client, user, item_factory):
        item_factory(user, ["pants", "pants-jeans"], description="Jeans skinny", price="120.00")
        item_factory(user, ["pants", "pants-jeans"], description="Jeans reto", price="80.00")

        data = auth_client.get(ITEMS_URL, {"search": "jeans", "max_price": "100"}).json()
        assert [i["description"] for i in data["results"]] == ["Jeans reto"]

    def test_ordering(self, auth_client, user, item_factory):
        item_factory(user, ["pants", "pants-jeans"], description="B", quantity=5)
        item_factory(user, ["pants", "pants-jeans"], description="A", quantity=1)

        data = auth_client.get(ITEMS_URL, {"ordering": "quantity"}).json()
        assert [i["quantity"] for i in data["results"]] == [1, 5]


class TestRetrieveItem:
    def test_owner(self, auth_client, item):
        response = auth_client.get(_item_url(item.id))
        assert response.status_code == 200
        assert response.json()["id"] == str(item.id)

    def test_other_user_gets_404(self, other_client, item):
        response = other_client.get(_item_url(item.id))
        assert response.status_code == 404
        assert response.json()["errors"][0]["code"] == "item_not_found"

    def test_unknown_id(self, auth_client):
        assert auth_client.get(_item_url(uuid.uuid4())).status_code == 404


# ==========================================================================
# Price / stock count
# ==========================================================================


class TestPriceAndQuantity:
    def test_patch_price(self, auth_client, item):
        response = auth_client.patch(_item_url(item.id, "price/"), {"price": "59.90"}, format="json")
        assert response.status_code == 200
        item.refresh_from_db()
        assert item.price == Decimal("59.90")

    def test_put_quantity(self, auth_client, item):
        response = auth_client.put(_item_url(item.id, "quantity/"), {"quantity": 25}, format="json")
        assert response.status_code == 200
        assert response.json()["quantity"] == 25

    def test_negative_quantity(self, auth_client, item):
        response = auth_client.put(_item_url(item.id, "quantity/"), {"quantity": -1}, format="json")
        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "invalid_quantity"
        item.refresh_from_db()
        assert item.quantity == 10

    def test_other_user_cannot_change_price(self, other_client, item):
        response = other_client.patch(_item_url(item.id, "price/"), {"price": "1.00"}, format="json")
        assert response.status_code == 404
        item.refresh_from_db()
        assert item.price == Decimal("50.00")


# ==========================================================================
# Categories
# ==========================================================================


class TestCategoryEndpoints:
    def test_tree_includes_own_items(self, auth_client, item):
        response = auth_client.get("/api/v1/categories/tree/")
        assert response.status_code == 200

        roots = {node["id"]: node for node in response.json()}
        assert set(roots) == {"shirts", "pants", "skirts"}
        t_shirts = roots["shirts"]["children"][0]
        womens = next(c for c in t_shirts["children"] if c["id"] == "womens")
        assert womens["children"] == [
            {
                "kind": "item",
                "id": str(item.id),
                "name": "T-shirt",
                "quantity": 10,
                "price": "50.00",
            }
        ]

    def test_validate_path(self, auth_client, categories):
        response = auth_client.post(
            "/api/v1/categories/validate-path/",
            {"path": ["shirts", "t-shirts", "womens"]},
            format="json",
        )
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert [c["id"] for c in data["path"]] == ["shirts", "t-shirts", "womens"]
        assert [c["level"] for c in data["path"]] == [1, 2, 3]

    def test_validate_broken_path(self, auth_client, categories):
        response = auth_client.post(
            "/api/v1/categories/validate-path/",
            {"path": ["t-shirts", "womens"]},
            format="json",
        )
        assert response.status_code == 409
        assert response.json()["errors"][0]["code"] == "broken_hierarchy"
