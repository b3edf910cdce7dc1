from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from modules.inventory.models import Category, InventoryItem
from modules.inventory.repositories.django_repository import (
    CategoryDjangoRepository,
    InventoryItemDjangoRepository,
)
from modules.inventory.services import InventoryService
from modules.sales.repositories.django_repository import SaleDjangoRepository
from modules.sales.services import SaleService
from shared.domain.identity import Identity


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@pytest.fixture()
def user(django_user_model):
    return django_user_model.objects.create_user(username="alice", password="s3cret-pass")


@pytest.fixture()
def other_user(django_user_model):
    return django_user_model.objects.create_user(username="bob", password="s3cret-pass")


@pytest.fixture()
def identity(user):
    return Identity.from_user(user)


@pytest.fixture()
def other_identity(other_user):
    return Identity.from_user(other_user)


@pytest.fixture()
def auth_client(api_client, user):
    api_client.force_authenticate(user=user)
    return api_client


@pytest.fixture()
def other_client(other_user):
    client = APIClient()
    client.force_authenticate(user=other_user)
    return client


# ---------------------------------------------------------------------------
# Category tree
#
#   shirts ─ t-shirts ─ womens (leaf)
#                     └ mens   (leaf)
#   pants  ─ pants-jeans      (no children, not flagged as leaf)
#   skirts ─ skirts-womens    (leaf, second level)
# ---------------------------------------------------------------------------


def _category(id, name, parent=None, is_leaf=False):
    level = parent.level + 1 if parent else 1
    return Category.objects.create(
        id=id, name=name, parent=parent, level=level, is_leaf=is_leaf
    )


@pytest.fixture()
def categories():
    shirts = _category("shirts", "Camisas")
    t_shirts = _category("t-shirts", "Camiseta", shirts)
    womens = _category("womens", "Feminina", t_shirts, is_leaf=True)
    mens = _category("mens", "Masculina", t_shirts, is_leaf=True)
    pants = _category("pants", "Calça")
    jeans = _category("pants-jeans", "Jeans", pants)
    skirts = _category("skirts", "Saia")
    skirts_womens = _category("skirts-womens", "Feminina", skirts, is_leaf=True)
    return {
        c.id: c
        for c in (shirts, t_shirts, womens, mens, pants, jeans, skirts, skirts_womens)
    }


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------


def _make_item(user, category_path, quantity=10, price="50.00", description="T-shirt"):
    return InventoryItem.objects.create(
        description=description,
        quantity=quantity,
        price=Decimal(price),
        category_path=InventoryItem.join_path(category_path),
        category_id=category_path[-1],
        user=user,
    )


@pytest.fixture()
def item_factory(categories):
    """Create items directly, bypassing the service (arbitrary quantities)."""
    return _make_item


@pytest.fixture()
def item(user, item_factory):
    return item_factory(user, ["shirts", "t-shirts", "womens"])


@pytest.fixture()
def item_repository():
    return InventoryItemDjangoRepository()


@pytest.fixture()
def category_repository():
    return CategoryDjangoRepository()


@pytest.fixture()
def inventory_service(item_repository, category_repository):
    return InventoryService(
        item_repository=item_repository,
        category_repository=category_repository,
    )


# ---------------------------------------------------------------------------
# Sales
# ---------------------------------------------------------------------------


@pytest.fixture()
def sale_repository():
    return SaleDjangoRepository()


@pytest.fixture()
def sale_service(sale_repository, item_repository):
    return SaleService(sale_repository=sale_repository, item_repository=item_repository)
