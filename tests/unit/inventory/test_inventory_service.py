"""Unit tests for InventoryService."""

import uuid
from decimal import Decimal

import pytest

from modules.core.exceptions import ValidationError
from modules.inventory.dtos import CategoryNodeDTO, CreateInventoryItemDTO, ItemLeafDTO
from modules.inventory.exceptions import (
    BrokenHierarchy,
    CategoryNotFound,
    EmptyPath,
    InvalidQuantity,
    ItemNotFound,
    NegativePrice,
    NotPlaceable,
)
from modules.inventory.models import InventoryItem

pytestmark = pytest.mark.unit


def _dto(**overrides):
    data = {
        "category_path": ["shirts", "t-shirts", "womens"],
        "description": "Camiseta básica",
        "quantity": 10,
        "price": Decimal("50.00"),
    }
    data.update(overrides)
    return CreateInventoryItemDTO(**data)


# ==========================================================================
# create_item
# ==========================================================================


class TestCreateItem:
    def test_creates_item_under_terminal_category(self, inventory_service, identity, categories):
        item = inventory_service.create_item(_dto(), identity)

        item.refresh_from_db()
        assert item.description == "Camiseta básica"
        assert item.quantity == 10
        assert item.price == Decimal("50.00")
        assert item.category_id == "womens"
        assert item.path == ["shirts", "t-shirts", "womens"]
        assert item.user_id == identity.user_id

    def test_default_quantity_is_one(self, inventory_service, identity, categories):
        dto = CreateInventoryItemDTO(
            category_path=["skirts", "skirts-womens"], description="Saia midi"
        )
        item = inventory_service.create_item(dto, identity)
        assert item.quantity == 1
        assert item.price == Decimal("0.00")

    def test_zero_quantity_allowed(self, inventory_service, identity, categories):
        item = inventory_service.create_item(_dto(quantity=0), identity)
        assert item.quantity == 0

    def test_blank_description(self, inventory_service, identity, categories):
        with pytest.raises(ValidationError) as exc_info:
            inventory_service.create_item(_dto(description="   "), identity)
        assert exc_info.value.extra["field"] == "description"

    def test_negative_quantity(self, inventory_service, identity, categories):
        with pytest.raises(InvalidQuantity):
            inventory_service.create_item(_dto(quantity=-1), identity)

    def test_negative_price(self, inventory_service, identity, categories):
        with pytest.raises(NegativePrice):
            inventory_service.create_item(_dto(price=Decimal("-0.01")), identity)

    @pytest.mark.parametrize(
        "path, error",
        [
            ([], EmptyPath),
            (["shirts", "nope"], CategoryNotFound),
            (["pants", "t-shirts", "womens"], BrokenHierarchy),
            (["shirts", "t-shirts"], NotPlaceable),
        ],
    )
    def test_invalid_path_creates_nothing(
        self, inventory_service, identity, categories, path, error
    ):
        with pytest.raises(error):
            inventory_service.create_item(_dto(category_path=path), identity)
        assert InventoryItem.objects.count() == 0


# ==========================================================================
# Price and stock count
# ==========================================================================


class TestUpdatePrice:
    def test_updates_price(self, inventory_service, identity, item):
        updated = inventory_service.update_price(str(item.id), Decimal("59.90"), identity)
        assert updated.price == Decimal("59.90")

    def test_negative_price(self, inventory_service, identity, item):
        with pytest.raises(NegativePrice):
            inventory_service.update_price(str(item.id), Decimal("-1"), identity)

    def test_other_users_item(self, inventory_service, other_identity, item):
        with pytest.raises(ItemNotFound):
            inventory_service.update_price(str(item.id), Decimal("1"), other_identity)


class TestSetQuantity:
    def test_sets_quantity(self, inventory_service, identity, item):
        updated = inventory_service.set_quantity(str(item.id), 3, identity)
        assert updated.quantity == 3

    def test_other_users_item(self, inventory_service, other_identity, item):
        with pytest.raises(ItemNotFound):
            inventory_service.set_quantity(str(item.id), 3, other_identity)
        item.refresh_from_db()
        assert item.quantity == 10


# ==========================================================================
# Queries
# ==========================================================================


class TestGetItem:
    def test_owner_can_read(self, inventory_service, identity, item):
        assert inventory_service.get_item(str(item.id), identity).id == item.id

    def test_other_user_sees_not_found(self, inventory_service, other_identity, item):
        with pytest.raises(ItemNotFound):
            inventory_service.get_item(str(item.id), other_identity)

    def test_unknown_id(self, inventory_service, identity):
        with pytest.raises(ItemNotFound):
            inventory_service.get_item(str(uuid.uuid4()), identity)


class TestListItems:
    def test_only_own_items(self, inventory_service, identity, user, other_user, item_factory):
        mine = item_factory(user, ["pants", "pants-jeans"], description="Jeans")
        item_factory(other_user, ["pants", "pants-jeans"], description="Jeans")

        ids = [i.id for i in inventory_service.list_items(identity)]
        assert ids == [mine.id]

    def test_category_matches_any_path_segment(
        self, inventory_service, identity, user, item_factory
    ):
        shirt = item_factory(user, ["shirts", "t-shirts", "womens"])
        item_factory(user, ["pants", "pants-jeans"], description="Jeans")

        for category in ("shirts", "t-shirts", "womens"):
            ids = [i.id for i in inventory_service.list_items(identity, {"category": category})]
            assert ids == [shirt.id]

    def test_category_does_not_match_prefix(self, inventory_service, identity, user, item_factory):
        item_factory(user, ["skirts", "skirts-womens"], description="Saia")
        assert list(inventory_service.list_items(identity, {"category": "skirt"})) == []

    def test_search_description(self, inventory_service, identity, user, item_factory):
        item_factory(user, ["pants", "pants-jeans"], description="Calça Jeans Skinny")
        item_factory(user, ["shirts", "t-shirts", "mens"], description="Camiseta")

        results = list(inventory_service.list_items(identity, {"search": "skinny"}))
        assert [i.description for i in results] == ["Calça Jeans Skinny"]


class TestCategoryTree:
    def test_roots_in_order(self, inventory_service, identity, categories):
        tree = inventory_service.category_tree(identity)
        assert [node.id for node in tree] == ["pants", "shirts", "skirts"]
        assert all(isinstance(node, CategoryNodeDTO) for node in tree)

    def test_items_hang_under_their_category(self, inventory_service, identity, item):
        tree = {node.id: node for node in inventory_service.category_tree(identity)}

        t_shirts = tree["shirts"].children[0]
        womens = next(child for child in t_shirts.children if child.id == "womens")
        assert len(womens.children) == 1
        leaf = womens.children[0]
        assert isinstance(leaf, ItemLeafDTO)
        assert leaf.kind == "item"
        assert leaf.id == item.id
        assert leaf.quantity == 10

    def test_other_users_items_hidden(self, inventory_service, other_identity, item):
        tree = {node.id: node for node in inventory_service.category_tree(other_identity)}
        t_shirts = tree["shirts"].children[0]
        womens = next(child for child in t_shirts.children if child.id == "womens")
        assert womens.children == []

    def test_serializes_to_json(self, inventory_service, identity, item):
        dumped = [node.model_dump(mode="json") for node in inventory_service.category_tree(identity)]
        shirts = next(node for node in dumped if node["id"] == "shirts")
        assert shirts["kind"] == "category"
        assert shirts["level"] == 1
        assert shirts["children"][0]["id"] == "t-shirts"
