from decimal import Decimal

import pytest
from pydantic import ValidationError

from modules.inventory.dtos import CategoryNodeDTO, CreateInventoryItemDTO, ItemLeafDTO

pytestmark = pytest.mark.unit


class TestCreateInventoryItemDTO:
    def test_strips_whitespace(self):
        dto = CreateInventoryItemDTO(
            category_path=[" shirts ", "t-shirts ", " womens"],
            description="  Camiseta  ",
        )
        assert dto.category_path == ["shirts", "t-shirts", "womens"]
        assert dto.description == "Camiseta"

    def test_defaults(self):
        dto = CreateInventoryItemDTO(category_path=["pants", "pants-jeans"], description="Jeans")
        assert dto.quantity == 1
        assert dto.price == Decimal("0.00")

    def test_is_frozen(self):
        dto = CreateInventoryItemDTO(category_path=["pants", "pants-jeans"], description="Jeans")
        with pytest.raises(ValidationError):
            dto.quantity = 5

    def test_missing_description(self):
        with pytest.raises(ValidationError):
            CreateInventoryItemDTO(category_path=["pants"])


class TestCategoryNodeDTO:
    def test_nested_children_of_both_kinds(self):
        leaf = ItemLeafDTO(
            id="0190a5b4-0000-7000-8000-000000000001",
            name="Camiseta",
            quantity=3,
            price=Decimal("10.00"),
        )
        node = CategoryNodeDTO(
            id="womens",
            name="Feminina",
            level=3,
            is_leaf=True,
            children=[leaf],
        )
        root = CategoryNodeDTO(id="shirts", name="Camisas", level=1, is_leaf=False, children=[node])

        dumped = root.model_dump(mode="json")
        assert dumped["children"][0]["children"][0]["kind"] == "item"
        assert dumped["children"][0]["children"][0]["price"] == "10.00"

    def test_children_default_empty(self):
        node = CategoryNodeDTO(id="jeans", name="Jeans", level=2, is_leaf=False)
        assert node.children == []
