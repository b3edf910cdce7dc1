"""Inventory DTOs for the Service Layer.

Pydantic v2 contracts between the API layer (DRF serializers) and
``InventoryService``.  DTOs are immutable (``frozen=True``) and only
normalise input; business rules (path placement, non-negative values) are
enforced by the service so they surface as domain errors.

- ``CreateInventoryItemDTO``: input for item creation.
- ``ItemLeafDTO`` / ``CategoryNodeDTO``: output of the category tree view.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CreateInventoryItemDTO(BaseModel):
    """Immutable DTO for item creation requests.

    ``category_path`` ids and ``description`` are stripped of surrounding
    whitespace.
    """

    model_config = ConfigDict(frozen=True)

    category_path: List[str]
    description: str
    quantity: int = 1
    price: Decimal = Decimal("0.00")

    @field_validator("category_path")
    @classmethod
    def strip_path_ids(cls, v: List[str]) -> List[str]:
        return [category_id.strip() for category_id in v]

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        return v.strip()


class ItemLeafDTO(BaseModel):
    """An inventory item hung under its terminal category."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["item"] = "item"
    id: UUID
    name: str
    quantity: int
    price: Decimal


class CategoryNodeDTO(BaseModel):
    """A category with its subcategories and, on leaves, the user's items."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["category"] = "category"
    id: str
    name: str
    level: int
    is_leaf: bool
    children: List[Union[CategoryNodeDTO, ItemLeafDTO]] = Field(default_factory=list)


CategoryNodeDTO.model_rebuild()
