"""Django ORM implementation of the inventory repositories.

Stock changes are issued as one ``UPDATE`` each.  The conditional
decrement puts the availability check in the ``WHERE`` clause, so two
concurrent reservations can never both pass a check made against the same
stale value; the database serialises them on the row lock.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db.models import F, Q, QuerySet
from django.utils import timezone

from modules.inventory.models import CATEGORY_PATH_SEPARATOR, Category, InventoryItem
from modules.inventory.repositories.interfaces import (
    ICategoryRepository,
    IInventoryItemRepository,
)

logger = structlog.get_logger(__name__)


class CategoryDjangoRepository(ICategoryRepository):
    """Concrete category repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Category]:
        return Category.objects.filter(id=id).first()

    def get_many(self, ids: Iterable[str]) -> Dict[str, Category]:
        return Category.objects.in_bulk(list(ids))

    def has_children(self, id: str) -> bool:
        return Category.objects.filter(parent_id=id).exists()

    def list_all(self) -> List[Category]:
        return list(Category.objects.order_by("level", "name"))

    def save(self, entity: Category) -> Category:
        entity.save()
        return entity


class InventoryItemDjangoRepository(IInventoryItemRepository):
    """Concrete inventory item repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[InventoryItem]:
        """Returns ``None`` for non-existent or invalid IDs."""
        try:
            return InventoryItem.objects.select_related("category").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_owned(self, id: str, user_id: int) -> Optional[InventoryItem]:
        try:
            return (
                InventoryItem.objects.select_related("category")
                .filter(id=id, user_id=user_id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list_for_user(
        self, user_id: int, filters: Optional[Dict[str, Any]] = None
    ) -> QuerySet:
        """Items owned by *user_id*.

        Supported filter keys:
        - ``category``: items filed anywhere under this category id
        - ``search``: case-insensitive match on the description
        """
        queryset = InventoryItem.objects.select_related("category").filter(
            user_id=user_id
        )
        filters = filters or {}
        if filters.get("category"):
            queryset = queryset.filter(path_contains(filters["category"]))
        if filters.get("search"):
            queryset = queryset.filter(description__icontains=filters["search"])
        return queryset.order_by("-created_at", "-id")

    def get_quantity(self, id: str) -> Optional[int]:
        try:
            return (
                InventoryItem.objects.filter(id=id)
                .values_list("quantity", flat=True)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def save(self, entity: InventoryItem) -> InventoryItem:
        entity.save()
        logger.info("inventory_item.saved", item_id=str(entity.id))
        return entity

    def conditional_decrement(self, id: str, quantity: int) -> bool:
        return self._update(
            Q(id=id, quantity__gte=quantity), quantity=F("quantity") - quantity
        )

    def increment(self, id: str, quantity: int) -> bool:
        return self._update(Q(id=id), quantity=F("quantity") + quantity)

    def set_quantity(self, id: str, quantity: int) -> bool:
        return self._update(Q(id=id), quantity=quantity)

    def update_price(self, id: str, price: Decimal) -> bool:
        return self._update(Q(id=id), price=price)

    def _update(self, condition: Q, **values: Any) -> bool:
        # ``update()`` bypasses ``save()``, so ``updated_at`` is set here.
        try:
            rows = InventoryItem.objects.filter(condition).update(
                updated_at=timezone.now(), **values
            )
        except (ValueError, ValidationError):
            return False
        return rows == 1


def path_contains(category_id: str) -> Q:
    """Match items whose ``category_path`` has *category_id* as a segment."""
    sep = CATEGORY_PATH_SEPARATOR
    return (
        Q(category_path=category_id)
        | Q(category_path__startswith=f"{category_id}{sep}")
        | Q(category_path__endswith=f"{sep}{category_id}")
        | Q(category_path__contains=f"{sep}{category_id}{sep}")
    )
