"""Category tree and inventory item models.

Rules implemented here:
- A category is one level deeper than its parent (root = level 1, max 3).
- Item ``quantity`` and ``price`` can never be negative (DB check constraints).
- ``category_path`` keeps the exact ids the item was filed under, joined
  with ``/``; ``category`` points at the terminal one.
- Items are never deleted by the application.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List

from django.conf import settings
from django.db import models

from modules.core.models import BaseModel

CATEGORY_PATH_SEPARATOR = "/"


class Category(models.Model):
    """Node of the store taxonomy.

    Ids are stable strings (``cat-001``, ``subcat-004`` …) assigned by the
    ``seed_categories`` command; the tree is read-only at runtime.
    """

    id: models.CharField = models.CharField(max_length=50, primary_key=True)
    name: models.CharField = models.CharField(max_length=100)
    parent: models.ForeignKey = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="children",
    )
    level: models.PositiveSmallIntegerField = models.PositiveSmallIntegerField(
        default=1
    )
    is_leaf: models.BooleanField = models.BooleanField(default=False)

    class Meta:
        db_table = "categories"
        ordering = ["level", "name"]
        verbose_name_plural = "categories"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(level__gte=1) & models.Q(level__lte=3),
                name="categories_level_range",
            ),
        ]

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class InventoryItem(BaseModel):
    """A clothing piece in stock (the original system called it a "piece").

    ``quantity`` is owned by ``StockLedger``: it is only changed through
    single-statement conditional or ``F()`` updates, never read-modify-write.
    """

    description: models.CharField = models.CharField(max_length=255)
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(default=0)
    price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    category_path: models.CharField = models.CharField(max_length=255)
    category: models.ForeignKey = models.ForeignKey(
        "inventory.Category",
        on_delete=models.PROTECT,
        related_name="items",
    )
    user: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="inventory_items",
    )

    class Meta:
        db_table = "inventory_items"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="items_user_created_idx"),
            models.Index(fields=["category"], name="items_category_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0),
                name="inventory_items_quantity_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="inventory_items_price_non_negative",
            ),
        ]

    @property
    def path(self) -> List[str]:
        """``category_path`` as the ordered list of category ids."""
        return self.category_path.split(CATEGORY_PATH_SEPARATOR)

    @staticmethod
    def join_path(path: List[str]) -> str:
        return CATEGORY_PATH_SEPARATOR.join(path)

    def __str__(self) -> str:
        return f"{self.description} x{self.quantity}"
