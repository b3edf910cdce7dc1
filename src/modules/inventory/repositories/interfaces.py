"""Inventory repository interfaces.

The validator, the stock ledger and ``InventoryService`` depend only on
these contracts (DIP); ``django_repository`` provides the ORM versions.
"""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.inventory.models import Category, InventoryItem


class ICategoryRepository(IRepository["Category"]):
    """Read access to the category tree."""

    @abstractmethod
    def get_many(self, ids: Iterable[str]) -> Dict[str, Category]:
        """Fetch the given categories in one query, keyed by id."""

    @abstractmethod
    def has_children(self, id: str) -> bool:
        """Return ``True`` if any category names *id* as its parent."""

    @abstractmethod
    def list_all(self) -> List[Category]:
        """Every category ordered by level, then name."""


class IInventoryItemRepository(IRepository["InventoryItem"]):
    """Repository contract for inventory items.

    The quantity mutators are single-statement updates and return ``False``
    when no row matched, so the caller can tell "absent" from "refused".
    """

    @abstractmethod
    def get_owned(self, id: str, user_id: int) -> Optional[InventoryItem]:
        """Item by id if it belongs to *user_id*, else ``None``."""

    @abstractmethod
    def list_for_user(
        self, user_id: int, filters: Optional[Dict[str, Any]] = None
    ) -> QuerySet:
        """Items owned by *user_id*, newest first."""

    @abstractmethod
    def get_quantity(self, id: str) -> Optional[int]:
        """Current stored quantity, ``None`` if the item does not exist."""

    @abstractmethod
    def conditional_decrement(self, id: str, quantity: int) -> bool:
        """Subtract *quantity* only where the stored quantity is at least that."""

    @abstractmethod
    def increment(self, id: str, quantity: int) -> bool:
        """Add *quantity* to the stored quantity."""

    @abstractmethod
    def set_quantity(self, id: str, quantity: int) -> bool:
        """Overwrite the stored quantity."""

    @abstractmethod
    def update_price(self, id: str, price: Decimal) -> bool:
        """Overwrite the price."""
