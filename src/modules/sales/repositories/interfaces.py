"""Sale repository interface.

Extends ``IRepository[Sale]`` with what the sale lifecycle needs: owner
scoped reads, a row lock, a compare-and-set status update, additive line
item upserts and the status audit trail.

``SaleService`` depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.sales.models import Sale, SaleLineItem, SaleStatusHistory


class ISaleRepository(IRepository["Sale"]):
    """Repository contract for the Sale aggregate root.

    Every lookup is scoped by ``(sale_id, user_id)``: a sale that belongs to
    someone else is returned as ``None``, exactly like a missing one.
    """

    @abstractmethod
    def get_owned(self, id: str, user_id: int) -> Optional[Sale]:
        """Sale with prefetched line items and history, or ``None``."""

    @abstractmethod
    def get_owned_for_update(self, id: str, user_id: int) -> Optional[Sale]:
        """Sale locked with ``SELECT FOR UPDATE``, or ``None``."""

    @abstractmethod
    def list_for_user(
        self, user_id: int, statuses: Optional[Iterable[str]] = None
    ) -> QuerySet:
        """Owner's sales, newest first, annotated with their totals."""

    @abstractmethod
    def owner_exists(self, user_id: int) -> bool:
        """``True`` if *user_id* is an existing, active account."""

    @abstractmethod
    def compare_and_set_status(
        self,
        id: str,
        expected: str,
        new: str,
        shipping_value: Optional[Decimal] = None,
    ) -> bool:
        """Move the sale from *expected* to *new* in one conditional update.

        Returns ``False`` when the stored status is no longer *expected*.
        *shipping_value*, when given, is written in the same statement.
        """

    @abstractmethod
    def record_events(self, entity: Sale) -> None:
        """Move the domain events collected on *entity* to the outbox."""

    @abstractmethod
    def set_shipping_value(self, id: str, value: Decimal) -> None:
        """Overwrite the shipping value without touching the status."""

    @abstractmethod
    def has_line_items(self, id: str) -> bool: ...

    @abstractmethod
    def add_line_item(self, sale_id: str, item_id: str, quantity: int) -> SaleLineItem:
        """Create the ``(sale, item)`` line or add *quantity* to it."""

    @abstractmethod
    def add_history(
        self,
        sale_id: str,
        new_status: str,
        user_id: Optional[int],
        old_status: Optional[str] = None,
        notes: str = "",
    ) -> SaleStatusHistory:
        """Record a status change in the sale's audit trail."""
