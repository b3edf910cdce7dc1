"""Sale, SaleLineItem, and SaleStatusHistory models.

Rules implemented:
- A sale starts in ``open-no-pieces`` and only moves forward (enforced in
  the service layer with a compare-and-set on ``status``).
- Every status change generates a history record with old/new status,
  timestamp, user and notes.
- A sale holds at most one line item per inventory item; its quantity is
  always positive.
- Sales are never deleted.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.sales.constants import (
    OPEN_STATES,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    SaleStatus,
)
from shared.domain.events import DomainEventMixin


class Sale(DomainEventMixin, BaseModel):
    """Sale aggregate root.

    ``shipping_value`` stays ``NULL`` until someone enters the shipping
    cost; it is not computed.
    """

    client_name: models.CharField = models.CharField(max_length=255)
    phone: models.CharField = models.CharField(max_length=30, blank=True, default="")
    address: models.CharField = models.CharField(
        max_length=500, blank=True, default=""
    )
    status: models.CharField = models.CharField(
        max_length=30,
        choices=SaleStatus.choices,
        default=SaleStatus.OPEN_NO_PIECES,
    )
    shipping_value: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
    )
    user: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="sales",
    )

    class Meta:
        db_table = "sales"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "status"], name="sales_user_status_idx"),
            models.Index(fields=["-created_at"], name="sales_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(shipping_value__isnull=True)
                | models.Q(shipping_value__gte=0),
                name="sales_shipping_value_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return str(self.status) in TERMINAL_STATES

    @property
    def is_open(self) -> bool:
        """Pieces can still be added."""
        return str(self.status) in OPEN_STATES

    def can_transition_to(self, new_status: str) -> bool:
        return str(new_status) in VALID_TRANSITIONS.get(str(self.status), set())

    # ------------------------------------------------------------------
    # Derived totals
    # ------------------------------------------------------------------

    @property
    def total_pieces(self) -> int:
        """Sum of line-item quantities.

        List queries annotate ``annotated_total_pieces``; otherwise the
        (prefetched) line items are summed.
        """
        annotated = getattr(self, "annotated_total_pieces", None)
        if annotated is not None:
            return annotated
        return sum(line.quantity for line in self.line_items.all())

    @property
    def total_value(self) -> Decimal:
        """Sum of ``quantity * item.price`` at the items' current price."""
        annotated = getattr(self, "annotated_total_value", None)
        if annotated is not None:
            return annotated
        return sum(
            (line.quantity * line.item.price for line in self.line_items.all()),
            Decimal("0.00"),
        )

    def __str__(self) -> str:
        return f"{self.client_name} ({self.status})"


class SaleLineItem(BaseModel):
    """Units of one inventory item reserved against one sale.

    Created on the first addition of the item and incremented on every
    repeat addition; never decremented.
    """

    sale: models.ForeignKey = models.ForeignKey(
        "sales.Sale",
        on_delete=models.CASCADE,
        related_name="line_items",
    )
    item: models.ForeignKey = models.ForeignKey(
        "inventory.InventoryItem",
        on_delete=models.PROTECT,
        related_name="sale_lines",
    )
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )

    class Meta:
        db_table = "sale_line_items"
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["sale", "item"], name="sale_line_items_sale_item_unique"
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="sale_line_items_quantity_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.item_id} x{self.quantity}"


class SaleStatusHistory(BaseModel):
    """Append-only audit trail for sale status transitions.

    The creation record has ``old_status = NULL``.  ``user`` is nullable so
    history survives if an account is removed.
    """

    sale: models.ForeignKey = models.ForeignKey(
        "sales.Sale",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status: models.CharField = models.CharField(  # noqa: DJ01
        max_length=30,
        choices=SaleStatus.choices,
        null=True,
        blank=True,
    )
    new_status: models.CharField = models.CharField(
        max_length=30,
        choices=SaleStatus.choices,
    )
    user: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "sale_status_history"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["sale", "created_at"], name="ssh_sale_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.sale_id} : {self.old_status} -> {self.new_status}"
