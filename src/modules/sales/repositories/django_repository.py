"""Django ORM implementation of the Sale repository.

Status changes are compare-and-set updates filtered on the expected current
status.  Callers additionally hold the sale row lock
(``get_owned_for_update``), so a lost race shows up as zero updated rows
rather than as a silent overwrite.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

import structlog
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db.models import DecimalField, ExpressionWrapper, F, QuerySet, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from modules.core.outbox import flush_domain_events
from modules.sales.models import Sale, SaleLineItem, SaleStatusHistory
from modules.sales.repositories.interfaces import ISaleRepository

logger = structlog.get_logger(__name__)

OUTBOX_TOPIC = "sales"

_MONEY = DecimalField(max_digits=12, decimal_places=2)


class SaleDjangoRepository(ISaleRepository):
    """Concrete Sale repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Sale]:
        """Unscoped lookup; returns ``None`` for non-existent or invalid IDs."""
        try:
            return self._with_relations(Sale.objects.all()).filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_owned(self, id: str, user_id: int) -> Optional[Sale]:
        try:
            return (
                self._with_relations(Sale.objects.all())
                .filter(id=id, user_id=user_id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_owned_for_update(self, id: str, user_id: int) -> Optional[Sale]:
        """Lock the sale row; only the row itself, no joins are locked."""
        try:
            return (
                Sale.objects.select_for_update().filter(id=id, user_id=user_id).first()
            )
        except (ValueError, ValidationError):
            return None

    def list_for_user(
        self, user_id: int, statuses: Optional[Iterable[str]] = None
    ) -> QuerySet:
        queryset = Sale.objects.filter(user_id=user_id)
        if statuses:
            queryset = queryset.filter(status__in=list(statuses))
        return queryset.annotate(
            annotated_total_pieces=Coalesce(Sum("line_items__quantity"), Value(0)),
            annotated_total_value=Coalesce(
                Sum(
                    ExpressionWrapper(
                        F("line_items__quantity") * F("line_items__item__price"),
                        output_field=_MONEY,
                    )
                ),
                Value(Decimal("0.00")),
                output_field=_MONEY,
            ),
        ).order_by("-created_at", "-id")

    def owner_exists(self, user_id: int) -> bool:
        return get_user_model().objects.filter(pk=user_id, is_active=True).exists()

    def has_line_items(self, id: str) -> bool:
        return SaleLineItem.objects.filter(sale_id=id).exists()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def save(self, entity: Sale) -> Sale:
        """Persist (create or update) a sale and move its events to the outbox."""
        entity.save()
        self.record_events(entity)
        logger.info("sale.saved", sale_id=str(entity.id))
        return entity

    def record_events(self, entity: Sale) -> None:
        flush_domain_events(entity, topic=OUTBOX_TOPIC)

    def compare_and_set_status(
        self,
        id: str,
        expected: str,
        new: str,
        shipping_value: Optional[Decimal] = None,
    ) -> bool:
        values: Dict[str, Any] = {"status": new, "updated_at": timezone.now()}
        if shipping_value is not None:
            values["shipping_value"] = shipping_value
        rows = Sale.objects.filter(id=id, status=expected).update(**values)
        return rows == 1

    def set_shipping_value(self, id: str, value: Decimal) -> None:
        Sale.objects.filter(id=id).update(
            shipping_value=value, updated_at=timezone.now()
        )

    def add_line_item(self, sale_id: str, item_id: str, quantity: int) -> SaleLineItem:
        """Additive upsert on ``(sale, item)``.

        Runs under the sale row lock, so two additions to the same sale
        cannot both take the create branch.
        """
        updated = SaleLineItem.objects.filter(sale_id=sale_id, item_id=item_id).update(
            quantity=F("quantity") + quantity, updated_at=timezone.now()
        )
        if not updated:
            SaleLineItem.objects.create(
                sale_id=sale_id, item_id=item_id, quantity=quantity
            )
        return SaleLineItem.objects.get(sale_id=sale_id, item_id=item_id)

    def add_history(
        self,
        sale_id: str,
        new_status: str,
        user_id: Optional[int],
        old_status: Optional[str] = None,
        notes: str = "",
    ) -> SaleStatusHistory:
        history = SaleStatusHistory.objects.create(
            sale_id=sale_id,
            old_status=old_status,
            new_status=new_status,
            user_id=user_id,
            notes=notes,
        )
        logger.info(
            "sale.history_added",
            sale_id=str(sale_id),
            old_status=old_status,
            new_status=new_status,
        )
        return history

    @staticmethod
    def _with_relations(queryset: QuerySet) -> QuerySet:
        return queryset.prefetch_related("line_items__item", "status_history")
