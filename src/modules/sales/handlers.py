"""Event handlers for Sales domain events."""

from __future__ import annotations

import structlog

from modules.sales.events import LineItemAdded, SaleCreated, SaleStatusChanged
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class SaleCreatedHandler(IEventHandler[SaleCreated]):
    def handle(self, event: SaleCreated) -> None:
        logger.info(
            "sale.event.created",
            sale_id=str(event.aggregate_id),
            user_id=event.user_id,
        )


class LineItemAddedHandler(IEventHandler[LineItemAdded]):
    def handle(self, event: LineItemAdded) -> None:
        logger.info(
            "sale.event.line_item_added",
            sale_id=str(event.aggregate_id),
            item_id=event.item_id,
            quantity=event.quantity,
            remaining_stock=event.remaining_stock,
        )


class SaleStatusChangedHandler(IEventHandler[SaleStatusChanged]):
    def handle(self, event: SaleStatusChanged) -> None:
        logger.info(
            "sale.event.status_changed",
            sale_id=str(event.aggregate_id),
            old_status=event.old_status,
            new_status=event.new_status,
        )


sale_created_handler = SaleCreatedHandler()
line_item_added_handler = LineItemAddedHandler()
sale_status_changed_handler = SaleStatusChangedHandler()
