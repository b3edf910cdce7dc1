"""Unit tests for Sales event handlers and their bus subscriptions."""

from __future__ import annotations

import logging
from uuid import uuid4

import pytest

from modules.sales.events import LineItemAdded, SaleCreated, SaleStatusChanged
from modules.sales.handlers import (
    LineItemAddedHandler,
    SaleCreatedHandler,
    SaleStatusChangedHandler,
)
from shared.infrastructure.bus import event_bus

pytestmark = pytest.mark.unit


def _logged(caplog, text):
    return any(text in record.getMessage() for record in caplog.records)


def test_sale_created_handler_logs(caplog):
    event = SaleCreated(aggregate_id=uuid4(), user_id=3)

    with caplog.at_level(logging.INFO, logger="modules.sales.handlers"):
        SaleCreatedHandler().handle(event)

    assert _logged(caplog, "sale.event.created")


def test_line_item_added_handler_logs(caplog):
    event = LineItemAdded(aggregate_id=uuid4(), item_id="x", quantity=2, remaining_stock=8)

    with caplog.at_level(logging.INFO, logger="modules.sales.handlers"):
        LineItemAddedHandler().handle(event)

    assert _logged(caplog, "sale.event.line_item_added")


def test_status_changed_handler_logs(caplog):
    event = SaleStatusChanged(
        aggregate_id=uuid4(), old_status="calculate-shipping", new_status="closed"
    )

    with caplog.at_level(logging.INFO, logger="modules.sales.handlers"):
        SaleStatusChangedHandler().handle(event)

    assert _logged(caplog, "sale.event.status_changed")


@pytest.mark.parametrize("event_class", [SaleCreated, LineItemAdded, SaleStatusChanged])
def test_app_ready_subscribes_handlers(event_class):
    assert event_bus.publish(event_class(aggregate_id=uuid4())) == 1
