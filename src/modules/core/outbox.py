"""Helpers that move collected domain events into the outbox table."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List
from uuid import UUID

import structlog

from modules.core.models import OutboxEvent
from shared.domain.events import DomainEvent, DomainEventMixin

logger = structlog.get_logger(__name__)


def flush_domain_events(entity: DomainEventMixin, topic: str) -> List[OutboxEvent]:
    """Persist and clear the events collected on *entity*.

    Must run inside the caller's transaction so events commit (or roll back)
    together with the state change that raised them.
    """
    rows = [
        OutboxEvent.objects.create(
            event_type=event.event_name,
            aggregate_id=str(event.aggregate_id),
            payload=serialize_event_payload(event),
            topic=topic,
        )
        for event in entity.domain_events
    ]
    entity.clear_domain_events()
    if rows:
        logger.debug("outbox.recorded", topic=topic, event_count=len(rows))
    return rows


def serialize_event_payload(event: DomainEvent) -> Dict[str, Any]:
    data = asdict(event)
    normalized = _normalize_for_json(data)
    return json.loads(json.dumps(normalized))


def _normalize_for_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, list):
        return [_normalize_for_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize_for_json(val) for key, val in value.items()}
    return value
