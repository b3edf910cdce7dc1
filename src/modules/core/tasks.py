"""Periodic jobs owned by the core module."""

from __future__ import annotations

import structlog
from celery import shared_task
from django.conf import settings
from django.db import transaction

from modules.core.models import OutboxEvent
from shared.domain.events import DomainEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)


@shared_task(name="core.relay_outbox_events")
def relay_outbox_events(batch_size: int | None = None) -> dict:
    """Deliver pending outbox events to the in-process event bus.

    Rows are locked with ``SELECT FOR UPDATE SKIP LOCKED`` where the database
    supports it, so two workers never deliver the same event.  A handler
    failure marks only that event as FAILED; it is retried on a later run
    until ``OUTBOX_MAX_RETRIES`` is reached.
    """
    limit = batch_size or settings.OUTBOX_BATCH_SIZE
    published = failed = 0

    with transaction.atomic():
        events = list(
            OutboxEvent.objects.deliverable(settings.OUTBOX_MAX_RETRIES)
            .select_for_update(skip_locked=True)[:limit]
        )
        for outbox_event in events:
            log = logger.bind(
                outbox_id=str(outbox_event.id),
                event_type=outbox_event.event_type,
                aggregate_id=outbox_event.aggregate_id,
            )
            try:
                with transaction.atomic():
                    event = DomainEvent.from_payload(
                        outbox_event.event_type, outbox_event.payload
                    )
                    deliveries = event_bus.publish(event)
            except Exception as exc:
                outbox_event.mark_as_failed(f"{type(exc).__name__}: {exc}")
                log.warning("outbox.delivery_failed", error=str(exc))
                failed += 1
                continue
            outbox_event.mark_as_published()
            log.debug("outbox.delivered", deliveries=deliveries)
            published += 1

    logger.info("outbox.relay_finished", published=published, failed=failed)
    return {"published": published, "failed": failed}
