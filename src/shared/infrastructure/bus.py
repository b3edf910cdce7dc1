"""Process-local event dispatch used by the outbox relay."""

from __future__ import annotations

from collections import defaultdict
from typing import DefaultDict, List, Type

import structlog

from shared.domain.bus import IEventBus, IEventHandler
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class InMemoryEventBus(IEventBus):
    """Handlers are registered from ``AppConfig.ready`` of each module.

    Dispatch is synchronous and a failing handler aborts the publish, so the
    relay can mark the outbox row for retry.
    """

    def __init__(self) -> None:
        self._subscriptions: DefaultDict[Type[DomainEvent], List[IEventHandler]] = (
            defaultdict(list)
        )

    def subscribe(self, event_class: Type[DomainEvent], handler: IEventHandler) -> None:
        registered = self._subscriptions[event_class]
        if handler in registered:
            return
        registered.append(handler)

    def unsubscribe(self, event_class: Type[DomainEvent], handler: IEventHandler) -> None:
        registered = self._subscriptions.get(event_class)
        if registered and handler in registered:
            registered.remove(handler)

    def publish(self, event: DomainEvent) -> int:
        targets = tuple(self._subscriptions.get(type(event), ()))
        for handler in targets:
            handler.handle(event)
        logger.debug(
            "event_bus.dispatched",
            event_name=event.event_name,
            aggregate_id=str(event.aggregate_id),
            deliveries=len(targets),
        )
        return len(targets)


event_bus = InMemoryEventBus()
