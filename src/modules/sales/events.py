"""Domain events for the Sales bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class SaleCreated(DomainEvent):
    """Raised when a sale is opened."""

    user_id: int = 0


@dataclass(frozen=True)
class LineItemAdded(DomainEvent):
    """Raised each time units of an item are reserved against a sale."""

    item_id: str = ""
    quantity: int = 0
    remaining_stock: int = 0


@dataclass(frozen=True)
class SaleStatusChanged(DomainEvent):
    """Raised on every lifecycle transition."""

    old_status: Optional[str] = None
    new_status: str = ""
