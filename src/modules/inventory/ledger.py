"""Stock ledger: the only code allowed to change an item's quantity."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from django.db import transaction

from modules.inventory.exceptions import InsufficientStock, InvalidQuantity, ItemNotFound

if TYPE_CHECKING:
    from modules.inventory.repositories.interfaces import IInventoryItemRepository

logger = structlog.get_logger(__name__)


class StockLedger:
    """Atomic stock mutations.

    Every operation is a single ``UPDATE`` followed by a read of the new
    value inside the same transaction, so the row lock taken by the update
    is still held when the value is read back.  Nothing is cached between
    calls.
    """

    def __init__(self, repository: IInventoryItemRepository) -> None:
        self._repo = repository

    @transaction.atomic
    def reserve(self, item_id: str, quantity: int) -> int:
        """Take *quantity* units out of stock and return what is left.

        Raises:
            InvalidQuantity: *quantity* is not positive.
            ItemNotFound: the item does not exist.
            InsufficientStock: fewer than *quantity* units are available.
        """
        _require_positive(quantity)
        log = logger.bind(item_id=str(item_id), requested=quantity)

        if self._repo.conditional_decrement(item_id, quantity):
            remaining = self._repo.get_quantity(item_id)
            log.info("stock.reserved", remaining=remaining)
            return remaining

        available = self._repo.get_quantity(item_id)
        if available is None:
            raise ItemNotFound(f"Inventory item {item_id} not found.")
        log.info("stock.insufficient", available=available)
        raise InsufficientStock(available=available, requested=quantity)

    @transaction.atomic
    def release(self, item_id: str, quantity: int) -> int:
        """Put *quantity* units back into stock and return the new total.

        No sale operation calls this yet; returns and cancellations are not
        modelled.

        Raises:
            InvalidQuantity: *quantity* is not positive.
            ItemNotFound: the item does not exist.
        """
        _require_positive(quantity)
        if not self._repo.increment(item_id, quantity):
            raise ItemNotFound(f"Inventory item {item_id} not found.")
        total = self._repo.get_quantity(item_id)
        logger.info("stock.released", item_id=str(item_id), quantity=quantity, total=total)
        return total

    @transaction.atomic
    def set_quantity(self, item_id: str, quantity: int) -> int:
        """Overwrite the stock count after a physical recount.

        Raises:
            InvalidQuantity: *quantity* is negative.
            ItemNotFound: the item does not exist.
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            raise InvalidQuantity("Quantity cannot be negative.", requested=quantity)
        if not self._repo.set_quantity(item_id, quantity):
            raise ItemNotFound(f"Inventory item {item_id} not found.")
        logger.info("stock.counted", item_id=str(item_id), quantity=quantity)
        return quantity


def _require_positive(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantity(requested=quantity)
