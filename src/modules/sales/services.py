"""Sale service layer (Use Cases).

Drives a sale through its lifecycle::

    open-no-pieces -> open-awaiting-payment -> calculate-shipping
        -> shipping-awaiting-payment -> shipping-date-pending -> closed

All write operations are atomic; the service defines the unit-of-work
boundary.  Each command locks the sale row first, re-reads its state and
then applies the status change as a compare-and-set, so two concurrent
requests can never both move the sale from the same state.  Stock is
reserved through ``StockLedger`` in the same transaction as the line item
and the status change: a failure anywhere rolls all of them back.

Every read and write is scoped by ``(sale_id, user_id)``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, Optional

import structlog
from django.conf import settings
from django.db import transaction

from modules.core.exceptions import ValidationError
from modules.core.pagination import paginate
from modules.inventory.exceptions import InvalidQuantity, ItemNotFound
from modules.inventory.ledger import StockLedger
from modules.sales.constants import SaleStatus
from modules.sales.dtos import SalePage
from modules.sales.events import LineItemAdded, SaleCreated, SaleStatusChanged
from modules.sales.exceptions import (
    AlreadyClosed,
    InvalidStateForTransition,
    NegativeValue,
    NoLineItems,
    OwnerNotFound,
    SaleNotFound,
    ShippingValueMissing,
)
from modules.sales.models import Sale

if TYPE_CHECKING:
    from modules.inventory.repositories.interfaces import IInventoryItemRepository
    from modules.sales.dtos import AddLineItemDTO, CreateSaleDTO
    from modules.sales.repositories.interfaces import ISaleRepository
    from shared.domain.identity import Identity

logger = structlog.get_logger(__name__)


class SaleService:
    """Application service for Sale use-cases.

    Receives repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        sale_repository: ISaleRepository,
        item_repository: IInventoryItemRepository,
        ledger: Optional[StockLedger] = None,
    ) -> None:
        self._sale_repo = sale_repository
        self._item_repo = item_repository
        self._ledger = ledger or StockLedger(item_repository)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_sale(self, dto: CreateSaleDTO, identity: Identity) -> Sale:
        """Open a sale in ``open-no-pieces``.

        Raises:
            ValidationError: ``client_name`` is blank.
            OwnerNotFound: the user does not exist or is inactive.
        """
        log = logger.bind(user_id=identity.user_id)

        if not dto.client_name:
            raise ValidationError("Client name must not be empty.", field="client_name")
        if not self._sale_repo.owner_exists(identity.user_id):
            log.warning("sale.owner_not_found")
            raise OwnerNotFound(f"User {identity.user_id} not found.")

        sale = Sale(
            client_name=dto.client_name,
            phone=dto.phone or "",
            address=dto.address or "",
            user_id=identity.user_id,
        )
        sale.add_domain_event(SaleCreated(aggregate_id=sale.id, user_id=identity.user_id))
        self._sale_repo.save(sale)
        self._sale_repo.add_history(
            sale_id=sale.id,
            new_status=SaleStatus.OPEN_NO_PIECES,
            user_id=identity.user_id,
            notes="Sale created",
        )

        log.info("sale.created", sale_id=str(sale.id))
        return self.get_sale(str(sale.id), identity)

    @transaction.atomic
    def add_line_item(
        self, sale_id: str, dto: AddLineItemDTO, identity: Identity
    ) -> Sale:
        """Reserve units of one of the user's items against an open sale.

        Repeat additions of the same item add to the existing line.  The
        first line item moves the sale to ``open-awaiting-payment``.

        Raises:
            InvalidQuantity: ``quantity`` is not positive.
            SaleNotFound: no such sale for this user.
            AlreadyClosed: the sale is closed.
            InvalidStateForTransition: the sale is past the open states.
            ItemNotFound: no such item for this user.
            InsufficientStock: not enough units available.
        """
        if dto.quantity <= 0:
            raise InvalidQuantity(requested=dto.quantity)

        sale = self._lock(sale_id, identity)
        log = logger.bind(
            sale_id=str(sale.id), item_id=str(dto.item_id), quantity=dto.quantity
        )

        if sale.is_terminal:
            raise AlreadyClosed()
        if not sale.is_open:
            log.warning("sale.add_item_not_allowed", current_status=sale.status)
            raise InvalidStateForTransition(
                f"Cannot add items to a sale in status {sale.status}.",
                current_status=sale.status,
            )

        item = self._item_repo.get_owned(str(dto.item_id), identity.user_id)
        if not item:
            raise ItemNotFound(f"Inventory item {dto.item_id} not found.")

        remaining = self._ledger.reserve(str(item.id), dto.quantity)
        line = self._sale_repo.add_line_item(sale.id, item.id, dto.quantity)
        sale.add_domain_event(
            LineItemAdded(
                aggregate_id=sale.id,
                item_id=str(item.id),
                quantity=dto.quantity,
                remaining_stock=remaining,
            )
        )
        log.info("sale.line_item_added", line_quantity=line.quantity, remaining=remaining)

        if sale.status == SaleStatus.OPEN_NO_PIECES:
            self._transition(
                sale, SaleStatus.OPEN_AWAITING_PAYMENT, identity, notes="First item added"
            )

        self._sale_repo.record_events(sale)
        return self.get_sale(str(sale.id), identity)

    @transaction.atomic
    def confirm_payment(self, sale_id: str, identity: Identity) -> Sale:
        """``open-awaiting-payment`` -> ``calculate-shipping``.

        Raises:
            SaleNotFound, AlreadyClosed, NoLineItems, InvalidStateForTransition
        """
        sale = self._lock(sale_id, identity)
        if sale.is_terminal:
            raise AlreadyClosed()
        if not self._sale_repo.has_line_items(sale.id):
            raise NoLineItems()
        self._require_status(sale, SaleStatus.OPEN_AWAITING_PAYMENT)

        self._transition(
            sale, SaleStatus.CALCULATE_SHIPPING, identity, notes="Payment confirmed"
        )
        self._sale_repo.record_events(sale)
        return self.get_sale(str(sale.id), identity)

    @transaction.atomic
    def set_shipping_value(
        self, sale_id: str, identity: Identity, value: Decimal
    ) -> Sale:
        """Record the shipping cost.

        From ``calculate-shipping`` this also moves the sale to
        ``shipping-awaiting-payment``; in any other non-closed state the
        value is corrected and the status is left alone.

        Raises:
            NegativeValue: *value* is below zero.
            SaleNotFound, AlreadyClosed
        """
        value = Decimal(str(value))
        if value < 0:
            raise NegativeValue(field="shipping_value")

        sale = self._lock(sale_id, identity)
        if sale.is_terminal:
            raise AlreadyClosed()

        if sale.status == SaleStatus.CALCULATE_SHIPPING:
            self._transition(
                sale,
                SaleStatus.SHIPPING_AWAITING_PAYMENT,
                identity,
                notes=f"Shipping value set to {value}",
                shipping_value=value,
            )
        else:
            self._sale_repo.set_shipping_value(sale.id, value)
            logger.info(
                "sale.shipping_value_corrected",
                sale_id=str(sale.id),
                status=sale.status,
                value=str(value),
            )

        self._sale_repo.record_events(sale)
        return self.get_sale(str(sale.id), identity)

    @transaction.atomic
    def confirm_shipping_payment(self, sale_id: str, identity: Identity) -> Sale:
        """``shipping-awaiting-payment`` -> ``shipping-date-pending``.

        The status is checked before the shipping value.

        Raises:
            SaleNotFound, AlreadyClosed, InvalidStateForTransition,
            ShippingValueMissing
        """
        sale = self._lock(sale_id, identity)
        if sale.is_terminal:
            raise AlreadyClosed()
        self._require_status(sale, SaleStatus.SHIPPING_AWAITING_PAYMENT)
        if sale.shipping_value is None:
            raise ShippingValueMissing()

        self._transition(
            sale,
            SaleStatus.SHIPPING_DATE_PENDING,
            identity,
            notes="Shipping payment confirmed",
        )
        self._sale_repo.record_events(sale)
        return self.get_sale(str(sale.id), identity)

    @transaction.atomic
    def confirm_shipping_date(self, sale_id: str, identity: Identity) -> Sale:
        """``shipping-date-pending`` -> ``closed``.

        Raises:
            SaleNotFound, AlreadyClosed, InvalidStateForTransition
        """
        sale = self._lock(sale_id, identity)
        if sale.is_terminal:
            raise AlreadyClosed()
        self._require_status(sale, SaleStatus.SHIPPING_DATE_PENDING)

        self._transition(sale, SaleStatus.CLOSED, identity, notes="Shipping date confirmed")
        self._sale_repo.record_events(sale)
        return self.get_sale(str(sale.id), identity)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_sale(self, sale_id: str, identity: Identity) -> Sale:
        """Raises:
        SaleNotFound: the sale does not exist or belongs to another user.
        """
        sale = self._sale_repo.get_owned(sale_id, identity.user_id)
        if not sale:
            raise SaleNotFound(f"Sale {sale_id} not found.")
        return sale

    def list_sales(
        self,
        identity: Identity,
        statuses: Optional[Iterable[str]] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> SalePage:
        """The user's sales, newest first, with ``total_pieces`` and
        ``total_value`` on each.

        Raises:
            ValidationError: an unknown status, or ``page`` / ``page_size``
                below 1.
        """
        statuses = list(statuses or [])
        unknown = sorted(set(statuses) - set(SaleStatus.values))
        if unknown:
            raise ValidationError(
                f"Unknown status: {', '.join(unknown)}.", field="status"
            )

        if page_size is None:
            page_size = settings.REST_FRAMEWORK["PAGE_SIZE"]
        queryset = self._sale_repo.list_for_user(identity.user_id, statuses)
        return SalePage.from_page(paginate(queryset, page, page_size))

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def _lock(self, sale_id: str, identity: Identity) -> Sale:
        sale = self._sale_repo.get_owned_for_update(sale_id, identity.user_id)
        if not sale:
            raise SaleNotFound(f"Sale {sale_id} not found.")
        return sale

    @staticmethod
    def _require_status(sale: Sale, expected: str) -> None:
        if sale.status != expected:
            logger.warning(
                "sale.invalid_transition",
                sale_id=str(sale.id),
                current_status=sale.status,
                expected_status=expected,
            )
            raise InvalidStateForTransition(
                f"Sale is {sale.status}; this step requires {expected}.",
                current_status=sale.status,
            )

    def _transition(
        self,
        sale: Sale,
        new_status: str,
        identity: Identity,
        notes: str = "",
        shipping_value: Optional[Decimal] = None,
    ) -> None:
        old_status, new_status = str(sale.status), str(new_status)
        log = logger.bind(
            sale_id=str(sale.id), current_status=old_status, new_status=new_status
        )

        if not sale.can_transition_to(new_status):
            log.warning("sale.invalid_transition")
            raise InvalidStateForTransition(
                f"Cannot transition from {old_status} to {new_status}.",
                current_status=old_status,
            )
        if not self._sale_repo.compare_and_set_status(
            sale.id, old_status, new_status, shipping_value=shipping_value
        ):
            log.warning("sale.transition_lost_race")
            raise InvalidStateForTransition(
                f"Sale is no longer {old_status}.", current_status=old_status
            )

        sale.status = new_status
        if shipping_value is not None:
            sale.shipping_value = shipping_value
        sale.add_domain_event(
            SaleStatusChanged(
                aggregate_id=sale.id, old_status=old_status, new_status=new_status
            )
        )
        self._sale_repo.add_history(
            sale_id=sale.id,
            new_status=new_status,
            user_id=identity.user_id,
            old_status=old_status,
            notes=notes,
        )
        log.info("sale.status_changed")
