"""Inventory service layer (Use Cases).

Item placement goes through ``CategoryHierarchyValidator``; every quantity
change goes through ``StockLedger``.  Items are scoped to their owner: an
item belonging to someone else is reported exactly like a missing one.
"""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

import structlog
from django.db import transaction

from modules.core.exceptions import ValidationError
from modules.inventory.dtos import CategoryNodeDTO, ItemLeafDTO
from modules.inventory.exceptions import InvalidQuantity, ItemNotFound, NegativePrice
from modules.inventory.hierarchy import CategoryHierarchyValidator
from modules.inventory.ledger import StockLedger
from modules.inventory.models import InventoryItem

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.inventory.dtos import CreateInventoryItemDTO
    from modules.inventory.models import Category
    from modules.inventory.repositories.interfaces import (
        ICategoryRepository,
        IInventoryItemRepository,
    )
    from shared.domain.identity import Identity

logger = structlog.get_logger(__name__)


class InventoryService:
    """Application service for inventory use-cases.

    Receives repositories via constructor injection (DIP).  The validator
    and the ledger are built from them unless given explicitly.
    """

    def __init__(
        self,
        item_repository: IInventoryItemRepository,
        category_repository: ICategoryRepository,
        validator: Optional[CategoryHierarchyValidator] = None,
        ledger: Optional[StockLedger] = None,
    ) -> None:
        self._item_repo = item_repository
        self._category_repo = category_repository
        self._validator = validator or CategoryHierarchyValidator(category_repository)
        self._ledger = ledger or StockLedger(item_repository)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_item(
        self, dto: CreateInventoryItemDTO, identity: Identity
    ) -> InventoryItem:
        """File a new item under a validated category path.

        Raises:
            ValidationError: the description is blank.
            InvalidQuantity: the initial quantity is negative.
            NegativePrice: the price is negative.
            EmptyPath, CategoryNotFound, BrokenHierarchy, NotPlaceable:
                propagated from the hierarchy validator.
        """
        log = logger.bind(user_id=identity.user_id, path=dto.category_path)

        if not dto.description:
            raise ValidationError("Description must not be empty.", field="description")
        if dto.quantity < 0:
            raise InvalidQuantity("Quantity cannot be negative.", requested=dto.quantity)
        if dto.price < 0:
            raise NegativePrice()

        chain = self._validator.validate(dto.category_path)

        item = InventoryItem(
            description=dto.description,
            quantity=dto.quantity,
            price=dto.price,
            category_path=InventoryItem.join_path([c.id for c in chain]),
            category=chain[-1],
            user_id=identity.user_id,
        )
        item = self._item_repo.save(item)
        log.info("inventory_item.created", item_id=str(item.id), quantity=item.quantity)
        return item

    @transaction.atomic
    def update_price(
        self, item_id: str, price: Decimal, identity: Identity
    ) -> InventoryItem:
        """Raises:
        NegativePrice: *price* is below zero.
        ItemNotFound: no such item for this user.
        """
        if price < 0:
            raise NegativePrice()
        item = self.get_item(item_id, identity)
        self._item_repo.update_price(str(item.id), price)
        logger.info("inventory_item.price_updated", item_id=str(item.id), price=str(price))
        return self.get_item(item_id, identity)

    @transaction.atomic
    def set_quantity(
        self, item_id: str, quantity: int, identity: Identity
    ) -> InventoryItem:
        """Administrative stock count for one of the user's items.

        Raises:
            InvalidQuantity: *quantity* is negative.
            ItemNotFound: no such item for this user.
        """
        item = self.get_item(item_id, identity)
        self._ledger.set_quantity(str(item.id), quantity)
        return self.get_item(item_id, identity)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def validate_path(self, path: Sequence[str]) -> List[Category]:
        return self._validator.validate(path)

    def get_item(self, item_id: str, identity: Identity) -> InventoryItem:
        """Raises:
        ItemNotFound: the item does not exist or belongs to another user.
        """
        item = self._item_repo.get_owned(item_id, identity.user_id)
        if not item:
            raise ItemNotFound(f"Inventory item {item_id} not found.")
        return item

    def list_items(
        self, identity: Identity, filters: Optional[Dict[str, Any]] = None
    ) -> QuerySet:
        return self._item_repo.list_for_user(identity.user_id, filters)

    def category_tree(self, identity: Identity) -> List[CategoryNodeDTO]:
        """The whole taxonomy with the user's items under their categories."""
        categories = self._category_repo.list_all()

        children_of: Dict[Optional[str], List[Category]] = defaultdict(list)
        for category in categories:
            children_of[category.parent_id].append(category)

        items_of: Dict[str, List[ItemLeafDTO]] = defaultdict(list)
        for item in self._item_repo.list_for_user(identity.user_id):
            items_of[item.category_id].append(
                ItemLeafDTO(
                    id=item.id,
                    name=item.description,
                    quantity=item.quantity,
                    price=item.price,
                )
            )

        def build(category: Category) -> CategoryNodeDTO:
            return CategoryNodeDTO(
                id=category.id,
                name=category.name,
                level=category.level,
                is_leaf=category.is_leaf,
                children=[build(child) for child in children_of[category.id]]
                + items_of[category.id],
            )

        return [build(root) for root in children_of[None]]
