"""Inventory domain exceptions.

Raised by the validator, the stock ledger and the service layer.
``api_exception_handler`` renders them; views do not catch them.
"""

from __future__ import annotations

from modules.core.exceptions import ConflictError, NotFoundError, ValidationError


class EmptyPath(ValidationError):
    """A category path with no elements."""

    code = "empty_path"
    default_detail = "Category path must not be empty."


class CategoryNotFound(NotFoundError):
    code = "category_not_found"
    default_detail = "Category not found."


class BrokenHierarchy(ConflictError):
    """The path is not an unbroken chain starting at a top-level category."""

    code = "broken_hierarchy"
    default_detail = "Category path is not a valid parent chain."


class NotPlaceable(ConflictError):
    """The terminal category still has subdivisions."""

    code = "not_placeable"
    default_detail = "Items can only be filed under a leaf category."


class ItemNotFound(NotFoundError):
    """The item does not exist or belongs to another user."""

    code = "item_not_found"
    default_detail = "Inventory item not found."


class InsufficientStock(ConflictError):
    """Carries ``available`` and ``requested`` in the error payload."""

    code = "insufficient_stock"
    default_detail = "Not enough stock."

    def __init__(self, available: int, requested: int) -> None:
        super().__init__(
            f"Requested {requested}, available {available}.",
            available=available,
            requested=requested,
        )
        self.available = available
        self.requested = requested


class InvalidQuantity(ValidationError):
    code = "invalid_quantity"
    default_detail = "Quantity must be a positive integer."


class NegativePrice(ValidationError):
    code = "negative_price"
    default_detail = "Price cannot be negative."
