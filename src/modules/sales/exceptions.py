"""Sale domain exceptions.

Raised by ``SaleService`` inside its transaction, so the unit of work is
already rolled back when ``api_exception_handler`` renders them.
"""

from __future__ import annotations

from modules.core.exceptions import ConflictError, NotFoundError, ValidationError


class SaleNotFound(NotFoundError):
    """The sale does not exist or belongs to another user."""

    code = "sale_not_found"
    default_detail = "Sale not found."


class OwnerNotFound(NotFoundError):
    """The acting user does not resolve to an active account."""

    code = "owner_not_found"
    default_detail = "User not found."


class AlreadyClosed(ConflictError):
    code = "already_closed"
    default_detail = "Sale is already closed."


class NoLineItems(ConflictError):
    code = "no_line_items"
    default_detail = "Sale has no items."


class InvalidStateForTransition(ConflictError):
    """The sale is not in the state the operation starts from.

    Also raised when a concurrent request moved the sale first.
    """

    code = "invalid_state_for_transition"
    default_detail = "Operation not allowed in the current sale status."


class ShippingValueMissing(ConflictError):
    code = "shipping_value_missing"
    default_detail = "Shipping value must be set first."


class NegativeValue(ValidationError):
    code = "negative_value"
    default_detail = "Value cannot be negative."
