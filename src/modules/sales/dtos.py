"""Sale DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  These are the
contracts between the API layer (DRF Serializers) and ``SaleService``.
DTOs are immutable (``frozen=True``).

- ``CreateSaleDTO``: input for opening a sale.
- ``AddLineItemDTO``: input for reserving units of an item against a sale.
- ``SalePage``: one page of the caller's sales.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

if TYPE_CHECKING:
    from modules.core.pagination import Page


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateSaleDTO(BaseModel):
    """Immutable DTO for sale creation requests.

    Text fields are stripped; a blank ``client_name`` is rejected by the
    service as a domain validation error.
    """

    model_config = ConfigDict(frozen=True)

    client_name: str
    phone: Optional[str] = ""
    address: Optional[str] = ""

    @field_validator("client_name", "phone", "address")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> str:
        return (v or "").strip()


class AddLineItemDTO(BaseModel):
    """Immutable DTO for adding an item to a sale.

    ``quantity`` is checked by the service (``InvalidQuantity``) rather than
    here, so a non-positive value reports the same error everywhere.
    """

    model_config = ConfigDict(frozen=True)

    item_id: UUID
    quantity: int


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class SalePage(BaseModel):
    """Immutable DTO for one offset page of sales, newest first.

    ``count`` is the size of the whole filtered set, not of this page.
    """

    model_config = ConfigDict(frozen=True)

    results: List[Any]
    count: int
    page: int
    page_size: int
    num_pages: int

    @classmethod
    def from_page(cls, page: Page) -> SalePage:
        return cls(
            results=page.results,
            count=page.count,
            page=page.page,
            page_size=page.page_size,
            num_pages=page.num_pages,
        )
