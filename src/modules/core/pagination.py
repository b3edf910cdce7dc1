"""Pagination for list endpoints and offset paging inside services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, List, TypeVar

from django.conf import settings
from django.db.models import QuerySet
from rest_framework.pagination import PageNumberPagination

from modules.core.exceptions import ValidationError

T = TypeVar("T")


class StandardResultsSetPagination(PageNumberPagination):
    """``?page=N&page_size=M`` with the configured default and ceiling."""

    page_size = settings.REST_FRAMEWORK["PAGE_SIZE"]
    page_size_query_param = "page_size"
    max_page_size = settings.MAX_PAGE_SIZE


@dataclass(frozen=True)
class Page(Generic[T]):
    """One offset page of a filtered result set."""

    results: List[T]
    count: int
    page: int
    page_size: int

    @property
    def num_pages(self) -> int:
        if not self.count:
            return 1
        return (self.count + self.page_size - 1) // self.page_size

    @property
    def has_next(self) -> bool:
        return self.page < self.num_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


def paginate(queryset: QuerySet, page: int, page_size: int) -> Page:
    """Slice *queryset* into the 1-based *page*.

    ``page_size`` is capped at ``MAX_PAGE_SIZE``.  A page past the end yields
    empty results with the real ``count``.

    Raises:
        ValidationError: ``page`` or ``page_size`` is below 1.
    """
    if page < 1:
        raise ValidationError("Page must be at least 1.", field="page")
    if page_size < 1:
        raise ValidationError("Page size must be at least 1.", field="page_size")
    page_size = min(page_size, settings.MAX_PAGE_SIZE)

    count = queryset.count()
    offset = (page - 1) * page_size
    results = list(queryset[offset : offset + page_size])
    return Page(results=results, count=count, page=page, page_size=page_size)
