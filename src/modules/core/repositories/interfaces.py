"""Persistence contract shared by the inventory and sales repositories.

Services receive repositories through their constructor and only see these
abstract types; the ORM is confined to the ``django_repository`` modules.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    # Records are never removed in this service, hence no delete().

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Look up by primary key. Unknown or unparsable ids give ``None``."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Insert or update ``entity`` and hand it back."""
