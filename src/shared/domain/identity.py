"""Authenticated identity passed explicitly into every service call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Identity:
    """The already-authenticated user a command runs on behalf of.

    Services never read the current user from request or global state;
    views build an ``Identity`` and hand it over.
    """

    user_id: int

    @classmethod
    def from_user(cls, user: Any) -> Identity:
        return cls(user_id=int(user.pk))

    def __str__(self) -> str:
        return f"user:{self.user_id}"
