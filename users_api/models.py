"""Domain models for the in-memory users service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class User:
    """Represents a registered user held by :class:`~users_api.store.UserStore`."""

    id: str
    name: str
    email: str
    created_at: datetime


__all__ = ["User"]
