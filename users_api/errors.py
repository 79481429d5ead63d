"""Exceptions raised by the users service."""

from __future__ import annotations


class UsersAPIError(Exception):
    """Base class for errors raised by the users service."""


class UserNotFoundError(UsersAPIError, LookupError):
    """Raised when a lookup or delete targets an unknown user id."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User '{user_id}' not found")
        self.user_id = user_id


__all__ = ["UsersAPIError", "UserNotFoundError"]
