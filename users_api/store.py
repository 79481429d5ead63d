"""Thread-safe in-memory storage for user records."""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

from .models import User


class UserStore:
    """Hold the authoritative set of users behind a single lock.

    Every operation acquires the lock for its whole duration, so callers never
    observe a partially applied mutation. Records are immutable, which makes the
    references returned by :meth:`list` and :meth:`get` safe snapshots.
    """

    def __init__(self) -> None:
        self._users: Dict[str, User] = {}
        self._lock = threading.Lock()

    def list(self) -> List[User]:
        with self._lock:
            return list(self._users.values())

    def insert(self, user: User) -> None:
        # Ids are generated fresh for every create, so overwriting never
        # happens in practice.
        with self._lock:
            self._users[user.id] = user

    def get(self, user_id: str) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def remove(self, user_id: str) -> bool:
        with self._lock:
            return self._users.pop(user_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    def __contains__(self, user_id: object) -> bool:
        with self._lock:
            return user_id in self._users


__all__ = ["UserStore"]
