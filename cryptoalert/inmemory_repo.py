"""Thread-safe in-memory subscription store."""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime

from cryptoalert.dto import Subscription, SubscriptionNotFoundError

_NOT_FOUND = "подписка не найдена"


class InMemorySubscriptionRepo:
    """Keeps subscriptions in a dict keyed by id; ids start at 1."""

    def __init__(self) -> None:
        self._data: dict[int, Subscription] = {}
        self._next_id = 1
        self._lock = threading.RLock()

    def add(self, sub: Subscription) -> Subscription:
        with self._lock:
            now = datetime.now()
            stored = replace(sub, id=self._next_id, created_at=now, updated_at=now)
            self._next_id += 1
            self._data[stored.id] = stored
            return stored

    def _owned(self, user_id: str, sub_id: int) -> Subscription:
        sub = self._data.get(sub_id)
        if sub is None or sub.user_id != user_id:
            raise SubscriptionNotFoundError(_NOT_FOUND)
        return sub

    def remove(self, user_id: str, sub_id: int) -> None:
        with self._lock:
            self._owned(user_id, sub_id)
            del self._data[sub_id]

    def update(self, user_id: str, sub_id: int, new_threshold: float) -> None:
        with self._lock:
            sub = self._owned(user_id, sub_id)
            self._data[sub_id] = replace(
                sub,
                token=replace(sub.token, threshold=new_threshold),
                updated_at=datetime.now(),
            )

    def list(self, user_id: str) -> list[Subscription]:
        with self._lock:
            return [sub for sub in self._data.values() if sub.user_id == user_id]

    def list_all(self) -> list[Subscription]:
        with self._lock:
            return list(self._data.values())