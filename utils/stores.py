"""
In-memory keyed stores for verified users and outstanding OTP challenges.

Handlers only talk to the `KeyedStore` protocol, so a test fake or another
backend can be swapped in without touching them.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Generic, Iterator, Optional, Protocol, TypeVar

from models import Challenge

V = TypeVar("V")


class KeyedStore(Protocol[V]):
    def get(self, key: str) -> Optional[V]:
        ...

    def set(self, key: str, value: V) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def has(self, key: str) -> bool:
        ...


class InMemoryStore(Generic[V]):
    def __init__(self) -> None:
        self._entries: dict[str, V] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[V]:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, value: V) -> None:
        with self._lock:
            self._entries[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def purge(self, predicate: Callable[[V], bool]) -> int:
        """Drop every entry matching `predicate`; returns how many were removed."""
        with self._lock:
            stale = [key for key, value in self._entries.items() if predicate(value)]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class KeyedLocks:
    """Per-key mutual exclusion; idle locks are dropped from the registry."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._holders: dict[str, int] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._holders[key] = self._holders.get(key, 0) + 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._holders[key] -= 1
                if self._holders[key] == 0:
                    del self._holders[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


def sweep_expired_challenges(store: InMemoryStore[Challenge], now: datetime) -> int:
    return store.purge(lambda challenge: challenge.is_expired(now))
