"""Keyed in-process locks.

Serializes writers that touch the same key (a product id, an order id)
while letting unrelated keys proceed concurrently.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class KeyedLock:
    """A registry of re-entrant locks, one per key."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def _lock_for(self, key: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._lock_for(str(key))
        with lock:
            yield

    def __len__(self) -> int:
        return len(self._locks)


product_locks = KeyedLock()
order_locks = KeyedLock()
