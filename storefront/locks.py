from __future__ import annotations

import itertools
from contextlib import contextmanager
from threading import Lock, RLock
from typing import Dict, Hashable, Iterator


class KeyedLock:
    """Hand out one re-entrant lock per key (session id, product id, ...)."""

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: Dict[Hashable, RLock] = {}

    def _lock_for(self, key: Hashable) -> RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = RLock()
            return lock

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._lock_for(key):
            yield

    def __len__(self) -> int:
        return len(self._locks)


class IdSequence:
    """Thread-safe counter for record ids, starting at 1."""

    def __init__(self, start: int = 1) -> None:
        self._lock = Lock()
        self._counter = itertools.count(start)

    def next(self) -> int:
        with self._lock:
            return next(self._counter)
