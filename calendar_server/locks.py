"""Per-key mutual exclusion."""
from __future__ import annotations

import threading
import typing as t
from contextlib import contextmanager
from dataclasses import dataclass, field


@dataclass
class _LockEntry:
    """A key's lock and the number of threads holding or waiting on it."""
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class KeyedLock:
    """
    Hands out one lock per key, so work on different keys runs concurrently
    while work on the same key is serialized. Locks are released from the
    table once no thread holds or waits on them.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[t.Hashable, _LockEntry] = {}

    @contextmanager
    def hold(self, key: t.Hashable) -> t.Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(key, _LockEntry())
            entry.users += 1
        entry.lock.acquire()
        try:
            yield
        finally:
            entry.lock.release()
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
