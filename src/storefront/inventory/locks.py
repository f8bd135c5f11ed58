"""Per-key locks for serializing work on one product (or one idempotency key)."""

import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager


class _Entry:
    __slots__ = ("lock", "holders")

    def __init__(self):
        self.lock = threading.RLock()
        self.holders = 0


class KeyedLocks:
    """A registry handing out one reentrant lock per key.

    Several keys are always acquired in sorted order, so two callers locking
    overlapping sets cannot deadlock. A key's lock exists only while some
    caller holds or waits for it; the registry does not grow with the number
    of distinct keys ever seen.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    def _checkout(self, key: str) -> threading.RLock:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.holders += 1
            return entry.lock

    def _checkin(self, key: str) -> None:
        with self._guard:
            entry = self._entries[key]
            entry.holders -= 1
            if entry.holders == 0:
                del self._entries[key]

    @contextmanager
    def hold(self, keys: Iterable) -> Iterator[list[str]]:
        ordered = sorted({str(k) for k in keys})
        held: list[tuple[str, threading.RLock]] = []
        try:
            for key in ordered:
                lock = self._checkout(key)
                try:
                    lock.acquire()
                except BaseException:
                    self._checkin(key)
                    raise
                held.append((key, lock))
            yield ordered
        finally:
            for key, lock in reversed(held):
                lock.release()
                self._checkin(key)

    def is_held(self, key) -> bool:
        with self._guard:
            return str(key) in self._entries

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)


product_locks = KeyedLocks()
idempotency_locks = KeyedLocks()
