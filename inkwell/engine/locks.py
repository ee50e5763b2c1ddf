"""
In-process mutual exclusion keyed by resource name.

A document's ``max_version``-then-write sequence must not interleave with
another save to the same document; different documents proceed in parallel.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import Dict, Iterator


class NamedLocks:
    """A lazily-populated lock per name. Thread-safe."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.RLock] = defaultdict(threading.RLock)

    def get(self, name: str) -> threading.RLock:
        with self._guard:
            return self._locks[name]

    @contextmanager
    def hold(self, *names: str) -> Iterator[None]:
        """Acquire the locks for *names* in sorted order to avoid deadlock."""
        locks = [self.get(name) for name in sorted(set(names))]
        for lock in locks:
            lock.acquire()
        try:
            yield
        finally:
            for lock in reversed(locks):
                lock.release()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
