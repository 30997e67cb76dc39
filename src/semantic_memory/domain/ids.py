"""IdGenerator implementations.

Both generators make uniqueness within a process a property of the generator
itself rather than of clock resolution or chance.
"""

from __future__ import annotations

import itertools
import threading
from uuid import uuid4


class UuidIdGenerator:
    """Random 128-bit suffixes (``uuid4().hex``)."""

    def next_suffix(self) -> str:
        return uuid4().hex


class CounterIdGenerator:
    """Monotonic counter suffixes, safe to share between threads.

    A ``prefix`` distinguishes counters created by different processes that
    write to the same store.
    """

    def __init__(self, prefix: str = "", start: int = 0) -> None:
        self._prefix = prefix
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_suffix(self) -> str:
        with self._lock:
            value = next(self._counter)
        return f"{self._prefix}{value}"
