#!/usr/bin/env python3
"""Process-local usage counters, keyed by source and surface."""

import threading
import time


class UsageCounters:
    """Thread-safe named counters.

    Keys are free-form; the endpoints use ``"<source>:<surface>"`` such as
    ``"petstore:tools/call"``.
    """

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._lock = threading.Lock()
        self.start_time = time.time()

    def increment(self, key: str, amount: int = 1) -> int:
        """Add ``amount`` to ``key`` and return the new value."""
        with self._lock:
            value = self._counts.get(key, 0) + amount
            self._counts[key] = value
            return value

    def get(self, key: str) -> int:
        with self._lock:
            return self._counts.get(key, 0)

    def snapshot(self) -> dict[str, int]:
        """Copy of all counters."""
        with self._lock:
            return dict(self._counts)

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()

    @property
    def uptime(self) -> float:
        return time.time() - self.start_time

    @property
    def total(self) -> int:
        with self._lock:
            return sum(self._counts.values())
