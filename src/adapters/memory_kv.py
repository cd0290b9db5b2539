"""In-process expiring key-value adapter.

Implements KVStorePort with a dict and per-key deadlines. Useful when the
host cache is unavailable (CLI, tests); entries are lost on restart, which
is fine for cached data.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional


class MemoryKVStore:
    """Dict-backed cache that satisfies the KVStorePort contract."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[bytes, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        """Return the value for key, or None if missing or expired."""

        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if now >= expires_at:
                # Expired entries are evicted lazily on read.
                del self._entries[key]
                return None
        return value

    def set_with_expiry(self, key: str, value: bytes, ttl_seconds: int) -> None:
        """Store value until ttl_seconds have elapsed on the clock."""

        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        expires_at = self._clock() + ttl_seconds
        with self._lock:
            self._entries[key] = (bytes(value), expires_at)

    def cleanup_expired(self) -> int:
        """Drop expired entries and return how many were removed."""

        now = self._clock()
        with self._lock:
            expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
            for key in expired:
                del self._entries[key]
        return len(expired)
