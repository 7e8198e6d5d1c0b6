"""A small time-based cache for backend records.

Entries expire ``expiration`` seconds after being stored; expired entries
are purged lazily, at most once every ``cleanup_interval`` seconds, when
the cache is touched. An expiration of 0 disables the cache entirely.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Optional


class TTLCache:
    def __init__(
        self,
        expiration: float,
        cleanup_interval: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.expiration = expiration
        self.cleanup_interval = cleanup_interval
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._last_cleanup = clock()

    @property
    def enabled(self) -> bool:
        return self.expiration > 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[Any]:
        """Return the value stored at ``key``, or None if missing or expired."""
        if not self.enabled:
            return None
        self._maybe_purge()

        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return value

    def put(self, key: str, value: Any) -> None:
        if not self.enabled:
            return
        self._maybe_purge()
        self._entries[key] = (self._clock() + self.expiration, value)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def delete_prefix(self, prefix: str) -> None:
        """Remove ``prefix`` and every key below it."""
        for key in [k for k in self._entries if k == prefix or k.startswith(prefix + "/")]:
            del self._entries[key]

    def clear(self) -> None:
        self._entries.clear()

    def _maybe_purge(self) -> None:
        now = self._clock()
        if now - self._last_cleanup < self.cleanup_interval:
            return
        self._last_cleanup = now
        for key in [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]:
            del self._entries[key]
