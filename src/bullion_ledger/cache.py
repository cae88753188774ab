"""In-memory cache with per-entry expiry.

Instances are created by the caller and handed to the services that read
through them, so tests and separate sessions never share cached rows.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


@dataclass
class CacheEntry:
    value: Any
    stored_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.stored_at > self.ttl


class DataCache:
    """Key/value store whose entries expire ``ttl`` seconds after being set."""

    def __init__(
        self,
        default_ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None when missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            logger.debug("cache_expired", key=key)
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        self._entries[key] = CacheEntry(
            value=value,
            stored_at=self._clock(),
            ttl=self._default_ttl if ttl is None else ttl,
        )

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every entry whose key starts with ``prefix``."""
        stale = [key for key in self._entries if key.startswith(prefix)]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug("cache_invalidated", prefix=prefix, count=len(stale))
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
