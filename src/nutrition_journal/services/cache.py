"""Query cache for server data read by the journal."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol, TypeVar

_logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_STALE_SECONDS = 300


class Cache(Protocol):
    """Cache interface for simple key-value data."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL in seconds."""

    def invalidate(self, prefix: str) -> None:
        """Drop every entry whose key starts with prefix."""


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime


@dataclass
class InMemoryCache(Cache):
    """Process-local cache."""

    _entries: dict[str, _CacheEntry]

    def __init__(self) -> None:
        self._entries = {}

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if datetime.now(tz=UTC) >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL."""
        expires_at = datetime.now(tz=UTC) + timedelta(seconds=ttl_seconds)
        self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)

    def invalidate(self, prefix: str) -> None:
        """Drop cached entries under a key prefix."""
        for key in [key for key in self._entries if key.startswith(prefix)]:
            del self._entries[key]


@dataclass
class QueryCache:
    """Read-through cache with a staleness window and a short retry."""

    cache: Cache
    stale_seconds: int = DEFAULT_STALE_SECONDS
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    def fetch(self, key: str, loader: Callable[[], T]) -> T:
        """Return the cached value for key, loading it on a miss."""
        cached = self.cache.get(key)
        if cached is not None:
            return cached  # type: ignore[return-value]
        value = self._call_with_retry(loader, key=key)
        self.cache.set(key, value, ttl_seconds=self.stale_seconds)
        return value

    def invalidate(self, prefix: str) -> None:
        """Invalidate every query under a prefix."""
        self.cache.invalidate(prefix)

    def _call_with_retry(self, loader: Callable[[], T], *, key: str) -> T:
        attempt = 0
        while True:
            try:
                return loader()
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "Query %s failed (attempt %s/%s): %s",
                    key,
                    attempt,
                    self.retry_attempts + 1,
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                time.sleep(self.retry_delay_seconds)
