"""
Process-local TTL cache for country metadata.

Backed by ``cachetools.TLRUCache`` so every entry carries its own
time-to-live, fixed when the entry is written. Expiry is lazy: an expired
entry is simply absent on the next ``get``/``has``, and ``stats()`` sweeps
everything stale before reporting. There is no background thread.

The store is an ordinary object -- the application builds one in its
lifespan and hands it to services through dependencies. Tests construct
their own with a fake timer.

IMPORTANT: ``get()``, ``set()`` and ``get_or_set()`` use the key AS-IS.
All prefixing happens in the ``cache_key_for_*`` helpers at the bottom of
this module.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, NamedTuple, TypeVar

from cachetools import TLRUCache

from countryvotes.constants import (
    CACHE_MAXSIZE,
    COUNTRY_CACHE_PREFIX,
    COUNTRY_CACHE_TTL,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


class _Entry(NamedTuple):
    value: Any
    ttl: float


def _entry_expiry(_key: str, entry: _Entry, now: float) -> float:
    """TLRUCache time-to-use: absolute expiry for a freshly written entry."""
    return now + entry.ttl


@dataclass
class CacheStats:
    size: int
    keys: list[str] = field(default_factory=list)


class TTLCacheStore:
    """String-keyed cache with per-entry TTL and a read-through helper.

    Args:
        maxsize: Upper bound on live entries. When full, the least recently
            used entry is evicted; freshness semantics are unaffected.
        timer: Monotonic clock returning seconds. Injected in tests.
    """

    def __init__(
        self,
        maxsize: int = CACHE_MAXSIZE,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store: TLRUCache[str, _Entry] = TLRUCache(
            maxsize=maxsize, ttu=_entry_expiry, timer=timer
        )

    def set(self, key: str, value: Any, ttl: float = COUNTRY_CACHE_TTL) -> None:
        """Store *value* under *key* for *ttl* seconds, replacing any prior entry."""
        # TLRUCache silently drops items that are already expired on arrival,
        # which would leave a stale previous value visible.
        self._store.pop(key, None)
        self._store[key] = _Entry(value, ttl)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value, or *default* when absent or expired."""
        entry = self._store.get(key, _MISSING)
        if entry is _MISSING:
            return default
        return entry.value

    def has(self, key: str) -> bool:
        return key in self._store

    def delete(self, key: str) -> bool:
        """Remove *key*. Returns True if a live entry was removed."""
        return self._store.pop(key, _MISSING) is not _MISSING

    def clear(self) -> None:
        self._store.clear()

    async def get_or_set(
        self,
        key: str,
        supplier: Callable[[], Awaitable[T]],
        ttl: float = COUNTRY_CACHE_TTL,
    ) -> T:
        """Return the cached value for *key*, computing it on a miss.

        On a hit the supplier is not called. On a miss it is awaited exactly
        once and its result cached for *ttl* seconds. If the supplier raises,
        the exception propagates and nothing is cached, so the next call
        retries.

        Concurrent misses on the same cold key may each run the supplier;
        the last write wins.
        """
        entry = self._store.get(key, _MISSING)
        if entry is not _MISSING:
            logger.debug("Cache hit: %s", key)
            return entry.value

        logger.debug("Cache miss: %s", key)
        value = await supplier()
        self.set(key, value, ttl)
        return value

    def stats(self) -> CacheStats:
        """Sweep expired entries, then report size and live keys."""
        self._store.expire()
        keys = list(self._store.keys())
        return CacheStats(size=len(keys), keys=keys)


# -----------------------------------------------------------------------
# Cache key generators -- all prefixing happens HERE, nowhere else.
# -----------------------------------------------------------------------


def cache_key_for_country(code: str) -> str:
    """Generate cache key for a country's metadata.

    The code is used exactly as given -- it must be the same string that is
    sent to the lookup service, so the aggregate path (upper-cased codes
    from storage) and the by-code path share entries when codes match.

    Returns:
        ``"country:{code}"``
    """
    return f"{COUNTRY_CACHE_PREFIX}:{code}"
