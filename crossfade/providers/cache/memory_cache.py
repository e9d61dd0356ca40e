"""Process-local preview cache on top of ``cachetools.TTLCache``.

Entries expire after a single store-wide TTL and the least recently used
entry is evicted once ``max_size`` is reached.  Hit and miss counts are
kept so a caller can report how much a long-lived core saved on lookups.
"""

from __future__ import annotations

from typing import Any

import structlog
from cachetools import TTLCache

from crossfade.interfaces.cache_provider import ICacheProvider
from crossfade.utils.logging import get_logger

DEFAULT_MAX_ENTRIES = 1000
DEFAULT_TTL_SECONDS = 3600


class MemoryCacheProvider(ICacheProvider):
    """TTL cache held in this process.

    Parameters
    ----------
    max_size:
        Entry count at which the least recently used entry is dropped.
    ttl:
        Lifetime of every entry, in seconds.
    """

    def __init__(self, max_size: int = DEFAULT_MAX_ENTRIES, ttl: int = DEFAULT_TTL_SECONDS) -> None:
        self._entries: TTLCache[str, Any] = TTLCache(maxsize=max_size, ttl=ttl)
        self.hits = 0
        self.misses = 0
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def get(self, key: str) -> Any | None:
        found = self._entries.get(key)
        if found is None:
            self.misses += 1
            self._logger.debug("cache_miss", key=key)
        else:
            self.hits += 1
            self._logger.debug("cache_hit", key=key)
        return found

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        # TTLCache has one TTL for the whole store; per-entry ttl is ignored.
        self._entries[key] = value
        self._logger.debug("cache_set", key=key, size=len(self._entries))

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def exists(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
