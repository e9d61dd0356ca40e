"""Cache contract for lookups that may outlive one batch.

crossfade stores nothing itself.  A caller that wants preview lookups (the
only cached concern today) to survive across batches hands a cache to the
preview provider; keys are plain strings such as
``itunes_preview:strobe|deadmau5`` and values are whatever the provider
chose to store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ICacheProvider(ABC):
    """Async key-value store."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Stored value for *key*, or ``None`` when absent or expired."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store *value* under *key*.

        Parameters
        ----------
        ttl:
            Seconds to keep the entry; ``None`` leaves it to the backend.
            Backends with a single store-wide TTL may ignore it.
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Drop *key*; a missing key is not an error."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """``True`` if *key* holds a live entry."""
