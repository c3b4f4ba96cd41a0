"""Per-run memoization of provider responses keyed by canonical domain."""

import asyncio
import logging
from collections import Counter
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, TypeVar

from .models import ProviderKind

logger = logging.getLogger(__name__)

T = TypeVar("T")

CacheKey = tuple[str, ProviderKind]


class _Missing(Enum):
    MISSING = "missing"


MISSING = _Missing.MISSING
"""Returned by ``ResponseCache.get`` when nothing is stored for a key.

A stored ``None`` is a cached NotFound and must not be confused with it.
"""


class ResponseCache:
    """
    Write-through cache of final provider outcomes for one pipeline run.

    Only successes and NotFound results are stored; a fetch that raises is
    never cached. There is no eviction: size is bounded by the unique domains
    of one submission, and a new instance is built for every run.

    The table is guarded by one lock; ``get_or_fetch`` additionally holds a
    per-key lock across lookup, fetch and store so two concurrent callers
    never fetch the same key twice.
    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, Any] = {}
        self._lock = asyncio.Lock()
        self._key_locks: dict[CacheKey, asyncio.Lock] = {}
        self._lookups: Counter[CacheKey] = Counter()

    async def get(self, domain: str, kind: ProviderKind) -> Any:
        """Return the stored record (possibly None), or MISSING."""
        key = (domain, kind)
        async with self._lock:
            self._lookups[key] += 1
            return self._entries.get(key, MISSING)

    async def put(self, domain: str, kind: ProviderKind, record: Any) -> None:
        async with self._lock:
            self._entries[(domain, kind)] = record

    async def get_or_fetch(
        self,
        domain: str,
        kind: ProviderKind,
        fetch: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Return the cached record for (domain, kind), fetching and storing it on a miss.

        Parameters:
            domain (str): Canonical domain.
            kind (ProviderKind): Provider the record comes from.
            fetch (Callable[[], Awaitable[T]]): Zero-argument coroutine factory that
                performs the (already retried) provider call.

        Returns:
            T: Cached or freshly fetched record; None stands for NotFound.
        """
        key_lock = await self._key_lock((domain, kind))
        async with key_lock:
            cached = await self.get(domain, kind)
            if cached is not MISSING:
                logger.debug(f"Cache hit for {kind.value}:{domain}")
                return cached

            record = await fetch()
            await self.put(domain, kind, record)
            return record

    async def _key_lock(self, key: CacheKey) -> asyncio.Lock:
        async with self._lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = asyncio.Lock()
            return lock

    def lookup_count(self, domain: str, kind: ProviderKind | None = None) -> int:
        """Number of lookups made for a domain (optionally for one provider)."""
        if kind is not None:
            return self._lookups[(domain, kind)]
        return sum(
            count for (key_domain, _), count in self._lookups.items() if key_domain == domain
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
