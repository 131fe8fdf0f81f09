# src/tiercascade/tiers/memory.py
"""
Memory Cache Tier - in-process storage with expiry and LRU eviction.

This is the fastest tier and normally the head of a chain. It supports:
- Absolute expiration (computed per write by the cascade engine)
- Sliding expiration (each read pushes expiry out by the tier's TTL,
  never past an absolute expiration instant when one is set)
- An item count limit with LRU eviction
- Hit/miss statistics

Items are stored by reference; callers that mutate cached objects should
store copies.

Usage:
    tier = MemoryCacheTier("Order", options=CascadeOptions(time_to_live_seconds=60))
    await tier.set("42", order)
    order = await tier.get("42")
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..cascade.expiration import to_timestamp
from ..cascade.options import Capability
from ..cascade.tier import CascadeTier, K, T
from ..config.models import ExpirationMode

logger = logging.getLogger(__name__)


@dataclass
class MemoryEntry:
    """An entry stored in the in-process cache.

    Attributes:
        value: The stored item or list of items.
        expires_at: Unix timestamp when the entry expires (None = never).
        sliding_seconds: TTL re-applied on each read (None = absolute expiry).
        hard_expires_at: Cap for sliding renewals (None = uncapped).
        last_accessed: Unix timestamp of the last read or write, for LRU.
        access_count: Number of reads served.
    """

    value: Any
    expires_at: float | None = None
    sliding_seconds: float | None = None
    hard_expires_at: float | None = None
    last_accessed: float = 0.0
    access_count: int = 0

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at

    def touch(self, now: float) -> None:
        self.last_accessed = now
        self.access_count += 1
        if self.sliding_seconds is not None:
            renewed = now + self.sliding_seconds
            if self.hard_expires_at is not None:
                renewed = min(renewed, self.hard_expires_at)
            self.expires_at = renewed


class MemoryCacheTier(CascadeTier[T, K]):
    """In-process cache tier.

    Args:
        entity: Item schema name.
        max_items: Maximum number of entries (0 = unlimited).
        **kwargs: Passed to :class:`CascadeTier`.
    """

    kind_capabilities = frozenset({Capability.IN_PROCESS_CACHE})

    def __init__(self, entity: str, *, max_items: int = 10000, **kwargs: Any) -> None:
        super().__init__(entity, **kwargs)
        self.max_items = max_items
        self._store: dict[Any, MemoryEntry] = {}
        self._lock = threading.RLock()
        self._stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "deletes": 0,
            "evictions": 0,
            "expirations": 0,
        }

    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------

    def _now(self) -> float:
        return self._clock.now().timestamp()

    def _lookup(self, key: Any) -> Any | None:
        with self._lock:
            now = self._now()
            entry = self._store.get(key)

            if entry is None:
                self._stats["misses"] += 1
                return None

            if entry.is_expired(now):
                del self._store[key]
                self._stats["misses"] += 1
                self._stats["expirations"] += 1
                return None

            entry.touch(now)
            self._stats["hits"] += 1
            return entry.value

    def _store_entry(self, key: Any, value: Any, expires_at: datetime | None, sliding: bool) -> None:
        with self._lock:
            now = self._now()

            if self.max_items > 0 and key not in self._store and len(self._store) >= self.max_items:
                self._evict_lru()

            hard_expiry = to_timestamp(expires_at)
            sliding_seconds = None
            if sliding and self.time_to_live is not None:
                sliding_seconds = self.time_to_live.total_seconds()
                hard_expiry = to_timestamp(self.absolute_expiration)
                first_expiry = now + sliding_seconds
                expiry: float | None = (
                    min(first_expiry, hard_expiry) if hard_expiry is not None else first_expiry
                )
            else:
                expiry = hard_expiry

            self._store[key] = MemoryEntry(
                value=value,
                expires_at=expiry,
                sliding_seconds=sliding_seconds,
                hard_expires_at=hard_expiry if sliding_seconds is not None else None,
                last_accessed=now,
            )
            self._stats["sets"] += 1

    def _evict_lru(self) -> int:
        """Evict expired entries, or else the least recently used one."""
        now = self._now()
        expired = [k for k, e in self._store.items() if e.is_expired(now)]
        for key in expired:
            del self._store[key]
        self._stats["expirations"] += len(expired)
        if expired:
            return len(expired)

        oldest = min(self._store, key=lambda k: self._store[k].last_accessed)
        del self._store[oldest]
        self._stats["evictions"] += 1
        logger.debug("%s evicted LRU entry %r", self.name, oldest)
        return 1

    # -------------------------------------------------------------------------
    # Backend primitives
    # -------------------------------------------------------------------------

    async def _core_get(self, key: Any) -> T | None:
        return self._lookup(key)

    async def _core_get_all(self, all_key: str) -> list[T]:
        return self._lookup(all_key) or []

    async def _core_get_list(self, list_key: str) -> list[T]:
        return self._lookup(list_key) or []

    async def _core_set(self, key: Any, item: T, expires_at: datetime | None) -> None:
        self._store_entry(key, item, expires_at, self.expiration_mode == ExpirationMode.SLIDING)

    async def _core_set_all(self, all_key: str, items: list[T], expires_at: datetime | None) -> None:
        self._store_entry(all_key, list(items), expires_at, sliding=False)

    async def _core_set_list(self, list_key: str, items: list[T], expires_at: datetime | None) -> None:
        self._store_entry(list_key, list(items), expires_at, sliding=False)

    async def _core_delete(self, key: Any) -> None:
        with self._lock:
            if self._store.pop(key, None) is not None:
                self._stats["deletes"] += 1

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def clear(self) -> int:
        """Remove all entries. Returns the number removed."""
        with self._lock:
            count = len(self._store)
            self._store.clear()
            return count

    def stats(self) -> dict[str, Any]:
        """Return cache statistics including the hit rate."""
        with self._lock:
            total = self._stats["hits"] + self._stats["misses"]
            return {
                "item_count": len(self._store),
                "max_items": self.max_items,
                "hit_rate": self._stats["hits"] / total if total > 0 else 0.0,
                **self._stats,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: Any) -> bool:
        with self._lock:
            entry = self._store.get(key)
            return entry is not None and not entry.is_expired(self._now())
