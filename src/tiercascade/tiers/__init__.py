# src/tiercascade/tiers/__init__.py
"""
Storage Tiers Package.

Concrete tiers that plug a backend into the cascade engine.

Tiers:
- **MemoryCacheTier**: in-process cache with absolute/sliding expiry
- **RedisTier** / **RedisHashTier**: distributed cache via ``redis.asyncio``
- **SQLiteStoreTier**: durable key/value store via ``aiosqlite``
- **CallbackTier**: primitives supplied by the caller

Typical chain::

    MemoryCacheTier → RedisTier → SQLiteStoreTier
       (process)      (shared)       (durable)
"""

from .callback import CallbackTier
from .codec import ItemCodec
from .memory import MemoryCacheTier, MemoryEntry
from .redis_cache import RedisHashTier, RedisTier
from .sqlite import SQLiteStoreTier

__all__ = [
    "CallbackTier",
    "ItemCodec",
    "MemoryCacheTier",
    "MemoryEntry",
    "RedisHashTier",
    "RedisTier",
    "SQLiteStoreTier",
]
