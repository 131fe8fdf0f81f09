# src/tiercascade/tiers/redis_cache.py
"""
Redis Tiers - distributed cache tiers backed by ``redis.asyncio``.

Two layouts are provided:

- :class:`RedisTier` stores one JSON string per key. Writes carry the
  computed expiration as ``EXAT``; in sliding mode reads use ``GETEX`` to
  push the expiry out by the tier's TTL, capped by its absolute expiration.
- :class:`RedisHashTier` stores items as fields of a hash. Single items live
  in one hash per entity (see :meth:`RedisHashTier.adapt_hash_key`); get-all
  and list collections are hashes of their own with one field per item,
  keyed by the item-to-key adapter. Hash fields cannot expire individually,
  so this tier applies no expiration.

Redis removes expired keys itself, so an expired value is always a miss.

Example::

    import redis.asyncio as aioredis

    client = aioredis.from_url("redis://localhost:6379/0")
    tier = RedisTier("Order", client, item_type=Order)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from redis.asyncio import Redis

from ..cascade.options import Capability
from ..cascade.tier import CascadeTier, K, T
from ..config.models import ExpirationMode
from .codec import ItemCodec

logger = logging.getLogger(__name__)


class RedisTier(CascadeTier[T, K]):
    """Redis string tier: ``SET``/``GET`` of JSON payloads.

    Args:
        entity: Item schema name.
        client: An ``redis.asyncio.Redis`` client (owned by the caller).
        item_type: Type used to decode payloads (default: plain JSON values).
        **kwargs: Passed to :class:`CascadeTier`.
    """

    kind_capabilities = frozenset({Capability.DISTRIBUTED_CACHE})

    def __init__(self, entity: str, client: Redis, *, item_type: Any = Any, **kwargs: Any) -> None:
        super().__init__(entity, **kwargs)
        self._client = client
        self._codec: ItemCodec[T] = ItemCodec(item_type, entity)

    async def _read(self, name: str) -> bytes | None:
        if self.expiration_mode == ExpirationMode.SLIDING and self.time_to_live is not None:
            # renewal is capped by the absolute expiration instant
            return await self._client.getex(name, exat=self.calculate_expiration())
        return await self._client.get(name)

    async def _write(self, name: str, payload: bytes, expires_at: datetime | None) -> None:
        if expires_at is not None:
            await self._client.set(name, payload, exat=expires_at)
        else:
            await self._client.set(name, payload)

    async def _core_get(self, key: Any) -> T | None:
        payload = await self._read(str(key))
        return None if payload is None else self._codec.loads(payload)

    async def _core_get_all(self, all_key: str) -> list[T]:
        payload = await self._client.get(all_key)
        return [] if payload is None else self._codec.loads_many(payload)

    async def _core_get_list(self, list_key: str) -> list[T]:
        payload = await self._client.get(list_key)
        return [] if payload is None else self._codec.loads_many(payload)

    async def _core_set(self, key: Any, item: T, expires_at: datetime | None) -> None:
        await self._write(str(key), self._codec.dumps(item), expires_at)

    async def _core_set_all(self, all_key: str, items: list[T], expires_at: datetime | None) -> None:
        await self._write(all_key, self._codec.dumps_many(items), expires_at)

    async def _core_set_list(self, list_key: str, items: list[T], expires_at: datetime | None) -> None:
        await self._write(list_key, self._codec.dumps_many(items), expires_at)

    async def _core_delete(self, key: Any) -> None:
        await self._client.delete(str(key))


class RedisHashTier(CascadeTier[T, K]):
    """Redis hash tier: items are fields of a hash.

    Args:
        entity: Item schema name; also the default hash holding single items.
        client: An ``redis.asyncio.Redis`` client (owned by the caller).
        item_type: Type used to decode payloads (default: plain JSON values).
        **kwargs: Passed to :class:`CascadeTier`.
    """

    kind_capabilities = frozenset({Capability.DISTRIBUTED_HASH})

    def __init__(self, entity: str, client: Redis, *, item_type: Any = Any, **kwargs: Any) -> None:
        super().__init__(entity, **kwargs)
        self._client = client
        self._codec: ItemCodec[T] = ItemCodec(item_type, entity)
        self._hash_key: Callable[[], Any] = lambda: entity

    def adapt_hash_key(self, adapter: Callable[[], Any] | str) -> RedisHashTier[T, K]:
        """Set the name of the hash that holds single items."""
        self._hash_key = adapter if callable(adapter) else (lambda: adapter)
        return self

    @property
    def hash_name(self) -> str:
        return str(self._hash_key())

    async def _read_hash(self, name: str) -> list[T]:
        fields = await self._client.hgetall(name)
        if not fields:
            return []
        return [self._codec.loads(payload) for payload in fields.values()]

    async def _write_hash(self, name: str, items: list[T]) -> None:
        if not items:
            return
        mapping = {str(self.keys.key_of(item)): self._codec.dumps(item) for item in items}
        await self._client.hset(name, mapping=mapping)

    async def _core_get(self, key: Any) -> T | None:
        payload = await self._client.hget(self.hash_name, str(key))
        return None if payload is None else self._codec.loads(payload)

    async def _core_get_all(self, all_key: str) -> list[T]:
        return await self._read_hash(all_key)

    async def _core_get_list(self, list_key: str) -> list[T]:
        return await self._read_hash(list_key)

    async def _core_set(self, key: Any, item: T, expires_at: datetime | None) -> None:
        await self._client.hset(self.hash_name, str(key), self._codec.dumps(item))

    async def _core_set_all(self, all_key: str, items: list[T], expires_at: datetime | None) -> None:
        await self._write_hash(all_key, items)

    async def _core_set_list(self, list_key: str, items: list[T], expires_at: datetime | None) -> None:
        await self._write_hash(list_key, items)

    async def _core_delete(self, key: Any) -> None:
        await self._client.hdel(self.hash_name, str(key))
