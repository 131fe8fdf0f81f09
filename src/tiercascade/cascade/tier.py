# src/tiercascade/cascade/tier.py
"""
Cascade Tier - the shared dispatch engine of every storage tier.

A tier wraps exactly one backend and holds a forward reference to the next
tier, forming a singly linked chain assembled by the caller::

    memory = MemoryCacheTier("Order")
    memory.set_next(RedisTier("Order", redis_client)).set_next(SQLiteStoreTier("Order"))

    order = await memory.get("42")          # memory → redis → sqlite
    await memory.set("42", order, update_downstream=True)

Dispatch rules:
- Reads try the local backend first, fall through to the next tier on a miss,
  and by default back-fill the value into every tier they passed through.
- Writes go to the local backend only, unless ``update_downstream=True``.
- Deletes go to the local backend only, unless ``delete_downstream=True``.
- Skip requests (:class:`~.options.CallOptions`) apply to one call only.

Concrete tiers implement the seven ``_core_*`` primitives; they receive
physical keys (already adapted) and the computed expiration instant.

Backend errors propagate unchanged: there is no retry and no rollback of
tiers already written in the same call.
"""

from __future__ import annotations

import abc
import logging
from collections.abc import Callable, Iterable, Iterator
from datetime import datetime, timedelta
from typing import Any, ClassVar, Generic, TypeVar

from ..config.models import CascadeOptions, ExpirationMode
from ..exceptions import CascadeConfigError
from .expiration import Clock, SystemClock, calculate_expiration
from .keys import KeyAdapters
from .options import NO_OPTIONS, CallOptions, Capability, as_capability

logger = logging.getLogger(__name__)

T = TypeVar("T")  # Item type
K = TypeVar("K")  # Key type

TierT = TypeVar("TierT", bound="CascadeTier[Any, Any]")


class CascadeTier(abc.ABC, Generic[T, K]):
    """Base class of all tiers: dispatch engine, chain locator and key layer.

    Args:
        entity: Explicit name of the item schema. Drives default collection
            keys and per-entity overrides in ``options``.
        options: Expiration settings for this tier.
        clock: Time source for expiration calculation.
        capabilities: Capabilities declared in addition to the tier kind's own.
        name: Display name used in logs and errors.
    """

    kind_capabilities: ClassVar[frozenset[Capability]] = frozenset()

    def __init__(
        self,
        entity: str,
        *,
        options: CascadeOptions | None = None,
        clock: Clock | None = None,
        capabilities: Iterable[Capability | str] = (),
        name: str | None = None,
    ) -> None:
        if not entity:
            raise CascadeConfigError("A tier needs a non-empty entity name.")

        options = options or CascadeOptions()
        self.entity = entity
        self.name = name or f"{type(self).__name__}[{entity}]"
        self.capabilities: frozenset[Capability] = self.kind_capabilities | frozenset(
            as_capability(c) for c in capabilities
        )
        self.time_to_live: timedelta | None = options.time_to_live_for(entity)
        self.absolute_expiration: datetime | None = None
        self.expiration_mode: ExpirationMode = options.expiration_mode_for(entity)
        self.keys = KeyAdapters(entity=entity, tier_name=self.name)

        self._clock = clock or SystemClock()
        self._next: CascadeTier[T, K] | None = None

    def __repr__(self) -> str:
        return f"<{self.name}>"

    # -------------------------------------------------------------------------
    # Chain assembly and locator
    # -------------------------------------------------------------------------

    def get_next(self) -> CascadeTier[T, K] | None:
        return self._next

    def set_next(self, next_tier: TierT) -> TierT:
        """Link *next_tier* after this tier and return it, so links can chain.

        Raises:
            CascadeConfigError: If the link would make the chain cyclic.
        """
        if any(tier is self for tier in next_tier.chain()):
            raise CascadeConfigError(
                f"Linking {next_tier.name} after {self.name} would create a cycle."
            )
        self._next = next_tier
        logger.debug("Linked %s -> %s", self.name, next_tier.name)
        return next_tier

    def chain(self) -> Iterator[CascadeTier[T, K]]:
        """Iterate over this tier and every tier after it."""
        tier: CascadeTier[T, K] | None = self
        while tier is not None:
            yield tier
            tier = tier._next

    def has_capability(self, capability: Capability | str) -> bool:
        return as_capability(capability) in self.capabilities

    def find_tier(self, capability: Capability | str, index: int = 0) -> CascadeTier[T, K] | None:
        """Find the ``index``-th tier (zero-based) declaring *capability*.

        Returns:
            The matching tier, or None if the chain ends first.
        """
        if index < 0:
            raise ValueError("index must be zero or positive")
        capability = as_capability(capability)
        remaining = index
        for tier in self.chain():
            if capability in tier.capabilities:
                if remaining == 0:
                    return tier
                remaining -= 1
        return None

    def skip_read(self, *capabilities: Capability | str) -> CallOptions:
        """Options skipping reads on every tier of *capabilities* from here on."""
        return CallOptions().skip_read(*capabilities)

    def skip_write(self, *capabilities: Capability | str) -> CallOptions:
        """Options skipping writes on every tier of *capabilities* from here on."""
        return CallOptions().skip_write(*capabilities)

    def skip_read_this(self) -> CallOptions:
        return CallOptions().skip_read_this(self)

    def skip_write_this(self) -> CallOptions:
        return CallOptions().skip_write_this(self)

    # -------------------------------------------------------------------------
    # Fluent configuration
    # -------------------------------------------------------------------------

    def set_time_to_live(self: TierT, time_to_live: timedelta | None) -> TierT:
        self.time_to_live = time_to_live
        return self

    def set_absolute_expiration(self: TierT, expiration: datetime | None) -> TierT:
        self.absolute_expiration = expiration
        return self

    def set_expiration_mode(self: TierT, mode: ExpirationMode | str) -> TierT:
        self.expiration_mode = ExpirationMode(mode)
        return self

    def adapt_key_to_key(self: TierT, adapter: Callable[[K], Any]) -> TierT:
        self.keys.key_to_key = adapter
        return self

    def adapt_item_to_key(self: TierT, adapter: Callable[[T], Any]) -> TierT:
        self.keys.item_to_key = adapter
        return self

    def adapt_get_set_all_key(self: TierT, key: str) -> TierT:
        self.keys.get_all_key = key
        return self

    def adapt_list_prefix(self: TierT, prefix: str) -> TierT:
        self.keys.list_prefix = prefix
        return self

    def adapt_list_key(self: TierT, key: str | None) -> TierT:
        self.keys.list_key = key
        return self

    def calculate_expiration(self) -> datetime | None:
        """Effective expiration instant for a write happening now."""
        return calculate_expiration(
            self.time_to_live, self.absolute_expiration, self._clock.now()
        )

    # -------------------------------------------------------------------------
    # Dispatch engine
    # -------------------------------------------------------------------------

    async def get(
        self, key: K, update_downstream: bool = True, options: CallOptions | None = None
    ) -> T | None:
        """Get an item, falling through to the next tier on a miss.

        Args:
            key: Logical key.
            update_downstream: Back-fill a value found further down into this tier.
            options: Per-call skip requests.

        Returns:
            The item, or None if no tier has it.
        """
        options = options or NO_OPTIONS

        if not options.skips_read(self):
            value = await self._core_get(self.keys.key_for(key))
            if value is not None:
                logger.debug("%s hit for key %r", self.name, key)
                return value

        if self._next is None:
            return None

        value = await self._next.get(key, update_downstream, options)

        if value is not None and update_downstream and not options.skips_write(self):
            logger.debug("%s back-filling key %r", self.name, key)
            await self._write_one(key, value)

        return value

    async def get_all(
        self, update_downstream: bool = True, options: CallOptions | None = None
    ) -> list[T]:
        """Get the whole get-all collection; an empty list counts as a miss."""
        options = options or NO_OPTIONS

        if not options.skips_read(self):
            values = await self._core_get_all(self.keys.get_all_key)
            if values:
                return list(values)

        if self._next is None:
            return []

        values = await self._next.get_all(update_downstream, options)

        if values and update_downstream and not options.skips_write(self):
            logger.debug("%s back-filling %d items for get-all", self.name, len(values))
            await self._core_set_all(self.keys.get_all_key, values, self.calculate_expiration())

        return values

    async def get_list(
        self, list_id: Any, update_downstream: bool = True, options: CallOptions | None = None
    ) -> list[T]:
        """Get the list identified by *list_id*; an empty list counts as a miss."""
        options = options or NO_OPTIONS
        list_key = self.keys.list_key_for(list_id)

        if not options.skips_read(self):
            values = await self._core_get_list(list_key)
            if values:
                return list(values)

        if self._next is None:
            return []

        values = await self._next.get_list(list_id, update_downstream, options)

        if values and update_downstream and not options.skips_write(self):
            logger.debug("%s back-filling %d items for list %r", self.name, len(values), list_id)
            await self._core_set_list(list_key, values, self.calculate_expiration())

        return values

    async def set(
        self,
        key: K,
        item: T,
        update_downstream: bool = False,
        options: CallOptions | None = None,
    ) -> None:
        """Write an item locally and, if asked, to every following tier."""
        options = options or NO_OPTIONS

        if not options.skips_write(self):
            await self._write_one(key, item)

        if update_downstream and self._next is not None:
            await self._next.set(key, item, update_downstream, options)

    async def set_all(
        self,
        items: list[T],
        update_downstream: bool = False,
        options: CallOptions | None = None,
    ) -> None:
        options = options or NO_OPTIONS

        if not options.skips_write(self):
            await self._core_set_all(self.keys.get_all_key, list(items), self.calculate_expiration())

        if update_downstream and self._next is not None:
            await self._next.set_all(items, update_downstream, options)

    async def set_list(
        self,
        list_id: Any,
        items: list[T],
        update_downstream: bool = False,
        options: CallOptions | None = None,
    ) -> None:
        options = options or NO_OPTIONS

        if not options.skips_write(self):
            await self._core_set_list(
                self.keys.list_key_for(list_id), list(items), self.calculate_expiration()
            )

        if update_downstream and self._next is not None:
            await self._next.set_list(list_id, items, update_downstream, options)

    async def delete(self, key: K, delete_downstream: bool = False) -> None:
        """Delete an item locally and, if asked, from every following tier."""
        await self._core_delete(self.keys.key_for(key))

        if delete_downstream and self._next is not None:
            await self._next.delete(key, delete_downstream)

    async def refresh(self, key: K, options: CallOptions | None = None) -> T | None:
        """Re-read *key* from the last tier and write it into every tier on the way back."""
        options = options or NO_OPTIONS

        if self._next is None:
            return await self.get(key, True, options)

        value = await self._next.refresh(key, options)

        if value is not None and not options.skips_write(self):
            await self._write_one(key, value)

        return value

    async def _write_one(self, key: K, item: T) -> None:
        await self._core_set(self.keys.key_for(key), item, self.calculate_expiration())

    # -------------------------------------------------------------------------
    # Backend primitives
    # -------------------------------------------------------------------------

    @abc.abstractmethod
    async def _core_get(self, key: Any) -> T | None:
        """Read one item by physical key; None when absent or expired."""

    @abc.abstractmethod
    async def _core_get_all(self, all_key: str) -> list[T]:
        """Read the get-all collection; empty when absent."""

    @abc.abstractmethod
    async def _core_get_list(self, list_key: str) -> list[T]:
        """Read a list collection; empty when absent."""

    @abc.abstractmethod
    async def _core_set(self, key: Any, item: T, expires_at: datetime | None) -> None:
        """Write one item."""

    @abc.abstractmethod
    async def _core_set_all(self, all_key: str, items: list[T], expires_at: datetime | None) -> None:
        """Write the get-all collection."""

    @abc.abstractmethod
    async def _core_set_list(self, list_key: str, items: list[T], expires_at: datetime | None) -> None:
        """Write a list collection."""

    @abc.abstractmethod
    async def _core_delete(self, key: Any) -> None:
        """Delete one item by physical key."""
