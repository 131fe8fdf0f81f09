# src/tiercascade/cascade/options.py
"""
Capabilities and per-call options.

Tiers declare a static set of :class:`Capability` tags at construction. The
chain locator and skip requests match on these tags, never on concrete
classes.

Skip requests travel with a single call as an immutable :class:`CallOptions`
value, so two concurrent calls on the same chain cannot consume each other's
skips::

    options = CallOptions().skip_read(Capability.IN_PROCESS_CACHE)
    fresh = await head.get("order:42", options=options)   # bypasses memory
    cached = await head.get("order:42")                   # consults it again
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .tier import CascadeTier


class Capability(str, Enum):
    """Closed set of tier kinds used for locating and skipping tiers."""

    IN_PROCESS_CACHE = "in_process_cache"
    DISTRIBUTED_CACHE = "distributed_cache"
    DISTRIBUTED_HASH = "distributed_hash"
    DURABLE_STORE = "durable_store"
    CALLBACK = "callback"


def as_capability(value: Capability | str) -> Capability:
    """Normalise a capability given as enum member or its string value."""
    if isinstance(value, Capability):
        return value
    return Capability(value)


@dataclass(frozen=True)
class CallOptions:
    """Which tiers a single call must not read from or write to.

    Attributes:
        skip_read_capabilities: Every tier declaring one of these is not read.
        skip_write_capabilities: Every tier declaring one of these is not written.
        skip_read_tiers: Specific tier instances that are not read.
        skip_write_tiers: Specific tier instances that are not written.
    """

    skip_read_capabilities: frozenset[Capability] = frozenset()
    skip_write_capabilities: frozenset[Capability] = frozenset()
    skip_read_tiers: frozenset[Any] = field(default=frozenset(), repr=False)
    skip_write_tiers: frozenset[Any] = field(default=frozenset(), repr=False)

    def skip_read(self, *capabilities: Capability | str) -> CallOptions:
        """Skip reading every tier of the given capabilities."""
        caps = frozenset(as_capability(c) for c in capabilities)
        return replace(self, skip_read_capabilities=self.skip_read_capabilities | caps)

    def skip_write(self, *capabilities: Capability | str) -> CallOptions:
        """Skip writing (including back-fill) every tier of the given capabilities."""
        caps = frozenset(as_capability(c) for c in capabilities)
        return replace(self, skip_write_capabilities=self.skip_write_capabilities | caps)

    def skip_read_this(self, tier: CascadeTier) -> CallOptions:
        return replace(self, skip_read_tiers=self.skip_read_tiers | {tier})

    def skip_write_this(self, tier: CascadeTier) -> CallOptions:
        return replace(self, skip_write_tiers=self.skip_write_tiers | {tier})

    def skips_read(self, tier: CascadeTier) -> bool:
        return tier in self.skip_read_tiers or not self.skip_read_capabilities.isdisjoint(
            tier.capabilities
        )

    def skips_write(self, tier: CascadeTier) -> bool:
        return tier in self.skip_write_tiers or not self.skip_write_capabilities.isdisjoint(
            tier.capabilities
        )


NO_OPTIONS = CallOptions()
