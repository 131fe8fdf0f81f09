# src/tiercascade/registrar.py
"""
Chain assembly helpers.

:func:`build_cascade` creates one tier per requested kind, applies the
matching settings section to each, links them in order and returns the head::

    settings = load_settings(config_path="cascade.toml")
    orders = build_cascade("Order", ["memory", "redis", "sqlite"], settings, item_type=Order)

:func:`link` chains tiers that were built by hand.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

import redis.asyncio as aioredis

from .cascade.expiration import Clock
from .cascade.tier import CascadeTier
from .config.models import CascadeSettings
from .exceptions import CascadeConfigError
from .logging_config import log_display
from .tiers import CallbackTier, MemoryCacheTier, RedisHashTier, RedisTier, SQLiteStoreTier

logger = logging.getLogger(__name__)


class TierKind(str, Enum):
    """Tier kinds the registrar knows how to build."""

    MEMORY = "memory"
    REDIS = "redis"
    REDIS_HASH = "redis_hash"
    SQLITE = "sqlite"
    CALLBACK = "callback"


def link(*tiers: CascadeTier[Any, Any]) -> CascadeTier[Any, Any]:
    """Link *tiers* in the given order and return the head.

    Raises:
        CascadeConfigError: If no tiers are given or a link creates a cycle.
    """
    if not tiers:
        raise CascadeConfigError("A cascade needs at least one tier.")
    for current, following in zip(tiers, tiers[1:]):
        current.set_next(following)
    return tiers[0]


def build_cascade(
    entity: str,
    kinds: list[TierKind | str],
    settings: CascadeSettings | None = None,
    *,
    item_type: Any = Any,
    redis_client: aioredis.Redis | None = None,
    clock: Clock | None = None,
) -> CascadeTier[Any, Any]:
    """
    Build and link a chain of tiers for one entity.

    Args:
        entity: Item schema name shared by every tier.
        kinds: Tier kinds, head first.
        settings: Cascade settings (defaults when omitted).
        item_type: Item type used by serializing tiers.
        redis_client: Client for Redis tiers; created from
            ``settings.redis_url`` when omitted.
        clock: Time source shared by all tiers.

    Returns:
        The head tier.

    Raises:
        CascadeConfigError: On unknown kinds or an empty kind list.
    """
    settings = settings or CascadeSettings()
    tiers: list[CascadeTier[Any, Any]] = []

    for raw_kind in kinds:
        try:
            kind = TierKind(raw_kind)
        except ValueError as e:
            raise CascadeConfigError(f"Unknown tier kind: {raw_kind!r}") from e

        if kind in (TierKind.REDIS, TierKind.REDIS_HASH) and redis_client is None:
            redis_client = aioredis.from_url(settings.redis_url)
            logger.debug("Created Redis client for %s", settings.redis_url)

        if kind is TierKind.MEMORY:
            tier: CascadeTier[Any, Any] = MemoryCacheTier(
                entity, max_items=settings.memory_max_items, options=settings.memory, clock=clock
            )
        elif kind is TierKind.REDIS:
            tier = RedisTier(
                entity, redis_client, item_type=item_type, options=settings.redis, clock=clock
            )
        elif kind is TierKind.REDIS_HASH:
            tier = RedisHashTier(
                entity, redis_client, item_type=item_type, options=settings.redis_hash, clock=clock
            )
        elif kind is TierKind.SQLITE:
            tier = SQLiteStoreTier(
                entity,
                db_path=settings.sqlite_path,
                table_name=settings.sqlite_table,
                item_type=item_type,
                options=settings.sqlite,
                clock=clock,
            )
        else:
            tier = CallbackTier(entity, clock=clock)

        tiers.append(tier)

    head = link(*tiers)
    log_display(
        logger, logging.INFO, "Built cascade for %s: %s", entity, " -> ".join(t.name for t in tiers)
    )
    return head
