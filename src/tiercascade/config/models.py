# src/tiercascade/config/models.py
"""
Pydantic models for tiercascade configuration validation.

Each backend reads its own :class:`CascadeOptions` section so that, for
example, the in-process cache can keep items for a minute while Redis keeps
them for an hour::

    [cascade]
    redis_url = "redis://localhost:6379/0"

    [cascade.memory]
    time_to_live_seconds = 60

    [cascade.redis]
    time_to_live_seconds = 3600
    expiration_mode = "sliding"

    [cascade.redis.time_to_live_seconds_by_entity]
    Order = 300
"""

from __future__ import annotations

from datetime import timedelta
from enum import Enum

from pydantic import BaseModel, Field


class ExpirationMode(str, Enum):
    """How a written item expires.

    ``ABSOLUTE`` items expire at a fixed instant computed at write time.
    ``SLIDING`` items have their time-to-live re-applied on every read.
    """

    ABSOLUTE = "absolute"
    SLIDING = "sliding"


class CascadeOptions(BaseModel):
    """Expiration settings consumed by one tier.

    Attributes:
        time_to_live_seconds: Default TTL for written items (None = no expiry).
        time_to_live_seconds_by_entity: Per-entity TTL overrides. A ``None``
            value explicitly disables expiry for that entity.
        expiration_mode: Default expiration mode.
        expiration_mode_by_entity: Per-entity expiration mode overrides.
    """

    time_to_live_seconds: int | None = Field(
        default=None, ge=0, description="Default TTL in seconds (None=no expiry)"
    )
    time_to_live_seconds_by_entity: dict[str, int | None] = Field(default_factory=dict)
    expiration_mode: ExpirationMode = Field(default=ExpirationMode.ABSOLUTE)
    expiration_mode_by_entity: dict[str, ExpirationMode] = Field(default_factory=dict)

    def time_to_live_for(self, entity: str) -> timedelta | None:
        """Resolve the TTL for *entity*, honouring per-entity overrides."""
        if entity in self.time_to_live_seconds_by_entity:
            seconds = self.time_to_live_seconds_by_entity[entity]
        else:
            seconds = self.time_to_live_seconds
        return timedelta(seconds=seconds) if seconds is not None else None

    def expiration_mode_for(self, entity: str) -> ExpirationMode:
        """Resolve the expiration mode for *entity*."""
        return self.expiration_mode_by_entity.get(entity, self.expiration_mode)


class CascadeSettings(BaseModel):
    """Top-level ``[cascade]`` configuration section.

    Attributes:
        memory: Options for the in-process cache tier.
        redis: Options for the Redis string tier.
        redis_hash: Options for the Redis hash tier.
        sqlite: Options for the SQLite durable tier.
        redis_url: Connection URL used when the registrar creates a Redis client.
        sqlite_path: Database file for the SQLite tier.
        sqlite_table: Table holding the key/value rows.
        memory_max_items: Upper bound on in-process cache entries (0 = unlimited).
    """

    memory: CascadeOptions = Field(default_factory=CascadeOptions)
    redis: CascadeOptions = Field(default_factory=CascadeOptions)
    redis_hash: CascadeOptions = Field(default_factory=CascadeOptions)
    sqlite: CascadeOptions = Field(default_factory=CascadeOptions)
    redis_url: str = Field(default="redis://localhost:6379/0")
    sqlite_path: str = Field(default="~/.local/share/tiercascade/store.db")
    sqlite_table: str = Field(default="cascade_store", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    memory_max_items: int = Field(default=10000, ge=0)
