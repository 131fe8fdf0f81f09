# src/tiercascade/__init__.py
"""
tiercascade - treat a chain of cache and store tiers as one repository.

A read tries each tier in order and back-fills the tiers it fell through;
a write goes to the first tier and, on request, to every following one.

    from tiercascade import MemoryCacheTier, SQLiteStoreTier

    head = MemoryCacheTier("Order")
    head.set_next(SQLiteStoreTier("Order", db_path="orders.db"))
    order = await head.get("42")
"""

from importlib.metadata import PackageNotFoundError, version

from .cascade import (
    CallOptions,
    Capability,
    CascadeTier,
    Clock,
    FrozenClock,
    SystemClock,
    calculate_expiration,
)
from .config import CascadeOptions, CascadeSettings, ExpirationMode, load_settings
from .exceptions import (
    CascadeConfigError,
    InvalidOperationError,
    SerializationError,
    TierCascadeError,
    TierNotPreparedError,
)
from .registrar import TierKind, build_cascade, link
from .tiers import (
    CallbackTier,
    ItemCodec,
    MemoryCacheTier,
    RedisHashTier,
    RedisTier,
    SQLiteStoreTier,
)

try:
    __version__ = version("tiercascade")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "CallOptions",
    "CallbackTier",
    "Capability",
    "CascadeConfigError",
    "CascadeOptions",
    "CascadeSettings",
    "CascadeTier",
    "Clock",
    "ExpirationMode",
    "FrozenClock",
    "InvalidOperationError",
    "ItemCodec",
    "MemoryCacheTier",
    "RedisHashTier",
    "RedisTier",
    "SQLiteStoreTier",
    "SerializationError",
    "SystemClock",
    "TierCascadeError",
    "TierKind",
    "TierNotPreparedError",
    "build_cascade",
    "calculate_expiration",
    "link",
    "load_settings",
]
