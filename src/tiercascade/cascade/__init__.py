# src/tiercascade/cascade/__init__.py
"""
Cascade engine package.

Provides the dispatch engine shared by every tier, the expiration
calculator, the key adaptation layer and the per-call options used to skip
tiers by capability.
"""

from .expiration import Clock, FrozenClock, SystemClock, calculate_expiration
from .keys import KeyAdapters
from .options import NO_OPTIONS, CallOptions, Capability, as_capability
from .tier import CascadeTier

__all__ = [
    "CallOptions",
    "Capability",
    "CascadeTier",
    "Clock",
    "FrozenClock",
    "KeyAdapters",
    "NO_OPTIONS",
    "SystemClock",
    "as_capability",
    "calculate_expiration",
]
