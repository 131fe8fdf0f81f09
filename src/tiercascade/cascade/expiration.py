# src/tiercascade/cascade/expiration.py
"""
Expiration calculation for cascade tiers.

A tier may carry a relative time-to-live, an absolute expiration instant, or
both. The effective expiration for a write is whichever of the two comes
first; it is recomputed for every write since it depends on "now".
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    """Source of the current UTC time."""

    def now(self) -> datetime: ...


class SystemClock:
    """Clock backed by the system wall time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FrozenClock:
    """Clock that always returns the same instant until moved.

    Useful in tests that assert on computed expiration instants.
    """

    def __init__(self, instant: datetime | None = None) -> None:
        self._instant = instant or datetime.now(timezone.utc)

    def now(self) -> datetime:
        return self._instant

    def advance(self, delta: timedelta) -> None:
        self._instant += delta


def calculate_expiration(
    time_to_live: timedelta | None,
    absolute_expiration: datetime | None,
    now: datetime,
) -> datetime | None:
    """Compute the effective expiration instant for a write.

    Args:
        time_to_live: Relative lifetime of the written item, if any.
        absolute_expiration: Fixed expiration instant, if any.
        now: Current time.

    Returns:
        The absolute instant when it is set and earlier than ``now + ttl``
        (or when there is no TTL), otherwise ``now + ttl``; None when
        neither is configured.
    """
    ttl_expiration = now + time_to_live if time_to_live is not None else None

    if absolute_expiration is not None and (
        ttl_expiration is None or ttl_expiration > absolute_expiration
    ):
        return absolute_expiration

    return ttl_expiration


def to_timestamp(instant: datetime | None) -> float | None:
    """Convert an expiration instant to a Unix timestamp (naive = UTC)."""
    if instant is None:
        return None
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.timestamp()
