# tests/conftest.py
"""
Shared fixtures for tiercascade tests.

``RecordingTier`` is a dict-backed tier that records every backend call, so
tests can assert exactly which tiers were read or written by a cascade.
"""

from datetime import datetime, timezone
from typing import Any

import pytest

from tiercascade.cascade import Capability, CascadeTier, FrozenClock


class RecordingTier(CascadeTier[Any, Any]):
    """In-memory tier that logs (operation, key) tuples in ``calls``."""

    def __init__(self, entity: str = "SomeObject", *, capability: Capability | None = None, **kwargs):
        caps = [capability] if capability is not None else []
        super().__init__(entity, capabilities=caps, **kwargs)
        self.items: dict[Any, Any] = {}
        self.expirations: dict[Any, datetime | None] = {}
        self.calls: list[tuple[str, Any]] = []

    def ops(self, operation: str) -> list[Any]:
        return [key for op, key in self.calls if op == operation]

    async def _core_get(self, key):
        self.calls.append(("get", key))
        return self.items.get(key)

    async def _core_get_all(self, all_key):
        self.calls.append(("get_all", all_key))
        return list(self.items.get(all_key, []))

    async def _core_get_list(self, list_key):
        self.calls.append(("get_list", list_key))
        return list(self.items.get(list_key, []))

    async def _core_set(self, key, item, expires_at):
        self.calls.append(("set", key))
        self.items[key] = item
        self.expirations[key] = expires_at

    async def _core_set_all(self, all_key, items, expires_at):
        self.calls.append(("set_all", all_key))
        self.items[all_key] = list(items)
        self.expirations[all_key] = expires_at

    async def _core_set_list(self, list_key, items, expires_at):
        self.calls.append(("set_list", list_key))
        self.items[list_key] = list(items)
        self.expirations[list_key] = expires_at

    async def _core_delete(self, key):
        self.calls.append(("delete", key))
        self.items.pop(key, None)


@pytest.fixture
def clock() -> FrozenClock:
    """A clock frozen at 2024-01-01T12:00:00Z."""
    return FrozenClock(datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def recording_tier_cls():
    """The RecordingTier class, for tests that build their own chains."""
    return RecordingTier


@pytest.fixture
def two_tier_chain():
    """A linked (first, second) pair of RecordingTiers."""
    first = RecordingTier(name="first")
    second = RecordingTier(name="second")
    first.set_next(second)
    return first, second
