# src/tiercascade/tiers/codec.py
"""
JSON codec for tiers that store serialized payloads (Redis, SQLite).

Validation and (de)serialization are delegated to a pydantic ``TypeAdapter``
built for the item type, so plain dicts, dataclasses and pydantic models all
round-trip to the same type they were written as.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from ..exceptions import SerializationError

T = TypeVar("T")


class ItemCodec(Generic[T]):
    """Encode items (and lists of items) to JSON bytes and back."""

    def __init__(self, item_type: Any = Any, entity: str = "Unknown") -> None:
        self.entity = entity
        self._item = TypeAdapter(item_type)
        self._items = TypeAdapter(list[item_type])  # type: ignore[valid-type]

    def dumps(self, item: T) -> bytes:
        try:
            return self._item.dump_json(item)
        except (ValueError, TypeError) as e:
            raise SerializationError(self.entity, str(e)) from e

    def loads(self, payload: bytes | str) -> T:
        try:
            return self._item.validate_json(payload)
        except ValidationError as e:
            raise SerializationError(self.entity, str(e)) from e

    def dumps_many(self, items: list[T]) -> bytes:
        try:
            return self._items.dump_json(items)
        except (ValueError, TypeError) as e:
            raise SerializationError(self.entity, str(e)) from e

    def loads_many(self, payload: bytes | str) -> list[T]:
        try:
            return self._items.validate_json(payload)
        except ValidationError as e:
            raise SerializationError(self.entity, str(e)) from e
