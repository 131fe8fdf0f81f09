# src/tiercascade/cascade/keys.py
"""
Per-tier key adaptation.

Maps the caller's logical keys to the physical keys a backend uses:

- ``key_to_key``: applied to every single-item key (identity by default)
- ``item_to_key``: derives a key from an item, for backends that store one
  field per item when bulk-writing a collection
- ``get_all_key``: fixed key for the get-all / set-all collection
- ``list_prefix`` / ``list_key``: list keys are ``"<prefix>:<list_id>"``
  unless a fixed ``list_key`` overrides them
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from ..exceptions import InvalidOperationError


def _identity(key: Any) -> Any:
    return key


@dataclass
class KeyAdapters:
    """Key adaptation functions of one tier.

    Attributes:
        entity: Name of the item schema, used to derive default keys.
        key_to_key: Logical key → physical key.
        item_to_key: Item → key; None until configured.
        get_all_key: Key of the get-all collection (default ``"<entity>_List"``).
        list_prefix: Prefix combined with list identifiers (default ``entity``).
        list_key: Fixed list key that ignores the identifier when set.
    """

    entity: str
    key_to_key: Callable[[Any], Any] = _identity
    item_to_key: Callable[[Any], Any] | None = None
    get_all_key: str = ""
    list_prefix: str = ""
    list_key: str | None = None
    tier_name: str = field(default="", repr=False)

    def __post_init__(self) -> None:
        if not self.get_all_key:
            self.get_all_key = f"{self.entity}_List"
        if not self.list_prefix:
            self.list_prefix = self.entity

    def key_for(self, key: Any) -> Any:
        return self.key_to_key(key)

    def key_of(self, item: Any) -> Any:
        """Derive the key of *item*.

        Raises:
            InvalidOperationError: If no item-to-key adapter was configured.
        """
        if self.item_to_key is None:
            raise InvalidOperationError(
                self.tier_name or self.entity,
                "no item-to-key adapter configured; call adapt_item_to_key() first.",
            )
        return self.item_to_key(item)

    def list_key_for(self, list_id: Any) -> str:
        if self.list_key is not None:
            return self.list_key
        return f"{self.list_prefix}:{list_id}"
