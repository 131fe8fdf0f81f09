# tests/cascade/test_keys.py
"""
Tests for per-tier key adaptation.
"""

import pytest

from tiercascade.cascade import KeyAdapters
from tiercascade.exceptions import InvalidOperationError


class TestKeyAdapters:
    """Tests for KeyAdapters defaults and overrides."""

    def test_defaults_derive_from_entity(self):
        keys = KeyAdapters(entity="SomeObject")
        assert keys.get_all_key == "SomeObject_List"
        assert keys.list_prefix == "SomeObject"
        assert keys.key_for(42) == 42

    def test_list_key_uses_prefix_and_identifier(self):
        """With no fixed list key, list id "X" resolves to "SomeObject:X"."""
        keys = KeyAdapters(entity="SomeObject")
        assert keys.list_key_for("X") == "SomeObject:X"
        assert keys.list_key_for(7) == "SomeObject:7"

    def test_fixed_list_key_ignores_identifier(self):
        keys = KeyAdapters(entity="SomeObject", list_key="everything")
        assert keys.list_key_for("X") == "everything"
        assert keys.list_key_for("Y") == "everything"

    def test_key_to_key_is_applied(self):
        keys = KeyAdapters(entity="User", key_to_key=lambda k: f"user:{k}")
        assert keys.key_for(3) == "user:3"

    def test_key_of_uses_item_adapter(self):
        keys = KeyAdapters(entity="User", item_to_key=lambda item: item["id"])
        assert keys.key_of({"id": 9, "name": "x"}) == 9

    def test_key_of_without_adapter_raises(self):
        """Deriving a key from an item needs an adapter."""
        keys = KeyAdapters(entity="User", tier_name="RedisHashTier[User]")
        with pytest.raises(InvalidOperationError) as exc_info:
            keys.key_of({"id": 1})
        assert "RedisHashTier[User]" in str(exc_info.value)

    def test_explicit_collection_keys_kept(self):
        keys = KeyAdapters(entity="User", get_all_key="users", list_prefix="u")
        assert keys.get_all_key == "users"
        assert keys.list_key_for(1) == "u:1"
