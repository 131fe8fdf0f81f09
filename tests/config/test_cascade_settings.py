# tests/config/test_cascade_settings.py
"""
Tests for cascade settings models and loading.
"""

from datetime import timedelta

import pytest

from tiercascade.config import CascadeOptions, CascadeSettings, ExpirationMode, load_settings
from tiercascade.exceptions import CascadeConfigError


# =============================================================================
# MODELS
# =============================================================================


class TestCascadeOptions:
    """Tests for per-entity option resolution."""

    def test_defaults(self):
        options = CascadeOptions()
        assert options.time_to_live_for("Order") is None
        assert options.expiration_mode_for("Order") is ExpirationMode.ABSOLUTE

    def test_entity_override(self):
        options = CascadeOptions(
            time_to_live_seconds=60, time_to_live_seconds_by_entity={"Order": 5}
        )
        assert options.time_to_live_for("Order") == timedelta(seconds=5)
        assert options.time_to_live_for("User") == timedelta(seconds=60)

    def test_explicit_none_override_disables_expiry(self):
        options = CascadeOptions(
            time_to_live_seconds=60, time_to_live_seconds_by_entity={"Order": None}
        )
        assert options.time_to_live_for("Order") is None

    def test_mode_from_string(self):
        options = CascadeOptions(expiration_mode_by_entity={"Order": "sliding"})
        assert options.expiration_mode_for("Order") is ExpirationMode.SLIDING

    def test_negative_ttl_rejected(self):
        with pytest.raises(ValueError):
            CascadeOptions(time_to_live_seconds=-1)


class TestCascadeSettings:

    def test_defaults(self):
        settings = CascadeSettings()
        assert settings.redis_url == "redis://localhost:6379/0"
        assert settings.sqlite_table == "cascade_store"
        assert settings.memory_max_items == 10000
        assert settings.memory.time_to_live_seconds is None

    def test_table_name_validated(self):
        with pytest.raises(ValueError):
            CascadeSettings(sqlite_table="bad-name")


# =============================================================================
# LOADING
# =============================================================================


class TestLoadSettings:
    """Tests for load_settings."""

    def test_no_sources(self):
        assert load_settings(environ={}) == CascadeSettings()

    def test_from_dict_with_section(self):
        settings = load_settings(
            {"cascade": {"memory": {"time_to_live_seconds": 30}}}, environ={}
        )
        assert settings.memory.time_to_live_seconds == 30

    def test_from_bare_dict(self):
        settings = load_settings({"memory_max_items": 5}, environ={})
        assert settings.memory_max_items == 5

    def test_from_toml(self, tmp_path):
        path = tmp_path / "cascade.toml"
        path.write_text(
            """
[cascade]
redis_url = "redis://example:6379/1"

[cascade.redis]
time_to_live_seconds = 3600
expiration_mode = "sliding"

[cascade.redis.time_to_live_seconds_by_entity]
Order = 300
"""
        )
        settings = load_settings(config_path=path, environ={})

        assert settings.redis_url == "redis://example:6379/1"
        assert settings.redis.expiration_mode is ExpirationMode.SLIDING
        assert settings.redis.time_to_live_for("Order") == timedelta(seconds=300)
        assert settings.redis.time_to_live_for("User") == timedelta(seconds=3600)

    def test_dict_overrides_toml(self, tmp_path):
        path = tmp_path / "cascade.toml"
        path.write_text('[cascade]\nsqlite_table = "from_file"\nmemory_max_items = 7\n')

        settings = load_settings({"sqlite_table": "from_dict"}, config_path=path, environ={})

        assert settings.sqlite_table == "from_dict"
        assert settings.memory_max_items == 7

    def test_environment_overrides(self):
        settings = load_settings(
            {"redis_url": "redis://dict"},
            environ={
                "TIERCASCADE_REDIS_URL": "redis://env",
                "TIERCASCADE_MEMORY_MAX_ITEMS": "12",
            },
        )
        assert settings.redis_url == "redis://env"
        assert settings.memory_max_items == 12

    def test_process_environment_used_by_default(self, monkeypatch):
        monkeypatch.setenv("TIERCASCADE_SQLITE_PATH", "/tmp/env.db")
        assert load_settings().sqlite_path == "/tmp/env.db"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(config_path=tmp_path / "missing.toml")

    def test_invalid_values_raise_config_error(self):
        with pytest.raises(CascadeConfigError):
            load_settings({"memory": {"expiration_mode": "forever"}}, environ={})
