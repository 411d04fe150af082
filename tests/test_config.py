"""
Tests for configuration schemas and the JSON-backed ConfigManager.
"""

import json

import pytest
from pydantic import ValidationError as PydanticValidationError

from mediahub.core.config_manager import ConfigManager, apply_env_overrides
from mediahub.core.config_schemas import (
    AppSettings,
    ConsumetSettings,
    HttpSettings,
    LoggingSettings,
)
from mediahub.core.exceptions import ConfigurationError


class TestSchemas:
    def test_defaults(self):
        settings = AppSettings()

        assert settings.consumet.base_url == "http://consumet:3000"
        assert settings.hianime.base_url == "https://hianime.to"
        assert settings.hianime.hd_server_names == ["HD-1", "HD-2"]
        assert settings.mangaplus.cdn_base == "https://jumpg-assets.tokyo-cdn.com/"
        assert settings.mappings.min_confidence == 0.9
        assert settings.logging.level == "INFO"
        assert list(settings.get_enabled_extractors()) == ["megacloud"]

    def test_consumet_url_is_normalized(self):
        assert ConsumetSettings(base_url="https://api.example.com/").base_url == "https://api.example.com"

    def test_consumet_url_requires_scheme(self):
        with pytest.raises(PydanticValidationError):
            ConsumetSettings(base_url="consumet:3000")

    def test_short_user_agent_rejected(self):
        with pytest.raises(PydanticValidationError):
            HttpSettings(user_agent="curl")

    def test_log_level_is_uppercased(self):
        assert LoggingSettings(level="debug").level == "DEBUG"

    def test_http_timeout_covers_consumet_timeout(self):
        settings = AppSettings(http={"timeout": 5}, consumet={"timeout": 30})
        assert settings.http.timeout == 30

    def test_enabled_extractors_sorted_by_priority(self):
        settings = AppSettings(extractors={
            "a": {"priority": 10},
            "b": {"priority": 500},
            "c": {"priority": 900, "enabled": False},
        })
        assert list(settings.get_enabled_extractors()) == ["b", "a"]


class TestEnvOverrides:
    def test_applies_known_variables(self):
        data = apply_env_overrides({}, {"CONSUMET_URL": "https://c.example.com", "MEDIAHUB_LOG_LEVEL": "debug"})

        assert data == {"consumet": {"base_url": "https://c.example.com"}, "logging": {"level": "debug"}}

    def test_ignores_empty_values(self):
        assert apply_env_overrides({"consumet": {"timeout": 3}}, {"CONSUMET_URL": ""}) == {"consumet": {"timeout": 3}}


class TestConfigManager:
    def test_creates_default_file(self, tmp_path):
        manager = ConfigManager(tmp_path, environ={})

        settings_file = tmp_path / "settings.json"
        assert settings_file.exists()
        assert json.loads(settings_file.read_text())["consumet"]["base_url"] == "http://consumet:3000"
        assert manager.settings == AppSettings()

    def test_loads_existing_file(self, tmp_path):
        (tmp_path / "settings.json").write_text(json.dumps({"consumet": {"base_url": "https://mine.example.com"}}))

        manager = ConfigManager(tmp_path, environ={})

        assert manager.settings.consumet.base_url == "https://mine.example.com"

    def test_corrupted_file_is_backed_up(self, tmp_path):
        (tmp_path / "settings.json").write_text("{not json")

        manager = ConfigManager(tmp_path, environ={})

        assert (tmp_path / "settings.json.backup").read_text() == "{not json"
        assert manager.settings == AppSettings()

    def test_environment_wins_over_file(self, tmp_path):
        (tmp_path / "settings.json").write_text(json.dumps({"consumet": {"base_url": "https://file.example.com"}}))

        manager = ConfigManager(tmp_path, environ={"CONSUMET_URL": "https://env.example.com"})

        assert manager.settings.consumet.base_url == "https://env.example.com"

    def test_invalid_environment_value(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigManager(tmp_path, environ={"MEDIAHUB_LOG_LEVEL": "chatty"})

    def test_get_setting(self, tmp_path):
        manager = ConfigManager(tmp_path, environ={})

        assert manager.get_setting("hianime.base_url") == "https://hianime.to"
        assert manager.get_setting("hianime.missing", "fallback") == "fallback"

    def test_update_setting_persists(self, tmp_path):
        manager = ConfigManager(tmp_path, environ={})
        manager.update_setting("mappings.min_confidence", 0.75)

        assert manager.settings.mappings.min_confidence == 0.75
        assert ConfigManager(tmp_path, environ={}).settings.mappings.min_confidence == 0.75

    def test_update_setting_rejects_invalid_value(self, tmp_path):
        manager = ConfigManager(tmp_path, environ={})

        with pytest.raises(ConfigurationError):
            manager.update_setting("mappings.min_confidence", 3)
        assert manager.settings.mappings.min_confidence == 0.9

    def test_update_setting_rejects_unknown_path(self, tmp_path):
        manager = ConfigManager(tmp_path, environ={})

        with pytest.raises(ConfigurationError):
            manager.update_setting("nope.level", "DEBUG")

    def test_reset_to_defaults(self, tmp_path):
        manager = ConfigManager(tmp_path, environ={})
        manager.update_setting("logging.level", "ERROR")
        manager.reset_to_defaults()

        assert manager.settings.logging.level == "INFO"
