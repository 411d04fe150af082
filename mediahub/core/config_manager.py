"""
Configuration Manager - JSON-based settings with environment overrides.

Settings live in ``settings.json`` inside a configuration directory. A
missing file is created with defaults, a corrupted one is backed up and
replaced. A handful of environment variables override the file so that
deployments can point MediaHub at a different scraping API without
touching disk.
"""

import json
import logging
import os
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import ValidationError

from mediahub.core.config_schemas import AppSettings
from mediahub.core.exceptions import ConfigurationError


logger = logging.getLogger(__name__)

# Environment variable -> dot path inside AppSettings
ENV_OVERRIDES: Dict[str, str] = {
    "CONSUMET_URL": "consumet.base_url",
    "MEDIAHUB_KEYS_URL": "hianime.keys_url",
    "MEDIAHUB_LOG_LEVEL": "logging.level",
}


def _set_path(data: Dict[str, Any], key_path: str, value: Any) -> None:
    keys = key_path.split('.')
    current = data
    for key in keys[:-1]:
        current = current.setdefault(key, {})
    current[keys[-1]] = value


def apply_env_overrides(data: Dict[str, Any], environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Apply environment overrides onto a raw settings dictionary.

    Args:
        data: Settings as loaded from JSON
        environ: Environment mapping, defaults to os.environ

    Returns:
        The same dictionary, updated in place
    """
    environ = os.environ if environ is None else environ
    for env_name, key_path in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            logger.debug(f"Overriding {key_path} from ${env_name}")
            _set_path(data, key_path, value)
    return data


class ConfigManager:
    """
    Loads, validates and persists MediaHub settings.

    The effective settings are the file contents with environment
    overrides layered on top; writes go through a temp file.
    """

    def __init__(self, config_dir: Optional[Union[str, Path]] = None, environ: Optional[Mapping[str, str]] = None):
        """
        Initialize configuration manager.

        Args:
            config_dir: Directory containing configuration files.
                       Defaults to './config'.
            environ: Environment used for overrides, defaults to os.environ
        """
        self.config_dir = Path(config_dir or "config")
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._settings_file = self.config_dir / "settings.json"
        self._environ = environ

        self._lock = Lock()
        self._settings: Optional[AppSettings] = None

        try:
            self._settings = self._load_settings()
            logger.info("Configuration loaded successfully")
        except ConfigurationError:
            raise
        except Exception as e:
            logger.error(f"Failed to load configuration: {e}")
            raise ConfigurationError(f"Configuration loading failed: {e}", str(self._settings_file))

    def _read_file(self) -> Dict[str, Any]:
        if not self._settings_file.exists():
            logger.info("Settings file not found, creating default configuration")
            self._save_settings(AppSettings())
            return {}

        try:
            with open(self._settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            AppSettings.model_validate(data)
            return data
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Invalid settings file, using defaults: {e}")
            backup_path = self._settings_file.with_suffix('.json.backup')
            self._settings_file.replace(backup_path)
            logger.info(f"Corrupted settings backed up to {backup_path}")

            self._save_settings(AppSettings())
            return {}

    def _load_settings(self) -> AppSettings:
        """Load settings from disk and layer environment overrides on top."""
        data = apply_env_overrides(self._read_file(), self._environ)
        try:
            return AppSettings.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid environment override: {e}",
                str(self._settings_file),
                details=e.errors()
            )

    def _save_settings(self, settings: AppSettings) -> None:
        """Save settings to file with atomic write."""
        temp_file = self._settings_file.with_suffix('.tmp')
        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(settings.model_dump(), f, indent=2, ensure_ascii=False)
            temp_file.replace(self._settings_file)
            logger.debug("Settings saved successfully")
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            raise ConfigurationError(f"Failed to save settings: {e}", str(self._settings_file))

    @property
    def settings(self) -> AppSettings:
        """Get current application settings (thread-safe)."""
        with self._lock:
            if self._settings is None:
                self._settings = self._load_settings()
            return self._settings

    def get_setting(self, key_path: str, default: Any = None) -> Any:
        """
        Get a specific setting using dot notation.

        Args:
            key_path: Dot-separated path to the setting (e.g. 'consumet.base_url')
            default: Default value if setting not found

        Returns:
            The setting value or default
        """
        current: Any = self.settings.model_dump()
        try:
            for key in key_path.split('.'):
                current = current[key]
            return current
        except (KeyError, TypeError):
            return default

    def update_setting(self, key_path: str, value: Any) -> None:
        """
        Update a specific setting using dot notation and persist it.

        Raises:
            ConfigurationError: If key path is invalid or value is invalid
        """
        with self._lock:
            if self._settings is None:
                raise ConfigurationError("Settings not loaded")

            settings_dict = self._settings.model_dump()
            keys = key_path.split('.')
            current = settings_dict
            for key in keys[:-1]:
                if not isinstance(current, dict) or key not in current:
                    raise ConfigurationError(f"Invalid setting path: {key_path}")
                current = current[key]

            if keys[-1] not in current:
                raise ConfigurationError(f"Invalid setting key: {keys[-1]}")
            current[keys[-1]] = value

            try:
                updated_settings = AppSettings.model_validate(settings_dict)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid setting value: {e}")

            self._settings = updated_settings
            self._save_settings(updated_settings)
            logger.info(f"Setting updated: {key_path} = {value}")

    def reset_to_defaults(self) -> None:
        """Reset configuration to default values."""
        with self._lock:
            logger.warning("Resetting configuration to defaults")
            self._settings = AppSettings()
            self._save_settings(self._settings)


# Export configuration manager
__all__ = ["ConfigManager", "apply_env_overrides", "ENV_OVERRIDES"]
