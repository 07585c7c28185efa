"""Application settings management.

This module handles loading, saving, and managing the probing defaults
with atomic file operations and automatic backup.
"""

import json
import os
import sys
import shutil
import logging
from typing import Dict, Any, Optional
from pathlib import Path

from .constants import (
    END_Z_DEFAULT,
    GRID_STEP_DEFAULT,
    PROBE_FEEDRATE_DEFAULT,
    SETTINGS_BACKUP_SUFFIX,
    SETTINGS_DIR_ENV,
    SETTINGS_DIRNAME,
    SETTINGS_FILENAME,
    SETTINGS_TEMP_SUFFIX,
    START_Z_DEFAULT,
)
from .exceptions import (
    InvalidParameterError,
    SettingsLoadError,
    SettingsSaveError,
    SettingsValidationError,
)
from .validation import (
    validate_feed_rate,
    validate_optional_feed_rate,
    validate_path_order,
    validate_step,
)

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: Dict[str, Any] = {
    "grid": {
        "start_x": 0.0,
        "end_x": 0.0,
        "step_x": GRID_STEP_DEFAULT,
        "start_y": 0.0,
        "end_y": 0.0,
        "step_y": GRID_STEP_DEFAULT,
        "path_order": "row",
    },
    "probe": {
        "feedrate": None,
        "probe_feedrate": PROBE_FEEDRATE_DEFAULT,
        "start_z": START_Z_DEFAULT,
        "end_z": END_Z_DEFAULT,
    },
    "last_height_map": "",
    "log_level": "INFO",
}

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _deep_merge_defaults(defaults: Dict[str, Any], loaded: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = {}
    for key, default_val in defaults.items():
        if key in loaded:
            loaded_val = loaded[key]
            if isinstance(default_val, dict) and isinstance(loaded_val, dict):
                merged[key] = _deep_merge_defaults(default_val, loaded_val)
            else:
                merged[key] = loaded_val
        else:
            merged[key] = default_val
    for key, loaded_val in loaded.items():
        if key not in merged:
            merged[key] = loaded_val
    return merged


def _copy_defaults() -> Dict[str, Any]:
    return json.loads(json.dumps(DEFAULT_SETTINGS))


def get_default_settings_dir() -> str:
    """Get default directory for settings storage.

    Returns:
        Path to settings directory
    """
    # Check environment variable first
    env_dir = os.getenv(SETTINGS_DIR_ENV)
    if env_dir:
        return env_dir

    # Platform-specific defaults
    if sys.platform.startswith("win"):
        base = os.getenv("LOCALAPPDATA") or os.getenv("APPDATA")
    else:
        base = os.getenv("XDG_CONFIG_HOME")

    if not base:
        base = os.path.expanduser("~")

    return os.path.join(base, SETTINGS_DIRNAME)


def get_settings_path() -> str:
    """Get path to settings file.

    Creates directory if it doesn't exist.
    Falls back to the home directory if creation fails.

    Returns:
        Full path to settings file
    """
    base_dir = get_default_settings_dir()

    try:
        os.makedirs(base_dir, exist_ok=True)
    except OSError as e:
        logger.warning(f"Failed to create settings directory: {e}")
        fallback_dir = os.path.join(os.path.expanduser("~"), ".autoleveler")
        try:
            os.makedirs(fallback_dir, exist_ok=True)
            base_dir = fallback_dir
        except OSError:
            base_dir = os.getcwd()

    return os.path.join(base_dir, SETTINGS_FILENAME)


class Settings:
    """Probing settings manager.

    Example:
        settings = Settings()
        settings.load()
        settings.set("probe.feedrate", 500)
        settings.save()
    """

    def __init__(self, filepath: Optional[str] = None):
        self.filepath = filepath or get_settings_path()
        self.data: Dict[str, Any] = _copy_defaults()
        logger.debug(f"Settings file: {self.filepath}")

    def load(self) -> bool:
        """Load settings from file.

        Returns:
            True if loaded, False if no file exists (defaults stay in place)

        Raises:
            SettingsLoadError: If the file exists but cannot be read
        """
        if not os.path.exists(self.filepath):
            logger.info("No settings file found, using defaults")
            return False

        try:
            with open(self.filepath, "r", encoding="utf-8") as f:
                loaded_data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in settings file: {e}")
            raise SettingsLoadError(f"Invalid JSON: {e}")
        except OSError as e:
            logger.error(f"Failed to read settings file: {e}")
            raise SettingsLoadError(f"Failed to read file: {e}")

        if not isinstance(loaded_data, dict):
            raise SettingsLoadError("Settings file must contain a JSON object")

        self.data = _deep_merge_defaults(_copy_defaults(), loaded_data)
        logger.info("Settings loaded successfully")
        return True

    def save(self) -> None:
        """Save settings to file atomically.

        Raises:
            SettingsSaveError: If save fails
        """
        filepath = Path(self.filepath)
        temp_path = Path(str(filepath) + SETTINGS_TEMP_SUFFIX)
        backup_path = Path(str(filepath) + SETTINGS_BACKUP_SUFFIX)

        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)

            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(self.data, f, indent=2, sort_keys=True)

            if filepath.exists():
                try:
                    shutil.copy2(filepath, backup_path)
                except OSError as e:
                    logger.warning(f"Failed to create backup: {e}")

            temp_path.replace(filepath)
            logger.info("Settings saved successfully")

        except OSError as e:
            logger.error(f"Failed to write settings: {e}")
            if backup_path.exists():
                try:
                    shutil.copy2(backup_path, filepath)
                    logger.info("Settings restored from backup")
                except OSError:
                    logger.warning("Settings backup could not be restored")
            raise SettingsSaveError(f"Failed to save: {e}")

        finally:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    logger.debug(f"Could not remove temp file {temp_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """Get setting value.

        Args:
            key: Setting key (supports dot notation like "probe.start_z")
            default: Default value if key not found
        """
        value = self.data
        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        keys = key.split(".")
        if len(keys) == 1:
            self.data[key] = value
            return
        current = self.data
        for k in keys[:-1]:
            if k not in current or not isinstance(current[k], dict):
                current[k] = {}
            current = current[k]
        current[keys[-1]] = value

    def get_all(self) -> Dict[str, Any]:
        return json.loads(json.dumps(self.data))

    def reset_to_defaults(self) -> None:
        """Reset all settings to defaults."""
        self.data = _copy_defaults()
        logger.info("Settings reset to defaults")

    def grid_options(self) -> Dict[str, Any]:
        return dict(self.get("grid", {}))

    def probe_options(self) -> Dict[str, Any]:
        return dict(self.get("probe", {}))

    def validate(self) -> bool:
        """Validate current settings.

        Returns:
            True if valid

        Raises:
            SettingsValidationError: If validation fails
        """
        if not isinstance(self.data, dict):
            raise SettingsValidationError("Settings must be a dictionary")

        try:
            validate_step(self.get("grid.step_x"), "grid.step_x")
            validate_step(self.get("grid.step_y"), "grid.step_y")
            validate_path_order(self.get("grid.path_order"))
            validate_optional_feed_rate(self.get("probe.feedrate"), "probe.feedrate")
            validate_feed_rate(self.get("probe.probe_feedrate"), "probe.probe_feedrate")
        except InvalidParameterError as e:
            raise SettingsValidationError(str(e))

        for key in ("grid.start_x", "grid.end_x", "grid.start_y", "grid.end_y", "probe.start_z", "probe.end_z"):
            value = self.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise SettingsValidationError(f"Invalid {key}: {value}")

        level = str(self.get("log_level", "INFO")).upper()
        if level not in _LOG_LEVELS:
            raise SettingsValidationError(f"Invalid log level: {level}")

        return True
