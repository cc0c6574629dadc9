"""
Persistent user settings.
A small JSON-backed store for bridge paths and sideload behaviour flags.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from platformdirs import user_config_dir

from .platform_utils import APP_NAME, get_data_directory, get_platform_tools_directory

logger = logging.getLogger(__name__)


def default_settings() -> Dict[str, Any]:
    tools_dir = get_platform_tools_directory()
    return {
        "adb_folder": tools_dir,
        "adb_path": "",
        "backup_dir": os.path.join(get_data_directory(), "backups"),
        "auto_reinstall": False,
        "no_device_mode": False,
        "adb_debug_warned": False,
    }


class SettingsStore:
    """Settings persisted to ``settings.json`` in the user config directory.

    Values read as attributes (``settings.auto_reinstall``); unknown keys in
    the file are kept so newer versions do not lose them.
    """

    def __init__(self, path: Optional[str] = None):
        object.__setattr__(self, "path", path or os.path.join(user_config_dir(APP_NAME), "settings.json"))
        object.__setattr__(self, "_data", default_settings())
        self.load()

    def load(self) -> None:
        """Load settings from disk, keeping defaults when the file is unusable."""
        if not os.path.isfile(self.path):
            return
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                stored = json.load(fh)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load settings from {self.path}: {e}. Using defaults.")
            return
        if isinstance(stored, dict):
            self._data.update(stored)

    def save(self) -> bool:
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as fh:
                json.dump(self._data, fh, indent=2)
            return True
        except OSError as e:
            logger.warning(f"Failed to save settings: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._data)

    def __getattr__(self, name: str) -> Any:
        data = object.__getattribute__(self, "_data")
        if name in data:
            return data[name]
        raise AttributeError(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in self._data:
            self._data[name] = value
        else:
            object.__setattr__(self, name, value)
