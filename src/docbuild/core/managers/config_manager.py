# src/docbuild/core/managers/config_manager.py
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from docbuild.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

_TRUE_STRINGS = ("1", "true", "yes", "on")


class ConfigManager:
    """
    Singleton holding the build configuration.

    The settings file (bundled settings.json, or the file named by
    DOCBUILD_SETTINGS) is read once; callers may then override single keys in
    memory with dotted paths such as 'build.workers'.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._config = {}
            cls._instance.reset()
        return cls._instance

    @staticmethod
    def _split(key_path: str) -> List[str]:
        return [k for k in key_path.split('.') if k]

    def get_all(self) -> Dict[str, Any]:
        return self._config

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """Looks up 'section.key'; missing keys and nulls give `default`."""
        node: Any = self._config
        for key in self._split(key_path):
            if not isinstance(node, dict):
                return default
            node = node.get(key)
        return default if node is None else node

    def _parent_of(self, key_path: str) -> Tuple[Optional[Dict[str, Any]], str]:
        keys = self._split(key_path)
        node = self._config
        for key in keys[:-1]:
            node = node.setdefault(key, {})
            if not isinstance(node, dict):
                logger.error("Cannot set '%s': '%s' is not a section.", key_path, key)
                return None, keys[-1]
        return node, keys[-1]

    @staticmethod
    def _coerce(key_path: str, value: Any, current: Any) -> Any:
        """Casts a new value to the type of the value it replaces, if there is one."""
        if current is None or isinstance(current, (dict, list)) or isinstance(value, type(current)):
            return value
        if isinstance(current, bool) and isinstance(value, str):
            return value.strip().lower() in _TRUE_STRINGS
        try:
            return type(current)(value)
        except (ValueError, TypeError):
            logger.warning("'%s' expects %s, keeping %r as given.", key_path, type(current).__name__, value)
            return value

    def set_nested(self, key_path: str, value: Any) -> bool:
        """Overrides one key in memory. Returns False if the path runs through a non-section."""
        parent, leaf = self._parent_of(key_path)
        if parent is None:
            return False
        parent[leaf] = self._coerce(key_path, value, parent.get(leaf))
        logger.info("Configuration updated: %s = %s", key_path, parent[leaf])
        return True

    def reset(self) -> None:
        """Drops in-memory changes and reloads the settings file."""
        config_path = PathUtils.get_settings_file()
        if not config_path.exists():
            logger.warning("No settings file at %s, using an empty configuration.", config_path)
            self._config = {}
            return
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                self._config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load %s: %s", config_path, e, exc_info=True)
            self._config = {}
            return
        logger.debug("Configuration loaded from %s.", config_path)


# The global singleton instance that the entire build will use.
config_manager = ConfigManager()
