# src/docbuild/core/services/l10n_service.py
import json
import logging
from pathlib import Path
from typing import Dict, Optional, Union

from docbuild.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)


class LocaleStrings:
    """
    Immutable localization tables keyed by locale and message key.

    Loaded once at startup and handed explicitly to the components that
    render tooltips. Lookups fall back to the default locale, then to the key.
    """

    def __init__(self, tables: Dict[str, Dict], default_locale: str = "en-US"):
        self.default_locale = default_locale
        self._natives: Dict[str, str] = {}
        self._strings: Dict[str, Dict[str, str]] = {}
        for locale, table in (tables or {}).items():
            table = table or {}
            self._natives[locale.lower()] = table.get("native", locale)
            self._strings[locale.lower()] = dict(table.get("strings", {}))

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None, default_locale: str = "en-US") -> "LocaleStrings":
        """
        Loads the tables from a JSON file (the bundled locales.json by default).
        A missing or unreadable file yields empty tables.
        """
        file_path = PathUtils.resolve_package_file(str(path)) if path else PathUtils.get_default_strings_file()
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                tables = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load localization tables from %s: %s", file_path, e)
            tables = {}
        return cls(tables, default_locale=default_locale)

    def get(self, locale: str, key: str) -> str:
        """Returns the message for `key` in `locale`, falling back to the default locale."""
        for candidate in (locale, self.default_locale):
            value = self._strings.get(candidate.lower(), {}).get(key)
            if value:
                return value
        logger.debug("Missing localization string %r for %s", key, locale)
        return key

    def native_name(self, locale: str) -> str:
        """The locale's name in its own language, e.g. 'Français' for 'fr'."""
        return self._natives.get(locale.lower(), locale)
