# src/docbuild/core/utils/path_utils.py
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

SETTINGS_ENV = "DOCBUILD_SETTINGS"


class PathUtils:
    """
    A central utility for reliably retrieving important package paths.
    """

    @staticmethod
    def get_build_package_root() -> Path:
        """Returns the directory of the 'docbuild' package (holds the bundled JSON files)."""
        return Path(__file__).resolve().parents[2]

    @staticmethod
    def get_settings_file() -> Path:
        """The file named by DOCBUILD_SETTINGS, else the bundled settings.json."""
        override = os.environ.get(SETTINGS_ENV)
        if override:
            return Path(override).expanduser()
        return PathUtils.get_build_package_root() / "settings.json"

    @staticmethod
    def get_default_strings_file() -> Path:
        """The bundled localization tables."""
        return PathUtils.get_build_package_root() / "locales.json"

    @staticmethod
    def resolve_package_file(name: str) -> Path:
        """
        Resolves a configured file name. Relative names are looked up inside
        the 'docbuild' package.
        """
        path = Path(name).expanduser()
        if path.is_absolute():
            return path
        return PathUtils.get_build_package_root() / path
