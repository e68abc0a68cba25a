"""
Configuration manager for moku-pona.
Handles locating the data directory and loading optional settings.
"""
import json
import logging
import os
from dataclasses import dataclass
from typing import Dict, Any, Mapping, Optional
from json.decoder import JSONDecodeError

from moku_pona.utils.helpers import selector_to_filename

logger = logging.getLogger(__name__)

DATA_DIR_ENV = "MOKU_PONA"
DATA_DIR_NAME = ".moku-pona"
SETTINGS_FILE = "settings.json"


@dataclass(frozen=True)
class DataPaths:
    """
    File locations used by all components.
    """
    data_dir: str
    site_list: str
    update_log: str

    def cache_name(self, host: str, port: int, selector: str) -> str:
        """
        Name of the cache file for an item, relative to the data directory.

        Args:
            host: Item host
            port: Item port
            selector: Item selector

        Returns:
            File name of the form host-port-selector.txt
        """
        return f"{host}-{port}-{selector_to_filename(selector)}.txt"

    def cache_path(self, name: str) -> str:
        return os.path.join(self.data_dir, name)


def resolve_data_dir(environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Find the data directory from the environment.

    Uses $MOKU_PONA, then $HOME/.moku-pona, then $LOGDIR/.moku-pona.

    Raises:
        ValueError: If none of the variables is set.
    """
    if environ is None:
        environ = os.environ

    if environ.get(DATA_DIR_ENV):
        return environ[DATA_DIR_ENV]
    for var in ("HOME", "LOGDIR"):
        if environ.get(var):
            return os.path.join(environ[var], DATA_DIR_NAME)

    raise ValueError(f"Cannot determine data directory: set {DATA_DIR_ENV}, HOME or LOGDIR")


class ConfigManager:
    """
    Manages configuration loading and exposes the data paths.
    """

    def __init__(self, data_dir: Optional[str] = None, settings_path: Optional[str] = None,
                 environ: Optional[Mapping[str, str]] = None):
        """
        Initialize configuration manager.

        Args:
            data_dir: Data directory; resolved from the environment when None
            settings_path: Path to settings file; defaults to settings.json in the data directory
            environ: Environment mapping used for lookups (defaults to os.environ)
        """
        self.data_dir = data_dir or resolve_data_dir(environ)
        self.settings_path = settings_path or os.path.join(self.data_dir, SETTINGS_FILE)
        self.settings: Dict[str, Any] = {}

        logger.debug(f"ConfigManager initialized with data dir: {self.data_dir}, settings: {self.settings_path}")

        self._load_settings()

    def _load_settings(self):
        """Load the settings file if present, then apply defaults and validate."""
        if os.path.exists(self.settings_path):
            self.settings = self._load_json_file(self.settings_path)
            if not isinstance(self.settings, dict):
                raise TypeError(f"Settings in '{self.settings_path}' must be a JSON object")
        else:
            logger.debug(f"No settings file at {self.settings_path}, using defaults")
            self.settings = {}

        self._set_default_settings()
        self._validate_settings()

    def _load_json_file(self, file_path: str) -> Dict[str, Any]:
        """
        Load a JSON configuration file.

        Raises:
            json.JSONDecodeError: If the file contains invalid JSON.
            OSError: If the file cannot be read.
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                config = json.load(f)

            logger.info(f"Loaded settings from {file_path}")
            return config

        except JSONDecodeError as e:
            logger.error(f"Invalid JSON in settings file '{file_path}': {e}")
            raise

    def _set_default_settings(self):
        """Recursively set default values for missing settings."""
        defaults = {
            "networking": {
                "timeout_seconds": 10
            },
            "storage": {
                "site_list": "sites.txt",
                "update_log": "updates.txt"
            },
            "logging": {
                "level": "WARNING",
                "log_dir": None
            }
        }

        def merge_dicts(source, default):
            """Recursively merges default dict into source dict."""
            for key, value in default.items():
                if key not in source:
                    source[key] = value
                elif isinstance(value, dict) and isinstance(source[key], dict):
                    merge_dicts(source[key], value)

        merge_dicts(self.settings, defaults)

    def _validate_settings(self):
        """Validate specific key values within settings."""
        for section in ("networking", "storage", "logging"):
            if not isinstance(self.settings.get(section), dict):
                raise TypeError(f"Invalid type for configuration section '{section}'. Expected object")

        timeout = self.settings["networking"].get("timeout_seconds")
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise TypeError("Invalid value for 'networking.timeout_seconds'. Expected positive number.")

        for key in ("site_list", "update_log"):
            value = self.settings["storage"].get(key)
            if not value or not isinstance(value, str):
                raise TypeError(f"Missing or invalid type for 'storage.{key}'. Expected non-empty string.")

        if not isinstance(self.settings["logging"].get("level"), str):
            raise TypeError("Invalid type for 'logging.level'. Expected a string.")
        log_dir = self.settings["logging"].get("log_dir")
        if log_dir is not None and not isinstance(log_dir, str):
            raise TypeError("Invalid type for 'logging.log_dir'. Expected a string or null.")

    def get_config_value(self, key_path: str, default=None):
        """
        Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path to configuration value (e.g., "storage.site_list")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.settings

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    @property
    def paths(self) -> DataPaths:
        """The data paths derived from this configuration."""
        return DataPaths(
            data_dir=self.data_dir,
            site_list=os.path.join(self.data_dir, self.get_config_value("storage.site_list")),
            update_log=os.path.join(self.data_dir, self.get_config_value("storage.update_log")),
        )
