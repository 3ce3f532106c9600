"""
Reads, writes and upgrades the radiko-cli INI file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from radiko_cli.exceptions import ConfigurationError
from radiko_cli.models.config import AppConfig

log = logging.getLogger(__name__)

SECTION = "DEFAULT"


class ConfigManager:
    """
    Owns the single `[DEFAULT]` section of `config.ini`.

    Values are stored as text; they are converted back using the annotations
    of the matching `AppConfig` fields.
    """

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_config(self, cli_options: dict[str, Any] | None = None) -> AppConfig:
        """
        Builds the effective `AppConfig`: file values, then command-line overrides.

        Raises:
            ConfigurationError: If the file is missing, unreadable, holds a
            value of the wrong type, or the merged settings fail validation.
        """
        if not self.config_file_path.is_file():
            raise ConfigurationError(
                f"No configuration at '{self.config_file_path}'. "
                "Please run 'radiko-cli init' first."
            )
        self._read()

        if self._migrate_if_needed():
            log.info("[yellow]Added new settings to the configuration file.[/yellow]")

        try:
            settings = self._get_config_as_dict()
        except ValueError as e:
            raise ConfigurationError(f"Invalid value in configuration file: {e}") from e
        settings.update(cli_options or {})

        try:
            return AppConfig(**settings, config_path=str(self.config_file_path.parent))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any]) -> None:
        """Writes a fresh file from `settings`, filling the rest with defaults."""
        defaults = AppConfig().model_dump()
        parser = configparser.ConfigParser(interpolation=None)
        parser[SECTION] = {
            key: self._to_ini_value(settings.get(key, defaults[key]))
            for key in sorted(AppConfig.get_ini_keys())
        }
        self._write(parser)
        log.debug(f"Configuration written to '{self.config_file_path}'")

    def get_raw_config(self) -> dict[str, Any]:
        """Reads the config file without validation, for display purposes."""
        self._read()
        return self._get_config_as_dict()

    def _read(self) -> None:
        try:
            self._parser.read(self.config_file_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Cannot parse configuration file: {e}") from e

    def _write(self, parser: configparser.ConfigParser) -> None:
        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as f:
                parser.write(f)
        except OSError as e:
            raise ConfigurationError(f"Cannot write configuration file: {e}") from e

    @staticmethod
    def _to_ini_value(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        return "" if value is None else str(value)

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Converts the stored strings to the types `AppConfig` declares."""
        section = self._parser[SECTION]
        getters = {bool: section.getboolean, int: section.getint, float: section.getfloat}
        result: dict[str, Any] = {}
        for key, field in AppConfig.model_fields.items():
            if key not in AppConfig.get_ini_keys() or key not in section:
                continue
            getter = getters.get(field.annotation, section.get)
            result[key] = getter(key)
        return result

    def _migrate_if_needed(self) -> bool:
        """Adds settings introduced after the file was written. True if any were added."""
        defaults = AppConfig().model_dump()
        section = self._parser[SECTION]
        missing = sorted(AppConfig.get_ini_keys() - set(section))
        if not missing:
            return False

        for key in missing:
            section[key] = self._to_ini_value(defaults[key])
            log.debug(f"Config upgrade: '{key}' = '{section[key]}'")
        try:
            self._write(self._parser)
        except ConfigurationError as e:
            log.error(f"Could not save upgraded configuration: {e}")
            return False
        return True
