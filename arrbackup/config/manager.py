"""Configuration management for arr-backup."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from arrbackup.utils.errors import ConfigurationError, create_error_suggestions, format_validation_errors

from .schemas import SETTING_ENV_VARS
from .validator import ConfigValidator

logger = logging.getLogger(__name__)

CONFIG_FILE_ENV_VAR = "ARR_BACKUP_CONFIG"

DEFAULT_MAX_AGE = 3600.0
DEFAULT_REQUEST_TIMEOUT = 30.0

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}

_BOOLEAN_SETTINGS = {"delete_backup"}
_NUMERIC_SETTINGS = {"max_age", "request_timeout"}


@dataclass(frozen=True, repr=False)
class Settings:
    """Validated settings for one run."""

    base_url: str
    api_key: str
    config_dir: Path
    dest_dir: Path
    delete_backup: bool = True
    max_age: float = DEFAULT_MAX_AGE
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __repr__(self) -> str:
        return (
            f"Settings(base_url={self.base_url!r}, api_key='***', "
            f"config_dir={str(self.config_dir)!r}, dest_dir={str(self.dest_dir)!r}, "
            f"delete_backup={self.delete_backup}, max_age={self.max_age}, "
            f"request_timeout={self.request_timeout})"
        )


def parse_bool(value: str) -> bool:
    """Parse a boolean from an environment string."""
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"invalid boolean value: {value!r}")


class ConfigManager:
    """Builds run settings from a YAML file and the environment."""

    def __init__(self, config_file: Optional[str] = None, environ: Optional[Mapping[str, str]] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Optional YAML file (defaults to $ARR_BACKUP_CONFIG)
            environ: Environment mapping (defaults to os.environ)
        """
        self.environ = os.environ if environ is None else environ
        self.config_file = config_file or self.environ.get(CONFIG_FILE_ENV_VAR) or None
        self.validator = ConfigValidator()

    def load_file(self) -> Dict[str, Any]:
        """
        Load settings from the YAML configuration file.

        Returns:
            Dict[str, Any]: Settings from the file (empty if no file configured)

        Raises:
            ConfigurationError: If the file is missing or not valid YAML
        """
        if not self.config_file:
            return {}

        if not os.path.exists(self.config_file):
            raise ConfigurationError(
                f"Configuration file not found: {self.config_file}",
                suggestions=create_error_suggestions("configuration_invalid"),
            )

        try:
            with open(self.config_file, encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in {self.config_file}",
                details=str(e),
                suggestions=create_error_suggestions("configuration_invalid"),
            ) from e

        if config is None:
            return {}

        if not isinstance(config, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping: {self.config_file}")

        logger.debug("Loaded configuration file %s", self.config_file)
        return config

    def load_environment(self, errors: List[str]) -> Dict[str, Any]:
        """
        Read settings from environment variables.

        Args:
            errors: List collecting conversion errors

        Returns:
            Dict[str, Any]: Settings present in the environment
        """
        config = {}

        for key, env_var in SETTING_ENV_VARS.items():
            raw = self.environ.get(env_var)
            if raw is None:
                continue

            if key in _BOOLEAN_SETTINGS:
                try:
                    config[key] = parse_bool(raw)
                except ValueError as e:
                    errors.append(f"{env_var}: {e}")
            elif key in _NUMERIC_SETTINGS:
                try:
                    config[key] = float(raw)
                except ValueError:
                    errors.append(f"{env_var}: not a number: {raw!r}")
            else:
                config[key] = raw

        return config

    def load_settings(self, overrides: Optional[Dict[str, Any]] = None) -> Settings:
        """
        Merge file, environment and overrides into validated settings.

        Args:
            overrides: Values taking precedence over everything else (None values are ignored)

        Returns:
            Settings: Validated settings

        Raises:
            ConfigurationError: If any setting is missing or invalid
        """
        errors: List[str] = []

        config = self.load_file()
        config.update(self.load_environment(errors))
        if overrides:
            config.update({key: value for key, value in overrides.items() if value is not None})

        errors.extend(self.validator.validate_settings(config))
        if errors:
            raise ConfigurationError(
                "Invalid configuration",
                details=format_validation_errors(errors),
                suggestions=create_error_suggestions("configuration_invalid"),
            )

        return Settings(
            base_url=config["base_url"].rstrip("/"),
            api_key=config["api_key"],
            config_dir=Path(config["config_dir"]),
            dest_dir=Path(config["dest_dir"]),
            delete_backup=config.get("delete_backup", True),
            max_age=float(config.get("max_age", DEFAULT_MAX_AGE)),
            request_timeout=float(config.get("request_timeout", DEFAULT_REQUEST_TIMEOUT)),
        )
