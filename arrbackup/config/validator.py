"""Configuration validation for arr-backup."""

import re
from typing import Any, Dict, List
from urllib.parse import urlparse

import jsonschema

from .schemas import SETTING_ENV_VARS, SETTINGS_SCHEMA


class ConfigValidator:
    """Validates merged arr-backup settings."""

    def __init__(self):
        """Initialize validator."""
        self._schema_validator = jsonschema.Draft7Validator(SETTINGS_SCHEMA)

    def validate_settings(self, config: Dict[str, Any]) -> List[str]:
        """
        Validate settings against the schema and additional rules.

        Args:
            config: Merged settings dictionary

        Returns:
            List[str]: List of validation errors (empty if valid)
        """
        errors = []

        try:
            schema_errors = sorted(self._schema_validator.iter_errors(config), key=lambda e: list(e.path))
        except jsonschema.SchemaError as e:
            return [f"Schema error: {e.message}"]

        for error in schema_errors:
            errors.append(self._format_schema_error(error))

        if isinstance(config.get("base_url"), str) and config["base_url"]:
            errors.extend(self._validate_base_url(config["base_url"]))

        return errors

    def _format_schema_error(self, error: jsonschema.ValidationError) -> str:
        """Turn a schema error into a message naming the setting."""
        if error.validator == "required":
            match = re.match(r"'([^']+)' is a required property", error.message)
            if match:
                key = match.group(1)
                env_var = SETTING_ENV_VARS.get(key)
                if env_var:
                    return f"{env_var} missing"
                return f"{key} missing"

        if error.path:
            key = str(error.path[0])
            return f"{SETTING_ENV_VARS.get(key, key)}: {error.message}"

        return error.message

    def _validate_base_url(self, url: str) -> List[str]:
        """Validate server base URL."""
        errors = []

        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https"):
            errors.append(f"ARR_URL must use http or https: {url}")
        elif not parsed.netloc:
            errors.append(f"ARR_URL has no host: {url}")

        return errors
