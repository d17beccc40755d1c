"""Logging configuration for arr-backup."""

import logging
import sys
from typing import Iterable, Optional

REDACTED = "***"


class SecretRedactingFilter(logging.Filter):
    """Masks registered secret values in log records."""

    def __init__(self, secrets: Optional[Iterable[str]] = None):
        super().__init__()
        self._secrets = set()
        for secret in secrets or []:
            self.add_secret(secret)

    def add_secret(self, secret: Optional[str]) -> None:
        if secret:
            self._secrets.add(secret)

    def redact(self, value: str) -> str:
        for secret in self._secrets:
            value = value.replace(secret, REDACTED)
        return value

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True

        # Render once so secrets inside args are caught as well.
        message = record.getMessage()
        redacted = self.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


_redacting_filter = SecretRedactingFilter()


def register_secret(secret: Optional[str]) -> None:
    """Register a value that must never appear in log output."""
    _redacting_filter.add_secret(secret)


def redact_secrets(text: str) -> str:
    """Mask registered secrets in text printed outside the logging system."""
    return _redacting_filter.redact(text)


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """
    Setup logging configuration for the CLI.

    Args:
        verbose: Enable verbose/debug logging
        log_file: Optional log file path
    """
    level = logging.DEBUG if verbose else logging.INFO

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(_redacting_filter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Drop handlers from a previous call
    for handler in list(root_logger.handlers):
        if _redacting_filter in handler.filters:
            root_logger.removeHandler(handler)
            handler.close()

    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(_redacting_filter)
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
