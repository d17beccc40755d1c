"""Error handling utilities for arr-backup."""

import sys
import traceback
from typing import Optional

import click

from arrbackup.utils.logging import redact_secrets


class ArrBackupError(Exception):
    """Base exception for arr-backup errors."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        suggestions: Optional[list] = None,
    ):
        self.message = message
        self.details = details
        self.suggestions = suggestions or []
        super().__init__(message)


class ConfigurationError(ArrBackupError):
    """Raised when a required setting is missing or invalid."""

    pass


class PreconditionError(ArrBackupError):
    """Raised when the source or destination directories are not usable."""

    pass


class TransportError(ArrBackupError):
    """Raised when the server cannot be reached."""

    pass


class ServerError(ArrBackupError):
    """Raised when the server answers with a non-success status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[str] = None,
        suggestions: Optional[list] = None,
    ):
        self.status_code = status_code
        super().__init__(message, details=details, suggestions=suggestions)


class DecodeError(ArrBackupError):
    """Raised when a response body does not match the backup record shape."""

    pass


class BackupTimeoutError(ArrBackupError):
    """Raised when no fresh manual backup appeared in time."""

    pass


class UnsafePathError(ArrBackupError):
    """Raised when an archive entry would land outside the destination."""

    pass


class SymlinkEncounteredError(ArrBackupError):
    """Raised when an extraction target is a symbolic link."""

    pass


class ArchiveIOError(ArrBackupError):
    """Raised when the archive cannot be read or written to disk."""

    pass


class ErrorHandler:
    """Handles and formats errors for user-friendly display."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def handle_error(self, error: Exception, context: Optional[str] = None) -> None:
        """
        Handle and display error with appropriate formatting.

        Args:
            error: Exception to handle
            context: Optional context about when/where error occurred
        """
        if isinstance(error, ArrBackupError):
            self._handle_arrbackup_error(error, context)
        else:
            self._handle_generic_error(error, context)

    def _handle_arrbackup_error(self, error: ArrBackupError, context: Optional[str]) -> None:
        """Handle arr-backup specific errors."""
        click.echo(f"✗ {error.message}", err=True)

        if context:
            click.echo(f"Context: {context}", err=True)

        if error.details:
            click.echo(f"Details: {error.details}", err=True)

        if error.suggestions:
            click.echo("\nSuggestions:", err=True)
            for suggestion in error.suggestions:
                click.echo(f"  • {suggestion}", err=True)

        if self.verbose:
            click.echo("\nFull traceback:", err=True)
            click.echo(redact_secrets(traceback.format_exc()).rstrip("\n"), err=True)

    def _handle_generic_error(self, error: Exception, context: Optional[str]) -> None:
        """Handle generic Python exceptions."""
        error_type = type(error).__name__

        if isinstance(error, FileNotFoundError):
            message = f"File not found: {error}"
            suggestions = [
                "Check that the file path is correct",
                "Ensure the file exists and is readable",
            ]
        elif isinstance(error, PermissionError):
            message = f"Permission denied: {error}"
            suggestions = [
                "Check file/directory permissions",
                "Try running with appropriate privileges",
            ]
        else:
            message = f"{error_type}: {error}"
            suggestions = []

        click.echo(f"✗ {message}", err=True)

        if context:
            click.echo(f"Context: {context}", err=True)

        if suggestions:
            click.echo("\nSuggestions:", err=True)
            for suggestion in suggestions:
                click.echo(f"  • {suggestion}", err=True)

        if self.verbose:
            click.echo("\nFull traceback:", err=True)
            click.echo(redact_secrets(traceback.format_exc()).rstrip("\n"), err=True)

    def exit_with_error(self, error: Exception, context: Optional[str] = None, exit_code: int = 1) -> None:
        """Handle error and exit with specified code."""
        self.handle_error(error, context)
        sys.exit(exit_code)


def create_error_suggestions(error_type: str, **kwargs) -> list:
    """
    Create contextual error suggestions based on error type and context.

    Args:
        error_type: Type of error
        **kwargs: Additional context information (``url``, ``path``)

    Returns:
        list: List of suggestion strings
    """
    url = kwargs.get("url", "the server URL")
    path = kwargs.get("path", "the path")

    suggestions = {
        "server_unreachable": [
            f"Check that {url} is reachable from this host",
            "Verify that the server is running",
            "Check proxy and firewall settings",
        ],
        "unauthorized": [
            "Check ARR_API_KEY against Settings > General in the server UI",
            "Make sure the key has not been regenerated",
        ],
        "configuration_invalid": [
            "Check YAML syntax in the configuration file",
            "Verify all required settings are present",
            "Environment variables override values from the file",
        ],
        "destination_not_empty": [
            f"Empty {path} before running again",
            "Point ARR_DEST_DIR at a fresh directory",
        ],
        "directory_missing": [
            f"Create {path} or fix the configured path",
            "Check volume mounts when running in a container",
        ],
        "backup_timeout": [
            "Check the server's System > Tasks page for a running backup",
            "Large databases can take longer than the wait window",
        ],
        "unsafe_archive": [
            "Do not restore this archive",
            "Inspect the server's backup folder for tampering",
        ],
    }

    return suggestions.get(error_type, [])


def format_validation_errors(errors: list) -> str:
    """
    Format validation errors for display.

    Args:
        errors: List of validation error messages

    Returns:
        str: Formatted error message
    """
    if not errors:
        return "No validation errors"

    if len(errors) == 1:
        return f"Validation error: {errors[0]}"

    formatted = "Validation errors:\n"
    for i, error in enumerate(errors, 1):
        formatted += f"  {i}. {error}\n"

    return formatted.strip()
