"""Utilities for arr-backup."""

from .logging import SecretRedactingFilter, redact_secrets, register_secret, setup_logging

__all__ = ["SecretRedactingFilter", "redact_secrets", "register_secret", "setup_logging"]
