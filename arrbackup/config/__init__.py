"""Configuration management for arr-backup."""

from .manager import ConfigManager, Settings
from .schemas import BACKUP_LIST_SCHEMA, BACKUP_RECORD_SCHEMA, SETTINGS_SCHEMA

__all__ = ["ConfigManager", "Settings", "BACKUP_LIST_SCHEMA", "BACKUP_RECORD_SCHEMA", "SETTINGS_SCHEMA"]
