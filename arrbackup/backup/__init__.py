"""Backup acquisition and extraction."""

from .acquisition import AcquisitionState, BackupAcquirer, select_latest_manual
from .extraction import extract_archive, open_archive, resolve_entry_path
from .manager import BackupManager

__all__ = [
    "AcquisitionState",
    "BackupAcquirer",
    "BackupManager",
    "extract_archive",
    "open_archive",
    "resolve_entry_path",
    "select_latest_manual",
]
