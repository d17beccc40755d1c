"""Client for the server's backup API."""

from .api import ArrClient
from .models import Backup, BackupType

__all__ = ["ArrClient", "Backup", "BackupType"]
