"""Backup retrieval pipeline: pre-checks, acquire, extract, delete."""

import logging
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Optional

from arrbackup.client.api import ArrClient
from arrbackup.client.models import Backup
from arrbackup.config.manager import Settings
from arrbackup.utils.errors import PreconditionError, create_error_suggestions

from .acquisition import BackupAcquirer
from .extraction import extract_archive, open_archive, resolve_entry_path

logger = logging.getLogger(__name__)

MANUAL_BACKUP_DIR = Path("Backups") / "manual"


class BackupManager:
    """Runs one backup retrieval from start to finish."""

    def __init__(
        self,
        settings: Settings,
        client: Optional[ArrClient] = None,
        acquirer: Optional[BackupAcquirer] = None,
    ):
        """
        Initialize backup manager.

        Args:
            settings: Validated run settings
            client: Optional API client (built from settings if omitted)
            acquirer: Optional acquirer (built from settings if omitted)
        """
        self.settings = settings
        self.client = client or ArrClient(
            settings.base_url,
            settings.api_key,
            timeout=settings.request_timeout,
        )
        self.acquirer = acquirer or BackupAcquirer(self.client, timedelta(seconds=settings.max_age))

    def pre_checks(self) -> None:
        """
        Verify directories before touching the network.

        Raises:
            PreconditionError: If a directory is missing or the destination is not empty
        """
        dest_dir = self.settings.dest_dir
        config_dir = self.settings.config_dir

        if not dest_dir.is_dir():
            logger.error("Destination directory does not exist: %s", dest_dir)
            raise PreconditionError(
                f"Destination directory does not exist: {dest_dir}",
                suggestions=create_error_suggestions("directory_missing", path=dest_dir),
            )

        if not config_dir.is_dir():
            logger.error("Config directory does not exist: %s", config_dir)
            raise PreconditionError(
                f"Config directory does not exist: {config_dir}",
                suggestions=create_error_suggestions("directory_missing", path=config_dir),
            )

        if any(dest_dir.iterdir()):
            logger.error("Destination directory is not empty: %s", dest_dir)
            raise PreconditionError(
                f"Destination directory is not empty: {dest_dir}",
                suggestions=create_error_suggestions("destination_not_empty", path=dest_dir),
            )

    def locate_backup_file(self, backup: Backup) -> Path:
        """Path of the backup archive inside the server's config directory."""
        return resolve_entry_path(self.settings.config_dir / MANUAL_BACKUP_DIR, backup.name)

    def copy_backup(self, backup: Backup) -> list:
        """Extract the backup archive into the destination directory."""
        backup_file = self.locate_backup_file(backup)
        logger.info("Copying backup %s -> %s", backup_file, self.settings.dest_dir)

        with open_archive(backup_file) as archive:
            return extract_archive(archive, self.settings.dest_dir)

    def run(self) -> Dict[str, Any]:
        """
        Retrieve a fresh backup into the destination directory.

        Returns:
            Dict[str, Any]: ``backup``, extracted ``files`` and whether it was ``deleted``
        """
        self.pre_checks()

        backup = self.acquirer.acquire()
        logger.info("Found backup %s (id=%s)", backup.name, backup.id)

        files = self.copy_backup(backup)

        deleted = False
        if self.settings.delete_backup:
            self.client.delete_backup(backup.id)
            deleted = True
            logger.info("Deleted remote backup %s", backup.id)
        else:
            logger.debug("Skipping backup deletion for %s", backup.id)

        logger.info("Backup complete")
        return {"backup": backup, "files": files, "deleted": deleted}
