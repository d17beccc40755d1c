"""Find a fresh manual backup, triggering and waiting for one if needed."""

import logging
import time
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Iterable, Optional

from arrbackup.client.models import Backup
from arrbackup.utils.errors import BackupTimeoutError, create_error_suggestions

logger = logging.getLogger(__name__)

# Overall wait for a triggered backup to show up
DEFAULT_TIMEOUT = timedelta(seconds=60)
DEFAULT_POLL_INTERVAL = timedelta(seconds=5)


class AcquisitionState(Enum):
    """States of the acquisition state machine."""

    CHECKING = "checking"
    TRIGGERING = "triggering"
    POLLING = "polling"
    DONE = "done"
    FAILED = "failed"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def select_latest_manual(backups: Iterable[Backup]) -> Optional[Backup]:
    """
    Pick the newest manual backup.

    Scheduled and update backups are ignored. Backups with the same
    timestamp are ordered by id, highest wins.

    Returns:
        Optional[Backup]: The newest manual backup, or None if there is none
    """
    manual = [backup for backup in backups if backup.is_manual]
    if not manual:
        return None
    return max(manual, key=lambda backup: (backup.created_at, backup.id))


class BackupAcquirer:
    """Produces a manual backup younger than ``max_age``."""

    def __init__(
        self,
        client,
        max_age: timedelta,
        timeout: timedelta = DEFAULT_TIMEOUT,
        poll_interval: timedelta = DEFAULT_POLL_INTERVAL,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the acquirer.

        Args:
            client: Object providing list_backups() and trigger_backup()
            max_age: Freshness threshold for reusing a backup
            timeout: How long to wait for a triggered backup
            poll_interval: Pause between polls
            clock: Returns the current aware UTC time
            sleep: Blocks for the given number of seconds
        """
        self.client = client
        self.max_age = max_age
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.clock = clock
        self.sleep = sleep
        self.state = AcquisitionState.CHECKING

    def _transition(self, state: AcquisitionState) -> None:
        logger.debug("Acquisition state %s -> %s", self.state.value, state.value)
        self.state = state

    def _fresh_backup(self) -> Optional[Backup]:
        """Return the newest manual backup if it is fresh enough."""
        backup = select_latest_manual(self.client.list_backups())
        if backup is None:
            logger.info("No manual backup found")
            return None

        now = self.clock()
        age = backup.age(now)
        if backup.is_recent(self.max_age, now):
            return backup

        logger.info(
            "Backup is too old: %s (id=%s, age=%.0fs, max_age=%.0fs)",
            backup.name,
            backup.id,
            age.total_seconds(),
            self.max_age.total_seconds(),
        )
        return None

    def acquire(self) -> Backup:
        """
        Run the state machine until a fresh backup is found.

        Returns:
            Backup: A manual backup younger than max_age

        Raises:
            BackupTimeoutError: If no fresh backup appeared before the deadline
            TransportError, ServerError, DecodeError: From the API client
        """
        self.state = AcquisitionState.CHECKING
        try:
            backup = self._fresh_backup()
            if backup is not None:
                self._transition(AcquisitionState.DONE)
                logger.info("Reusing backup %s (id=%s)", backup.name, backup.id)
                return backup

            self._transition(AcquisitionState.TRIGGERING)
            self.client.trigger_backup()

            deadline = self.clock() + self.timeout
            self._transition(AcquisitionState.POLLING)
            while True:
                if self.clock() > deadline:
                    raise BackupTimeoutError(
                        "Backup creation timed out",
                        details=f"No fresh manual backup after {self.timeout.total_seconds():.0f}s",
                        suggestions=create_error_suggestions("backup_timeout"),
                    )

                backup = self._fresh_backup()
                if backup is not None:
                    self._transition(AcquisitionState.DONE)
                    logger.info("New backup ready: %s (id=%s)", backup.name, backup.id)
                    return backup

                logger.info("Waiting for backup to complete")
                self.sleep(self.poll_interval.total_seconds())
        except Exception:
            self._transition(AcquisitionState.FAILED)
            raise
