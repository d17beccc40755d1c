"""Backup records returned by the server."""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional

import jsonschema

from arrbackup.config.schemas import BACKUP_RECORD_SCHEMA
from arrbackup.utils.errors import DecodeError

# .NET serializes up to 7 fractional digits; datetime only takes 6.
_FRACTION_RE = re.compile(r"(\.\d+)")


class BackupType(Enum):
    """Origin of a backup."""

    MANUAL = "manual"
    SCHEDULED = "scheduled"
    UPDATE = "update"


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Accepts a trailing ``Z``, explicit offsets and any number of fractional
    digits. Naive timestamps are taken to be UTC.

    Raises:
        ValueError: If the value is not an ISO-8601 timestamp
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    match = _FRACTION_RE.search(text)
    if match:
        digits = match.group(1)[1:]
        text = text[: match.start()] + "." + digits[:6].ljust(6, "0") + text[match.end():]

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class Backup:
    """A single backup known to the server."""

    id: int
    name: str
    created_at: datetime
    type: BackupType

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Backup":
        """
        Build a backup from a decoded API record.

        Raises:
            DecodeError: If the record does not have the expected shape
        """
        try:
            jsonschema.validate(data, BACKUP_RECORD_SCHEMA)
        except jsonschema.ValidationError as e:
            raise DecodeError("Unexpected backup record from server", details=e.message) from e

        try:
            created_at = parse_timestamp(data["time"])
        except ValueError as e:
            raise DecodeError(f"Invalid backup timestamp: {data['time']!r}") from e

        return cls(
            # The integer schema type also admits integral floats such as 3.0
            id=int(data["id"]),
            name=data["name"],
            created_at=created_at,
            type=BackupType(data["type"]),
        )

    @property
    def is_manual(self) -> bool:
        return self.type is BackupType.MANUAL

    def age(self, now: Optional[datetime] = None) -> timedelta:
        """Time elapsed since the backup was created."""
        now = now or datetime.now(timezone.utc)
        return now - self.created_at

    def is_recent(self, max_age: timedelta, now: Optional[datetime] = None) -> bool:
        """True if the backup is younger than ``max_age``.

        A negative age means the clocks disagree, so the backup is not trusted
        as recent.
        """
        age = self.age(now)
        return timedelta(0) <= age < max_age
