"""
Drive Backup - Retention Pruner
===============================

Deletes backups in the Drive folder that are older than the retention
period.

DESIGN:
    Age is measured from Drive's createdTime, not from the timestamp in
    the file name. An object is deleted only when it is strictly older
    than RETENTION_PERIOD. Objects with an unreadable createdTime are
    skipped, and a failed delete does not stop the pass.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from src.core.logger import logger
from src.services.backup.drive import DriveStorage
from src.services.backup.errors import PruneError


# =============================================================================
# Constants
# =============================================================================

RETENTION_DAYS = 30
RETENTION_PERIOD = timedelta(hours=RETENTION_DAYS * 24)

# RFC 3339 date-time: mandatory offset, optional fractional seconds
_RFC3339_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
)


# =============================================================================
# Result
# =============================================================================

@dataclass
class PruneResult:
    """Outcome of one pruning pass."""

    listed: int = 0
    deleted: int = 0
    skipped: int = 0
    failed: int = 0
    deleted_names: List[str] = field(default_factory=list)

    @property
    def retained(self) -> int:
        return self.listed - self.deleted


# =============================================================================
# Helpers
# =============================================================================

def parse_created_time(value: Optional[str]) -> datetime:
    """
    Parse a Drive createdTime value into an aware datetime.

    Accepts "Z" or numeric offsets and any number of fractional digits
    (truncated to microseconds).

    Raises:
        ValueError: If the value is missing or not an RFC 3339 timestamp.
    """
    if not value:
        raise ValueError("missing timestamp")

    match = _RFC3339_RE.match(value.strip())
    if not match:
        raise ValueError(f"invalid timestamp: {value!r}")

    date_part, time_part, fraction, offset = match.groups()
    # fromisoformat wants exactly six fractional digits on older interpreters
    fraction = fraction[:7].ljust(7, "0") if fraction else ""
    if offset in ("Z", "z"):
        offset = "+00:00"

    return datetime.fromisoformat(f"{date_part}T{time_part}{fraction}{offset}")


def is_expired(created: datetime, now: datetime, max_age: timedelta = RETENTION_PERIOD) -> bool:
    """True when created is strictly more than max_age before now."""
    return now - created > max_age


# =============================================================================
# Prune
# =============================================================================

def prune_old_backups(
    storage: DriveStorage,
    now: Optional[datetime] = None,
    max_age: timedelta = RETENTION_PERIOD,
) -> PruneResult:
    """
    Delete every file in the folder older than max_age.

    Args:
        storage: Drive storage bound to the backup folder.
        now: Reference time, defaults to the current UTC time.
        max_age: Retention period.

    Returns:
        Counts of listed, deleted, skipped and failed objects.

    Raises:
        PruneError: If the folder cannot be listed.
    """
    now = now or datetime.now(timezone.utc)

    try:
        files = storage.list_files()
    except Exception as e:
        raise PruneError("failed to list files") from e

    result = PruneResult(listed=len(files))

    for remote in files:
        try:
            created = parse_created_time(remote.created_time)
        except ValueError:
            logger.warning(f"Skipping file {remote.name}: invalid date format")
            result.skipped += 1
            continue

        if not is_expired(created, now, max_age):
            continue

        try:
            storage.delete_file(remote.id)
        except Exception as e:
            logger.warning(f"Failed to delete {remote.name}: {e}")
            result.failed += 1
            continue

        logger.info(f"Deleted old backup: {remote.name}")
        result.deleted += 1
        result.deleted_names.append(remote.name)

    logger.tree("Cleanup Complete", [
        ("Listed", str(result.listed)),
        ("Deleted", str(result.deleted)),
        ("Skipped", str(result.skipped)),
        ("Failed", str(result.failed)),
        ("Retention", f"{max_age.days} days"),
    ], emoji="🧹")

    return result


__all__ = [
    "PruneResult",
    "parse_created_time",
    "is_expired",
    "prune_old_backups",
    "RETENTION_DAYS",
    "RETENTION_PERIOD",
]
