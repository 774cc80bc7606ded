"""
Drive Backup - Backup Package
=============================

Dump a PostgreSQL database, upload it to Google Drive and prune old copies.
"""

from .errors import BackupError, DumpError, PruneError, UploadError
from .drive import DriveStorage, RemoteObject, RetryPolicy
from .dump import backup_filename, build_dump_command, create_dump
from .upload import connect_storage, remove_local_backup, upload_backup
from .prune import (
    PruneResult,
    RETENTION_PERIOD,
    is_expired,
    parse_created_time,
    prune_old_backups,
)
from .runner import BackupResult, run_backup

__all__ = [
    # Errors
    "BackupError",
    "DumpError",
    "PruneError",
    "UploadError",
    # Storage
    "DriveStorage",
    "RemoteObject",
    "RetryPolicy",
    # Steps
    "backup_filename",
    "build_dump_command",
    "create_dump",
    "connect_storage",
    "upload_backup",
    "remove_local_backup",
    "PruneResult",
    "RETENTION_PERIOD",
    "is_expired",
    "parse_created_time",
    "prune_old_backups",
    # Runner
    "BackupResult",
    "run_backup",
]
