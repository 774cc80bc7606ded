"""
Drive Backup - Backup Errors
============================

Exceptions raised by the backup steps. Each one carries a message naming
the operation that failed and is raised from the underlying cause.
"""


class BackupError(Exception):
    """Base class for backup job failures."""


class DumpError(BackupError):
    """The database dump could not be produced. Fatal."""


class UploadError(BackupError):
    """The artifact could not be uploaded to Drive. Fatal."""


class PruneError(BackupError):
    """Old backups could not be listed. Reported as a warning."""


__all__ = [
    "BackupError",
    "DumpError",
    "UploadError",
    "PruneError",
]
