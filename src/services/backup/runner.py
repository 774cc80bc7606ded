"""
Drive Backup - Backup Runner
============================

Runs one backup: dump -> upload -> local cleanup -> prune.

DESIGN:
    Dump and upload failures propagate as DumpError / UploadError and end
    the run. Local cleanup and pruning only log warnings, so a run whose
    backup reached Drive always counts as successful.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from src.core.config import Config
from src.core.logger import logger
from src.services.backup.drive import DriveStorage, RemoteObject
from src.services.backup.dump import backup_filename, create_dump
from src.services.backup.errors import PruneError
from src.services.backup.prune import PruneResult, prune_old_backups
from src.services.backup.upload import connect_storage, remove_local_backup, upload_backup


@dataclass
class BackupResult:
    """Outcome of a completed run."""

    artifact: Path
    remote: RemoteObject
    local_removed: bool
    prune: Optional[PruneResult] = None


def run_backup(
    config: Config,
    now: Optional[datetime] = None,
    storage_factory: Callable[[Config], DriveStorage] = connect_storage,
) -> BackupResult:
    """
    Execute a full backup run.

    Args:
        config: Job configuration.
        now: Timestamp for the artifact name, defaults to local time.
        storage_factory: Builds the Drive storage shared by upload and prune.

    Returns:
        BackupResult describing the run.

    Raises:
        DumpError: If the dump fails. Nothing is uploaded.
        UploadError: If authentication or upload fails. The local
            artifact is kept and pruning is not attempted.
    """
    backup_dir = Path(config.backup_dir)
    artifact = backup_dir / backup_filename(now)

    logger.tree("Backup Started", [
        ("Artifact", artifact.name),
        ("Container", config.container_name),
        ("Folder", config.backup_folder_id),
    ], emoji="🚀")

    create_dump(config, artifact)

    storage = storage_factory(config)
    remote = upload_backup(storage, artifact)

    local_removed = remove_local_backup(artifact)

    prune = None
    try:
        prune = prune_old_backups(storage)
    except PruneError as e:
        logger.warning(f"Failed to delete old backups: {e}: {e.__cause__}")

    return BackupResult(
        artifact=artifact,
        remote=remote,
        local_removed=local_removed,
        prune=prune,
    )


__all__ = [
    "BackupResult",
    "run_backup",
]
