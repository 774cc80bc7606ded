"""
Drive Backup - Artifact Upload
==============================

Uploads the local dump to the backup folder and removes it afterwards.
"""

from pathlib import Path

from src.core.config import Config
from src.core.logger import logger
from src.services.backup.drive import DriveStorage, RemoteObject, RetryPolicy
from src.services.backup.errors import UploadError


def connect_storage(config: Config) -> DriveStorage:
    """
    Build the authenticated Drive storage for this run.

    Raises:
        UploadError: On any credential or client construction failure.
    """
    retry = RetryPolicy(
        max_retries=config.retry_max_retries,
        base_delay=config.retry_base_delay,
    )
    return DriveStorage.from_service_account_file(
        config.service_account_file,
        config.backup_folder_id,
        retry=retry,
    )


def upload_backup(storage: DriveStorage, path: Path) -> RemoteObject:
    """
    Upload a local artifact as a new file named after it.

    The local file is held open only for the duration of the request.
    Partial uploads are not cleaned up.

    Raises:
        UploadError: If the file cannot be opened or the request fails.
    """
    try:
        stream = open(path, "rb")
    except OSError as e:
        raise UploadError(f"failed to open file: {path}") from e

    with stream:
        try:
            remote = storage.create_file(path.name, stream)
        except Exception as e:
            raise UploadError("failed to upload file to Drive") from e

    logger.tree("Backup Uploaded", [
        ("File", remote.name),
        ("Drive ID", remote.id),
        ("Folder", storage.folder_id),
    ], emoji="☁️")

    return remote


def remove_local_backup(path: Path) -> bool:
    """
    Delete the local artifact after a successful upload.

    Failures are logged as warnings only.

    Returns:
        True if the file was removed.
    """
    try:
        path.unlink()
    except OSError as e:
        logger.warning(f"Failed to clean up local backup file: {path.name}: {e}")
        return False

    logger.info(f"Successfully cleaned up local backup file: {path.name}")
    return True


__all__ = [
    "connect_storage",
    "upload_backup",
    "remove_local_backup",
]
