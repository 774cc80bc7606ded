"""
Drive Backup - Google Drive Storage
===================================

Thin wrapper around the Drive v3 files API used by the upload and prune
steps.

DESIGN:
    One DriveStorage is built per run from the service account file and
    shared by the uploader and the pruner. Every remote call goes through
    retry_call so transient provider errors are retried with backoff.
"""

import json
from dataclasses import dataclass
from typing import Any, BinaryIO, Dict, Iterator, List, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.http import MediaIoBaseUpload

from src.core.logger import logger
from src.services.backup.errors import UploadError
from src.utils.retry import retry_call


# =============================================================================
# Constants
# =============================================================================

DRIVE_FILE_SCOPE = "https://www.googleapis.com/auth/drive.file"
BACKUP_MIME_TYPE = "application/octet-stream"
FILE_FIELDS = "id, name, createdTime"
LIST_PAGE_SIZE = 100
UPLOAD_CHUNK_SIZE = 8 * 1024 * 1024


# =============================================================================
# Remote Object
# =============================================================================

@dataclass
class RemoteObject:
    """A backup file as tracked by Drive."""

    id: str
    name: str
    created_time: Optional[str] = None

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "RemoteObject":
        return cls(
            id=item["id"],
            name=item.get("name", ""),
            created_time=item.get("createdTime"),
        )


@dataclass
class RetryPolicy:
    """Backoff settings applied to each Drive call."""

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0


# =============================================================================
# Credentials
# =============================================================================

def load_credentials(path: str) -> service_account.Credentials:
    """
    Load service account credentials scoped to files created by this app.

    Raises:
        UploadError: If the file cannot be read or is not a valid key.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = f.read()
    except OSError as e:
        raise UploadError(f"failed to read service account file: {path}") from e

    try:
        info = json.loads(raw)
        return service_account.Credentials.from_service_account_info(
            info, scopes=[DRIVE_FILE_SCOPE]
        )
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise UploadError("failed to create credentials from JSON") from e


# =============================================================================
# Drive Storage
# =============================================================================

class DriveStorage:
    """
    File operations scoped to a single Drive folder.

    Attributes:
        folder_id: Drive folder holding the backups.
        retry: Backoff settings for each request.
    """

    def __init__(self, service: Any, folder_id: str, retry: Optional[RetryPolicy] = None) -> None:
        self._service = service
        self.folder_id = folder_id
        self.retry = retry or RetryPolicy()

    @classmethod
    def from_service_account_file(
        cls,
        path: str,
        folder_id: str,
        retry: Optional[RetryPolicy] = None,
    ) -> "DriveStorage":
        """
        Authenticate and build a Drive v3 client.

        Raises:
            UploadError: If credentials cannot be loaded or the client
                cannot be constructed.
        """
        credentials = load_credentials(path)
        try:
            service = build("drive", "v3", credentials=credentials, cache_discovery=False)
        except Exception as e:
            raise UploadError("failed to create Drive client") from e

        logger.debug(f"Drive client ready for {getattr(credentials, 'service_account_email', 'service account')}")
        return cls(service, folder_id, retry)

    def _execute(self, request: Any) -> Any:
        return retry_call(
            request.execute,
            max_retries=self.retry.max_retries,
            base_delay=self.retry.base_delay,
            max_delay=self.retry.max_delay,
        )

    # =========================================================================
    # Operations
    # =========================================================================

    def create_file(self, name: str, stream: BinaryIO) -> RemoteObject:
        """Upload a stream as a new file in the folder."""
        media = MediaIoBaseUpload(
            stream,
            mimetype=BACKUP_MIME_TYPE,
            chunksize=UPLOAD_CHUNK_SIZE,
            resumable=True,
        )
        request = self._service.files().create(
            body={"name": name, "parents": [self.folder_id]},
            media_body=media,
            fields=FILE_FIELDS,
        )
        return RemoteObject.from_api(self._execute(request))

    def iter_files(self) -> Iterator[RemoteObject]:
        """Yield every file whose parent is the folder, following page tokens."""
        page_token = None
        while True:
            request = self._service.files().list(
                q=f"'{self.folder_id}' in parents",
                fields=f"nextPageToken, files({FILE_FIELDS})",
                pageSize=LIST_PAGE_SIZE,
                pageToken=page_token,
            )
            response = self._execute(request)
            for item in response.get("files", []):
                yield RemoteObject.from_api(item)

            page_token = response.get("nextPageToken")
            if not page_token:
                break

    def list_files(self) -> List[RemoteObject]:
        """Collect all files in the folder."""
        return list(self.iter_files())

    def delete_file(self, file_id: str) -> None:
        """Permanently delete a file by ID."""
        self._execute(self._service.files().delete(fileId=file_id))


__all__ = [
    "DriveStorage",
    "RemoteObject",
    "RetryPolicy",
    "load_credentials",
    "DRIVE_FILE_SCOPE",
]
