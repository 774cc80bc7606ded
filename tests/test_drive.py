"""
Drive Backup - Drive Storage Tests
==================================

Covers credential loading, client construction and the retry behavior
of DriveStorage requests.
"""

import io
import json
from unittest.mock import MagicMock, patch

import pytest

from src.services.backup.drive import (
    DRIVE_FILE_SCOPE,
    DriveStorage,
    RemoteObject,
    RetryPolicy,
    load_credentials,
)
from src.services.backup.errors import UploadError

from tests.conftest import make_http_error


# =============================================================================
# Credential Loading Tests
# =============================================================================

class TestLoadCredentials:
    """Tests for load_credentials function."""

    def test_missing_file(self, tmp_path):
        missing = tmp_path / "nope.json"
        with pytest.raises(UploadError, match="failed to read service account file") as exc_info:
            load_credentials(str(missing))
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_invalid_json(self, tmp_path):
        key_file = tmp_path / "key.json"
        key_file.write_text("{not json")
        with pytest.raises(UploadError, match="failed to create credentials from JSON"):
            load_credentials(str(key_file))

    def test_json_missing_fields(self, tmp_path):
        key_file = tmp_path / "key.json"
        key_file.write_text(json.dumps({"type": "service_account"}))
        with pytest.raises(UploadError, match="failed to create credentials from JSON"):
            load_credentials(str(key_file))

    def test_scoped_to_drive_file(self, tmp_path):
        key_file = tmp_path / "key.json"
        key_file.write_text(json.dumps({"client_email": "bot@example.iam.gserviceaccount.com"}))

        with patch("src.services.backup.drive.service_account.Credentials.from_service_account_info") as from_info:
            creds = load_credentials(str(key_file))

        from_info.assert_called_once_with(
            {"client_email": "bot@example.iam.gserviceaccount.com"},
            scopes=[DRIVE_FILE_SCOPE],
        )
        assert creds is from_info.return_value


# =============================================================================
# Client Construction Tests
# =============================================================================

class TestFromServiceAccountFile:
    """Tests for DriveStorage.from_service_account_file."""

    def test_builds_drive_v3(self):
        with patch("src.services.backup.drive.load_credentials") as load, \
                patch("src.services.backup.drive.build") as build:
            storage = DriveStorage.from_service_account_file("key.json", "folder-1")

        build.assert_called_once_with(
            "drive", "v3", credentials=load.return_value, cache_discovery=False
        )
        assert storage.folder_id == "folder-1"

    def test_build_failure_wrapped(self):
        with patch("src.services.backup.drive.load_credentials"), \
                patch("src.services.backup.drive.build", side_effect=RuntimeError("discovery down")):
            with pytest.raises(UploadError, match="failed to create Drive client"):
                DriveStorage.from_service_account_file("key.json", "folder-1")


# =============================================================================
# Request Tests
# =============================================================================

class TestDriveStorageRequests:
    """Tests for create/list/delete through the fake service."""

    def test_create_file_sets_name_and_parent(self, drive_storage, fake_drive):
        remote = drive_storage.create_file("backup_20240101_000000.sql", io.BytesIO(b"dump"))

        upload = fake_drive.fake_files.uploads[0]
        assert upload["body"] == {"name": "backup_20240101_000000.sql", "parents": ["folder-123"]}
        assert upload["content"] == b"dump"
        assert isinstance(remote, RemoteObject)
        assert remote.name == "backup_20240101_000000.sql"
        assert remote.created_time.endswith("Z")

    def test_list_files_empty_folder(self, drive_storage):
        assert drive_storage.list_files() == []

    def test_transient_error_retried(self, no_backoff_sleep):
        request = MagicMock()
        request.execute.side_effect = [make_http_error(503), {"files": []}]
        service = MagicMock()
        service.files.return_value.list.return_value = request
        storage = DriveStorage(service, "folder-1", RetryPolicy(max_retries=3, base_delay=1.0))

        assert storage.list_files() == []
        assert request.execute.call_count == 2
        assert no_backoff_sleep == [1.0]

    def test_permanent_error_not_retried(self):
        request = MagicMock()
        request.execute.side_effect = make_http_error(404, "File not found")
        service = MagicMock()
        service.files.return_value.delete.return_value = request
        storage = DriveStorage(service, "folder-1", RetryPolicy(max_retries=3))

        with pytest.raises(Exception) as exc_info:
            storage.delete_file("missing")

        assert exc_info.value.resp.status == 404
        assert request.execute.call_count == 1


class TestRemoteObject:
    """Tests for RemoteObject.from_api."""

    def test_from_api_without_created_time(self):
        remote = RemoteObject.from_api({"id": "abc", "name": "x.sql"})
        assert remote.created_time is None
