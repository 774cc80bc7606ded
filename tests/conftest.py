"""
Drive Backup - Test Fixtures
============================

Shared fixtures for all tests.
"""

import os
import sys
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import httplib2
import pytest
from googleapiclient.errors import HttpError

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set up test environment before importing modules
os.environ["TESTING"] = "1"
os.environ.setdefault("BACKUP_LOG_DIR", tempfile.mkdtemp(prefix="drive-backup-logs-"))


# =============================================================================
# Helpers
# =============================================================================

def make_http_error(status: int, message: str = "boom") -> HttpError:
    """Build an HttpError the way googleapiclient raises it."""
    resp = httplib2.Response({"status": status})
    content = ('{"error": {"message": "%s"}}' % message).encode("utf-8")
    return HttpError(resp, content)


def rfc3339(moment: datetime) -> str:
    """Format an aware datetime like Drive's createdTime."""
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z")


# =============================================================================
# Fake Drive API
# =============================================================================

class FakeRequest:
    """Mimics googleapiclient.http.HttpRequest.execute()."""

    def __init__(self, fn):
        self._fn = fn

    def execute(self):
        return self._fn()


class FakeDriveFiles:
    """In-memory stand-in for service.files()."""

    def __init__(self, page_size: int = 100):
        self.items = []
        self.page_size = page_size
        self.uploads = []
        self.list_calls = []
        self.deleted_ids = []
        self.delete_errors = {}
        self.create_error = None
        self._next_id = 1

    def add(self, name: str, created_time: str) -> dict:
        item = {"id": f"file-{self._next_id}", "name": name, "createdTime": created_time}
        self._next_id += 1
        self.items.append(item)
        return item

    def create(self, body, media_body, fields):
        def _do():
            if self.create_error is not None:
                raise self.create_error
            content = media_body.getbytes(0, media_body.size())
            item = self.add(body["name"], rfc3339(datetime.now(timezone.utc)))
            self.uploads.append({"body": body, "content": content, "fields": fields})
            return dict(item)
        return FakeRequest(_do)

    def list(self, q, fields, pageSize, pageToken=None):
        self.list_calls.append({"q": q, "fields": fields, "pageSize": pageSize, "pageToken": pageToken})

        def _do():
            start = int(pageToken) if pageToken else 0
            end = start + self.page_size
            response = {"files": [dict(i) for i in self.items[start:end]]}
            if end < len(self.items):
                response["nextPageToken"] = str(end)
            return response
        return FakeRequest(_do)

    def delete(self, fileId):
        def _do():
            if fileId in self.delete_errors:
                raise self.delete_errors[fileId]
            for item in self.items:
                if item["id"] == fileId:
                    self.items.remove(item)
                    self.deleted_ids.append(fileId)
                    return ""
            raise make_http_error(404, "File not found")
        return FakeRequest(_do)


class FakeDriveService:
    """Mimics the resource returned by googleapiclient.discovery.build."""

    def __init__(self, page_size: int = 100):
        self.fake_files = FakeDriveFiles(page_size=page_size)

    def files(self):
        return self.fake_files


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def no_backoff_sleep(monkeypatch):
    """Make retry backoff instant and record the requested delays."""
    delays = []
    monkeypatch.setattr("src.utils.retry.time.sleep", delays.append)
    return delays


@pytest.fixture
def mock_config(tmp_path):
    """Create a configuration pointing at a temporary backup directory."""
    from src.core.config import Config

    return Config(
        backup_folder_id="folder-123",
        pg_database="appdb",
        container_name="postgres-main",
        service_account_file=str(tmp_path / "service_account.json"),
        pg_user="postgres",
        pg_password="",
        pg_host="localhost",
        pg_port=5432,
        backup_dir=str(tmp_path),
        retry_max_retries=2,
        retry_base_delay=0.5,
    )


@pytest.fixture
def fake_drive():
    """Create an empty fake Drive service."""
    return FakeDriveService()


@pytest.fixture
def drive_storage(fake_drive):
    """Create a DriveStorage bound to the fake service."""
    from src.services.backup.drive import DriveStorage, RetryPolicy

    return DriveStorage(fake_drive, "folder-123", RetryPolicy(max_retries=2, base_delay=0.5))


@pytest.fixture
def fixed_now():
    """Reference time used by retention tests."""
    return datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def successful_dump(monkeypatch):
    """Patch subprocess.run so pg_dump writes a small archive and exits 0."""
    import subprocess

    calls = []

    def _run(cmd, stdout=None, stderr=None, check=False):
        calls.append(cmd)
        stdout.write(b"PGDMP fake archive")
        return subprocess.CompletedProcess(cmd, 0, stdout=None, stderr=b"")

    run = MagicMock(side_effect=_run)
    run.calls = calls
    monkeypatch.setattr("src.services.backup.dump.subprocess.run", run)
    return run


@pytest.fixture
def failing_dump(monkeypatch):
    """Patch subprocess.run so pg_dump fails with exit status 1."""
    import subprocess

    def _run(cmd, stdout=None, stderr=None, check=False):
        stdout.write(b"partial")
        return subprocess.CompletedProcess(
            cmd, 1, stdout=None, stderr=b'pg_dump: error: database "appdb" does not exist\n'
        )

    run = MagicMock(side_effect=_run)
    monkeypatch.setattr("src.services.backup.dump.subprocess.run", run)
    return run
