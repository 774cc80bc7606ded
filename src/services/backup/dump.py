"""
Drive Backup - Database Dump
============================

Produces the local backup artifact by running pg_dump inside the database
container and streaming its stdout into a timestamped file.
"""

import subprocess
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from src.core.config import Config
from src.core.logger import logger
from src.services.backup.errors import DumpError


# =============================================================================
# Constants
# =============================================================================

BACKUP_FILENAME_FORMAT = "backup_%Y%m%d_%H%M%S.sql"
DOCKER_BIN = "docker"
KB_DIVISOR = 1024
STDERR_TAIL_CHARS = 500


# =============================================================================
# Helpers
# =============================================================================

def backup_filename(now: Optional[datetime] = None) -> str:
    """Name of the artifact for a given moment, e.g. backup_20240101_030000.sql."""
    return (now or datetime.now()).strftime(BACKUP_FILENAME_FORMAT)


def build_dump_command(config: Config) -> List[str]:
    """
    Build the docker exec invocation of pg_dump in custom archive format.

    PGPASSWORD is only forwarded when a password is configured.
    """
    cmd = [DOCKER_BIN, "exec"]
    if config.pg_password:
        cmd.extend(["-e", f"PGPASSWORD={config.pg_password}"])

    cmd.extend([
        config.container_name,
        "pg_dump",
        "-U", config.pg_user,
        "-h", config.pg_host,
        "-p", str(config.pg_port),
        "-F", "c",
        config.pg_database,
    ])
    return cmd


def _remove_partial(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove partial dump {path.name}: {e}")


# =============================================================================
# Dump
# =============================================================================

def create_dump(config: Config, path: Path) -> Path:
    """
    Dump the configured database into path.

    Single attempt, no retry. A partially written file is removed when the
    dump fails.

    Args:
        config: Job configuration.
        path: Output file, created or truncated.

    Returns:
        The path of the finished artifact.

    Raises:
        DumpError: If the file cannot be created, the command cannot be
            started, or pg_dump exits with a non-zero status.
    """
    cmd = build_dump_command(config)

    try:
        out_file = open(path, "wb")
    except OSError as e:
        raise DumpError(f"failed to create backup file: {path}") from e

    try:
        with out_file:
            result = subprocess.run(cmd, stdout=out_file, stderr=subprocess.PIPE, check=False)
    except OSError as e:
        _remove_partial(path)
        raise DumpError(f"failed to run dump command: {cmd[0]}") from e

    if result.returncode != 0:
        _remove_partial(path)
        stderr = (result.stderr or b"").decode("utf-8", errors="replace").strip()
        message = f"dump command exited with status {result.returncode}"
        if stderr:
            message = f"{message}: {stderr[-STDERR_TAIL_CHARS:]}"
        raise DumpError(message)

    size = path.stat().st_size
    logger.tree("Database Dump Created", [
        ("Container", config.container_name),
        ("Database", config.pg_database),
        ("File", path.name),
        ("Size", f"{size / KB_DIVISOR:.1f} KB"),
    ], emoji="💾")

    return path


__all__ = [
    "backup_filename",
    "build_dump_command",
    "create_dump",
    "BACKUP_FILENAME_FORMAT",
]
