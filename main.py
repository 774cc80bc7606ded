#!/usr/bin/env python3
"""
Drive Backup - Entry Point
==========================

Dumps the PostgreSQL database, uploads the dump to Google Drive and prunes
backups older than 30 days. Meant to be triggered by cron or a systemd
timer; one invocation performs one backup.

Exit codes:
- 0: backup uploaded (cleanup or pruning warnings do not change this)
- 1: configuration, dump or upload failure
"""

import sys

from dotenv import find_dotenv, load_dotenv

# The logger picks its directory from BACKUP_LOG_DIR when it is imported
load_dotenv(find_dotenv(usecwd=True))

from src.core.config import ConfigValidationError, validate_and_log_config
from src.core.logger import logger
from src.services.backup import BackupError, run_backup
from src.utils.error_handler import ErrorHandler


def main() -> int:
    """
    Run one backup.

    Handles the complete run:
    1. Validates required settings (.env is loaded at import)
    2. Dumps, uploads, cleans up and prunes

    Returns:
        Process exit code.
    """
    try:
        config = validate_and_log_config()
    except ConfigValidationError as e:
        ErrorHandler.handle(e, location="main.load_config", critical=True)
        return 1

    logger.set_webhook(config.error_webhook_url)

    try:
        result = run_backup(config)
    except BackupError as e:
        ErrorHandler.handle(
            e,
            location="main.run_backup",
            critical=True,
            container=config.container_name,
            folder_id=config.backup_folder_id,
        )
        return 1

    deleted = result.prune.deleted if result.prune else "n/a"
    logger.tree("Backup Complete", [
        ("Uploaded", result.remote.name),
        ("Drive ID", result.remote.id),
        ("Local Cleanup", "done" if result.local_removed else "failed"),
        ("Old Backups Deleted", str(deleted)),
    ], emoji="✅")
    logger.success("Backup and upload successful!")
    return 0


def run() -> None:
    """Console script entry point."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("🛑 Backup interrupted (Ctrl+C)")
        sys.exit(130)


if __name__ == "__main__":
    run()
