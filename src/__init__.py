"""
Drive Backup - Source Package
=============================

Scheduled PostgreSQL backups to Google Drive with 30-day retention.

Package Structure:
- core/: Configuration and logging
- services/backup/: Dump, upload, prune and the runner that chains them
- utils/: Retry and error handling helpers

Version: v1.0.0
"""
