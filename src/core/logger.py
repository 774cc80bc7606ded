"""
Drive Backup - Logger Module
============================

Custom tree-style logging with daily log files.

DESIGN:
    This logger provides structured, hierarchical output that's easy to scan
    visually. Tree-style formatting groups the details of each backup step
    (file names, sizes, counts) under a single heading.

    Key features:
    - Tree-style formatting for structured data visualization
    - Daily log files in dated folders
    - 7-day log retention with automatic cleanup
    - Run tracking with unique run IDs
    - Webhook integration for error alerts
"""

import os
import uuid
import aiohttp
import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Tuple, Optional


# =============================================================================
# Constants
# =============================================================================

LOGS_DIR = Path(os.getenv("BACKUP_LOG_DIR", "logs"))
"""Directory for all log files, organized by date."""

LOG_RETENTION_DAYS = 7
"""Number of days to retain log directories before cleanup."""


# =============================================================================
# Tree Logger Class
# =============================================================================

class TreeLogger:
    """
    Custom logger with tree-style formatting.

    DESIGN:
        Uses tree-style output (├─ └─) for visual hierarchy.
        Separate error log file for quick troubleshooting.
        Optional webhook notifications for failed runs.

    Attributes:
        run_id: Unique identifier for this backup run.
        log_file: Path to the main log file.
        error_file: Path to the error-only log file.
    """

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(self, logs_dir: Path = LOGS_DIR) -> None:
        """
        Initialize logger with run ID and daily log file.

        Creates dated log directory, cleans up old logs,
        and writes the run header.
        """
        self.run_id: str = str(uuid.uuid4())[:8]
        self._webhook_url: Optional[str] = None
        self.logs_dir = logs_dir

        today = datetime.now().strftime("%Y-%m-%d")
        self.log_dir = logs_dir / today
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_file = self.log_dir / f"Backup-{today}.log"
        self.error_file = self.log_dir / f"Backup-Errors-{today}.log"

        self._cleanup_old_logs()
        self._write_session_header()

    def set_webhook(self, url: Optional[str]) -> None:
        """
        Set webhook URL for error notifications.

        Args:
            url: Webhook URL for error alerts.
        """
        self._webhook_url = url

    # =========================================================================
    # Log Cleanup
    # =========================================================================

    def _cleanup_old_logs(self) -> None:
        """
        Remove log directories older than retention period.

        Only removes directories matching date format YYYY-MM-DD.
        """
        if not self.logs_dir.exists():
            return

        now = datetime.now()
        deleted = 0

        for item in self.logs_dir.iterdir():
            if item.is_dir() and item.name != "errors":
                try:
                    dir_date = datetime.strptime(item.name, "%Y-%m-%d")
                    age_days = (now - dir_date).days
                    if age_days > LOG_RETENTION_DAYS:
                        for f in item.iterdir():
                            f.unlink()
                        item.rmdir()
                        deleted += 1
                except ValueError:
                    pass  # Not a dated directory

        if deleted > 0:
            print(f"[LOG CLEANUP] Removed {deleted} old log directories")

    # =========================================================================
    # Session Header
    # =========================================================================

    def _write_session_header(self) -> None:
        """Write run start marker to log file."""
        header = f"""
============================================================
NEW RUN - RUN ID: {self.run_id}
[{datetime.now().strftime("%Y-%m-%d %H:%M:%S")}]
============================================================
"""
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(header)

    # =========================================================================
    # Core Logging
    # =========================================================================

    def _get_timestamp(self) -> str:
        """
        Get current local timestamp.

        Returns:
            Formatted timestamp string like "[14:30:45]".
        """
        return datetime.now().strftime("[%H:%M:%S]")

    def _write(
        self,
        message: str,
        emoji: str = "",
        include_timestamp: bool = True,
        is_error: bool = False,
    ) -> None:
        """
        Write log message to console and file.

        Args:
            message: Log message content.
            emoji: Optional emoji prefix.
            include_timestamp: Whether to prepend timestamp.
            is_error: Whether to also write to error log.
        """
        if include_timestamp:
            timestamp = self._get_timestamp()
            full_message = f"{timestamp} {emoji} {message}" if emoji else f"{timestamp} {message}"
        else:
            full_message = f"{emoji} {message}" if emoji else message

        print(full_message)

        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(f"{full_message}\n")

        if is_error:
            with open(self.error_file, "a", encoding="utf-8") as f:
                f.write(f"{full_message}\n")

    # =========================================================================
    # Tree Formatting
    # =========================================================================

    def tree(
        self,
        title: str,
        items: List[Tuple[str, str]],
        emoji: str = "📦",
    ) -> None:
        """
        Log structured data in tree format.

        Args:
            title: Main heading for the tree.
            items: List of (key, value) tuples to display.
            emoji: Emoji prefix for the title.

        Example output:
            [14:30:45] 💾 Database Dump Created
              ├─ File: backup_20240101_143045.sql
              └─ Size: 1204.3 KB
        """
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write("\n")

        self._write(title, emoji=emoji)

        for i, (key, value) in enumerate(items):
            prefix = "└─" if i == len(items) - 1 else "├─"
            self._write(f"  {prefix} {key}: {value}", include_timestamp=False)

        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write("\n")

    # =========================================================================
    # Log Levels
    # =========================================================================

    def debug(self, msg: str) -> None:
        """Log debug message (only if DEBUG env var set)."""
        if os.getenv("DEBUG"):
            self._write(msg, "🔍")

    def info(self, msg: str) -> None:
        """Log informational message."""
        self._write(msg, "ℹ️")

    def success(self, msg: str) -> None:
        """Log success message."""
        self._write(msg, "✅")

    def warning(self, msg: str) -> None:
        """Log warning message."""
        self._write(msg, "⚠️")

    def error(
        self,
        msg: str,
        details: Optional[List[Tuple[str, str]]] = None,
    ) -> None:
        """
        Log error message with optional structured details.

        DESIGN:
            Errors with details use tree format for visibility.
            Sends to webhook if configured.
            Always written to both main and error log files.

        Args:
            msg: Error message or title.
            details: Optional list of (key, value) detail tuples.
        """
        if details:
            self._write("", is_error=True)
            self._write(msg, "❌", is_error=True)
            for i, (key, value) in enumerate(details):
                prefix = "└─" if i == len(details) - 1 else "├─"
                self._write(
                    f"  {prefix} {key}: {value}",
                    include_timestamp=False,
                    is_error=True,
                )
            self._write("", include_timestamp=False, is_error=True)

            if self._webhook_url:
                self._dispatch_webhook(msg, details)
        else:
            self._write(msg, "❌", is_error=True)

    def critical(self, msg: str) -> None:
        """Log critical error message."""
        self._write(msg, "🚨", is_error=True)

    # =========================================================================
    # Webhook Integration
    # =========================================================================

    def _dispatch_webhook(self, title: str, details: List[Tuple[str, str]]) -> None:
        """
        Deliver an error alert, blocking when no event loop is running.

        The backup job is synchronous, so the alert is normally sent with
        asyncio.run before the process exits.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self._send_webhook_error(title, details))
        else:
            loop.create_task(self._send_webhook_error(title, details))

    async def _send_webhook_error(
        self,
        title: str,
        details: List[Tuple[str, str]],
    ) -> None:
        """
        Send error notification to the configured webhook.

        Args:
            title: Error title for the embed.
            details: List of (key, value) detail tuples.
        """
        if not self._webhook_url:
            return

        try:
            description = "\n".join([f"**{k}:** {v}" for k, v in details])
            payload = {
                "embeds": [{
                    "title": f"❌ {title}",
                    "description": description,
                    "color": 0xFF0000,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "footer": {"text": f"Run ID: {self.run_id}"},
                }]
            }

            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self._webhook_url,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=10),
                ) as resp:
                    if resp.status >= 300:
                        print(f"Webhook error: {resp.status}")

        except Exception as e:
            print(f"Failed to send webhook: {e}")


# =============================================================================
# Global Instance
# =============================================================================

logger = TreeLogger()
"""
Global logger instance for use throughout the application.

DESIGN:
    Single instance created at module import time.
    All modules import and use this same instance.
"""


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "logger",
    "TreeLogger",
    "LOGS_DIR",
]
