"""
Drive Backup - Error Handler
============================

Provides detailed error context and logging for failed backup runs.

Features:
- Detailed error context with stack traces
- Error categorization (config, dump, drive, filesystem)
- Recovery suggestions per category
- Critical error file logging
"""

import json
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from googleapiclient.errors import HttpError

from src.core.config import ConfigValidationError
from src.core.logger import logger
from src.services.backup.errors import BackupError, DumpError, PruneError, UploadError


class ErrorContext:
    """Captures and formats detailed error context"""

    @staticmethod
    def get_full_context(e: Exception, location: str, **kwargs) -> Dict[str, Any]:
        """
        Get comprehensive error context.

        Args:
            e: The exception
            location: Where the error occurred
            **kwargs: Additional context (file names, folder IDs, etc.)

        Returns:
            Dictionary with full error context
        """
        chain = []
        current = e
        while current is not None:
            chain.append(f"{type(current).__name__}: {current}")
            current = current.__cause__

        return {
            'timestamp': datetime.now().isoformat(),
            'location': location,
            'error_type': type(e).__name__,
            'error_message': str(e),
            'cause_chain': chain,
            'traceback': ''.join(traceback.format_exception(type(e), e, e.__traceback__)),
            'python_version': sys.version,
            'additional_context': kwargs,
        }


class ErrorHandler:
    """Error handling with context and recovery hints"""

    ERROR_CATEGORIES = {
        'config': [
            ConfigValidationError,
        ],
        'dump': [
            DumpError,
        ],
        'drive': [
            UploadError,
            PruneError,
            HttpError,
        ],
        'filesystem': [
            OSError,
        ],
    }

    ERROR_SUGGESTIONS = {
        'config': "Set the missing variables in the environment or .env file",
        'dump': "Check that the container is running and the database credentials are valid",
        'drive': "Check the service account file and that the folder is shared with the service account",
        'filesystem': "Check disk space and permissions in the backup directory",
    }

    @classmethod
    def categorize_error(cls, e: Exception) -> str:
        """
        Categorize the error type.

        Args:
            e: The exception

        Returns:
            Error category string
        """
        for category, error_types in cls.ERROR_CATEGORIES.items():
            if any(isinstance(e, err_type) for err_type in error_types):
                return category

        if isinstance(e, BackupError):
            return 'backup'
        return 'general'

    @classmethod
    def get_recovery_suggestion(cls, category: str) -> str:
        """
        Get recovery suggestion for an error category.

        Args:
            category: Error category

        Returns:
            Recovery suggestion string
        """
        return cls.ERROR_SUGGESTIONS.get(category, "Unexpected error - check logs for details")

    @classmethod
    def handle(cls, e: Exception, location: str, critical: bool = False, **context) -> Dict[str, Any]:
        """
        Handle an error with full context.

        Args:
            e: The exception
            location: Where the error occurred
            critical: Whether this error stops the run
            **context: Additional context

        Returns:
            The collected error context.
        """
        category = cls.categorize_error(e)
        suggestion = cls.get_recovery_suggestion(category)
        full_context = ErrorContext.get_full_context(e, location, **context)

        if critical:
            details = [
                ("Category", category.upper()),
                ("Location", location),
                ("Error", f"{full_context['error_type']}: {full_context['error_message']}"),
            ]
            for cause in full_context['cause_chain'][1:]:
                details.append(("Caused By", cause))
            details.append(("Recovery", suggestion))
            logger.error("Backup Run Failed", details)
            logger.debug(f"Traceback:\n{full_context['traceback']}")
            cls._store_critical_error(full_context)
        else:
            logger.warning(f"[{category.upper()}] in {location}: {full_context['error_type']} - {str(e)[:200]}")

        return full_context

    @staticmethod
    def _store_critical_error(context: Dict[str, Any]) -> None:
        """
        Store critical error for later analysis.

        Args:
            context: Full error context
        """
        try:
            error_dir = logger.logs_dir / 'errors'
            error_dir.mkdir(exist_ok=True, parents=True)

            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            error_file = Path(error_dir) / f"error_{timestamp}_{logger.run_id}.json"

            with open(error_file, 'w', encoding='utf-8') as f:
                json.dump(context, f, indent=2, default=str)

            logger.info(f"Critical error saved to {error_file}")
        except OSError as save_error:
            logger.info(f"Failed to save error details: {save_error}")


__all__ = [
    "ErrorContext",
    "ErrorHandler",
]
