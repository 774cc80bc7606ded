"""
Drive Backup - Utils Package
============================

Helpers shared by the backup steps.

DESIGN:
    Utils are stateless helper functions and classes that can be
    used anywhere in the codebase. They do not depend on job state.

Available Utilities:
    Retry: Exponential backoff for Drive API calls
"""

from .retry import retry_call, is_retryable, RETRYABLE_EXCEPTIONS

__all__ = [
    "retry_call",
    "is_retryable",
    "RETRYABLE_EXCEPTIONS",
]
