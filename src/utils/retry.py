"""
Drive Backup - Retry Utilities
==============================

Retry logic for Google Drive API calls with exponential backoff.
"""

import socket
import time
from typing import Any, Callable, Tuple, Type

import httplib2
from googleapiclient.errors import HttpError

from src.core.logger import logger

# Exceptions that should trigger a retry
RETRYABLE_EXCEPTIONS: Tuple[Type[Exception], ...] = (
    HttpError,
    ConnectionError,
    TimeoutError,
    socket.timeout,
    httplib2.HttpLib2Error,
)

# HTTP statuses worth another attempt; anything else is a permanent failure
RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


def is_retryable(e: Exception) -> bool:
    """
    Decide whether an exception is transient.

    Args:
        e: Exception raised by a remote call.

    Returns:
        True for network errors and HttpError with a transient status.
    """
    if isinstance(e, HttpError):
        return getattr(e.resp, "status", None) in RETRYABLE_STATUSES
    return isinstance(e, RETRYABLE_EXCEPTIONS)


def retry_call(
    func: Callable[..., Any],
    *args,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    **kwargs,
) -> Any:
    """
    Call a function, retrying transient failures with exponential backoff.

    Args:
        func: Function to call.
        *args: Arguments to pass to the function.
        max_retries: Maximum number of retry attempts after the first call.
        base_delay: Initial delay between retries (seconds).
        max_delay: Maximum delay between retries (seconds).
        **kwargs: Keyword arguments to pass to the function.

    Returns:
        Result of the function.

    Raises:
        The last exception if all retries fail, or the first
        non-retryable exception immediately.
    """
    for attempt in range(max_retries + 1):
        try:
            return func(*args, **kwargs)
        except RETRYABLE_EXCEPTIONS as e:
            if not is_retryable(e):
                raise

            if attempt < max_retries:
                # Exponential backoff: 1s, 2s, 4s, etc. (capped at max_delay)
                delay = min(base_delay * (2 ** attempt), max_delay)
                logger.warning(f"Retry {attempt + 1}/{max_retries}: {type(e).__name__} - retrying in {delay:.1f}s")
                time.sleep(delay)
            else:
                logger.error(f"All {max_retries} retries failed: {type(e).__name__}: {e}")
                raise


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "retry_call",
    "is_retryable",
    "RETRYABLE_EXCEPTIONS",
    "RETRYABLE_STATUSES",
]
