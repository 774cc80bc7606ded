"""
Drive Backup - Configuration Module
===================================

Centralized configuration management with environment variable validation.

DESIGN:
    This module provides a single source of truth for all configuration,
    loaded from environment variables at startup (main.py loads a .env
    file first). The resulting Config is passed explicitly to the dump,
    upload and prune steps instead of being read from module constants.

    Key patterns:
    - Singleton pattern via get_config() ensures one Config instance
    - Validation happens once at load time, not on every access
    - All missing required variables are reported together
"""

import os
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Defaults
# =============================================================================

DEFAULT_SERVICE_ACCOUNT_FILE = "service_account.json"
DEFAULT_PG_USER = "postgres"
DEFAULT_PG_HOST = "localhost"
DEFAULT_PG_PORT = 5432
DEFAULT_BACKUP_DIR = "."
DEFAULT_RETRY_MAX_RETRIES = 3
DEFAULT_RETRY_BASE_DELAY = 1.0


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class Config:
    """
    Backup job configuration loaded from environment variables.

    Attributes:
        backup_folder_id: Drive folder that receives uploads and is pruned.
        pg_database: Name of the database to dump.
        container_name: Docker container running PostgreSQL.
        service_account_file: Path to the service account JSON key.
        pg_user: Database role used by pg_dump.
        pg_password: Optional password forwarded as PGPASSWORD.
        pg_host: Host pg_dump connects to inside the container.
        pg_port: Port pg_dump connects to inside the container.
        backup_dir: Directory where the local artifact is written.
        retry_max_retries: Retries for each Drive call after the first try.
        retry_base_delay: Initial backoff delay in seconds.
        error_webhook_url: Optional webhook for error alerts.
    """

    # -------------------------------------------------------------------------
    # Required
    # -------------------------------------------------------------------------

    backup_folder_id: str
    pg_database: str
    container_name: str

    # -------------------------------------------------------------------------
    # Optional: Google Drive
    # -------------------------------------------------------------------------

    service_account_file: str = DEFAULT_SERVICE_ACCOUNT_FILE

    # -------------------------------------------------------------------------
    # Optional: PostgreSQL
    # -------------------------------------------------------------------------

    pg_user: str = DEFAULT_PG_USER
    pg_password: str = ""
    pg_host: str = DEFAULT_PG_HOST
    pg_port: int = DEFAULT_PG_PORT

    # -------------------------------------------------------------------------
    # Optional: Local Storage
    # -------------------------------------------------------------------------

    backup_dir: str = DEFAULT_BACKUP_DIR

    # -------------------------------------------------------------------------
    # Optional: Retry
    # -------------------------------------------------------------------------

    retry_max_retries: int = DEFAULT_RETRY_MAX_RETRIES
    retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY

    # -------------------------------------------------------------------------
    # Optional: Webhooks
    # -------------------------------------------------------------------------

    error_webhook_url: Optional[str] = None


# =============================================================================
# Validation
# =============================================================================

class ConfigValidationError(Exception):
    """
    Raised when required configuration is missing or invalid.

    DESIGN:
        Custom exception type allows callers to distinguish config
        errors from dump and upload failures.
    """

    pass


def _parse_int_with_default(value: Optional[str], default: int, name: str, min_val: int = None, max_val: int = None) -> int:
    """
    Parse optional integer with default and range validation.

    Args:
        value: String value from environment variable.
        default: Default value if not set or invalid.
        name: Variable name for warning messages.
        min_val: Minimum allowed value (inclusive).
        max_val: Maximum allowed value (inclusive).

    Returns:
        Parsed integer within valid range, or default.
    """
    if not value:
        return default
    try:
        parsed = int(value)
        if min_val is not None and parsed < min_val:
            from src.core.logger import logger
            logger.warning(f"Config {name}={parsed} below min {min_val}, using {min_val}")
            return min_val
        if max_val is not None and parsed > max_val:
            from src.core.logger import logger
            logger.warning(f"Config {name}={parsed} above max {max_val}, using {max_val}")
            return max_val
        return parsed
    except ValueError:
        from src.core.logger import logger
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default


def _parse_float_with_default(value: Optional[str], default: float, name: str) -> float:
    """Parse optional non-negative float, falling back to default."""
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        from src.core.logger import logger
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default
    if parsed < 0:
        from src.core.logger import logger
        logger.warning(f"Config {name}={parsed} is negative, using default {default}")
        return default
    return parsed


def _validate_url(value: Optional[str], name: str) -> Optional[str]:
    """
    Validate URL format for webhooks.

    Args:
        value: URL string to validate.
        name: Variable name for warning messages.

    Returns:
        URL if valid, None if invalid or empty.
    """
    if not value:
        return None
    if not value.startswith(("https://", "http://")):
        from src.core.logger import logger
        logger.warning(f"Config {name} invalid URL format, ignoring")
        return None
    return value


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config() -> Config:
    """
    Load and validate configuration from environment variables.

    DESIGN:
        Validates all required variables upfront before creating the
        Config object. This fail-fast approach stops the run before a
        dump is produced that could never be uploaded.

    Returns:
        Validated Config object with all settings.

    Raises:
        ConfigValidationError: If any required variable is missing.
    """
    missing = []

    backup_folder_id = os.getenv("BACKUP_FOLDER_ID")
    if not backup_folder_id:
        missing.append("BACKUP_FOLDER_ID")

    pg_database = os.getenv("PG_DATABASE")
    if not pg_database:
        missing.append("PG_DATABASE")

    container_name = os.getenv("PG_CONTAINER")
    if not container_name:
        missing.append("PG_CONTAINER")

    if missing:
        raise ConfigValidationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    return Config(
        backup_folder_id=backup_folder_id,
        pg_database=pg_database,
        container_name=container_name,
        service_account_file=os.getenv("SERVICE_ACCOUNT_FILE", DEFAULT_SERVICE_ACCOUNT_FILE),
        pg_user=os.getenv("PG_USER", DEFAULT_PG_USER),
        pg_password=os.getenv("PG_PASSWORD", ""),
        pg_host=os.getenv("PG_HOST", DEFAULT_PG_HOST),
        pg_port=_parse_int_with_default(
            os.getenv("PG_PORT"), DEFAULT_PG_PORT, "PG_PORT", min_val=1, max_val=65535
        ),
        backup_dir=os.getenv("BACKUP_DIR", DEFAULT_BACKUP_DIR),
        retry_max_retries=_parse_int_with_default(
            os.getenv("RETRY_MAX_RETRIES"), DEFAULT_RETRY_MAX_RETRIES, "RETRY_MAX_RETRIES", min_val=0, max_val=10
        ),
        retry_base_delay=_parse_float_with_default(
            os.getenv("RETRY_BASE_DELAY"), DEFAULT_RETRY_BASE_DELAY, "RETRY_BASE_DELAY"
        ),
        error_webhook_url=_validate_url(os.getenv("ERROR_WEBHOOK_URL"), "ERROR_WEBHOOK_URL"),
    )


# =============================================================================
# Global Config Instance
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance, loading if needed.

    Returns:
        The global Config instance.

    Raises:
        ConfigValidationError: On first call if config is invalid.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


# =============================================================================
# Config Validation & Logging
# =============================================================================

def validate_and_log_config() -> Config:
    """
    Validate configuration and log a summary at startup.

    Returns:
        The validated Config.

    Raises:
        ConfigValidationError: If required configuration is missing.
    """
    from src.core.logger import logger

    config = get_config()

    if not config.pg_password:
        logger.info("Optional config not set: PG_PASSWORD")
    if not config.error_webhook_url:
        logger.info("Optional config not set: ERROR_WEBHOOK_URL")

    logger.tree("Configuration Validated", [
        ("Container", config.container_name),
        ("Database", f"{config.pg_user}@{config.pg_host}:{config.pg_port}/{config.pg_database}"),
        ("Drive Folder", config.backup_folder_id),
        ("Credentials", config.service_account_file),
        ("Retries", str(config.retry_max_retries)),
    ], emoji="⚙️")

    return config


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "Config",
    "ConfigValidationError",
    "get_config",
    "load_config",
    "validate_and_log_config",
]
