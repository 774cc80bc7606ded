"""
Drive Backup - Core Package
===========================

Configuration and logging shared by every backup step.

DESIGN:
    Core modules are singletons or global instances:
    - get_config() returns the same Config instance
    - logger is a global TreeLogger instance
"""

# =============================================================================
# Core Imports
# =============================================================================

from .config import (
    Config,
    ConfigValidationError,
    get_config,
    load_config,
    validate_and_log_config,
)

from .logger import logger, TreeLogger


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    # Config
    "Config",
    "ConfigValidationError",
    "get_config",
    "load_config",
    "validate_and_log_config",
    # Logger
    "logger",
    "TreeLogger",
]
