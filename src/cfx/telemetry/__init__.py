"""Telemetry module for structured logging.

This module provides:
- Structured logging via structlog
- Semantic event constants
"""

from cfx.telemetry.events import (
    BOOTSTRAP_COMPLETED,
    BOOTSTRAP_FAILED,
    CONFIG_FILE_MISSING,
    CONFIG_LOADED,
    ENV_FILES_LOADED,
    ENVIRONMENT_CONTEXT_BUILT,
)
from cfx.telemetry.logger import configure_logging, get_logger

__all__ = [
    # Core exports
    "get_logger",
    "configure_logging",
    # Event constants
    "ENVIRONMENT_CONTEXT_BUILT",
    "ENV_FILES_LOADED",
    "CONFIG_FILE_MISSING",
    "CONFIG_LOADED",
    "BOOTSTRAP_COMPLETED",
    "BOOTSTRAP_FAILED",
]
