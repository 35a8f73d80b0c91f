"""Logging utilities for monitoring and debugging."""

from dailyledger.core.logging.config import LOG_LEVELS, LogConfig
from dailyledger.core.logging.logger import (
    StructuredLogger,
    configure_logging,
    current_run_id,
    get_logger,
    log_context,
    logger,
)

__all__ = [
    "LOG_LEVELS",
    "LogConfig",
    "StructuredLogger",
    "configure_logging",
    "current_run_id",
    "get_logger",
    "log_context",
    "logger",
]
