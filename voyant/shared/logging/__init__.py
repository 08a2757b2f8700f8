"""Logging configuration and utilities."""

from voyant.shared.logging.config import (
    setup_logging,
    log_state_transition,
    StructuredFormatter,
    LOG_FORMAT,
)

__all__ = [
    "setup_logging",
    "log_state_transition",
    "StructuredFormatter",
    "LOG_FORMAT",
]
