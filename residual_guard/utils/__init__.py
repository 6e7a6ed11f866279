"""Minimal utilities for the residual_guard package."""

from residual_guard.utils.logging import (
    configure_logging,
    get_logger,
    log_calls,
)

__all__ = [
    "get_logger",
    "configure_logging",
    "log_calls",
]
