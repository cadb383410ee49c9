"""
Tessera Logging - Structured, operation-aware logging.

This package provides:
- Structured logging with structlog
- Operation context propagation via contextvars
- Timing utilities for step tracking
- Environment-based configuration

Usage:
    from tessera.core.logging import get_logger, configure_logging, log_step, set_context

    configure_logging()
    log = get_logger(__name__)

    set_context(operation="TransferLamports", task_id="abc-123")

    with log_step("transaction.send"):
        ...
"""

from tessera.core.logging.config import configure_logging, is_configured, is_debug_enabled
from tessera.core.logging.context import (
    LogContext,
    bind_context,
    clear_context,
    get_context,
    get_logger,
    push_context,
    set_context,
)
from tessera.core.logging.timing import TimingResult, log_step, log_timing, timed_block

__all__ = [
    # Configuration
    "configure_logging",
    "is_configured",
    "is_debug_enabled",
    # Context
    "get_logger",
    "set_context",
    "clear_context",
    "get_context",
    "bind_context",
    "push_context",
    "LogContext",
    # Timing
    "TimingResult",
    "log_step",
    "log_timing",
    "timed_block",
]
