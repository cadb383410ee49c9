"""
One-call structlog setup.

Defaults come from ``TesseraSettings``, so the usual knobs are environment
variables:

- ``TESSERA_LOG_LEVEL``: DEBUG | INFO | WARNING | ERROR (default INFO)
- ``TESSERA_LOG_FORMAT``: console | json (default console)
- ``TESSERA_LOG_OPERATION_DEBUG``: comma-separated operation names that log
  at DEBUG whatever the level

Usage:
    from tessera.core.logging import configure_logging

    configure_logging()                      # from the environment
    configure_logging(level="DEBUG", format="json", force=True)
"""

import logging
import sys
from typing import Any, Literal

import structlog
from structlog.types import Processor

from tessera.core.logging.context import add_context_processor
from tessera.core.settings import TesseraSettings

_configured = False


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None,
    format: Literal["json", "console"] | None = None,
    operation_debug: list[str] | None = None,
    force: bool = False,
) -> None:
    """
    Route structlog through stdlib logging with the SDK's processors.

    Only the first call has an effect unless ``force`` is set. Explicit
    arguments win over settings.
    """
    global _configured
    if _configured and not force:
        return

    settings = TesseraSettings()
    log_level = (level or settings.log_level).upper()
    log_format = (format or settings.log_format).lower()
    if operation_debug is None:
        operation_debug = [name.strip() for name in settings.log_operation_debug.split(",") if name.strip()]

    processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_context_processor,
    ]
    if operation_debug:
        # Needs "operation", so it runs after the context is merged.
        processors.append(_make_operation_filter(operation_debug, log_level))
    else:
        processors.insert(0, structlog.stdlib.filter_by_level)
    processors += [
        structlog.processors.format_exc_info,
        structlog.processors.StackInfoRenderer(),
        _renderer(log_format),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # The operation filter does its own level check; stdlib must pass DEBUG through.
    stdlib_level = logging.DEBUG if operation_debug else getattr(logging, log_level)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=stdlib_level, force=True)
    logging.getLogger("tessera").setLevel(stdlib_level)

    _configured = True


def _renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stderr.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def _make_operation_filter(debug_operations: list[str], default_level: str) -> Processor:
    """Processor letting everything through for listed operations and applying ``default_level`` otherwise."""
    threshold = getattr(logging, default_level)
    verbose = frozenset(debug_operations)

    def operation_debug_filter(logger: Any, method_name: str, event_dict: dict) -> dict:
        if event_dict.get("operation") in verbose:
            return event_dict
        level = getattr(logging, str(event_dict.get("level", method_name)).upper(), logging.DEBUG)
        if level < threshold:
            raise structlog.DropEvent
        return event_dict

    return operation_debug_filter


def is_debug_enabled() -> bool:
    return logging.getLogger().isEnabledFor(logging.DEBUG)


def is_configured() -> bool:
    return _configured
