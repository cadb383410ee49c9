"""
Operation-aware log context.

The fields of ``LogContext`` live in structlog's contextvars store, so any
logger configured with ``merge_contextvars`` picks them up without a bound
logger being passed around. Each asyncio task works on a copy of the context
it was created in: a dispatch running in ``asyncio.gather`` never sees the
identifiers of its siblings.

Usage:
    token = push_context(operation="TransferLamports", task_id=task_id)
    try:
        log.info("operation.execute.start")   # carries operation + task_id
    finally:
        token.restore()
"""

from collections.abc import Mapping
from contextvars import Token
from dataclasses import asdict, dataclass, fields, replace
from typing import Any

import structlog
from structlog.contextvars import (
    bind_contextvars,
    clear_contextvars,
    get_contextvars,
    merge_contextvars,
    reset_contextvars,
)


@dataclass(frozen=True)
class LogContext:
    """
    Snapshot of the identifiers attached to every log entry.

    Attributes:
        operation: Operation name being dispatched (e.g. "TransferLamports")
        task_id: Identifier of the task attempt
        span_id: Current timing span
        parent_span_id: Enclosing timing span
        step: Name of the innermost ``log_step``
        attempt: Attempt number, omitted from output while it is 1
        signature: Transaction signature once one is known
    """

    operation: str | None = None
    task_id: str | None = None
    span_id: str | None = None
    parent_span_id: str | None = None
    step: str | None = None
    attempt: int = 1
    signature: str | None = None

    def to_dict(self) -> dict[str, Any]:
        values = {key: value for key, value in asdict(self).items() if value is not None}
        if values.get("attempt") == 1:
            del values["attempt"]
        return values

    def merge(self, **kwargs) -> "LogContext":
        """Copy with the given fields replaced; None values and unknown keys are ignored."""
        return replace(self, **_known(kwargs))


_FIELDS = frozenset(f.name for f in fields(LogContext))


def _known(values: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if key in _FIELDS and value is not None}


def get_context() -> LogContext:
    """Current context as a ``LogContext`` (other bound keys are left out)."""
    return LogContext(**_known(get_contextvars()))


def set_context(**kwargs) -> LogContext:
    """Replace the whole context with the given fields."""
    clear_contextvars()
    return bind_context(**kwargs)


def bind_context(**kwargs) -> LogContext:
    """Add fields to the current context, keeping the others."""
    bind_contextvars(**_known(kwargs))
    return get_context()


def clear_context() -> None:
    clear_contextvars()


class _ContextToken:
    """Undo handle returned by ``push_context``."""

    def __init__(self, tokens: Mapping[str, Token]):
        self._tokens = tokens

    def restore(self) -> None:
        reset_contextvars(**self._tokens)


def push_context(**kwargs) -> _ContextToken:
    """Bind fields for a nested block; ``restore()`` puts the previous values back."""
    return _ContextToken(bind_contextvars(**_known(kwargs)))


def add_context_processor(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor merging the context into an event; explicit keys win."""
    return merge_contextvars(logger, method_name, event_dict)


def get_logger(name: str | None = None) -> Any:
    """Module logger, typically ``get_logger(__name__)``."""
    return structlog.get_logger(name)
