"""
Step timing with lightweight spans.

``log_step`` is the workhorse: it opens a span (pushed into the log context so
nested logs carry ``span_id``/``parent_span_id``), logs ``<event>.start`` at
DEBUG, then ``<event>.end`` with ``duration_ms`` or ``<event>.error`` with the
exception details. ``timed_block`` measures without logging, and
``log_timing`` wraps a sync or async function in ``log_step``.

The context managers are synchronous but may be held across ``await``; the
span only exists in the context of the running asyncio task.
"""

import functools
import inspect
import time
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, TypeVar

from tessera.core.logging.context import get_context, get_logger, push_context

F = TypeVar("F", bound=Callable[..., Any])

_timing_log = get_logger("tessera.timing")


def _generate_span_id() -> str:
    """8 hex chars, unique enough to correlate the logs of one process."""
    return uuid.uuid4().hex[:8]


@dataclass
class TimingResult:
    """Measurement of one step; ``metrics`` are emitted with the end event."""

    step: str
    span_id: str = field(default_factory=_generate_span_id)
    parent_span_id: str | None = None
    started_at: float = field(default_factory=time.perf_counter)
    ended_at: float | None = None
    metrics: dict[str, Any] = field(default_factory=dict)
    status: str = "ok"
    error_info: dict[str, Any] | None = None

    def stop(self) -> "TimingResult":
        if self.ended_at is None:
            self.ended_at = time.perf_counter()
        return self

    @property
    def duration_seconds(self) -> float:
        end = time.perf_counter() if self.ended_at is None else self.ended_at
        return end - self.started_at

    @property
    def duration_ms(self) -> float:
        return self.duration_seconds * 1000

    def add_metric(self, key: str, value: Any) -> "TimingResult":
        self.metrics[key] = value
        return self

    def set_error(self, error: BaseException) -> "TimingResult":
        self.status = "error"
        self.error_info = {"error_type": type(error).__name__, "error_message": str(error)}
        return self

    def span_fields(self) -> dict[str, Any]:
        span = {"span_id": self.span_id}
        if self.parent_span_id:
            span["parent_span_id"] = self.parent_span_id
        return {**span, **self.metrics}

    def to_log_dict(self) -> dict[str, Any]:
        return {"duration_ms": round(self.duration_ms, 2), **self.span_fields()}

    def to_error_dict(self) -> dict[str, Any]:
        return {**self.to_log_dict(), "status": "error", **(self.error_info or {})}


@contextmanager
def timed_block(step: str = "unnamed") -> Iterator[TimingResult]:
    """
    Measure a block without logging anything.

    Usage:
        with timed_block("operation.execute") as timer:
            result = await task.run(scope)
        log.info("operation.execute.end", **timer.to_log_dict())
    """
    timer = TimingResult(step=step, parent_span_id=get_context().span_id)
    try:
        yield timer
    finally:
        timer.stop()


@contextmanager
def log_step(event: str, log_start: bool = True, level: str = "info", **extra_metrics) -> Iterator[TimingResult]:
    """
    Time and log a step as a span.

    Args:
        event: Event prefix, e.g. "transaction.send"
        log_start: Emit ``<event>.start`` at DEBUG
        level: Level of the ``<event>.end`` entry
        **extra_metrics: Fields added to every entry of the step

    Usage:
        with log_step("transaction.send", instructions=3) as timer:
            response = await rpc.send_and_confirm_transaction(tx, signers, options)
            timer.add_metric("signature", response.signature)
    """
    parent = get_context().span_id
    timer = TimingResult(step=event, parent_span_id=parent, metrics=dict(extra_metrics))
    token = push_context(span_id=timer.span_id, parent_span_id=parent, step=event)

    if log_start:
        _timing_log.debug(f"{event}.start", **timer.span_fields())
    try:
        yield timer
    except Exception as error:
        timer.stop().set_error(error)
        _timing_log.error(f"{event}.error", **timer.to_error_dict())
        raise
    finally:
        timer.stop()
        token.restore()

    getattr(_timing_log, level)(f"{event}.end", **timer.to_log_dict())


def log_timing(step: str | None = None, log_start: bool = True, level: str = "info") -> Callable[[F], F]:
    """
    Decorator form of ``log_step``; the step defaults to the function name.

    Usage:
        @log_timing("accounts.fetch")
        async def fetch(addresses):
            ...
    """

    def decorator(func: F) -> F:
        name = step or func.__name__

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def timed_coroutine(*args, **kwargs):
                with log_step(name, log_start=log_start, level=level):
                    return await func(*args, **kwargs)

            return timed_coroutine  # type: ignore[return-value]

        @functools.wraps(func)
        def timed_function(*args, **kwargs):
            with log_step(name, log_start=log_start, level=level):
                return func(*args, **kwargs)

        return timed_function  # type: ignore[return-value]

    return decorator
