"""
Lazy, observable, cancellable units of work.

A Task wraps a ``callback(scope)`` and does nothing until ``run`` is awaited.
Every "find X" or "write X" call of the SDK is modeled as a Task, so callers
always get the same knobs: run it, cancel it through the scope passed to
``run``, and inspect its status, result or error afterwards.

Manifesto:
    - **Lazy:** constructing a task performs no work
    - **Single-flight:** a task never runs concurrently with itself
    - **Cached:** a completed task answers ``run`` from its recorded outcome
    - **No retries:** failures are recorded and propagated, never retried

Architecture:
    ::

        pending ──run──▶ running ──▶ successful
           ▲                   ├──▶ failed
           │                   └──▶ canceled
           └──── reset ────────────────┘       load_with(x) ──▶ successful

Tags:
    task, loader, lazy, state-machine, asyncio, tessera-core
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Generic, TypeVar

from tessera.core.errors import TaskIsAlreadyRunningError
from tessera.core.logging import get_logger
from tessera.core.scope import Scope

T = TypeVar("T")


log = get_logger(__name__)


class TaskStatus(str, Enum):
    """Task execution status."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCESSFUL = "successful"
    FAILED = "failed"
    CANCELED = "canceled"


StatusListener = Callable[[TaskStatus], Any]


class Task(Generic[T]):
    """
    Deferred, at-most-once-running, restartable computation.

    Usage:
        task = Task(lambda scope: rpc.get_account(address))
        account = await task.run(scope)
        task.get_status()  # TaskStatus.SUCCESSFUL
    """

    def __init__(
        self,
        callback: Callable[[Scope], T | Awaitable[T]],
        children: list[Task[Any]] | None = None,
        context: Any = None,
    ) -> None:
        self._callback = callback
        self._children: list[Task[Any]] = list(children or [])
        self._context = context
        self._status = TaskStatus.PENDING
        self._result: T | None = None
        self._error: BaseException | None = None
        self._listeners: list[StatusListener] = []

    async def run(
        self,
        scope: Scope | None = None,
        *,
        force: bool = False,
        fail_silently: bool = False,
    ) -> T | None:
        """
        Run the task, or answer from its recorded outcome.

        A pending task (or any task when ``force`` is set) starts a new
        attempt. A successful task returns its cached result; a failed or
        canceled task re-raises its recorded error.

        Args:
            scope: Caller's scope; the attempt runs in a child of it
            force: Start a new attempt even if the task already completed
            fail_silently: Return None instead of raising; status still records the outcome

        Raises:
            TaskIsAlreadyRunningError: If an attempt is still in flight
        """
        if self.is_running():
            raise TaskIsAlreadyRunningError()

        if self.is_pending() or force:
            return await self._force_run(scope, fail_silently)

        if self.is_successful():
            return self._result

        if fail_silently or self._error is None:
            return None
        raise self._error

    async def _force_run(self, scope: Scope | None, fail_silently: bool) -> T | None:
        attempt = Scope(parent=scope)
        self._result = None
        self._error = None

        try:
            self._set_status(TaskStatus.RUNNING)
            attempt.throw_if_canceled()
            result = self._callback(attempt)
            if inspect.isawaitable(result):
                result = await result
            attempt.throw_if_canceled()
        except asyncio.CancelledError as error:
            self._error = error
            self._set_status(TaskStatus.CANCELED)
            raise
        except Exception as error:
            self._error = error
            self._result = None
            self._set_status(TaskStatus.CANCELED if attempt.is_canceled() else TaskStatus.FAILED)
            if fail_silently:
                log.debug(
                    "task.failed_silently",
                    status=self._status.value,
                    error_type=type(error).__name__,
                    error_message=str(error),
                )
                return None
            raise
        except BaseException as error:
            self._error = error
            self._set_status(TaskStatus.FAILED)
            raise
        finally:
            attempt.close()

        self._result = result  # type: ignore[assignment]
        self._set_status(TaskStatus.SUCCESSFUL)
        return self._result

    def load_with(self, preloaded_result: T) -> Task[T]:
        """Mark the task successful with a value obtained elsewhere."""
        self._result = preloaded_result
        self._error = None
        self._set_status(TaskStatus.SUCCESSFUL)
        return self

    def reset(self) -> Task[T]:
        """Return to pending, discarding any prior result or error."""
        if self.is_running():
            raise TaskIsAlreadyRunningError()
        self._result = None
        self._error = None
        self._set_status(TaskStatus.PENDING)
        return self

    # ── Children and context ────────────────────────────────────

    def set_children(self, children: list[Task[Any]]) -> Task[T]:
        self._children = list(children)
        return self

    def get_children(self) -> list[Task[Any]]:
        return self._children

    def get_descendants(self) -> list[Task[Any]]:
        """All nested tasks, depth-first."""
        descendants: list[Task[Any]] = []
        for child in self._children:
            descendants.append(child)
            descendants.extend(child.get_descendants())
        return descendants

    def set_context(self, context: Any) -> Task[T]:
        self._context = context
        return self

    def get_context(self) -> Any:
        return self._context

    # ── Status ──────────────────────────────────────────────────

    def get_status(self) -> TaskStatus:
        return self._status

    def get_result(self) -> T | None:
        return self._result

    def get_error(self) -> BaseException | None:
        return self._error

    def is_pending(self) -> bool:
        return self._status == TaskStatus.PENDING

    def is_running(self) -> bool:
        return self._status == TaskStatus.RUNNING

    def is_completed(self) -> bool:
        return self._status not in (TaskStatus.PENDING, TaskStatus.RUNNING)

    def is_successful(self) -> bool:
        return self._status == TaskStatus.SUCCESSFUL

    def is_failed(self) -> bool:
        return self._status == TaskStatus.FAILED

    def is_canceled(self) -> bool:
        return self._status == TaskStatus.CANCELED

    # ── Listeners ───────────────────────────────────────────────

    def on_status_change(self, callback: StatusListener) -> Task[T]:
        self._listeners.append(callback)
        return self

    def on_status_change_to(self, status: TaskStatus, callback: Callable[[], Any]) -> Task[T]:
        return self.on_status_change(lambda new_status: callback() if new_status == status else None)

    def on_success(self, callback: Callable[[], Any]) -> Task[T]:
        return self.on_status_change_to(TaskStatus.SUCCESSFUL, callback)

    def on_failure(self, callback: Callable[[], Any]) -> Task[T]:
        return self.on_status_change_to(TaskStatus.FAILED, callback)

    def on_cancel(self, callback: Callable[[], Any]) -> Task[T]:
        return self.on_status_change_to(TaskStatus.CANCELED, callback)

    def _set_status(self, status: TaskStatus) -> None:
        if self._status == status:
            return
        self._status = status
        for listener in list(self._listeners):
            try:
                listener(status)
            except Exception:
                log.exception("task.status_listener_failed", status=status.value)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(status={self._status.value})"
