"""
Cooperative cancellation scopes.

A Scope is a disposable cancellation token threaded through every
asynchronous call of the SDK. Nothing is interrupted preemptively: work
observes cancellation only at explicit checkpoints (``throw_if_canceled``),
typically placed right after an RPC round trip or after awaiting a nested
task. Code between two checkpoints always runs to completion.

Manifesto:
    - **Monotonic:** once canceled, a scope stays canceled
    - **No missed signals:** callbacks registered after cancellation fire immediately
    - **At most once:** cleanup callbacks run once, in registration order
    - **Composable:** a child follows its parent but can be canceled alone

Architecture:
    ::

        Scope (caller)
          └── child Scope (task attempt)      cancel() flows downward only
                └── OperationScope (handler)

Examples:
    >>> scope = Scope()
    >>> child = scope.child()
    >>> scope.cancel("user closed the dialog")
    >>> child.is_canceled()
    True
    >>> child.throw_if_canceled()
    Traceback (most recent call last):
    ...
    tessera.core.errors.OperationCanceledError: The operation was canceled: user closed the dialog

Tags:
    cancellation, scope, cooperative, asyncio, tessera-core
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from tessera.core.errors import OperationCanceledError
from tessera.core.logging import get_logger

T = TypeVar("T")

log = get_logger(__name__)

CancelCallback = Callable[[OperationCanceledError], Any]


class Scope:
    """
    Cancellation token with cleanup-callback registration.

    A scope built with a ``parent`` cancels itself when the parent cancels.
    Canceling a child never affects its parent.
    """

    def __init__(self, parent: Scope | None = None) -> None:
        self._canceled = False
        self._error: OperationCanceledError | None = None
        self._callbacks: list[CancelCallback] = []
        self._parent = parent
        self._detach: Callable[[], None] | None = None

        if parent is not None:
            self._detach = parent.on_cancel(self._on_parent_canceled)

    @classmethod
    def create(cls, parent: Scope | None = None) -> Scope:
        """Build a scope, optionally linked to a parent scope."""
        return cls(parent)

    def child(self) -> Scope:
        """Derive a child scope that inherits this scope's cancellation."""
        return Scope(parent=self)

    @property
    def parent(self) -> Scope | None:
        return self._parent

    def is_canceled(self) -> bool:
        return self._canceled

    def get_cancelation_error(self) -> OperationCanceledError | None:
        return self._error

    def throw_if_canceled(self) -> None:
        """Checkpoint: raise OperationCanceledError if this scope was canceled."""
        if self._error is not None:
            raise self._error

    def cancel(self, reason: str | None = None) -> None:
        """
        Cancel the scope and run its cleanup callbacks.

        Idempotent: a second call keeps the first reason and runs nothing.
        """
        if self._canceled:
            return
        self._cancel_with(OperationCanceledError(reason))

    def on_cancel(self, callback: CancelCallback) -> Callable[[], None]:
        """
        Register a cleanup callback.

        The callback receives the cancellation error. If the scope is already
        canceled it fires immediately. Returns a function that unregisters it.
        """
        if self._error is not None:
            callback(self._error)
            return lambda: None

        self._callbacks.append(callback)

        def remove() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return remove

    def close(self) -> None:
        """
        Stop listening to the parent and drop pending callbacks.

        A closed scope keeps its canceled flag but no longer reacts to
        cancellation of its parent.
        """
        if self._detach is not None:
            self._detach()
            self._detach = None
        self._callbacks.clear()

    async def run(self, callback: Callable[[Scope], T | Awaitable[T]], *, close: bool = True) -> T:
        """
        Run ``callback(self)`` (sync or async) and close the scope afterwards.

        Usage:
            result = await Scope(parent).run(fetch_everything)
        """
        try:
            result = callback(self)
            if inspect.isawaitable(result):
                result = await result
            return result  # type: ignore[return-value]
        finally:
            if close:
                self.close()

    def _on_parent_canceled(self, error: OperationCanceledError) -> None:
        if not self._canceled:
            self._cancel_with(error)

    def _cancel_with(self, error: OperationCanceledError) -> None:
        self._canceled = True
        self._error = error
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            # Every callback runs, even after an earlier one raised.
            try:
                callback(error)
            except Exception:
                log.exception(
                    "scope.cancel_callback_failed",
                    callback=getattr(callback, "__qualname__", repr(callback)),
                )

    def __enter__(self) -> Scope:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(canceled={self._canceled})"
