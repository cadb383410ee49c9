"""
Operation dispatcher.

Turns an operation value into a Task by looking its name up in the client's
registry, and offers ``execute`` as the one-call convenience for callers that
do not need to keep the task around.

Usage:
    operations = client.operations()
    operations.register(transfer_lamports_operation, transfer_lamports_handler)

    task = operations.get_task(transfer_lamports_operation(params))
    output = await task.run(scope)

    # Or
    output = await operations.execute(transfer_lamports_operation(params))
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, TypeVar
from uuid import uuid4

from tessera.core.errors import OperationCanceledError, OperationHandlerMissingError
from tessera.core.ledger import ConfirmOptions
from tessera.core.logging import get_logger, push_context, timed_block
from tessera.core.scope import Scope
from tessera.core.task import Task
from tessera.framework.operations import (
    Operation,
    OperationConstructor,
    OperationHandler,
    OperationOptions,
    OperationScope,
)
from tessera.framework.registry import OperationRegistry

if TYPE_CHECKING:
    from tessera.client import Tessera

O = TypeVar("O")  # noqa: E741

log = get_logger(__name__)


class OperationDispatcher:
    """
    Dispatcher for operations of one client.

    The dispatcher never retries and never swallows errors: whatever the
    handler raises ends up in the task's ``failed`` status and, unless the
    caller asked to fail silently, in the caller's hands.
    """

    def __init__(self, client: Tessera, registry: OperationRegistry | None = None) -> None:
        self._client = client
        self._registry = registry if registry is not None else OperationRegistry()

    @property
    def registry(self) -> OperationRegistry:
        return self._registry

    def register(self, operation: OperationConstructor | str, handler: OperationHandler) -> OperationDispatcher:
        """Register a handler (last registration wins)."""
        self._registry.register(operation, handler)
        return self

    def get_task(self, operation: Operation[Any, O], options: OperationOptions | None = None) -> Task[O]:
        """
        Build the task that fulfills ``operation``.

        The handler is resolved now. When none is registered the returned task
        fails with OperationHandlerMissingError as soon as it runs, without
        invoking any handler.
        """
        try:
            handler = self._registry.get(operation.name)
        except OperationHandlerMissingError as error:
            log.warning("operation.handler_missing", operation=operation.name)
            missing = error

            def fail(scope: Scope) -> O:
                raise missing

            return Task(fail, context=operation)

        resolved = options or OperationOptions()

        async def callback(scope: Scope) -> O:
            operation_scope = self._make_scope(scope, resolved)
            try:
                handle = getattr(handler, "handle", None)
                if callable(handle):
                    result = handle(operation, self._client, operation_scope)
                else:
                    result = handler(operation, self._client, operation_scope)  # type: ignore[operator]
                if inspect.isawaitable(result):
                    result = await result
                return result
            finally:
                operation_scope.close()

        return Task(callback, context=operation)

    async def execute(
        self,
        operation: Operation[Any, O],
        scope: Scope | None = None,
        *,
        options: OperationOptions | None = None,
        fail_silently: bool | None = None,
    ) -> O | None:
        """
        Run ``operation`` to completion in ``scope`` (a fresh one by default).

        Args:
            operation: Operation value to fulfill
            scope: Caller's cancellation scope
            options: Payer, commitment and confirm options for the handler
            fail_silently: Return None instead of raising (defaults to settings)

        Returns:
            The handler's output, or None after a silent failure
        """
        if fail_silently is None:
            fail_silently = self._client.settings.fail_silently

        task = self.get_task(operation, options)
        token = push_context(operation=operation.name, task_id=uuid4().hex)
        try:
            log.debug("operation.execute.start")
            with timed_block("operation.execute") as timer:
                try:
                    result = await task.run(scope or Scope(), fail_silently=fail_silently)
                except OperationCanceledError as error:
                    log.info("operation.execute.canceled", reason=error.reason, duration_ms=round(timer.duration_ms, 2))
                    raise
                except Exception as error:
                    log.error(
                        "operation.execute.failed",
                        error_type=type(error).__name__,
                        error_message=str(error),
                        duration_ms=round(timer.duration_ms, 2),
                    )
                    raise
            log.info("operation.execute.end", status=task.get_status().value, **timer.to_log_dict())
            return result
        finally:
            token.restore()

    def _make_scope(self, parent: Scope, options: OperationOptions) -> OperationScope:
        settings = self._client.settings
        commitment = options.commitment or settings.commitment
        confirm_options = options.confirm_options or ConfirmOptions(
            commitment=commitment,
            skip_preflight=settings.skip_preflight,
        )
        return OperationScope(
            parent,
            payer=options.payer or self._client.identity(),
            commitment=commitment,
            confirm_options=confirm_options,
        )
