"""Operation registry: a name-keyed table of handlers.

Manifesto:
    Dispatch by name instead of by class hierarchy. A plugin overrides the
    default behavior of an operation simply by registering its own handler
    under the same name; call sites never change.

    Each client owns its registry. There is no module-level table, so two
    clients in one process never see each other's handlers.

Tags:
    tessera-core, framework, registry, operation-dispatch, plugins

Doc-Types:
    api-reference
"""

from __future__ import annotations

from tessera.core.errors import OperationHandlerMissingError
from tessera.core.logging import get_logger
from tessera.framework.operations import OperationConstructor, OperationHandler

logger = get_logger(__name__)


def _operation_name(operation: OperationConstructor | str) -> str:
    if isinstance(operation, str):
        return operation
    return operation.name


class OperationRegistry:
    """
    Registry of operation handlers.

    Exactly one handler per operation name; registering again replaces
    the previous handler (last write wins).
    """

    def __init__(self) -> None:
        self._handlers: dict[str, OperationHandler] = {}

    def register(self, operation: OperationConstructor | str, handler: OperationHandler) -> None:
        """Register ``handler`` for the operation's name, replacing any previous one."""
        name = _operation_name(operation)
        replaced = name in self._handlers
        self._handlers[name] = handler
        logger.debug(
            "operation.registered",
            name=name,
            handler=getattr(handler, "__qualname__", type(handler).__name__),
            replaced=replaced,
        )

    def unregister(self, operation: OperationConstructor | str) -> None:
        """Remove the handler for an operation, if any."""
        self._handlers.pop(_operation_name(operation), None)

    def get(self, name: str) -> OperationHandler:
        """
        Get the handler for an operation name.

        Raises:
            OperationHandlerMissingError: If nothing is registered under ``name``
        """
        handler = self._handlers.get(name)
        if handler is None:
            raise OperationHandlerMissingError(name)
        return handler

    def has(self, name: str) -> bool:
        return name in self._handlers

    def list_operations(self) -> list[str]:
        """List all registered operation names."""
        return sorted(self._handlers.keys())

    def clear(self) -> None:
        """Remove every handler (for testing)."""
        self._handlers.clear()

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers
