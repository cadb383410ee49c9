"""Operation values, constructors, options and the handler scope."""

from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Generic, Protocol, TypeVar, Union

from tessera.core.ledger import ConfirmOptions, Signer
from tessera.core.scope import Scope
from tessera.core.settings import Commitment

if TYPE_CHECKING:
    from tessera.client import Tessera

I = TypeVar("I")  # noqa: E741
O = TypeVar("O")  # noqa: E741


@dataclass(frozen=True)
class Operation(Generic[I, O]):
    """
    An immutable request: an operation name plus its input.

    ``O`` is the output type the registered handler produces; it only
    exists for type checkers.
    """

    name: str
    input: I

    def __repr__(self) -> str:
        return f"Operation(name={self.name!r}, input={self.input!r})"


class OperationConstructor(Generic[I, O]):
    """Callable that builds ``Operation(name, input)`` values for one name."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __call__(self, input: I) -> Operation[I, O]:
        return Operation(name=self.name, input=input)

    def __repr__(self) -> str:
        return f"OperationConstructor({self.name!r})"


def use_operation(name: str) -> OperationConstructor[Any, Any]:
    """
    Declare an operation by name.

    Usage:
        transfer_lamports_operation = use_operation("TransferLamports")
        operation = transfer_lamports_operation(TransferLamportsInput(...))
    """
    return OperationConstructor(name)


@dataclass(frozen=True)
class OperationOptions:
    """
    Per-call options forwarded to the handler through its scope.

    Attributes:
        payer: Signer paying transaction fees (defaults to the client identity)
        commitment: Commitment level for reads (defaults to settings)
        confirm_options: How submissions are confirmed (defaults to settings)
    """

    payer: Signer | None = None
    commitment: Commitment | None = None
    confirm_options: ConfirmOptions | None = None


class OperationScope(Scope):
    """
    Scope handed to operation handlers.

    A child of the task attempt's scope that also carries the resolved
    operation options, so a handler reads ``scope.payer`` instead of
    re-deriving defaults.
    """

    def __init__(
        self,
        parent: Scope | None,
        *,
        payer: Signer | None,
        commitment: Commitment | None,
        confirm_options: ConfirmOptions,
    ) -> None:
        super().__init__(parent)
        self.payer = payer
        self.commitment = commitment
        self.confirm_options = confirm_options


class OperationHandlerProtocol(Protocol):
    """Object-style handler: anything with an async or sync ``handle`` method."""

    def handle(self, operation: Operation[Any, Any], client: Tessera, scope: OperationScope) -> Any: ...


HandlerFunction = Callable[[Operation[Any, Any], "Tessera", OperationScope], Union[Any, Awaitable[Any]]]
OperationHandler = Union[HandlerFunction, OperationHandlerProtocol]
