"""
Structured error types for the Tessera SDK.

Every condition the SDK raises itself is a TesseraError subclass carrying a
category, structured context and an optional chained cause. Errors raised by
external collaborators (RPC adapters, instruction builders, model
constructors) are never wrapped or reclassified on their way through the
core: they propagate unchanged.

Manifesto:
    - **Typed hierarchy:** one class per recognizable condition
    - **Rich context:** operation name, task id, address and signature travel with the error
    - **No hidden recovery:** nothing here decides on retries

Architecture:
    ::

        TesseraError (category, context, cause)
          ├── SdkError
          │     ├── OperationHandlerMissingError   (DISPATCH)
          │     ├── OperationCanceledError         (CANCELLATION)
          │     ├── TaskIsAlreadyRunningError      (TASK)
          │     ├── AccountNotFoundError           (ACCOUNT)
          │     ├── ExpectedSignerError            (BUILDER)
          │     └── PluginNotInstalledError        (CONFIG)
          └── RpcError                             (RPC)

Examples:
    >>> error = OperationHandlerMissingError("TransferLamports")
    >>> error.category
    <ErrorCategory.DISPATCH: 'DISPATCH'>
    >>> error.with_context(task_id="abc").context.task_id
    'abc'

Tags:
    error-handling, exception-hierarchy, error-context, tessera-core

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories used for classification and log routing."""

    DISPATCH = "DISPATCH"  # No handler for an operation name
    CANCELLATION = "CANCELLATION"  # Scope canceled at a checkpoint
    TASK = "TASK"  # Task lifecycle misuse
    BUILDER = "BUILDER"  # Handler precondition before any network call
    RPC = "RPC"  # Ledger RPC boundary
    ACCOUNT = "ACCOUNT"  # Missing or unexpected on-chain account
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        operation: Name of the operation being executed
        task_id: Identifier of the task attempt
        address: Ledger address involved, if any
        signature: Transaction signature, if one was produced
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    task_id: str | None = None
    address: str | None = None
    signature: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "task_id", "address", "signature"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class TesseraError(Exception):
    """
    Base exception for all Tessera errors.

    Subclasses set ``default_category``; callers may override it per
    instance. ``cause`` is chained into ``__cause__`` so tracebacks keep the
    original exception.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TesseraError:
        """
        Add context to this error (fluent API).

        Usage:
            raise AccountNotFoundError(address).with_context(operation="FindAccountByAddress")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# SDK ERRORS
# =============================================================================


class SdkError(TesseraError):
    """Condition raised by the SDK core itself."""

    default_category = ErrorCategory.INTERNAL


class OperationHandlerMissingError(SdkError):
    """No handler is registered for the requested operation name."""

    default_category = ErrorCategory.DISPATCH

    def __init__(self, operation_name: str):
        self.operation_name = operation_name
        message = (
            f"No operation handler was registered for the [{operation_name}] operation. "
            "Did you forget to register it? You may do this by using: "
            '"client.operations().register(operation, handler)".'
        )
        super().__init__(message, context=ErrorContext(operation=operation_name))


class OperationCanceledError(SdkError):
    """
    Raised at a cancellation checkpoint once the scope has been canceled.

    This is the recognizable ``Canceled`` condition: handlers may catch and
    translate it, otherwise it propagates to the caller.
    """

    default_category = ErrorCategory.CANCELLATION

    def __init__(self, reason: str | None = None):
        self.reason = reason
        message = "The operation was canceled."
        if reason:
            message = f"The operation was canceled: {reason}"
        super().__init__(message)


class TaskIsAlreadyRunningError(SdkError):
    """A task was asked to run while a previous attempt is still in flight."""

    default_category = ErrorCategory.TASK

    def __init__(self) -> None:
        super().__init__(
            "Trying to re-run a task that hasn't completed yet. "
            'Ensure the task has completed using "await" before trying to run it again.'
        )


class AccountNotFoundError(SdkError):
    """No account exists at the requested address."""

    default_category = ErrorCategory.ACCOUNT

    def __init__(self, address: str, account_type: str | None = None, solution: str | None = None):
        self.address = address
        self.account_type = account_type
        if account_type:
            message = f"The account of type [{account_type}] was not found"
        else:
            message = "No account was found"
        message += f" at the provided address [{address}]."
        if solution:
            message += f" {solution}"
        super().__init__(message, context=ErrorContext(address=address))


class ExpectedSignerError(SdkError):
    """A value that must sign the transaction is not a signer."""

    default_category = ErrorCategory.BUILDER

    def __init__(self, variable: str, actual_type: str):
        self.variable = variable
        self.actual_type = actual_type
        super().__init__(
            f"Expected variable [{variable}] to be of type [Signer] but got [{actual_type}]. "
            "Please check that you are providing the variable as a signer."
        )


class PluginNotInstalledError(SdkError):
    """An accessor was used before the plugin providing it was installed."""

    default_category = ErrorCategory.CONFIG

    def __init__(self, plugin: str):
        self.plugin = plugin
        super().__init__(f"The [{plugin}] plugin is not installed. Install it with client.use({plugin}()).")


# =============================================================================
# RPC ERRORS
# =============================================================================


class RpcError(TesseraError):
    """Failure reported by the ledger RPC boundary."""

    default_category = ErrorCategory.RPC


def is_cancellation(error: BaseException | None) -> bool:
    """Check whether an error is the cancellation condition."""
    return isinstance(error, OperationCanceledError)

