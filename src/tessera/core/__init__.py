"""Tessera Core -- the primitives every operation runs on.

Manifesto:
    Every domain feature of the SDK (transfers, token mints, marketplaces) is an
    operation plus a transaction builder. None of them carry their own
    control-flow machinery: cancellation, lazy evaluation, status tracking
    and error taxonomy live here, once.

Architecture::

    errors.py      Structured error hierarchy (TesseraError, SdkError, RpcError)
    settings.py    TesseraSettings (pydantic-settings)
    logging/       structlog configuration, log context, timing helpers
    scope.py       Cooperative cancellation scopes
    task.py        Lazy, single-flight, restartable tasks
    ledger.py      Opaque ledger value types + RpcClient protocol
"""

from tessera.core.errors import (
    AccountNotFoundError,
    ErrorCategory,
    ErrorContext,
    ExpectedSignerError,
    OperationCanceledError,
    OperationHandlerMissingError,
    PluginNotInstalledError,
    RpcError,
    SdkError,
    TaskIsAlreadyRunningError,
    TesseraError,
    is_cancellation,
)
from tessera.core.ledger import (
    AccountMeta,
    ConfirmOptions,
    Instruction,
    InstructionWithSigners,
    PublicKey,
    RawAccount,
    RpcClient,
    SendAndConfirmResponse,
    Signer,
    Transaction,
    TransactionOptions,
)
from tessera.core.scope import Scope
from tessera.core.settings import TesseraSettings, get_settings
from tessera.core.task import Task, TaskStatus

__all__ = [
    # Errors
    "TesseraError",
    "SdkError",
    "RpcError",
    "ErrorCategory",
    "ErrorContext",
    "OperationHandlerMissingError",
    "OperationCanceledError",
    "TaskIsAlreadyRunningError",
    "AccountNotFoundError",
    "ExpectedSignerError",
    "PluginNotInstalledError",
    "is_cancellation",
    # Settings
    "TesseraSettings",
    "get_settings",
    # Scope / Task
    "Scope",
    "Task",
    "TaskStatus",
    # Ledger
    "PublicKey",
    "Signer",
    "AccountMeta",
    "Instruction",
    "InstructionWithSigners",
    "Transaction",
    "TransactionOptions",
    "ConfirmOptions",
    "SendAndConfirmResponse",
    "RawAccount",
    "RpcClient",
]
