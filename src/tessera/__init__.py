"""
Tessera - operation dispatch, cancellation and transaction assembly for ledger SDKs.

Quick start:
    from tessera import Tessera, Scope
    from tessera.plugins import SystemPlugin, TransferLamportsInput

    client = Tessera(rpc, identity=wallet).use(SystemPlugin())
    output = await client.system().transfer(TransferLamportsInput(to=bob, lamports=5_000))
"""

from tessera.client import Plugin, Tessera
from tessera.core import (
    OperationCanceledError,
    OperationHandlerMissingError,
    Scope,
    SdkError,
    Task,
    TaskIsAlreadyRunningError,
    TaskStatus,
    TesseraError,
    TesseraSettings,
)
from tessera.framework import (
    ConfirmedTransaction,
    GmaBuilder,
    Operation,
    OperationOptions,
    OperationScope,
    TransactionBuilder,
    use_operation,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Tessera",
    "Plugin",
    "Scope",
    "Task",
    "TaskStatus",
    "TesseraSettings",
    "TesseraError",
    "SdkError",
    "OperationCanceledError",
    "OperationHandlerMissingError",
    "TaskIsAlreadyRunningError",
    "Operation",
    "OperationOptions",
    "OperationScope",
    "use_operation",
    "TransactionBuilder",
    "ConfirmedTransaction",
    "GmaBuilder",
]
