"""
Tessera Framework - Operation dispatch and transaction assembly.

This package provides:
- Operation values and constructors
- Per-client operation registry
- Dispatcher producing Tasks for operations
- Transaction and multi-account read builders
"""

from tessera.framework.builders import ConfirmedTransaction, GmaBuilder, TransactionBuilder
from tessera.framework.dispatcher import OperationDispatcher
from tessera.framework.operations import (
    Operation,
    OperationConstructor,
    OperationHandler,
    OperationOptions,
    OperationScope,
    use_operation,
)
from tessera.framework.registry import OperationRegistry

__all__ = [
    # Operations
    "Operation",
    "OperationConstructor",
    "OperationHandler",
    "OperationOptions",
    "OperationScope",
    "use_operation",
    # Registry / dispatch
    "OperationRegistry",
    "OperationDispatcher",
    # Builders
    "TransactionBuilder",
    "ConfirmedTransaction",
    "GmaBuilder",
]
