"""Operation values, constructors and handler types."""

from tessera.framework.operations.base import (
    Operation,
    OperationConstructor,
    OperationHandler,
    OperationOptions,
    OperationScope,
    use_operation,
)

__all__ = [
    "Operation",
    "OperationConstructor",
    "OperationHandler",
    "OperationOptions",
    "OperationScope",
    "use_operation",
]
