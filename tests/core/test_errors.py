"""
Tests for tessera.core.errors module.

Tests cover:
- Error categories per class
- Context attachment and serialization
- Cause chaining
- Messages of the recognizable SDK conditions
"""

import pytest

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


class TestErrorContext:
    """Tests for ErrorContext."""

    def test_to_dict_skips_none(self):
        """Only populated fields are serialized."""
        ctx = ErrorContext(operation="FindAccountByAddress", address="abc")

        assert ctx.to_dict() == {"operation": "FindAccountByAddress", "address": "abc"}

    def test_metadata_is_flattened(self):
        """Metadata entries sit next to the named fields."""
        ctx = ErrorContext(task_id="t1", metadata={"chunk": 3})

        assert ctx.to_dict() == {"task_id": "t1", "chunk": 3}


class TestTesseraError:
    """Tests for the base error."""

    def test_default_category(self):
        """The base error is INTERNAL unless told otherwise."""
        assert TesseraError("x").category == ErrorCategory.INTERNAL
        assert TesseraError("x", category=ErrorCategory.RPC).category == ErrorCategory.RPC

    def test_with_context_sets_fields_and_metadata(self):
        """Known keys go to fields, unknown keys to metadata."""
        error = TesseraError("x").with_context(operation="Op", retries=2)

        assert error.context.operation == "Op"
        assert error.context.metadata == {"retries": 2}

    def test_cause_is_chained(self):
        """cause is exposed both as attribute and as __cause__."""
        root = ConnectionError("reset")
        error = RpcError("send failed", cause=root)

        assert error.cause is root
        assert error.__cause__ is root
        assert error.to_dict()["cause"] == "reset"

    def test_to_dict(self):
        """Serialization carries type, message, category and context."""
        error = AccountNotFoundError("addr1")

        data = error.to_dict()

        assert data["error_type"] == "AccountNotFoundError"
        assert data["category"] == "ACCOUNT"
        assert data["context"] == {"address": "addr1"}

    def test_repr(self):
        """repr names the class and category."""
        assert repr(RpcError("down")) == "RpcError('down', category=RPC)"


class TestSdkErrors:
    """Tests for the recognizable SDK conditions."""

    @pytest.mark.parametrize(
        "error,category",
        [
            (OperationHandlerMissingError("Op"), ErrorCategory.DISPATCH),
            (OperationCanceledError(), ErrorCategory.CANCELLATION),
            (TaskIsAlreadyRunningError(), ErrorCategory.TASK),
            (AccountNotFoundError("addr"), ErrorCategory.ACCOUNT),
            (ExpectedSignerError("payer", "str"), ErrorCategory.BUILDER),
            (PluginNotInstalledError("SystemPlugin"), ErrorCategory.CONFIG),
        ],
    )
    def test_categories(self, error, category):
        """Every SDK error is an SdkError with its own category."""
        assert isinstance(error, SdkError)
        assert error.category == category

    def test_handler_missing_names_operation(self):
        """The message and context name the missing operation."""
        error = OperationHandlerMissingError("TransferLamports")

        assert error.operation_name == "TransferLamports"
        assert "[TransferLamports]" in str(error)
        assert error.context.operation == "TransferLamports"

    def test_canceled_message(self):
        """The reason is appended when given."""
        assert str(OperationCanceledError()) == "The operation was canceled."
        assert str(OperationCanceledError("timeout")) == "The operation was canceled: timeout"

    def test_account_not_found_with_type_and_solution(self):
        """Account type and solution enrich the message."""
        error = AccountNotFoundError("addr", account_type="Metadata", solution="Mint it first.")

        assert str(error) == (
            "The account of type [Metadata] was not found at the provided address [addr]. Mint it first."
        )

    def test_is_cancellation(self):
        """Only OperationCanceledError is the cancellation condition."""
        assert is_cancellation(OperationCanceledError()) is True
        assert is_cancellation(RuntimeError()) is False
        assert is_cancellation(None) is False
