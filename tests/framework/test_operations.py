"""
Tests for tessera.framework.operations module.

Tests cover:
- Operation values and constructors
- OperationScope linkage to its parent
"""

import dataclasses

import pytest

from tessera.core.ledger import ConfirmOptions
from tessera.core.scope import Scope
from tessera.framework.operations import Operation, OperationOptions, OperationScope, use_operation


class TestOperation:
    """Tests for operation values."""

    def test_constructor_builds_operation(self):
        """A constructor stamps its name onto the input."""
        find_thing = use_operation("FindThing")

        operation = find_thing({"id": 1})

        assert find_thing.name == "FindThing"
        assert operation == Operation(name="FindThing", input={"id": 1})

    def test_operation_is_immutable(self):
        """Operation values are frozen."""
        operation = use_operation("FindThing")("x")

        with pytest.raises(dataclasses.FrozenInstanceError):
            operation.name = "Other"  # type: ignore[misc]

    def test_options_default_to_none(self):
        """OperationOptions leaves every field unresolved by default."""
        options = OperationOptions()

        assert options.payer is None
        assert options.commitment is None
        assert options.confirm_options is None


class TestOperationScope:
    """Tests for OperationScope."""

    def test_follows_parent_cancellation(self, alice):
        """An operation scope is a child of the scope it was built from."""
        parent = Scope()
        scope = OperationScope(
            parent,
            payer=alice,
            commitment="finalized",
            confirm_options=ConfirmOptions(commitment="finalized"),
        )

        parent.cancel()

        assert scope.is_canceled()
        assert scope.payer is alice
        assert scope.commitment == "finalized"
