"""Tests for core logging context management.

Covers LogContext, set/bind/push/clear and the structlog context processor.
"""

from __future__ import annotations

import asyncio

import pytest

from tessera.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    get_context,
    push_context,
    set_context,
)
from tessera.core.logging.context import add_context_processor


class TestLogContext:
    def test_to_dict_skips_defaults(self):
        ctx = LogContext(operation="TransferLamports")
        assert ctx.to_dict() == {"operation": "TransferLamports"}

    def test_attempt_included_when_not_first(self):
        assert LogContext(attempt=2).to_dict() == {"attempt": 2}

    def test_merge_ignores_none_and_unknown_keys(self):
        ctx = LogContext(operation="A", task_id="t1")
        merged = ctx.merge(operation=None, task_id="t2", unknown="x")
        assert merged.operation == "A"
        assert merged.task_id == "t2"
        assert ctx.task_id == "t1"


class TestContextVars:
    def test_set_replaces(self):
        set_context(operation="A", task_id="t1")
        set_context(operation="B")
        assert get_context().operation == "B"
        assert get_context().task_id is None

    def test_bind_merges(self):
        set_context(operation="A")
        bind_context(signature="sig")
        assert get_context().operation == "A"
        assert get_context().signature == "sig"

    def test_push_and_restore(self):
        set_context(operation="A")
        token = push_context(operation="B", step="inner")
        assert get_context().operation == "B"
        token.restore()
        assert get_context().operation == "A"
        assert get_context().step is None

    def test_clear(self):
        set_context(operation="A")
        clear_context()
        assert get_context() == LogContext()

    @pytest.mark.asyncio
    async def test_context_isolated_per_asyncio_task(self):
        """A context pushed inside one asyncio task does not leak into another."""

        async def worker(name):
            push_context(operation=name)
            await asyncio.sleep(0)
            return get_context().operation

        results = await asyncio.gather(worker("A"), worker("B"))

        assert results == ["A", "B"]
        assert get_context().operation is None


class TestContextProcessor:
    def test_adds_context(self):
        set_context(operation="Op", task_id="t1")
        event = add_context_processor(None, "info", {"event": "x"})
        assert event == {"event": "x", "operation": "Op", "task_id": "t1"}

    def test_explicit_keys_win(self):
        set_context(operation="Op")
        event = add_context_processor(None, "info", {"event": "x", "operation": "Explicit"})
        assert event["operation"] == "Explicit"
