"""Tests for core logging timing utilities.

Covers TimingResult, timed_block, log_step and log_timing.
"""

from __future__ import annotations

import time

import pytest
from structlog.testing import capture_logs

from tessera.core.logging import get_context, push_context
from tessera.core.logging.timing import (
    TimingResult,
    _generate_span_id,
    log_step,
    log_timing,
    timed_block,
)


# ── _generate_span_id ────────────────────────────────────────


class TestGenerateSpanId:
    def test_length(self):
        sid = _generate_span_id()
        assert len(sid) == 8

    def test_hex_chars(self):
        sid = _generate_span_id()
        int(sid, 16)  # Raises if not hex

    def test_unique(self):
        assert _generate_span_id() != _generate_span_id()


# ── TimingResult ─────────────────────────────────────────────


class TestTimingResult:
    def test_stop_sets_duration(self):
        tr = TimingResult(step="test")
        time.sleep(0.01)
        tr.stop()
        assert tr.duration_seconds > 0
        assert tr.duration_ms > 0

    def test_add_metric(self):
        tr = TimingResult(step="test")
        tr.add_metric("instructions", 3).add_metric("signers", 2)
        tr.stop()
        d = tr.to_log_dict()
        assert d["instructions"] == 3
        assert d["signers"] == 2

    def test_parent_span_only_when_set(self):
        assert "parent_span_id" not in TimingResult(step="a").stop().to_log_dict()
        assert TimingResult(step="a", parent_span_id="p").stop().to_log_dict()["parent_span_id"] == "p"

    def test_to_error_dict(self):
        tr = TimingResult(step="test")
        tr.set_error(RuntimeError("fail"))
        tr.stop()
        d = tr.to_error_dict()
        assert d["status"] == "error"
        assert d["error_type"] == "RuntimeError"
        assert d["error_message"] == "fail"


# ── timed_block ──────────────────────────────────────────────


class TestTimedBlock:
    def test_yields_timing_result(self):
        with timed_block("test-block") as tr:
            time.sleep(0.01)
        assert isinstance(tr, TimingResult)
        assert tr.ended_at is not None
        assert tr.duration_ms > 0

    def test_stops_on_error(self):
        with pytest.raises(ValueError):
            with timed_block("error-block") as tr:
                raise ValueError("expected")
        assert tr.ended_at is not None

    def test_parent_span_from_context(self):
        token = push_context(span_id="outer")
        try:
            with timed_block("inner") as tr:
                pass
        finally:
            token.restore()
        assert tr.parent_span_id == "outer"


# ── log_step ─────────────────────────────────────────────────


class TestLogStep:
    def test_logs_start_and_end(self):
        with capture_logs() as logs:
            with log_step("transaction.send", instructions=2) as tr:
                pass

        events = [entry["event"] for entry in logs]
        assert events == ["transaction.send.start", "transaction.send.end"]
        assert logs[1]["instructions"] == 2
        assert logs[1]["span_id"] == tr.span_id

    def test_skip_start(self):
        with capture_logs() as logs:
            with log_step("quiet", log_start=False):
                pass

        assert [entry["event"] for entry in logs] == ["quiet.end"]

    def test_error_logged_and_reraised(self):
        with capture_logs() as logs:
            with pytest.raises(RuntimeError):
                with log_step("error-step"):
                    raise RuntimeError("fail")

        error_entry = logs[-1]
        assert error_entry["event"] == "error-step.error"
        assert error_entry["error_type"] == "RuntimeError"
        assert "error-step.end" not in [entry["event"] for entry in logs]

    def test_context_pushed_and_restored(self):
        with log_step("outer") as tr:
            assert get_context().span_id == tr.span_id
            assert get_context().step == "outer"
        assert get_context().span_id is None
        assert get_context().step is None

    def test_nested_steps_link_spans(self):
        with log_step("outer") as outer:
            with log_step("inner") as inner:
                pass
        assert inner.parent_span_id == outer.span_id


# ── log_timing decorator ────────────────────────────────────


class TestLogTiming:
    def test_decorator_preserves_return(self):
        @log_timing("test-func")
        def add(a, b):
            return a + b

        assert add(1, 2) == 3
        assert add.__name__ == "add"

    def test_decorator_propagates_error(self):
        @log_timing("error-func")
        def fail():
            raise RuntimeError("decorated fail")

        with pytest.raises(RuntimeError, match="decorated fail"):
            fail()

    @pytest.mark.asyncio
    async def test_decorator_on_coroutine(self):
        @log_timing()
        async def fetch(n):
            return n * 2

        with capture_logs() as logs:
            assert await fetch(4) == 8

        assert logs[-1]["event"] == "fetch.end"
