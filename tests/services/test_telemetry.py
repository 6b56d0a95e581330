"""Tests for telemetry primitives: Span, trace_span, @traced."""

from __future__ import annotations

import time

import pytest

from vetcall.services.result import DispatchFailure, DispatchResult
from vetcall.services.telemetry import (
    Span,
    _current_span,
    disable_telemetry,
    enable_telemetry,
    get_current_span,
    trace_span,
    traced,
)

# ── Span ─────────────────────────────────────────────────────────────


class TestSpan:
    def test_duration_before_end_is_zero(self) -> None:
        assert Span(name="test").duration_ms == 0.0

    def test_duration_after_end(self) -> None:
        span = Span(name="test")
        time.sleep(0.002)
        span.end()
        assert span.duration_ms > 0

    def test_to_dict_minimal(self) -> None:
        span = Span(name="root")
        span.end()
        d = span.to_dict()
        assert d["name"] == "root"
        assert "children" not in d
        assert "annotations" not in d

    def test_annotate(self) -> None:
        span = Span(name="validate")
        span.annotate("failures", 2)
        span.end()
        assert span.to_dict()["annotations"] == {"failures": 2}


# ── trace_span ───────────────────────────────────────────────────────


class TestTraceSpan:
    def test_disabled_yields_none(self) -> None:
        with trace_span("resolve") as span:
            assert span is None

    def test_no_root_yields_none(self) -> None:
        enable_telemetry()
        with trace_span("resolve") as span:
            assert span is None

    def test_nested_under_root(self) -> None:
        enable_telemetry()
        root = Span(name="root")
        token = _current_span.set(root)
        try:
            with trace_span("a"):
                with trace_span("b") as inner:
                    assert get_current_span() is inner
            assert [c.name for c in root.children] == ["a"]
            assert [c.name for c in root.children[0].children] == ["b"]
            assert root.children[0].end_time is not None
        finally:
            _current_span.reset(token)


# ── @traced ──────────────────────────────────────────────────────────


class TestTracedDecorator:
    def test_noop_when_disabled(self) -> None:
        @traced
        def run() -> DispatchResult:
            return DispatchResult(ok=True, op="test")

        assert run().meta is None

    def test_injects_meta_and_keeps_existing(self) -> None:
        @traced
        def run() -> DispatchResult:
            with trace_span("stage"):
                pass
            return DispatchResult(ok=True, op="test", meta={"existing": "data"})

        enable_telemetry()
        result = run()
        assert result.meta is not None
        assert result.meta["existing"] == "data"
        tree = result.meta["telemetry"]
        assert tree["name"].endswith("<locals>.run")
        assert [c["name"] for c in tree["children"]] == ["stage"]

    def test_error_result_gets_telemetry(self) -> None:
        @traced
        def run() -> DispatchResult:
            return DispatchResult(
                ok=False,
                op="test",
                error=DispatchFailure(code="NOT_FOUND", message="Method not found: x"),
            )

        enable_telemetry()
        result = run()
        assert result.meta is not None
        assert "telemetry" in result.meta

    def test_other_return_types_pass_through(self) -> None:
        @traced
        def run() -> str:
            return "hello"

        enable_telemetry()
        assert run() == "hello"

    def test_exception_propagates_and_resets_span(self) -> None:
        @traced
        def run() -> DispatchResult:
            raise ValueError("boom")

        enable_telemetry()
        with pytest.raises(ValueError, match="boom"):
            run()
        assert _current_span.get() is None


class TestGetCurrentSpan:
    def test_none_when_disabled(self) -> None:
        root = Span(name="root")
        token = _current_span.set(root)
        try:
            assert get_current_span() is None
        finally:
            _current_span.reset(token)

    def test_returns_active_span(self) -> None:
        enable_telemetry()
        root = Span(name="root")
        token = _current_span.set(root)
        try:
            assert get_current_span() is root
        finally:
            _current_span.reset(token)
            disable_telemetry()
