"""Unit tests for the instrumentation module.

Tests use unittest.mock for OTel interactions. ``opentelemetry-api``
is a test dependency so ``SpanKind`` / ``StatusCode`` can be imported
directly for assertions.
"""

from unittest.mock import MagicMock, patch

import pytest
from opentelemetry.trace import SpanKind, StatusCode

import callflow.instrumentation as inst
from callflow.instrumentation import (
    completion_span,
    record_error,
    tool_span,
    turn_span,
    uninstrument,
)


@pytest.fixture(autouse=True)
def _reset_tracer():
    """Ensure _tracer is reset to None before and after each test."""
    inst._tracer = None
    yield
    inst._tracer = None


class TestInstrument:
    def test_raises_without_otel_installed(self):
        with patch("importlib.util.find_spec", return_value=None):
            with pytest.raises(ImportError, match="pip install"):
                inst.instrument()

    def test_sets_global_tracer(self):
        mock_tracer = MagicMock()
        mock_trace = MagicMock()
        mock_trace.get_tracer.return_value = mock_tracer
        mock_trace.NoOpTracer = type("NoOpTracer", (), {})

        with patch("importlib.util.find_spec", return_value=MagicMock()), \
                patch.dict("sys.modules", {
                    "opentelemetry": MagicMock(trace=mock_trace),
                    "opentelemetry.trace": mock_trace,
                }):
            inst.instrument(tracer_name="my-app")

        assert inst._tracer is mock_tracer
        mock_trace.get_tracer.assert_called_once_with("my-app")

    def test_uninstrument_clears_tracer(self):
        inst._tracer = MagicMock()
        uninstrument()
        assert inst._tracer is None


class TestSpansDisabled:
    @pytest.mark.asyncio
    async def test_spans_yield_none(self):
        async with turn_span("s1", 1) as span:
            assert span is None
        async with completion_span("m", 1) as span:
            assert span is None
        async with tool_span("bookService") as span:
            assert span is None

    def test_record_error_noop(self):
        record_error(None, RuntimeError("x"))


class TestSpansEnabled:
    def _tracer(self):
        tracer = MagicMock()
        span = MagicMock()
        tracer.start_as_current_span.return_value.__enter__.return_value = span
        inst._tracer = tracer
        return tracer, span

    @pytest.mark.asyncio
    async def test_turn_span(self):
        tracer, span = self._tracer()
        async with turn_span("s1", 4) as s:
            assert s is span
        name = tracer.start_as_current_span.call_args[0][0]
        attrs = tracer.start_as_current_span.call_args[1]["attributes"]
        assert name == "conversation_turn"
        assert attrs["gen_ai.conversation.id"] == "s1"
        assert attrs["callflow.interaction_count"] == 4

    @pytest.mark.asyncio
    async def test_completion_span_is_client_kind(self):
        tracer, _ = self._tracer()
        async with completion_span("gpt-4o", 2):
            pass
        kwargs = tracer.start_as_current_span.call_args[1]
        assert tracer.start_as_current_span.call_args[0][0] == "chat gpt-4o"
        assert kwargs["kind"] == SpanKind.CLIENT
        assert kwargs["attributes"]["callflow.pass"] == 2

    @pytest.mark.asyncio
    async def test_tool_span(self):
        tracer, _ = self._tracer()
        async with tool_span("bookService"):
            pass
        attrs = tracer.start_as_current_span.call_args[1]["attributes"]
        assert attrs["gen_ai.tool.name"] == "bookService"

    def test_record_error(self):
        span = MagicMock()
        error = ValueError("bad")
        record_error(span, error)

        span.set_status.assert_called_once_with(StatusCode.ERROR, "bad")
        span.record_exception.assert_called_once_with(error)
        span.set_attribute.assert_called_once_with("error.type", "ValueError")
