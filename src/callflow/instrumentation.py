"""Optional OpenTelemetry instrumentation for callflow.

Call ``callflow.instrument()`` once at startup to enable tracing.
Requires ``opentelemetry-api`` to be installed; the orchestrator
behaves identically without it.
"""

import importlib.util
import logging
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)

_tracer = None


def instrument(*, tracer_name: str = "callflow") -> None:
    """Enable OpenTelemetry tracing for conversation turns.

    Call once at startup, after configuring your TracerProvider.
    Requires ``opentelemetry-api``: ``pip install callflow[otel]``

    Args:
        tracer_name: Name passed to ``trace.get_tracer()``.

    Raises:
        ImportError: If ``opentelemetry-api`` is not installed.
    """
    global _tracer
    if importlib.util.find_spec("opentelemetry.trace") is None:
        raise ImportError(
            "opentelemetry-api is required for instrumentation. "
            "Install it with: pip install callflow[otel]"
        )
    from opentelemetry import trace
    _tracer = trace.get_tracer(tracer_name)
    if isinstance(_tracer, trace.NoOpTracer):
        logger.info(
            "No TracerProvider configured, spans will be "
            "discarded. Set up a TracerProvider to export "
            "traces."
        )
    else:
        logger.info("Callflow instrumentation enabled")


def uninstrument() -> None:
    """Disable OpenTelemetry tracing."""
    global _tracer
    _tracer = None


@asynccontextmanager
async def turn_span(session_id: str, interaction_count: int):
    """Wrap one caller turn, including every chained tool pass."""
    if _tracer is None:
        yield None
        return
    with _tracer.start_as_current_span(
        "conversation_turn",
        attributes={
            "gen_ai.operation.name": "invoke_agent",
            "gen_ai.conversation.id": session_id,
            "callflow.interaction_count": interaction_count,
        },
    ) as span:
        yield span


@asynccontextmanager
async def completion_span(model: str, pass_number: int):
    """Wrap one streamed completion pass in a ``chat`` span."""
    if _tracer is None:
        yield None
        return
    from opentelemetry.trace import SpanKind

    with _tracer.start_as_current_span(
        f"chat {model}",
        kind=SpanKind.CLIENT,
        attributes={
            "gen_ai.operation.name": "chat",
            "gen_ai.request.model": model,
            "callflow.pass": pass_number,
        },
    ) as span:
        yield span


@asynccontextmanager
async def tool_span(tool_name: str):
    """Wrap a tool execution in an ``execute_tool`` span."""
    if _tracer is None:
        yield None
        return
    with _tracer.start_as_current_span(
        f"execute_tool {tool_name}",
        attributes={
            "gen_ai.operation.name": "execute_tool",
            "gen_ai.tool.name": tool_name,
        },
    ) as span:
        yield span


def record_error(span, exception: BaseException) -> None:
    """Record an exception and set ERROR status on a span.

    No-ops when *span* is ``None`` (tracing disabled).
    """
    if span is None:
        return
    from opentelemetry.trace import StatusCode

    span.set_status(StatusCode.ERROR, str(exception))
    span.record_exception(exception)
    span.set_attribute(
        "error.type", type(exception).__qualname__
    )
