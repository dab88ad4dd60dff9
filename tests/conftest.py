import json

import pytest

from callflow.events import CollectingSink
from callflow.orchestrator import Orchestrator
from callflow.provider import ModelProvider
from callflow.session import Session
from callflow.streaming import StreamChunk, ToolCallFragment
from callflow.tools import ToolRegistry, tool


# ---------------------------------------------------------------------------
# Mock provider
# ---------------------------------------------------------------------------

class MockProvider(ModelProvider):
    """Provider that replays pre-queued streams. No network calls."""

    def __init__(self):
        self.streams: list[list[StreamChunk]] = []
        self.call_log: list[dict] = []

    async def stream_complete(self, model, messages, tools=None):
        self.call_log.append({
            "model": model, "messages": list(messages), "tools": tools,
        })
        for chunk in self.streams.pop(0):
            yield chunk


class FailingProvider(ModelProvider):
    """Provider whose stream raises after yielding *chunks*."""

    def __init__(self, error: Exception, chunks: list[StreamChunk] | None = None):
        self.error = error
        self.chunks = chunks or []

    async def stream_complete(self, model, messages, tools=None):
        for chunk in self.chunks:
            yield chunk
        raise self.error


# ---------------------------------------------------------------------------
# Stream builder helpers
# ---------------------------------------------------------------------------

def make_text_stream(*pieces: str) -> list[StreamChunk]:
    """Stream of text deltas ending with ``finish_reason='stop'``."""
    chunks = [StreamChunk(content_delta=p) for p in pieces]
    chunks.append(StreamChunk(finish_reason="stop"))
    return chunks


def make_tool_call_stream(
    name: str,
    arguments: str | dict,
    splits: int = 1,
) -> list[StreamChunk]:
    """Stream requesting *name* with *arguments* cut into *splits* pieces.

    The name arrives on the first fragment only; later fragments carry an
    empty name, as the OpenAI API streams them.
    """
    if isinstance(arguments, dict):
        arguments = json.dumps(arguments)
    size = max(1, -(-len(arguments) // splits))
    pieces = [arguments[i:i + size] for i in range(0, len(arguments), size)] or [""]
    chunks = []
    for i, piece in enumerate(pieces):
        chunks.append(StreamChunk(tool_call_fragments=[ToolCallFragment(
            index=0,
            call_id="call_1" if i == 0 else None,
            name=name if i == 0 else "",
            arguments_delta=piece,
        )]))
    chunks.append(StreamChunk(finish_reason="tool_calls"))
    return chunks


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------

@tool(say="One moment while I look that up.")
def echo(text: str):
    """Echo text back."""
    return text


@tool(say="Let me book that for you.", requires_caller=True)
async def book(booking_time: str, callerNumber: str | None = None):
    """Book a service.

    Args:
        booking_time: When to book.
    """
    return {"status": "success", "message": f"Booked {booking_time} for {callerNumber}"}


@pytest.fixture
def mock_provider():
    return MockProvider()


@pytest.fixture
def sink():
    return CollectingSink()


@pytest.fixture
def session():
    return Session.seeded("You are helpful.", "Hello • how can I help?", session_id="s1")


@pytest.fixture
def registry():
    return ToolRegistry([echo, book])


@pytest.fixture
def make_orchestrator(mock_provider, registry, session, sink):
    """Factory fixture wiring an orchestrator to the mock provider."""
    def _make(**kwargs):
        return Orchestrator(
            provider=kwargs.pop("provider", mock_provider),
            registry=kwargs.pop("registry", registry),
            session=kwargs.pop("session", session),
            sink=kwargs.pop("sink", sink),
            model="mock-model",
            **kwargs,
        )
    return _make
