"""Streaming primitives for provider responses.

Providers yield :class:`StreamChunk` objects. :class:`PendingToolCall`
reassembles a tool call whose name and arguments arrive in fragments,
and :class:`TextChunker` cuts plain text into speakable pieces at pause
markers.
"""

from __future__ import annotations

from dataclasses import dataclass

PAUSE_MARKER = "•"

FINISH_TOOL_CALLS = "tool_calls"
FINISH_STOP = "stop"


@dataclass
class ToolCallFragment:
    """A fragment of a tool call from a streaming chunk."""

    index: int = 0
    call_id: str | None = None
    name: str | None = None
    arguments_delta: str | None = None


@dataclass
class StreamChunk:
    """Normalised streaming chunk from any provider."""

    content_delta: str | None = None
    tool_call_fragments: list[ToolCallFragment] | None = None
    finish_reason: str | None = None


@dataclass
class PendingToolCall:
    """Accumulates the tool call requested during one completion pass.

    The first non-empty name wins; later names are ignored. Argument
    fragments are concatenated in arrival order.
    """

    name: str = ""
    arguments: str = ""

    def feed(self, fragment: ToolCallFragment) -> None:
        if fragment.name and not self.name:
            self.name = fragment.name
        if fragment.arguments_delta:
            self.arguments += fragment.arguments_delta

    @property
    def requested(self) -> bool:
        return bool(self.name)


class TextChunker:
    """Splits streamed text into chunks that end at a pause marker.

    Args:
        marker: Character the model inserts at natural pauses.
    """

    def __init__(self, marker: str = PAUSE_MARKER) -> None:
        self.marker = marker
        self._pending = ""

    @property
    def pending(self) -> str:
        return self._pending

    def feed(self, text: str) -> str | None:
        """Add *text*; return a finished chunk if it now ends at a pause."""
        self._pending += text
        if self._pending.strip().endswith(self.marker):
            return self.flush()
        return None

    def flush(self) -> str | None:
        """Return whatever is pending, or ``None`` when there is nothing."""
        chunk, self._pending = self._pending, ""
        return chunk or None
