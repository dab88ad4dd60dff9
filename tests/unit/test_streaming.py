"""Unit tests for streaming primitives."""

from callflow.streaming import PendingToolCall, TextChunker, ToolCallFragment


class TestPendingToolCall:
    def test_arguments_accumulated_across_fragments(self):
        pending = PendingToolCall()
        pending.feed(ToolCallFragment(name="echo", arguments_delta='{"te'))
        pending.feed(ToolCallFragment(arguments_delta='xt": "hi"}'))

        assert pending.name == "echo"
        assert pending.arguments == '{"text": "hi"}'

    def test_first_non_empty_name_wins(self):
        pending = PendingToolCall()
        pending.feed(ToolCallFragment(name=""))
        pending.feed(ToolCallFragment(name="first"))
        pending.feed(ToolCallFragment(name="second"))

        assert pending.name == "first"

    def test_empty_name_never_overwrites(self):
        pending = PendingToolCall()
        pending.feed(ToolCallFragment(name="book"))
        pending.feed(ToolCallFragment(name="", arguments_delta="{}"))
        pending.feed(ToolCallFragment(name=None))

        assert pending.name == "book"

    def test_requested(self):
        pending = PendingToolCall()
        assert not pending.requested
        pending.feed(ToolCallFragment(arguments_delta="{"))
        assert not pending.requested
        pending.feed(ToolCallFragment(name="x"))
        assert pending.requested


class TestTextChunker:
    def test_flushes_at_marker(self):
        chunker = TextChunker()
        assert chunker.feed("Hello there") is None
        assert chunker.feed(" friend •") == "Hello there friend •"
        assert chunker.pending == ""

    def test_trailing_whitespace_after_marker(self):
        chunker = TextChunker()
        assert chunker.feed("One • ") == "One • "

    def test_marker_mid_chunk_does_not_flush(self):
        chunker = TextChunker()
        assert chunker.feed("One • two") is None
        assert chunker.pending == "One • two"

    def test_custom_marker(self):
        chunker = TextChunker(marker="|")
        assert chunker.feed("a |") == "a |"

    def test_flush_empty_is_none(self):
        assert TextChunker().flush() is None

    def test_flush_returns_remainder(self):
        chunker = TextChunker()
        chunker.feed("tail")
        assert chunker.flush() == "tail"
        assert chunker.flush() is None
