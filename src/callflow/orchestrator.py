import logging
from dataclasses import dataclass, field
from enum import Enum

import httpx
from openai import APIError

from callflow.arguments import decode_arguments
from callflow.events import EmissionUnit, OutputSink
from callflow.exceptions import (
    CallflowError,
    MalformedArguments,
    ToolExecutionFailure,
    ToolLoopLimitExceeded,
)
from callflow.instrumentation import (
    completion_span,
    record_error,
    tool_span,
    turn_span,
)
from callflow.message import Turn, TurnRole
from callflow.provider import ModelProvider
from callflow.session import Session
from callflow.streaming import (
    FINISH_TOOL_CALLS,
    PAUSE_MARKER,
    PendingToolCall,
    TextChunker,
)
from callflow.tools import CALLER_PARAM, ToolRegistry, serialize_result

logger = logging.getLogger(__name__)

APOLOGY = "I'm sorry, I'm having trouble right now. • Could you please say that again?"


class StreamState(Enum):
    STREAMING_TEXT = "streaming_text"
    ACCUMULATING_TOOL_CALL = "accumulating_tool_call"
    DISPATCHING_TOOL = "dispatching_tool"
    DONE = "done"


@dataclass
class CompletionResult:
    """The outcome of one caller turn.

    ``tool_calls`` lists the tools dispatched, in order. ``aborted`` is
    set when a tool call was dropped because its arguments could not be
    decoded; ``final_turn`` is then ``None``.
    """

    final_turn: Turn | None = None
    tool_calls: list[str] = field(default_factory=list)
    passes: int = 0
    aborted: bool = False


class Orchestrator:
    """Drives the streamed completion and tool-call loop for one session.

    Each caller turn runs one or more completion passes. A pass streams
    text into ordered emission units and accumulates any requested tool
    call. When the model asks for a tool, the orchestrator runs it,
    records the result and starts the next pass; the turn ends at the
    first pass that finishes with plain text.

    The emission index lives on the instance, so it keeps counting
    across passes and turns. One instance serves exactly one session.

    Args:
        provider: Source of streamed completions.
        registry: Tools the model may call.
        session: Conversation context, owned by this orchestrator.
        sink: Receives emission units as they are flushed.
        model: Model name passed to the provider.
        pause_marker: Character that ends a speakable chunk.
        max_tool_rounds: Most tool calls one caller turn may chain.
    """

    def __init__(
        self,
        provider: ModelProvider,
        registry: ToolRegistry,
        session: Session,
        sink: OutputSink,
        model: str = "gpt-4o-2024-11-20",
        pause_marker: str = PAUSE_MARKER,
        max_tool_rounds: int = 10,
    ):
        self.provider = provider
        self.registry = registry
        self.session = session
        self.sink = sink
        self.model = model
        self.pause_marker = pause_marker
        self.max_tool_rounds = max_tool_rounds
        self.next_index = 0
        self.state = StreamState.STREAMING_TEXT

    @classmethod
    def from_settings(cls, settings, provider, registry, session, sink) -> "Orchestrator":
        return cls(
            provider, registry, session, sink,
            model=settings.model,
            pause_marker=settings.pause_marker,
            max_tool_rounds=settings.max_tool_rounds,
        )

    def set_caller_number(self, number: str) -> None:
        self.session.set_caller_number(number)

    def set_call_sid(self, call_sid: str) -> None:
        self.session.set_call_sid(call_sid)

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def _emit(self, text: str, interaction_count: int) -> None:
        unit = EmissionUnit(
            index=self.next_index, text=text,
            interaction_count=interaction_count,
        )
        self.next_index += 1
        self.sink.publish(unit)

    def _announce(self, text: str, interaction_count: int) -> None:
        self.sink.publish(EmissionUnit(
            index=None, text=text, interaction_count=interaction_count,
        ))

    # ------------------------------------------------------------------
    # Turn loop
    # ------------------------------------------------------------------

    async def completion(
        self,
        text,
        interaction_count: int,
        role: TurnRole = TurnRole.USER,
        name: str | None = None,
    ) -> CompletionResult:
        """Handle one caller turn and return once the model is done.

        Raises:
            UnresolvedTool: The model requested an unknown tool.
            ToolExecutionFailure: A tool raised.
            ToolLoopLimitExceeded: Too many chained tool calls.
        """
        self.session.append(role, text, name=name)
        result = CompletionResult()
        async with turn_span(self.session.session_id, interaction_count) as span:
            try:
                while await self._run_pass(interaction_count, result):
                    pass
            except Exception as e:
                self.state = StreamState.DONE
                record_error(span, e)
                raise
        logger.info(f"Session {self.session.session_id} context length: {len(self.session)}")
        return result

    async def respond_safely(self, text, interaction_count: int) -> CompletionResult | None:
        """Like :meth:`completion`, but speak a generic apology instead of
        raising when the turn fails."""
        try:
            return await self.completion(text, interaction_count)
        except (APIError, httpx.HTTPError, OSError, CallflowError) as e:
            logger.error(f"Turn {interaction_count} failed: {e}")
            self._emit(APOLOGY, interaction_count)
            return None

    async def _run_pass(self, interaction_count: int, result: CompletionResult) -> bool:
        """Stream one completion. Return ``True`` if a tool ran and
        another pass is needed."""
        self.state = StreamState.STREAMING_TEXT
        pending = PendingToolCall()
        chunker = TextChunker(self.pause_marker)
        complete_response = ""
        finish_reason = None
        result.passes += 1

        async with completion_span(self.model, result.passes):
            async for chunk in self.provider.stream_complete(
                model=self.model,
                messages=self.session.snapshot(),
                tools=self.registry.schemas() or None,
            ):
                if chunk.tool_call_fragments:
                    self.state = StreamState.ACCUMULATING_TOOL_CALL
                    for fragment in chunk.tool_call_fragments:
                        pending.feed(fragment)
                if chunk.content_delta:
                    complete_response += chunk.content_delta
                    piece = chunker.feed(chunk.content_delta)
                    if piece is not None:
                        self._emit(piece, interaction_count)
                if chunk.finish_reason:
                    finish_reason = chunk.finish_reason

        leftover = chunker.flush()
        if leftover is not None:
            self._emit(leftover, interaction_count)

        if finish_reason == FINISH_TOOL_CALLS or pending.requested:
            return await self._dispatch(pending, interaction_count, result)

        if finish_reason is None:
            logger.warning("Completion stream ended without a finish reason")
        result.final_turn = self.session.append(TurnRole.ASSISTANT, complete_response)
        self.state = StreamState.DONE
        return False

    # ------------------------------------------------------------------
    # Tool dispatch
    # ------------------------------------------------------------------

    async def _dispatch(
        self, pending: PendingToolCall, interaction_count: int,
        result: CompletionResult,
    ) -> bool:
        self.state = StreamState.DISPATCHING_TOOL
        tool_obj = self.registry.resolve(pending.name)

        try:
            args = decode_arguments(pending.arguments)
        except MalformedArguments as e:
            logger.error(f"Dropping call to {pending.name}: {e}")
            result.aborted = True
            self.state = StreamState.DONE
            return False

        if len(result.tool_calls) >= self.max_tool_rounds:
            raise ToolLoopLimitExceeded(self.max_tool_rounds)

        if tool_obj.requires_caller and self.session.caller_number:
            args[CALLER_PARAM] = self.session.caller_number

        if tool_obj.say:
            self._announce(tool_obj.say, interaction_count)

        logger.info(f"Calling {tool_obj.name} with {args}")
        async with tool_span(tool_obj.name) as span:
            try:
                output = await tool_obj.invoke(args)
            except ToolExecutionFailure as e:
                record_error(span, e)
                raise

        content = serialize_result(output)
        self.session.append(TurnRole.FUNCTION, content, name=tool_obj.name)
        result.tool_calls.append(tool_obj.name)
        return True
