import logging
import os
from collections.abc import AsyncIterator

from openai import AsyncOpenAI

from callflow.streaming import StreamChunk, ToolCallFragment

logger = logging.getLogger(__name__)


class ModelProvider:
    """Source of streamed chat completions.

    Subclasses yield one :class:`StreamChunk` per increment, in delivery
    order. Transport errors are left to propagate.
    """

    async def stream_complete(
            self,
            model: str,
            messages: list[dict],
            tools: list[dict] | None = None,
    ) -> AsyncIterator[StreamChunk]:
        raise NotImplementedError
        yield  # pragma: no cover


def to_stream_chunk(chunk) -> StreamChunk | None:
    """Normalise an OpenAI ``ChatCompletionChunk``.

    Returns ``None`` for chunks without choices (e.g. usage-only chunks).
    """
    if not chunk.choices:
        return None
    choice = chunk.choices[0]
    delta = choice.delta
    fragments = None
    if delta is not None and delta.tool_calls:
        fragments = [
            ToolCallFragment(
                index=tc.index,
                call_id=tc.id,
                name=tc.function.name if tc.function else None,
                arguments_delta=tc.function.arguments if tc.function else None,
            )
            for tc in delta.tool_calls
        ]
    return StreamChunk(
        content_delta=delta.content if delta is not None else None,
        tool_call_fragments=fragments,
        finish_reason=choice.finish_reason,
    )


class OpenAICompatibleProvider(ModelProvider):
    """Streams from any endpoint that speaks the chat-completions API."""

    def __init__(self, base_url: str | None = None, api_key: str | None = "DUMMY",
                 max_retries: int = 2, timeout: float = 60.0):
        self.base_url = base_url
        self.client = AsyncOpenAI(
            base_url=base_url,
            api_key=api_key,
            max_retries=max_retries,
            timeout=timeout,
        )

    async def stream_complete(
            self,
            model: str,
            messages: list[dict],
            tools: list[dict] | None = None,
    ) -> AsyncIterator[StreamChunk]:
        kwargs = {}
        if tools:
            kwargs["tools"] = tools
        stream = await self.client.chat.completions.create(
            model=model,
            messages=messages,
            stream=True,
            **kwargs,
        )
        async for raw in stream:
            chunk = to_stream_chunk(raw)
            if chunk is not None:
                yield chunk


class OpenAIProvider(OpenAICompatibleProvider):

    def __init__(self, api_key: str | None = None):
        if not api_key:
            api_key = os.getenv("OPENAI_API_KEY")
        super().__init__(api_key=api_key)
