"""OpenAI-compatible provider (OpenAI, Gemini, GLM, Groq, DeepSeek, Ollama, ...)"""

from typing import AsyncIterator
import logging

import openai

from .base import Provider, StreamDelta, Usage
from .registry import ProviderSpec

logger = logging.getLogger(__name__)


def convert_tools(tools: list[dict] | None) -> list[dict] | None:
    """Convert internal tool format to OpenAI format"""
    if not tools:
        return None

    return [
        {
            "type": "function",
            "function": {
                "name": t["name"],
                "description": t["description"],
                "parameters": t["parameters"],
            },
        }
        for t in tools
    ]


def _usage(raw) -> Usage | None:
    if raw is None:
        return None
    return Usage(
        prompt_tokens=raw.prompt_tokens or 0,
        completion_tokens=raw.completion_tokens or 0,
    )


class OpenAICompatibleProvider(Provider):
    """Chat completions provider for any OpenAI-compatible endpoint"""

    def __init__(
        self,
        spec: ProviderSpec,
        model: str,
        api_key: str | None = None,
        client: openai.AsyncOpenAI | None = None,
    ):
        self.spec = spec
        self.model = model
        self.client = client or openai.AsyncOpenAI(
            # The SDK refuses to start without a key; local servers ignore it
            api_key=api_key or "not-needed",
            base_url=spec.base_url,
        )

    def _request_kwargs(self, messages: list[dict], tools: list[dict] | None, stream: bool) -> dict:
        kwargs = {
            "model": self.model,
            "messages": messages,
            "stream": stream,
        }
        openai_tools = convert_tools(tools)
        if openai_tools:
            kwargs["tools"] = openai_tools
            kwargs["tool_choice"] = "auto"
        if stream and self.spec.stream_usage:
            kwargs["stream_options"] = {"include_usage": True}
        return kwargs

    async def stream(
        self,
        messages: list[dict],
        tools: list[dict] | None = None,
        stream: bool = True,
    ) -> AsyncIterator[StreamDelta]:
        """Stream a response from the chat completions endpoint"""

        logger.info(f"Making {self.spec.id} API call with model: {self.model}")
        logger.debug(f"Messages count: {len(messages)}, Tools: {len(tools) if tools else 0}")

        kwargs = self._request_kwargs(messages, tools, stream)

        if not stream:
            async for delta in self._complete(kwargs):
                yield delta
            return

        response = await self.client.chat.completions.create(**kwargs)
        finish_reason = None

        async for chunk in response:
            usage = _usage(getattr(chunk, "usage", None))
            if usage:
                yield StreamDelta(type="usage", usage=usage)

            if not chunk.choices:
                continue
            choice = chunk.choices[0]
            delta = choice.delta

            if delta and delta.content:
                yield StreamDelta.text(delta.content)

            if delta and delta.tool_calls:
                for position, tc in enumerate(delta.tool_calls):
                    yield StreamDelta.tool_call(
                        index=tc.index if tc.index is not None else position,
                        id=tc.id,
                        name=tc.function.name if tc.function else None,
                        arguments=tc.function.arguments if tc.function else None,
                    )

            if choice.finish_reason:
                finish_reason = choice.finish_reason

        yield StreamDelta.finish(finish_reason)

    async def _complete(self, kwargs: dict) -> AsyncIterator[StreamDelta]:
        """Non-streaming request, replayed as deltas"""
        response = await self.client.chat.completions.create(**kwargs)

        usage = _usage(response.usage)
        if usage:
            yield StreamDelta(type="usage", usage=usage)

        if not response.choices:
            yield StreamDelta.finish(None)
            return

        choice = response.choices[0]
        message = choice.message
        if message.content:
            yield StreamDelta.text(message.content)
        for index, tc in enumerate(message.tool_calls or []):
            yield StreamDelta.tool_call(
                index=index,
                id=tc.id,
                name=tc.function.name,
                arguments=tc.function.arguments,
            )
        yield StreamDelta.finish(choice.finish_reason)
