"""Anthropic provider implementation over the raw messages API"""

from typing import AsyncIterator
import json
import logging

import httpx

from .base import Provider, StreamDelta, Usage
from .registry import ProviderSpec
from zesbe.agent.errors import ProviderError

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"
MAX_TOKENS = 8192

# Anthropic stop reasons in chat-completions terms
STOP_REASONS = {
    "end_turn": "stop",
    "stop_sequence": "stop",
    "tool_use": "tool_calls",
    "max_tokens": "length",
}


def convert_messages(messages: list[dict]) -> tuple[str, list[dict]]:
    """Split out the system prompt and convert the rest to Anthropic format"""
    system_parts = []
    result = []
    pending_tool_results = []

    def flush():
        nonlocal pending_tool_results
        if pending_tool_results:
            result.append({"role": "user", "content": pending_tool_results})
            pending_tool_results = []

    for msg in messages:
        role = msg.get("role")

        if role == "system":
            system_parts.append(msg.get("content", ""))

        elif role == "user":
            flush()
            result.append({"role": "user", "content": msg.get("content", "")})

        elif role == "assistant":
            flush()
            content = []
            if msg.get("content"):
                content.append({"type": "text", "text": msg["content"]})

            for tc in msg.get("tool_calls") or []:
                args = tc.get("function", {}).get("arguments", "{}")
                try:
                    args = json.loads(args) if args else {}
                except json.JSONDecodeError:
                    args = {}
                content.append({
                    "type": "tool_use",
                    "id": tc.get("id", ""),
                    "name": tc.get("function", {}).get("name", ""),
                    "input": args if isinstance(args, dict) else {},
                })

            if content:
                result.append({"role": "assistant", "content": content})

        elif role == "tool":
            # Tool results travel inside a user message
            pending_tool_results.append({
                "type": "tool_result",
                "tool_use_id": msg.get("tool_call_id", ""),
                "content": msg.get("content", ""),
            })

    flush()
    return "\n\n".join(system_parts), result


def convert_tools(tools: list[dict] | None) -> list[dict] | None:
    """Convert internal tool format to Anthropic format"""
    if not tools:
        return None

    return [
        {
            "name": t["name"],
            "description": t["description"],
            "input_schema": t["parameters"],
        }
        for t in tools
    ]


def _error_message(body: bytes) -> str:
    try:
        error_json = json.loads(body)
        return error_json.get("error", {}).get("message", str(error_json))
    except (json.JSONDecodeError, AttributeError):
        return body.decode(errors="replace")[:500]


class AnthropicProvider(Provider):
    """Provider for Anthropic Claude models"""

    def __init__(
        self,
        spec: ProviderSpec,
        model: str,
        api_key: str | None = None,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.spec = spec
        self.model = model
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{(self.spec.base_url or 'https://api.anthropic.com/v1').rstrip('/')}/messages"

    def _headers(self) -> dict:
        if not self.api_key:
            raise ProviderError("No Anthropic API key found. Set ANTHROPIC_API_KEY or configure one.")
        return {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def _body(self, messages: list[dict], tools: list[dict] | None, stream: bool) -> dict:
        system, anthropic_messages = convert_messages(messages)
        body = {
            "model": self.model,
            "max_tokens": MAX_TOKENS,
            "messages": anthropic_messages,
            "stream": stream,
        }
        if system:
            body["system"] = system
        anthropic_tools = convert_tools(tools)
        if anthropic_tools:
            body["tools"] = anthropic_tools
        return body

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def stream(
        self,
        messages: list[dict],
        tools: list[dict] | None = None,
        stream: bool = True,
    ) -> AsyncIterator[StreamDelta]:
        """Stream a response from Claude"""

        logger.info(f"Making anthropic API call with model: {self.model}")
        headers = self._headers()
        body = self._body(messages, tools, stream)

        if not stream:
            async for delta in self._complete(headers, body):
                yield delta
            return

        usage = Usage()
        finish_reason = None

        async with self._client() as client:
            async with client.stream("POST", self.url, headers=headers, json=body) as response:
                if response.status_code != 200:
                    error_text = await response.aread()
                    raise ProviderError(
                        f"API error ({response.status_code}): {_error_message(error_text)}",
                        status_code=response.status_code,
                    )

                async for line in response.aiter_lines():
                    if not line.startswith("data: "):
                        continue

                    data = line[6:]
                    if data == "[DONE]":
                        break

                    try:
                        event = json.loads(data)
                    except json.JSONDecodeError:
                        continue

                    event_type = event.get("type")

                    if event_type == "message_start":
                        raw = event.get("message", {}).get("usage", {})
                        usage.prompt_tokens = raw.get("input_tokens", 0)

                    elif event_type == "content_block_start":
                        block = event.get("content_block", {})
                        if block.get("type") == "tool_use":
                            yield StreamDelta.tool_call(
                                index=event.get("index", 0),
                                id=block.get("id"),
                                name=block.get("name"),
                            )

                    elif event_type == "content_block_delta":
                        delta = event.get("delta", {})
                        if delta.get("type") == "text_delta":
                            yield StreamDelta.text(delta.get("text", ""))
                        elif delta.get("type") == "input_json_delta":
                            yield StreamDelta.tool_call(
                                index=event.get("index", 0),
                                arguments=delta.get("partial_json", ""),
                            )

                    elif event_type == "message_delta":
                        stop_reason = event.get("delta", {}).get("stop_reason")
                        if stop_reason:
                            finish_reason = STOP_REASONS.get(stop_reason, stop_reason)
                        usage.completion_tokens = event.get("usage", {}).get("output_tokens", 0)

                    elif event_type == "error":
                        error = event.get("error", {})
                        yield StreamDelta.finish("error", error=error.get("message", str(error)))
                        return

        yield StreamDelta(type="usage", usage=usage)
        yield StreamDelta.finish(finish_reason)

    async def _complete(self, headers: dict, body: dict) -> AsyncIterator[StreamDelta]:
        """Non-streaming request, replayed as deltas"""
        async with self._client() as client:
            response = await client.post(self.url, headers=headers, json=body)

        if response.status_code != 200:
            raise ProviderError(
                f"API error ({response.status_code}): {_error_message(response.content)}",
                status_code=response.status_code,
            )

        data = response.json()
        raw_usage = data.get("usage", {})
        yield StreamDelta(type="usage", usage=Usage(
            prompt_tokens=raw_usage.get("input_tokens", 0),
            completion_tokens=raw_usage.get("output_tokens", 0),
        ))

        for index, block in enumerate(data.get("content", [])):
            if block.get("type") == "text":
                yield StreamDelta.text(block.get("text", ""))
            elif block.get("type") == "tool_use":
                yield StreamDelta.tool_call(
                    index=index,
                    id=block.get("id"),
                    name=block.get("name"),
                    arguments=json.dumps(block.get("input", {})),
                )

        stop_reason = data.get("stop_reason")
        yield StreamDelta.finish(STOP_REASONS.get(stop_reason, stop_reason))
