"""Reduce an incremental response stream into one assistant turn"""

import logging
import time
from dataclasses import dataclass, field
from typing import AsyncIterable, Awaitable, Callable

from zesbe.agent.errors import EmptyResponseError, StreamError
from zesbe.agent.message import ToolCallRequest
from zesbe.provider.base import StreamDelta, StreamStatus, Usage

logger = logging.getLogger(__name__)


@dataclass
class AssistantTurn:
    """The assembled output of one model call"""
    text: str = ""
    tool_calls: list[ToolCallRequest] = field(default_factory=list)
    finish_reason: str | None = None
    status: StreamStatus = StreamStatus.OK
    usage: Usage | None = None


class StreamAccumulator:
    """Assembles text and tool calls from streamed fragments.

    Tool-call fragments are keyed by their stream index. The first fragment
    for an index allocates a call with a generated fallback id; later
    fragments overwrite the id and name and append to the arguments.
    """

    def __init__(self):
        self.text = ""
        self._calls: dict[int, ToolCallRequest] = {}
        self.finish_reason: str | None = None
        self.status = StreamStatus.OK
        self.error: str | None = None
        self.usage: Usage | None = None
        self.finished = False

    def feed(self, delta: StreamDelta) -> str | None:
        """Consume one delta, returning any text to forward for display"""
        if delta.type == "text":
            if not delta.content:
                return None
            self.text += delta.content
            return delta.content

        if delta.type == "tool_call_delta":
            call = self._calls.get(delta.index)
            if call is None:
                call = ToolCallRequest(
                    id=f"call_{int(time.time() * 1000)}_{delta.index}",
                    name="",
                    arguments_json="",
                )
                self._calls[delta.index] = call
            if delta.id:
                call.id = delta.id
            if delta.name:
                call.name = delta.name
            if delta.arguments:
                call.arguments_json += delta.arguments

        elif delta.type == "usage" and delta.usage:
            self.usage = delta.usage

        elif delta.type == "finish":
            self.finished = True
            self.finish_reason = delta.finish_reason
            self.status = delta.status
            self.error = delta.error

        return None

    @property
    def tool_calls(self) -> list[ToolCallRequest]:
        """Assembled calls in index order, without nameless fragments"""
        calls = []
        for index in sorted(self._calls):
            call = self._calls[index]
            if not call.name:
                logger.debug(f"Discarding tool call fragment {index} without a name")
                continue
            calls.append(call)
        return calls

    def result(self) -> AssistantTurn:
        """Finalize the turn, raising if the transport reported a failure"""
        if self.status == StreamStatus.ERROR:
            raise StreamError(self.error or f"Stream failed ({self.finish_reason or 'unknown'})")

        tool_calls = self.tool_calls
        if not self.text and not tool_calls and self.finish_reason != "stop":
            raise EmptyResponseError(self.finish_reason)

        if self.status == StreamStatus.TRUNCATED:
            logger.warning(f"Model output truncated ({self.finish_reason})")

        return AssistantTurn(
            text=self.text,
            tool_calls=tool_calls,
            finish_reason=self.finish_reason,
            status=self.status,
            usage=self.usage,
        )


async def accumulate(
    deltas: AsyncIterable[StreamDelta],
    on_text: Callable[[str], Awaitable[None] | None] | None = None,
) -> AssistantTurn:
    """Drain a delta stream, forwarding text fragments as they arrive"""
    accumulator = StreamAccumulator()
    async for delta in deltas:
        text = accumulator.feed(delta)
        if text and on_text is not None:
            maybe = on_text(text)
            if maybe is not None:
                await maybe
    return accumulator.result()
