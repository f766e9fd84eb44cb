"""Provider abstraction for LLM APIs"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Literal


class StreamStatus(str, Enum):
    """Terminal status reported by a transport at the end of a response"""
    OK = "ok"
    ERROR = "error"
    TRUNCATED = "truncated"


_FINISH_STATUS = {
    "stop": StreamStatus.OK,
    "tool_calls": StreamStatus.OK,
    "function_call": StreamStatus.OK,
    "end_turn": StreamStatus.OK,
    "tool_use": StreamStatus.OK,
    "stop_sequence": StreamStatus.OK,
    "length": StreamStatus.TRUNCATED,
    "max_tokens": StreamStatus.TRUNCATED,
    "content_filter": StreamStatus.ERROR,
    "error": StreamStatus.ERROR,
}


def status_for_finish_reason(finish_reason: str | None) -> StreamStatus:
    """Map a provider finish reason to a terminal status.

    Unknown or missing reasons are treated as OK; an empty response with such
    a reason is still rejected by the accumulator.
    """
    if finish_reason is None:
        return StreamStatus.OK
    return _FINISH_STATUS.get(finish_reason, StreamStatus.OK)


@dataclass
class Usage:
    prompt_tokens: int = 0
    completion_tokens: int = 0


@dataclass
class StreamDelta:
    """One incremental event of a model response"""
    type: Literal["text", "tool_call_delta", "usage", "finish"]
    content: str = ""
    # tool_call_delta
    index: int = 0
    id: str | None = None
    name: str | None = None
    arguments: str | None = None
    # usage
    usage: Usage | None = None
    # finish
    finish_reason: str | None = None
    status: StreamStatus = StreamStatus.OK
    error: str | None = None

    @classmethod
    def text(cls, content: str) -> "StreamDelta":
        return cls(type="text", content=content)

    @classmethod
    def tool_call(
        cls,
        index: int,
        id: str | None = None,
        name: str | None = None,
        arguments: str | None = None,
    ) -> "StreamDelta":
        return cls(type="tool_call_delta", index=index, id=id, name=name, arguments=arguments)

    @classmethod
    def finish(cls, finish_reason: str | None, error: str | None = None) -> "StreamDelta":
        status = StreamStatus.ERROR if error else status_for_finish_reason(finish_reason)
        return cls(type="finish", finish_reason=finish_reason, status=status, error=error)


class Provider(ABC):
    """Base class for LLM providers"""

    model: str

    @abstractmethod
    def stream(
        self,
        messages: list[dict],
        tools: list[dict] | None = None,
        stream: bool = True,
    ) -> AsyncIterator[StreamDelta]:
        """Yield the response as deltas, ending with a finish delta.

        With ``stream=False`` the provider makes one non-streaming request
        and yields the complete response as a short sequence of deltas.
        ``messages`` already includes the system prompt as its first entry.
        """
