"""Message models for the conversation history"""

import json
import time
from dataclasses import dataclass, field, fields
from typing import Any, Literal

Role = Literal["system", "user", "assistant", "tool"]


@dataclass
class ToolCallRequest:
    """A tool invocation requested by the model.

    ``arguments_json`` is the raw text the provider sent and may not be
    valid JSON.
    """
    id: str
    name: str
    arguments_json: str = ""

    def parse_arguments(self) -> dict[str, Any]:
        """Decode the arguments, falling back to an empty dict"""
        if not self.arguments_json:
            return {}
        try:
            args = json.loads(self.arguments_json)
        except json.JSONDecodeError:
            return {}
        return args if isinstance(args, dict) else {}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": "function",
            "function": {
                "name": self.name,
                "arguments": self.arguments_json,
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ToolCallRequest":
        function = data.get("function") or {}
        arguments = function.get("arguments", data.get("arguments", ""))
        if not isinstance(arguments, str):
            arguments = json.dumps(arguments)
        return cls(
            id=data.get("id", ""),
            name=function.get("name", data.get("name", "")),
            arguments_json=arguments or "",
        )


@dataclass
class ConversationMessage:
    """One turn in the canonical history"""
    role: Role
    content: str = ""
    tool_calls: list[ToolCallRequest] | None = None
    tool_call_id: str | None = None

    def to_dict(self) -> dict:
        """Convert to the OpenAI chat message shape"""
        result = {
            "role": self.role,
            "content": self.content,
        }
        if self.tool_calls:
            result["tool_calls"] = [tc.to_dict() for tc in self.tool_calls]
        if self.tool_call_id:
            result["tool_call_id"] = self.tool_call_id
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "ConversationMessage":
        tool_calls = data.get("tool_calls")
        return cls(
            role=data["role"],
            content=data.get("content") or "",
            tool_calls=[ToolCallRequest.from_dict(tc) for tc in tool_calls] if tool_calls else None,
            tool_call_id=data.get("tool_call_id"),
        )


def _now_ms() -> int:
    return int(time.time() * 1000)


# Session files store stats with camelCase keys
_STATS_KEYS = {
    "requests": "requests",
    "tool_calls": "toolCalls",
    "prompt_tokens": "promptTokens",
    "completion_tokens": "completionTokens",
    "total_tokens": "totalTokens",
    "start_time": "startTime",
}


@dataclass
class AgentStats:
    """Running usage counters for an agent"""
    requests: int = 0
    tool_calls: int = 0
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    start_time: int = field(default_factory=_now_ms)

    def add_usage(self, prompt_tokens: int, completion_tokens: int):
        self.prompt_tokens += prompt_tokens
        self.completion_tokens += completion_tokens
        self.total_tokens += prompt_tokens + completion_tokens

    def merge(self, data: dict):
        """Overwrite counters present in ``data``, keep the rest"""
        for f in fields(self):
            key = _STATS_KEYS[f.name]
            if key in data:
                setattr(self, f.name, data[key])
            elif f.name in data:
                setattr(self, f.name, data[f.name])

    def to_dict(self) -> dict:
        return {_STATS_KEYS[f.name]: getattr(self, f.name) for f in fields(self)}
