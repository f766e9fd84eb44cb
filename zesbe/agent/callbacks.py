"""Lifecycle callbacks consumed by the presentation layer"""

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable

from zesbe.agent.message import ToolCallRequest


@dataclass
class StepInfo:
    """Passed to ``on_step_finish`` after every step"""
    step_number: int
    text: str
    tool_calls: list[ToolCallRequest] = field(default_factory=list)
    has_more_steps: bool = False


@dataclass
class ChatCallbacks:
    """Hooks fired by ``Agent.chat``.

    Every hook may be a plain function or a coroutine function.
    ``on_tool_call`` doubles as the approval prompt: its return value decides
    whether the tool runs.
    """
    on_start: Callable[[], Any] | None = None
    on_token: Callable[[str], Any] | None = None
    on_tool_call: Callable[[str, dict], Any] | None = None
    on_tool_result: Callable[[str, Any], Any] | None = None
    on_step_finish: Callable[[StepInfo], Any] | None = None
    on_warning: Callable[[str], Any] | None = None
    on_end: Callable[[], Any] | None = None
    on_error: Callable[[BaseException], Any] | None = None


async def fire(callback: Callable | None, *args) -> Any:
    """Invoke an optional callback, awaiting it if it returns an awaitable"""
    if callback is None:
        return None
    result = callback(*args)
    if inspect.isawaitable(result):
        result = await result
    return result
