"""One round of the agent loop: a model call plus the tools it requests"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from zesbe.agent.callbacks import ChatCallbacks, fire
from zesbe.agent.message import ConversationMessage, ToolCallRequest
from zesbe.agent.normalize import normalize_messages
from zesbe.agent.stream import accumulate
from zesbe.provider.base import Provider, Usage
from zesbe.tool.registry import ToolRegistry

logger = logging.getLogger(__name__)

REJECTED_RESULT = "Tool execution was rejected by user."


@dataclass
class StepResult:
    text: str
    tool_calls: list[ToolCallRequest] = field(default_factory=list)
    usage: Usage | None = None
    finish_reason: str | None = None
    # Number of characters sent in the request, for usage estimates
    prompt_chars: int = 0

    @property
    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0


def stringify_result(result: Any) -> str:
    if isinstance(result, str):
        return result
    try:
        return json.dumps(result)
    except (TypeError, ValueError):
        return str(result)


class StepExecutor:
    """Performs exactly one model call and its consequent tool executions.

    Tool calls run strictly in order; each gets exactly one result message,
    including rejected ones. Provider errors propagate to the caller.
    """

    def __init__(
        self,
        provider: Provider,
        tools: ToolRegistry,
        supports_tools: bool = True,
        stream: bool = True,
        yolo: bool = False,
        context: dict | None = None,
    ):
        self.provider = provider
        self.tools = tools
        self.supports_tools = supports_tools
        self.stream = stream
        self.yolo = yolo
        self.context = context or {}

    async def step(
        self,
        history: list[ConversationMessage],
        system_prompt: str,
        callbacks: ChatCallbacks,
    ) -> StepResult:
        messages = normalize_messages(history, system_prompt, self.supports_tools)
        prompt_chars = sum(len(m.get("content") or "") for m in messages)

        turn = await accumulate(
            self.provider.stream(messages, self.tools.get_schemas(), stream=self.stream),
            on_text=callbacks.on_token,
        )

        if turn.text or turn.tool_calls:
            history.append(ConversationMessage(
                role="assistant",
                content=turn.text,
                tool_calls=list(turn.tool_calls) or None,
            ))

        answered = 0
        try:
            for call in turn.tool_calls:
                message = await self._run_tool(call, callbacks)
                history.append(message)
                answered += 1
                await fire(callbacks.on_tool_result, call.name, message.content)
        except BaseException:
            # Every call in the assistant turn must keep a matching tool message
            for call in turn.tool_calls[answered:]:
                history.append(ConversationMessage(role="tool", content=REJECTED_RESULT, tool_call_id=call.id))
            raise

        return StepResult(
            text=turn.text,
            tool_calls=turn.tool_calls,
            usage=turn.usage,
            finish_reason=turn.finish_reason,
            prompt_chars=prompt_chars,
        )

    async def _approve(self, name: str, args: dict, callbacks: ChatCallbacks) -> bool:
        """Ask ``on_tool_call`` for approval; in yolo mode its answer is ignored"""
        if callbacks.on_tool_call is None:
            return True
        approved = await fire(callbacks.on_tool_call, name, args)
        return True if self.yolo else bool(approved)

    async def _run_tool(self, call: ToolCallRequest, callbacks: ChatCallbacks) -> ConversationMessage:
        args = call.parse_arguments()
        logger.debug(f"Tool call {call.id}: {call.name}({call.arguments_json})")

        if await self._approve(call.name, args, callbacks):
            result = stringify_result(await self.tools.execute(call.name, args, self.context))
        else:
            logger.info(f"Tool {call.name} rejected by user")
            result = REJECTED_RESULT

        return ConversationMessage(role="tool", content=result, tool_call_id=call.id)
