"""Adapt the canonical history to what a provider's chat endpoint accepts"""

from zesbe.agent.message import ConversationMessage

CONTINUE_PROMPT = "Continue."


def _inline_tool_calls(msg: ConversationMessage) -> dict:
    lines = [f"[Calling tool: {tc.name}({tc.arguments_json})]" for tc in msg.tool_calls or []]
    content = "\n".join([msg.content, *lines]) if msg.content else "\n".join(lines)
    return {"role": "assistant", "content": content}


def _inline_tool_result(msg: ConversationMessage) -> dict:
    return {
        "role": "user",
        "content": f"[Tool Result: {msg.tool_call_id or ''}]\n{msg.content}",
    }


def normalize_messages(
    history: list[ConversationMessage],
    system_prompt: str,
    supports_tools: bool,
) -> list[dict]:
    """Build the message array for one request.

    The system prompt always comes first. Providers without native tool
    messages get tool calls and results folded into plain assistant and user
    text, and a trailing "Continue." user turn when no user turn remains.
    The history itself is never modified or reordered.
    """
    messages = [{"role": "system", "content": system_prompt}]

    if supports_tools:
        messages.extend(msg.to_dict() for msg in history)
        return messages

    for msg in history:
        if msg.role == "tool":
            messages.append(_inline_tool_result(msg))
        elif msg.role == "assistant" and msg.tool_calls:
            messages.append(_inline_tool_calls(msg))
        else:
            messages.append({"role": msg.role, "content": msg.content})

    if not any(m["role"] == "user" for m in messages):
        messages.append({"role": "user", "content": CONTINUE_PROMPT})

    return messages
