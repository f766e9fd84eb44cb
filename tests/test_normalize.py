"""Tests for message normalization"""

import copy

from zesbe.agent.message import ConversationMessage, ToolCallRequest
from zesbe.agent.normalize import CONTINUE_PROMPT, normalize_messages


def _tool_history():
    return [
        ConversationMessage(role="user", content="list files"),
        ConversationMessage(
            role="assistant",
            content="Looking.",
            tool_calls=[
                ToolCallRequest(id="c1", name="glob", arguments_json='{"pattern": "*"}'),
                ToolCallRequest(id="c2", name="read", arguments_json='{"file_path": "a"}'),
            ],
        ),
        ConversationMessage(role="tool", content="a\nb", tool_call_id="c1"),
        ConversationMessage(role="tool", content="hello", tool_call_id="c2"),
    ]


class TestNativeTools:
    def test_history_passes_through(self):
        history = _tool_history()

        messages = normalize_messages(history, "sys", supports_tools=True)

        assert messages[0] == {"role": "system", "content": "sys"}
        assert messages[1:] == [m.to_dict() for m in history]
        assert messages[3] == {"role": "tool", "content": "a\nb", "tool_call_id": "c1"}

    def test_no_continue_prompt(self):
        history = [ConversationMessage(role="assistant", content="hi")]

        messages = normalize_messages(history, "sys", supports_tools=True)

        assert len(messages) == 2


class TestInlinedTools:
    def test_tool_calls_become_annotations(self):
        messages = normalize_messages(_tool_history(), "sys", supports_tools=False)

        assistant = messages[2]
        assert assistant["role"] == "assistant"
        assert "tool_calls" not in assistant
        assert assistant["content"] == (
            "Looking.\n"
            '[Calling tool: glob({"pattern": "*"})]\n'
            '[Calling tool: read({"file_path": "a"})]'
        )

    def test_tool_results_become_user_messages(self):
        messages = normalize_messages(_tool_history(), "sys", supports_tools=False)

        assert messages[3] == {"role": "user", "content": "[Tool Result: c1]\na\nb"}
        assert messages[4] == {"role": "user", "content": "[Tool Result: c2]\nhello"}
        assert all(m["role"] != "tool" for m in messages)

    def test_assistant_without_text(self):
        history = [
            ConversationMessage(role="user", content="go"),
            ConversationMessage(
                role="assistant",
                tool_calls=[ToolCallRequest(id="c1", name="bash", arguments_json="{}")],
            ),
        ]

        messages = normalize_messages(history, "sys", supports_tools=False)

        assert messages[2]["content"] == "[Calling tool: bash({})]"

    def test_continue_added_without_user_message(self):
        history = [ConversationMessage(role="assistant", content="hi")]

        messages = normalize_messages(history, "sys", supports_tools=False)

        assert messages[-1] == {"role": "user", "content": CONTINUE_PROMPT}

    def test_empty_history(self):
        messages = normalize_messages([], "sys", supports_tools=False)

        assert messages == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": CONTINUE_PROMPT},
        ]

    def test_history_is_not_modified(self):
        history = _tool_history()
        before = copy.deepcopy(history)

        normalize_messages(history, "sys", supports_tools=False)
        normalize_messages(history, "sys", supports_tools=True)

        assert history == before
