"""Pytest configuration and shared fixtures"""

import pytest
import tempfile
import os
from pathlib import Path

# Set test storage directory to avoid polluting user data
os.environ["ZESBE_DATA_DIR"] = tempfile.mkdtemp()

from zesbe.provider.base import Provider, StreamDelta


@pytest.fixture(autouse=True)
def clean_storage():
    """Clean storage before each test"""
    from zesbe.storage.storage import Storage

    # Use a fresh temp dir for each test
    Storage.BASE_DIR = Path(tempfile.mkdtemp())
    yield


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


class ScriptedProvider(Provider):
    """Replays canned responses, one list of deltas per model call.

    Once the script runs out the last response repeats.
    """

    def __init__(self, *turns: list[StreamDelta], model: str = "scripted"):
        self.turns = list(turns)
        self.model = model
        self.calls: list[dict] = []

    async def stream(self, messages, tools=None, stream=True):
        self.calls.append({"messages": messages, "tools": tools, "stream": stream})
        index = min(len(self.calls) - 1, len(self.turns) - 1)
        for delta in self.turns[index]:
            yield delta


def text_turn(text: str, finish_reason: str = "stop") -> list[StreamDelta]:
    return [StreamDelta.text(text), StreamDelta.finish(finish_reason)]


def tool_turn(name: str, arguments: str, call_id: str = "call_1", text: str = "") -> list[StreamDelta]:
    deltas = [StreamDelta.text(text)] if text else []
    deltas += [
        StreamDelta.tool_call(0, id=call_id, name=name),
        StreamDelta.tool_call(0, arguments=arguments),
        StreamDelta.finish("tool_calls"),
    ]
    return deltas


@pytest.fixture
def scripted():
    return ScriptedProvider


@pytest.fixture
def make_agent(temp_dir):
    """Build an agent around a scripted provider and a tool registry"""
    from zesbe.agent.agent import Agent

    def factory(provider, **kwargs):
        kwargs.setdefault("cwd", temp_dir)
        return Agent("openai", "gpt-4o", provider=provider, **kwargs)

    return factory
