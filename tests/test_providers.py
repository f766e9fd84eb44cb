"""Tests for provider transports and the provider catalog"""

import json
from types import SimpleNamespace

import httpx
import pytest

from zesbe.agent.errors import ProviderError
from zesbe.agent.stream import accumulate
from zesbe.provider import create_provider, get_provider_spec
from zesbe.provider.anthropic import AnthropicProvider, convert_messages
from zesbe.provider.base import StreamStatus, status_for_finish_reason
from zesbe.provider.openai import OpenAICompatibleProvider


class TestCatalog:
    def test_known_provider(self):
        spec = get_provider_spec("groq")

        assert spec.base_url == "https://api.groq.com/openai/v1"
        assert spec.wire == "openai"
        assert spec.env_var == "GROQ_API_KEY"

    def test_providers_without_tool_messages(self):
        assert not get_provider_spec("minimax").supports_tools
        assert get_provider_spec("openai").supports_tools

    def test_overrides(self):
        spec = get_provider_spec("minimax", base_url="http://proxy/v1", supports_tools=True)

        assert spec.base_url == "http://proxy/v1"
        assert spec.supports_tools

    def test_unknown_provider_is_openai_compatible(self):
        spec = get_provider_spec("my-local", base_url="http://localhost:8000/v1")

        assert spec.wire == "openai"
        assert spec.base_url == "http://localhost:8000/v1"
        assert spec.env_var == "MY_LOCAL_API_KEY"

    def test_create_provider_picks_wire(self):
        assert isinstance(create_provider(get_provider_spec("anthropic"), "claude", api_key="k"), AnthropicProvider)
        assert isinstance(create_provider(get_provider_spec("ollama"), "llama3"), OpenAICompatibleProvider)

    @pytest.mark.parametrize("reason,status", [
        ("stop", StreamStatus.OK),
        ("tool_calls", StreamStatus.OK),
        ("length", StreamStatus.TRUNCATED),
        ("content_filter", StreamStatus.ERROR),
        (None, StreamStatus.OK),
        ("something_new", StreamStatus.OK),
    ])
    def test_finish_status(self, reason, status):
        assert status_for_finish_reason(reason) == status


class TestAnthropicMessages:
    def test_convert_messages(self):
        messages = [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "Checking.", "tool_calls": [
                {"id": "t1", "type": "function", "function": {"name": "read", "arguments": '{"file_path": "a"}'}},
                {"id": "t2", "type": "function", "function": {"name": "glob", "arguments": "not json"}},
            ]},
            {"role": "tool", "content": "A", "tool_call_id": "t1"},
            {"role": "tool", "content": "B", "tool_call_id": "t2"},
        ]

        system, converted = convert_messages(messages)

        assert system == "sys"
        assert converted[0] == {"role": "user", "content": "hi"}
        assistant = converted[1]["content"]
        assert assistant[0] == {"type": "text", "text": "Checking."}
        assert assistant[1]["input"] == {"file_path": "a"}
        assert assistant[2]["input"] == {}
        assert converted[2] == {"role": "user", "content": [
            {"type": "tool_result", "tool_use_id": "t1", "content": "A"},
            {"type": "tool_result", "tool_use_id": "t2", "content": "B"},
        ]}


def _sse(*events):
    return "".join(f"event: {e['type']}\ndata: {json.dumps(e)}\n\n" for e in events)


def _anthropic(handler):
    return AnthropicProvider(
        get_provider_spec("anthropic"),
        "claude-test",
        api_key="key",
        transport=httpx.MockTransport(handler),
    )


class TestAnthropicProvider:
    @pytest.mark.asyncio
    async def test_streams_text_and_tool_calls(self):
        requests = []

        def handler(request):
            requests.append(json.loads(request.content))
            body = _sse(
                {"type": "message_start", "message": {"usage": {"input_tokens": 20}}},
                {"type": "content_block_start", "index": 0, "content_block": {"type": "text", "text": ""}},
                {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": "Let me look."}},
                {"type": "content_block_start", "index": 1, "content_block": {"type": "tool_use", "id": "tu_1", "name": "read"}},
                {"type": "content_block_delta", "index": 1, "delta": {"type": "input_json_delta", "partial_json": '{"file_'}},
                {"type": "content_block_delta", "index": 1, "delta": {"type": "input_json_delta", "partial_json": 'path": "a"}'}},
                {"type": "message_delta", "delta": {"stop_reason": "tool_use"}, "usage": {"output_tokens": 9}},
                {"type": "message_stop"},
            )
            return httpx.Response(200, text=body, headers={"content-type": "text/event-stream"})

        provider = _anthropic(handler)
        tools = [{"name": "read", "description": "Read", "parameters": {"type": "object", "properties": {}}}]

        turn = await accumulate(provider.stream([{"role": "system", "content": "sys"}, {"role": "user", "content": "hi"}], tools))

        assert turn.text == "Let me look."
        assert turn.tool_calls[0].id == "tu_1"
        assert turn.tool_calls[0].parse_arguments() == {"file_path": "a"}
        assert turn.finish_reason == "tool_calls"
        assert turn.usage.prompt_tokens == 20
        assert turn.usage.completion_tokens == 9
        assert requests[0]["system"] == "sys"
        assert requests[0]["tools"][0]["input_schema"] == {"type": "object", "properties": {}}

    @pytest.mark.asyncio
    async def test_error_event_ends_stream_with_error(self):
        def handler(request):
            body = _sse({"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}})
            return httpx.Response(200, text=body)

        deltas = [d async for d in _anthropic(handler).stream([{"role": "user", "content": "hi"}])]

        assert deltas[-1].status == StreamStatus.ERROR
        assert deltas[-1].error == "Overloaded"

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        def handler(request):
            return httpx.Response(401, json={"error": {"message": "invalid x-api-key"}})

        with pytest.raises(ProviderError) as exc:
            async for _ in _anthropic(handler).stream([{"role": "user", "content": "hi"}]):
                pass

        assert exc.value.status_code == 401
        assert "invalid x-api-key" in str(exc.value)

    @pytest.mark.asyncio
    async def test_missing_key_raises(self):
        provider = AnthropicProvider(get_provider_spec("anthropic"), "claude-test")

        with pytest.raises(ProviderError):
            async for _ in provider.stream([{"role": "user", "content": "hi"}]):
                pass

    @pytest.mark.asyncio
    async def test_non_streaming(self):
        def handler(request):
            assert json.loads(request.content)["stream"] is False
            return httpx.Response(200, json={
                "content": [
                    {"type": "text", "text": "Sure."},
                    {"type": "tool_use", "id": "tu_9", "name": "bash", "input": {"command": "ls"}},
                ],
                "stop_reason": "tool_use",
                "usage": {"input_tokens": 3, "output_tokens": 4},
            })

        turn = await accumulate(_anthropic(handler).stream([{"role": "user", "content": "hi"}], stream=False))

        assert turn.text == "Sure."
        assert turn.tool_calls[0].parse_arguments() == {"command": "ls"}
        assert turn.finish_reason == "tool_calls"


class FakeStream:
    def __init__(self, chunks):
        self.chunks = chunks

    def __aiter__(self):
        return self._iter()

    async def _iter(self):
        for chunk in self.chunks:
            yield chunk


class FakeClient:
    """Stands in for AsyncOpenAI, recording request kwargs"""

    def __init__(self, response):
        self.response = response
        self.requests = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self.create))

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        return self.response


def _chunk(content=None, tool_calls=None, finish_reason=None, usage=None):
    choices = []
    if content is not None or tool_calls is not None or finish_reason is not None:
        choices = [SimpleNamespace(
            delta=SimpleNamespace(content=content, tool_calls=tool_calls),
            finish_reason=finish_reason,
        )]
    return SimpleNamespace(choices=choices, usage=usage)


def _tc(index, id=None, name=None, arguments=None):
    return SimpleNamespace(index=index, id=id, function=SimpleNamespace(name=name, arguments=arguments))


class TestOpenAICompatibleProvider:
    @pytest.mark.asyncio
    async def test_stream_maps_chunks(self):
        client = FakeClient(FakeStream([
            _chunk(content="Hi"),
            _chunk(tool_calls=[_tc(0, id="c1", name="glob", arguments='{"pat')]),
            _chunk(tool_calls=[_tc(0, arguments='tern": "*"}')]),
            _chunk(finish_reason="tool_calls"),
            _chunk(usage=SimpleNamespace(prompt_tokens=11, completion_tokens=6)),
        ]))
        provider = OpenAICompatibleProvider(get_provider_spec("openai"), "gpt-4o", client=client)
        tools = [{"name": "glob", "description": "Find", "parameters": {"type": "object", "properties": {}}}]

        turn = await accumulate(provider.stream([{"role": "user", "content": "x"}], tools))

        assert turn.text == "Hi"
        assert turn.tool_calls[0].parse_arguments() == {"pattern": "*"}
        assert turn.finish_reason == "tool_calls"
        assert turn.usage.prompt_tokens == 11
        request = client.requests[0]
        assert request["tools"][0]["function"]["name"] == "glob"
        assert request["tool_choice"] == "auto"
        assert request["stream_options"] == {"include_usage": True}

    @pytest.mark.asyncio
    async def test_no_stream_options_when_unsupported(self):
        client = FakeClient(FakeStream([_chunk(content="ok", finish_reason="stop")]))
        provider = OpenAICompatibleProvider(get_provider_spec("glm"), "glm-4.7", client=client)

        await accumulate(provider.stream([{"role": "user", "content": "x"}]))

        assert "stream_options" not in client.requests[0]
        assert "tools" not in client.requests[0]

    @pytest.mark.asyncio
    async def test_non_streaming_replay(self):
        message = SimpleNamespace(
            content="Done",
            tool_calls=[SimpleNamespace(id="c9", function=SimpleNamespace(name="bash", arguments='{"command": "ls"}'))],
        )
        response = SimpleNamespace(
            choices=[SimpleNamespace(message=message, finish_reason="tool_calls")],
            usage=SimpleNamespace(prompt_tokens=1, completion_tokens=2),
        )
        client = FakeClient(response)
        provider = OpenAICompatibleProvider(get_provider_spec("openai"), "gpt-4o", client=client)

        turn = await accumulate(provider.stream([{"role": "user", "content": "x"}], stream=False))

        assert client.requests[0]["stream"] is False
        assert "stream_options" not in client.requests[0]
        assert turn.text == "Done"
        assert turn.tool_calls[0].id == "c9"
