"""Tests for configuration loading"""

import json

import pytest

from zesbe.config.config import Config, ProviderConfig


@pytest.fixture
def config_path(temp_dir):
    return temp_dir / "config.json"


class TestConfig:
    def test_defaults_when_missing(self, config_path):
        config = Config.load(config_path)

        assert config.provider == "openai"
        assert config.max_steps == 0
        assert "anthropic" in config.providers

    def test_file_overrides_defaults(self, config_path):
        config_path.write_text(json.dumps({
            "provider": "glm",
            "model": "glm-4.7",
            "yolo": True,
            "providers": {"glm": {"base_url": "http://proxy/v1", "api_key": "abc"}},
        }))

        config = Config.load(config_path)

        assert config.provider == "glm"
        assert config.yolo
        assert config.providers["glm"].base_url == "http://proxy/v1"
        assert "openai" in config.providers

    def test_invalid_json_falls_back(self, config_path):
        config_path.write_text("{oops")

        assert Config.load(config_path) == Config()

    def test_invalid_values_fall_back(self, config_path):
        config_path.write_text(json.dumps({"max_steps": "many"}))

        assert Config.load(config_path).max_steps == 0

    def test_save_round_trip(self, config_path):
        config = Config(provider="anthropic", model="claude-3-5-sonnet-20241022", max_steps=5)

        config.save(config_path)

        assert Config.load(config_path) == config

    def test_provider_spec_applies_overrides(self):
        config = Config(providers={"minimax": ProviderConfig(supports_tools=True, base_url="http://m/v1")})

        spec = config.provider_spec("minimax")

        assert spec.supports_tools
        assert spec.base_url == "http://m/v1"


class TestApiKey:
    def test_static_key_wins(self, temp_dir):
        key_file = temp_dir / "key"
        key_file.write_text("from-file")
        config = Config(providers={"openai": ProviderConfig(api_key="static", api_key_file=str(key_file))})

        assert config.get_api_key() == "static"

    def test_key_file(self, temp_dir):
        key_file = temp_dir / "key"
        key_file.write_text("from-file\n")
        config = Config(providers={"openai": ProviderConfig(api_key_file=str(key_file))})

        assert config.get_api_key() == "from-file"

    def test_environment(self, temp_dir, monkeypatch):
        monkeypatch.setenv("DEEPSEEK_API_KEY", "from-env")
        config = Config(
            provider="deepseek",
            providers={"deepseek": ProviderConfig(api_key_file=str(temp_dir / "absent"))},
        )

        assert config.get_api_key() == "from-env"

    def test_no_key(self, monkeypatch):
        monkeypatch.delenv("GROQ_API_KEY", raising=False)

        assert Config(provider="groq", providers={}).get_api_key() is None


class TestAgentFromConfig:
    def test_builds_agent(self, scripted, temp_dir):
        from conftest import text_turn
        from zesbe.agent.agent import Agent

        config = Config(
            provider="minimax",
            model="minimax-m2.1",
            yolo=True,
            stream=False,
            max_steps=3,
            system_prompt="Custom prompt.",
            providers={"minimax": ProviderConfig(api_key="k")},
        )

        agent = Agent.from_config(config, provider=scripted(text_turn("x")), cwd=temp_dir)

        assert agent.provider_name == "minimax"
        assert agent.model == "minimax-m2.1"
        assert agent.yolo
        assert not agent.stream
        assert agent.max_steps == 3
        assert not agent.spec.supports_tools
        assert agent.system_prompt == "Custom prompt."


class TestInvalidConfigFiles:
    def test_invalid_provider_entry_falls_back(self, config_path):
        config_path.write_text(json.dumps({
            "provider": "glm",
            "providers": {"openai": {"supports_tools": "maybe"}},
        }))

        config = Config.load(config_path)

        assert config == Config()

    def test_provider_entry_not_an_object_falls_back(self, config_path):
        config_path.write_text(json.dumps({"providers": {"openai": "sk-123"}}))

        assert Config.load(config_path) == Config()

    @pytest.mark.parametrize("content", ["[]", "\"text\"", "42", "null"])
    def test_non_object_file_falls_back(self, config_path, content):
        config_path.write_text(content)

        assert Config.load(config_path) == Config()
