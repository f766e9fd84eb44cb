"""Configuration management"""

import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from zesbe.provider.registry import ProviderSpec, get_provider_spec

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".zesbe"
CONFIG_FILE = CONFIG_DIR / "config.json"


class ProviderConfig(BaseModel):
    base_url: str | None = None
    api_key: str | None = None
    api_key_file: str | None = None
    models: list[str] = Field(default_factory=list)
    # None defers to the provider catalog
    supports_tools: bool | None = None


def _default_providers() -> dict[str, ProviderConfig]:
    home = Path.home()
    return {
        "minimax": ProviderConfig(
            base_url="https://api.minimax.io/v1",
            api_key_file=str(home / ".minimax_api_key"),
            models=["minimax-m2.1", "abab6.5", "abab6.5s"],
        ),
        "openai": ProviderConfig(
            base_url="https://api.openai.com/v1",
            api_key_file=str(home / ".openai_api_key"),
            models=["gpt-4o", "gpt-4-turbo", "gpt-3.5-turbo"],
        ),
        "anthropic": ProviderConfig(
            base_url="https://api.anthropic.com/v1",
            api_key_file=str(home / ".anthropic_api_key"),
            models=["claude-3-5-sonnet-20241022", "claude-3-opus-20240229"],
        ),
        "gemini": ProviderConfig(
            base_url="https://generativelanguage.googleapis.com/v1beta/openai",
            api_key_file=str(home / ".gemini_api_key"),
            models=["gemini-2.0-flash-exp", "gemini-1.5-pro"],
        ),
        "ollama": ProviderConfig(
            base_url="http://localhost:11434/v1",
            api_key="ollama",
            models=["llama3", "codellama", "mistral"],
        ),
        "glm": ProviderConfig(
            base_url="https://api.z.ai/api/coding/paas/v4/",
            api_key_file=str(home / ".glm_api_key"),
            models=["glm-4.7", "glm-4.6", "glm-4.5", "glm-4.5-air"],
        ),
    }


class Config(BaseModel):
    provider: str = "openai"
    model: str = "gpt-4o"
    yolo: bool = False
    stream: bool = True
    # 0 means unlimited
    max_steps: int = 0
    system_prompt: str | None = None
    providers: dict[str, ProviderConfig] = Field(default_factory=_default_providers)

    @classmethod
    def default_path(cls) -> Path:
        override = os.environ.get("ZESBE_CONFIG")
        return Path(override) if override else CONFIG_FILE

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from file, layering it over the defaults"""
        path = path or cls.default_path()
        if not path.exists():
            return cls()

        try:
            data = json.loads(path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable config {path}: {e}")
            return cls()

        if not isinstance(data, dict):
            logger.warning(f"Ignoring config {path}: expected a JSON object")
            return cls()

        defaults = cls()
        providers = dict(defaults.providers)
        try:
            for name, raw in (data.pop("providers", None) or {}).items():
                providers[name] = ProviderConfig.model_validate(raw)
            return cls(**data, providers=providers)
        except (ValidationError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring invalid config {path}: {e}")
            return defaults

    def save(self, path: Path | None = None):
        """Save config to file"""
        path = path or self.default_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2))

    def provider_spec(self, provider: str | None = None) -> ProviderSpec:
        """Catalog entry for a provider with this config's overrides applied"""
        name = provider or self.provider
        settings = self.providers.get(name)
        if settings is None:
            return get_provider_spec(name)
        return get_provider_spec(name, base_url=settings.base_url, supports_tools=settings.supports_tools)

    def get_api_key(self, provider: str | None = None) -> str | None:
        """Resolve an API key: static key, then key file, then environment"""
        name = provider or self.provider
        settings = self.providers.get(name)

        if settings and settings.api_key:
            return settings.api_key

        if settings and settings.api_key_file:
            key_file = Path(settings.api_key_file).expanduser()
            if key_file.exists():
                try:
                    return key_file.read_text().strip()
                except OSError:
                    return None

        env_var = self.provider_spec(name).env_var
        if env_var:
            return os.environ.get(env_var)
        return None
