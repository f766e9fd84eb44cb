"""Provider catalog: provider id -> endpoint and capability flags"""

from dataclasses import dataclass, replace
from typing import Literal


@dataclass(frozen=True)
class ProviderSpec:
    """How to reach a provider and what its chat endpoint accepts"""
    id: str
    base_url: str | None
    wire: Literal["openai", "anthropic"] = "openai"
    # Accepts the "tool" role and "tool_calls" field verbatim
    supports_tools: bool = True
    env_var: str | None = None
    # Accepts stream_options={"include_usage": True}
    stream_usage: bool = False


PROVIDERS: dict[str, ProviderSpec] = {
    spec.id: spec
    for spec in [
        ProviderSpec("openai", "https://api.openai.com/v1", env_var="OPENAI_API_KEY", stream_usage=True),
        ProviderSpec("anthropic", "https://api.anthropic.com/v1", wire="anthropic", env_var="ANTHROPIC_API_KEY"),
        ProviderSpec("minimax", "https://api.minimax.io/v1", supports_tools=False, env_var="MINIMAX_API_KEY"),
        ProviderSpec("gemini", "https://generativelanguage.googleapis.com/v1beta/openai/", env_var="GEMINI_API_KEY"),
        ProviderSpec("glm", "https://api.z.ai/api/coding/paas/v4/", env_var="GLM_API_KEY"),
        ProviderSpec("groq", "https://api.groq.com/openai/v1", env_var="GROQ_API_KEY"),
        ProviderSpec("together", "https://api.together.xyz/v1", env_var="TOGETHER_API_KEY"),
        ProviderSpec("deepseek", "https://api.deepseek.com/v1", env_var="DEEPSEEK_API_KEY"),
        ProviderSpec("openrouter", "https://openrouter.ai/api/v1", env_var="OPENROUTER_API_KEY", stream_usage=True),
        ProviderSpec("ollama", "http://localhost:11434/v1", supports_tools=False),
    ]
}


def get_provider_spec(
    provider_id: str,
    base_url: str | None = None,
    supports_tools: bool | None = None,
) -> ProviderSpec:
    """Look up a provider, applying configured overrides.

    Unknown ids are treated as OpenAI-compatible endpoints at ``base_url``.
    """
    spec = PROVIDERS.get(provider_id)
    if spec is None:
        env_var = provider_id.upper().replace("-", "_") + "_API_KEY"
        spec = ProviderSpec(provider_id, base_url, env_var=env_var)
    if base_url:
        spec = replace(spec, base_url=base_url)
    if supports_tools is not None:
        spec = replace(spec, supports_tools=supports_tools)
    return spec
