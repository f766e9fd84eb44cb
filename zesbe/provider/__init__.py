"""LLM providers"""

from .base import Provider, StreamDelta, StreamStatus, Usage
from .registry import PROVIDERS, ProviderSpec, get_provider_spec


def create_provider(spec: ProviderSpec, model: str, api_key: str | None = None) -> Provider:
    """Build the transport for a provider spec"""
    if spec.wire == "anthropic":
        from .anthropic import AnthropicProvider
        return AnthropicProvider(spec, model, api_key=api_key)

    from .openai import OpenAICompatibleProvider
    return OpenAICompatibleProvider(spec, model, api_key=api_key)


__all__ = [
    "Provider",
    "StreamDelta",
    "StreamStatus",
    "Usage",
    "PROVIDERS",
    "ProviderSpec",
    "get_provider_spec",
    "create_provider",
]
