"""Chat transports and the provider registry.

Providers are registered by name. ``create_transport`` builds the transport
for the provider selected in a JotConfig.
"""

from collections.abc import Callable

from jot_core.config import JotConfig
from jot_core.transports.anthropic import AnthropicTransport
from jot_core.transports.openai import OpenAITransport
from jot_core.transports.protocol import ChatTransport

OLLAMA_DEFAULT_MODEL = "llama3.1"


def _anthropic(config: JotConfig) -> ChatTransport:
    return AnthropicTransport(
        api_key=config.anthropic_api_key,
        auth_token=config.anthropic_auth_token,
        model=config.llm_model,
    )


def _openai(config: JotConfig) -> ChatTransport:
    return OpenAITransport(api_key=config.openai_api_key, model=config.llm_model)


def _ollama(config: JotConfig) -> ChatTransport:
    return OpenAITransport(
        api_key=config.get_api_key(),
        model=config.llm_model or OLLAMA_DEFAULT_MODEL,
        base_url=config.ollama_base_url,
    )


TRANSPORT_REGISTRY: dict[str, Callable[[JotConfig], ChatTransport]] = {
    "anthropic": _anthropic,
    "openai": _openai,
    "ollama": _ollama,
}


def create_transport(config: JotConfig) -> ChatTransport:
    """Build the chat transport for the configured provider.

    Args:
        config: Settings naming the provider and its credentials.

    Returns:
        A transport ready for use by an Agent.

    Raises:
        ValueError: If the provider is not registered.
    """
    provider = config.llm_provider
    if provider not in TRANSPORT_REGISTRY:
        raise ValueError(
            f"Unknown LLM provider {provider!r}. "
            f"Available: {list(TRANSPORT_REGISTRY)}"
        )
    return TRANSPORT_REGISTRY[provider](config)


__all__ = [
    "AnthropicTransport",
    "ChatTransport",
    "OpenAITransport",
    "TRANSPORT_REGISTRY",
    "create_transport",
]
