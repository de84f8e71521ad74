"""
Provider factory — picks a ChatProvider implementation by model tag.
"""

import logging
from typing import TYPE_CHECKING, Dict

from .anthropic_provider import AnthropicProvider
from .base import ChatProvider, ProviderConfig
from .http_streaming import AzureInferenceProvider, MistralProvider
from .openai_provider import OpenAIProvider

if TYPE_CHECKING:
    from slackrelay.config import Settings

logger = logging.getLogger(__name__)


class UnsupportedModelError(ValueError):
    """Raised when the configured model tag has no provider."""


# tag -> (provider class, model name sent to the API)
PROVIDERS: Dict[str, tuple] = {
    "gpt-4o": (OpenAIProvider, "gpt-4o"),
    "llama": (AzureInferenceProvider, "Llama-3.3-70B-Instruct"),
    "mistral": (MistralProvider, "Mistral-large-2411"),
    "claude": (AnthropicProvider, "claude-sonnet-4-20250514"),
}


def create_provider(settings: "Settings", **kwargs) -> ChatProvider:
    """
    Create the provider configured by ``settings.ai_model``.

    Args:
        settings: Application settings
        **kwargs: Passed through to the provider constructor (e.g. ``client``)

    Raises:
        UnsupportedModelError: If the tag is unknown
    """
    tag = settings.ai_model
    if tag not in PROVIDERS:
        raise UnsupportedModelError(
            f"Unsupported AI model: {tag!r}. Available: {', '.join(sorted(PROVIDERS))}"
        )

    provider_class, model = PROVIDERS[tag]
    config = ProviderConfig(
        model=model,
        api_key=settings.ai_key,
        endpoint=settings.ai_endpoint,
        api_version=settings.ai_api_version,
        temperature=settings.temperature,
        top_p=settings.top_p,
        max_tokens=settings.max_tokens,
    )
    provider = provider_class(config, **kwargs)
    logger.info("Using %s (model=%s)", provider.get_name(), model)
    return provider
