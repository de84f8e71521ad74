"""
Chat-model providers.

Available providers:
- OpenAIProvider: OpenAI (and OpenAI-compatible hosts) via the openai SDK
- AzureInferenceProvider: Azure AI model inference (Llama) over httpx
- MistralProvider: Mistral chat completions over httpx
- AnthropicProvider: Claude via langchain-anthropic
"""

from .anthropic_provider import AnthropicProvider
from .base import ChatProvider, ProviderConfig
from .factory import PROVIDERS, UnsupportedModelError, create_provider
from .http_streaming import AzureInferenceProvider, HTTPStreamingProvider, MistralProvider
from .openai_provider import OpenAIProvider

__all__ = [
    # Base
    "ChatProvider",
    "ProviderConfig",
    # Providers
    "AnthropicProvider",
    "AzureInferenceProvider",
    "HTTPStreamingProvider",
    "MistralProvider",
    "OpenAIProvider",
    # Factory
    "PROVIDERS",
    "UnsupportedModelError",
    "create_provider",
]
