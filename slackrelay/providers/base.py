"""
Base class for hosted chat-model providers.

Every provider turns a transcript into a stream of text fragments; the
relay does not care which service produced them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List


@dataclass
class ProviderConfig:
    """Request settings shared by all providers."""
    model: str
    api_key: str = ""
    endpoint: str = ""
    api_version: str = ""
    temperature: float = 1.0
    top_p: float = 1.0
    max_tokens: int = 1000
    timeout: float = 120.0
    extra_params: Dict[str, Any] = field(default_factory=dict)


class ChatProvider(ABC):
    """
    Abstract base class for chat providers.

    Example:
        class EchoProvider(ChatProvider):
            async def stream_response(self, history):
                yield history[-1]["content"]
    """

    def __init__(self, config: ProviderConfig):
        self.config = config

    @abstractmethod
    def stream_response(self, history: List[Dict[str, str]]) -> AsyncIterator[str]:
        """
        Stream a reply to *history* as text fragments.

        Args:
            history: Transcript as ``[{"role": ..., "content": ...}]``

        Yields:
            Non-empty text fragments in generation order

        Raises:
            Exception: Transport or provider errors propagate to the caller
        """

    def build_payload(self, history: List[Dict[str, str]]) -> Dict[str, Any]:
        """Chat-completions request body for OpenAI-shaped HTTP APIs."""
        payload: Dict[str, Any] = {
            "model": self.config.model,
            "messages": history,
            "temperature": self.config.temperature,
            "top_p": self.config.top_p,
            "max_tokens": self.config.max_tokens,
            "stream": True,
        }
        payload.update(self.config.extra_params)
        return payload

    def get_name(self) -> str:
        return self.__class__.__name__
