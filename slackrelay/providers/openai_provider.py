"""
OpenAI provider.

Uses the official ``openai`` SDK; ``endpoint`` becomes the client's
``base_url`` so GitHub Models or any OpenAI-compatible host works too.
"""

import logging
from typing import AsyncIterator, Dict, List

from .base import ChatProvider, ProviderConfig

logger = logging.getLogger(__name__)


class OpenAIProvider(ChatProvider):
    """Streams chat completions through ``openai.AsyncOpenAI``."""

    def __init__(self, config: ProviderConfig, client=None):
        super().__init__(config)
        self._client = client

    def _get_client(self):
        """Get or create the async OpenAI client."""
        if self._client is None:
            from openai import AsyncOpenAI

            kwargs = {"timeout": self.config.timeout}
            if self.config.api_key:
                kwargs["api_key"] = self.config.api_key
            if self.config.endpoint:
                kwargs["base_url"] = self.config.endpoint
            self._client = AsyncOpenAI(**kwargs)
            logger.info("AsyncOpenAI client initialized (base_url=%s)", self.config.endpoint)
        return self._client

    async def stream_response(self, history: List[Dict[str, str]]) -> AsyncIterator[str]:
        client = self._get_client()
        kwargs = self.build_payload(history)

        async for chunk in await client.chat.completions.create(**kwargs):
            if chunk.choices and chunk.choices[0].delta.content:
                yield chunk.choices[0].delta.content
