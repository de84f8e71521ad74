"""
Providers reached over plain HTTP with an OpenAI-shaped streaming API.

- AzureInferenceProvider: Azure AI model inference (Llama deployments)
- MistralProvider: Mistral La Plateforme or a Mistral deployment on Azure
"""

import logging
from typing import AsyncIterator, Dict, List, Optional

import httpx

from .base import ChatProvider, ProviderConfig
from .sse import iter_sse_fragments

logger = logging.getLogger(__name__)


class HTTPStreamingProvider(ChatProvider):
    """
    Streams ``/chat/completions`` over server-sent events with httpx.

    Subclasses supply the URL path and authentication header.
    """

    default_endpoint = ""
    completions_path = "/chat/completions"

    def __init__(
        self,
        config: ProviderConfig,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            config: Provider configuration
            client: Shared httpx client (a fresh one is opened per call if None)
        """
        super().__init__(config)
        self._client = client

    @property
    def url(self) -> str:
        base = (self.config.endpoint or self.default_endpoint).rstrip("/")
        return f"{base}{self.completions_path}"

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.config.api_key}"}

    def query_params(self) -> Dict[str, str]:
        return {}

    async def stream_response(self, history: List[Dict[str, str]]) -> AsyncIterator[str]:
        headers = {
            **self.auth_headers(),
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
        }
        payload = self.build_payload(history)

        if self._client is not None:
            async for fragment in self._stream(self._client, headers, payload):
                yield fragment
            return

        async with httpx.AsyncClient(timeout=self.config.timeout) as client:
            async for fragment in self._stream(client, headers, payload):
                yield fragment

    async def _stream(
        self, client: httpx.AsyncClient, headers: Dict[str, str], payload: dict
    ) -> AsyncIterator[str]:
        logger.debug("POST %s (model=%s)", self.url, self.config.model)
        async with client.stream(
            "POST", self.url, headers=headers, params=self.query_params(), json=payload
        ) as resp:
            if resp.status_code != 200:
                body = await resp.aread()
                raise RuntimeError(
                    f"{self.get_name()} returned {resp.status_code}: "
                    f"{body.decode(errors='replace')[:200]}"
                )
            async for fragment in iter_sse_fragments(resp.aiter_lines()):
                yield fragment


class AzureInferenceProvider(HTTPStreamingProvider):
    """Azure AI model inference endpoint (``api-key`` header auth)."""

    default_api_version = "2024-05-01-preview"

    def auth_headers(self) -> Dict[str, str]:
        return {"api-key": self.config.api_key}

    def query_params(self) -> Dict[str, str]:
        return {"api-version": self.config.api_version or self.default_api_version}


class MistralProvider(HTTPStreamingProvider):
    """Mistral chat completions (bearer token auth)."""

    default_endpoint = "https://api.mistral.ai"
    completions_path = "/v1/chat/completions"
