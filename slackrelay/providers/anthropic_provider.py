"""Anthropic provider — Claude through ``langchain_anthropic``."""

from __future__ import annotations

from collections.abc import AsyncIterator

from langchain_anthropic import ChatAnthropic
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from .base import ChatProvider, ProviderConfig

_MESSAGE_TYPES = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
}


def to_langchain_messages(history: list[dict[str, str]]) -> list[BaseMessage]:
    """Convert ``{"role", "content"}`` turns into LangChain messages."""
    return [_MESSAGE_TYPES[turn["role"]](content=turn["content"]) for turn in history]


def _chunk_text(content) -> str:
    if isinstance(content, str):
        return content
    # Content blocks: [{"type": "text", "text": ...}, ...]
    return "".join(
        block.get("text", "") for block in content
        if isinstance(block, dict) and block.get("type") == "text"
    )


class AnthropicProvider(ChatProvider):
    """Streams Claude replies via ``ChatAnthropic.astream``."""

    def __init__(self, config: ProviderConfig, model: ChatAnthropic | None = None) -> None:
        super().__init__(config)
        self.model = model or ChatAnthropic(
            model=config.model,
            api_key=config.api_key,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout,
        )

    async def stream_response(self, history: list[dict[str, str]]) -> AsyncIterator[str]:
        async for chunk in self.model.astream(to_langchain_messages(history)):
            text = _chunk_text(chunk.content)
            if text:
                yield text
