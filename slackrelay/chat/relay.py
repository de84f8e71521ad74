"""Relay — drives a provider stream through the sentence buffer to a sink."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from slackrelay.chat.sentence_buffer import SentenceBuffer

if TYPE_CHECKING:
    from slackrelay.chat.session_manager import ConversationSession
    from slackrelay.providers.base import ChatProvider

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Something went wrong. Please try again later."

Sink = Callable[[str], "Awaitable[object] | object"]


async def _deliver(sink: Sink, text: str) -> None:
    result = sink(text)
    if inspect.isawaitable(result):
        await result


async def relay_response(
    session: "ConversationSession",
    provider: "ChatProvider",
    user_text: str,
    sink: Sink,
) -> list[str]:
    """Send *user_text* to *provider* and deliver the reply sentence by sentence.

    Sentences are appended to ``session.history`` as they complete. A provider
    failure is logged and answered with :data:`GENERIC_FAILURE_MESSAGE` after
    whatever was already buffered has been flushed. Calls on the same session
    run one at a time.

    Returns the sentences delivered from the provider (not the failure notice).
    """
    async with session.lock:
        return await _relay(session, provider, user_text, sink)


async def _relay(
    session: "ConversationSession",
    provider: "ChatProvider",
    user_text: str,
    sink: Sink,
) -> list[str]:
    session.add_user_message(user_text)
    session.trim()
    messages = session.as_messages()
    buffer = SentenceBuffer(transcript=session.history)
    failed = False

    try:
        async for fragment in provider.stream_response(messages):
            for sentence in buffer.consume(fragment):
                await _deliver(sink, sentence)
    except Exception as e:
        logger.error(
            "%s streaming failed for session %s: %s",
            provider.get_name(), session.session_id, e,
        )
        failed = True

    remaining = buffer.flush()
    if remaining:
        await _deliver(sink, remaining)
    if failed:
        await _deliver(sink, GENERIC_FAILURE_MESSAGE)

    session.trim()
    logger.info(
        "Relayed %d sentences for session %s", len(buffer.emitted), session.session_id
    )
    return buffer.emitted
