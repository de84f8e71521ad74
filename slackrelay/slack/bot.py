"""Slack bot — answers @mentions with a streamed model reply over Socket Mode."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp

from slackrelay.chat.relay import GENERIC_FAILURE_MESSAGE, relay_response
from slackrelay.chat.session_manager import SessionManager

if TYPE_CHECKING:
    from slackrelay.config import Settings
    from slackrelay.providers.base import ChatProvider

logger = logging.getLogger(__name__)

# <@U123>, <#C123|general>, <https://...|label>
TAG_PATTERN = re.compile(r"<[^>]*>")


def clean_mention(text: str | None) -> str:
    """Strip Slack tags (mentions, channel links) from message text."""
    return TAG_PATTERN.sub("", text or "").strip()


class SlackRelayBot:
    """Wires an ``AsyncApp`` to a chat provider.

    Each channel thread is its own conversation, so replies in a thread keep
    their context while separate threads never share history.
    """

    def __init__(
        self,
        settings: "Settings",
        provider: "ChatProvider",
        sessions: SessionManager | None = None,
        app: AsyncApp | None = None,
    ) -> None:
        self.settings = settings
        self.provider = provider
        self.sessions = sessions or SessionManager(
            system_prompt=settings.system_prompt,
            max_turns=settings.max_history_turns,
            ttl=settings.session_ttl_seconds,
            maxsize=settings.max_sessions,
        )
        self.app = app or AsyncApp(token=settings.slack_bot_token)
        self.app.event("app_mention")(self.handle_mention)

    async def handle_mention(self, event: dict, say) -> None:
        """Relay one @mention to the provider and post the reply in-thread."""
        thread_ts = event.get("thread_ts") or event.get("ts")
        channel = event.get("channel", "")

        async def post(sentence: str) -> None:
            await say(text=sentence, thread_ts=thread_ts)

        try:
            message = clean_mention(event.get("text"))
            logger.info("Received message in %s: %s", channel, message)
            if not message:
                return

            key = self.sessions.conversation_key(channel, thread_ts)
            session = self.sessions.get_session(key)
            sentences = await relay_response(session, self.provider, message, post)
            logger.info("Replied with %d sentences", len(sentences))
        except Exception as e:
            logger.error("Error handling app_mention event: %s", e)
            await say(text=GENERIC_FAILURE_MESSAGE, thread_ts=thread_ts)

    async def start(self) -> None:
        """Connect over Socket Mode and serve until cancelled."""
        if not self.settings.slack_app_token:
            raise RuntimeError("Missing required: SLACK_APP_TOKEN")
        handler = AsyncSocketModeHandler(self.app, self.settings.slack_app_token)
        logger.info("Slack bot is running (provider=%s)", self.provider.get_name())
        await handler.start_async()
