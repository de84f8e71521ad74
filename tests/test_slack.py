"""Tests for the Slack layer — uploader over fake slack_sdk clients, bot handler."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import aiohttp
import pytest
from slack_sdk.errors import SlackApiError
from slack_sdk.webhook.async_client import AsyncWebhookClient

from slackrelay.chat.relay import GENERIC_FAILURE_MESSAGE
from slackrelay.config import Settings
from slackrelay.providers.base import ChatProvider, ProviderConfig
from slackrelay.slack.bot import SlackRelayBot, clean_mention
from slackrelay.slack.uploader import (
    NOT_IN_CHANNEL_MESSAGE,
    SlackUploader,
    SlackUploadError,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class FakeWebClient:
    """Stands in for AsyncWebClient; *errors* maps a filename to a Slack error code."""

    def __init__(self, errors: dict | None = None):
        self.errors = errors or {}
        self.uploads: list[dict] = []

    async def files_upload_v2(self, **kwargs):
        self.uploads.append(kwargs)
        error = self.errors.get(kwargs.get("filename"))
        if isinstance(error, Exception):
            raise error
        if error:
            raise SlackApiError(f"files.completeUploadExternal failed: {error}",
                                {"ok": False, "error": error})
        return {"ok": True, "files": [{"id": "F123"}]}


class FakeWebhookClient:
    """Stands in for AsyncWebhookClient; records every text sent."""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.sent: list[str] = []

    async def send(self, text=None, **kwargs):
        self.sent.append(text)
        body = "ok" if self.status_code == 200 else "invalid_payload"
        return SimpleNamespace(status_code=self.status_code, body=body)


def make_uploader(
    web: FakeWebClient | None = None,
    webhook: FakeWebhookClient | None = None,
) -> SlackUploader:
    return SlackUploader(
        token="xoxb-test",
        channel_id="C42",
        client=web or FakeWebClient(),
        webhook_client=webhook,
    )


# ---------------------------------------------------------------------------
# SlackUploader
# ---------------------------------------------------------------------------

class TestSlackUploader:
    def test_upload_shares_file_into_channel(self):
        web = FakeWebClient()
        result = asyncio.run(make_uploader(web).upload_file("notes.txt", b"hello"))

        assert result.success is True
        assert result.filename == "notes.txt"
        assert web.uploads == [
            {"channel": "C42", "file": b"hello", "filename": "notes.txt", "title": "notes.txt"}
        ]

    def test_not_in_channel(self):
        web = FakeWebClient(errors={"a.pdf": "not_in_channel"})
        result = asyncio.run(make_uploader(web).upload_file("a.pdf", b"%PDF"))
        assert result.success is False
        assert result.error == NOT_IN_CHANNEL_MESSAGE

    def test_other_slack_error(self):
        web = FakeWebClient(errors={"a.pdf": "invalid_auth"})
        result = asyncio.run(make_uploader(web).upload_file("a.pdf", b"%PDF"))
        assert result.success is False
        assert result.error == "invalid_auth"

    def test_transport_error(self):
        web = FakeWebClient(errors={"a.pdf": aiohttp.ClientConnectionError("reset")})
        result = asyncio.run(make_uploader(web).upload_file("a.pdf", b"%PDF"))
        assert result.success is False
        assert "reset" in result.error

    def test_post_webhook(self):
        webhook = FakeWebhookClient()
        asyncio.run(make_uploader(webhook=webhook).post_webhook("hello"))
        assert webhook.sent == ["hello"]

    def test_post_webhook_error_status_raises(self):
        uploader = make_uploader(webhook=FakeWebhookClient(status_code=404))
        with pytest.raises(SlackUploadError, match="404"):
            asyncio.run(uploader.post_webhook("hello"))

    def test_post_webhook_without_url(self):
        with pytest.raises(SlackUploadError):
            asyncio.run(make_uploader().post_webhook("hello"))

    def test_webhook_client_built_from_url(self):
        uploader = SlackUploader(
            token="xoxb-test",
            channel_id="C42",
            webhook_url="https://hooks.slack.com/services/T/B/X",
            client=FakeWebClient(),
        )
        assert isinstance(uploader._webhook, AsyncWebhookClient)
        assert uploader._webhook.url == "https://hooks.slack.com/services/T/B/X"


# ---------------------------------------------------------------------------
# Bot
# ---------------------------------------------------------------------------

class FakeApp:
    """Stands in for AsyncApp; records registered event listeners."""

    def __init__(self):
        self.listeners = {}

    def event(self, name):
        def register(func):
            self.listeners[name] = func
            return func
        return register


class ListProvider(ChatProvider):
    def __init__(self, fragments, error=None):
        super().__init__(ProviderConfig(model="list"))
        self.fragments = fragments
        self.error = error

    async def stream_response(self, history):
        for fragment in self.fragments:
            yield fragment
        if self.error:
            raise self.error


class TestCleanMention:
    def test_strips_user_mention(self):
        assert clean_mention("<@U123ABC> what is Python?") == "what is Python?"

    def test_strips_every_tag(self):
        assert clean_mention("<@U1> see <#C2|general> <https://x.io|x>") == "see"

    def test_none_text(self):
        assert clean_mention(None) == ""


class TestSlackRelayBot:
    def _bot(self, provider) -> tuple[SlackRelayBot, FakeApp]:
        app = FakeApp()
        settings = Settings(_env_file=None, system_prompt="sys", max_history_turns=10)
        return SlackRelayBot(settings, provider, app=app), app

    def _say(self, posted: list):
        async def say(text, thread_ts=None):
            posted.append((text, thread_ts))
        return say

    def test_registers_app_mention(self):
        bot, app = self._bot(ListProvider([]))
        assert app.listeners["app_mention"] == bot.handle_mention

    def test_replies_sentence_by_sentence_in_thread(self):
        posted: list = []
        bot, _ = self._bot(ListProvider(["Hello. How", " can I help?"]))
        event = {"text": "<@UBOT> hi", "channel": "C1", "ts": "111.1"}
        asyncio.run(bot.handle_mention(event=event, say=self._say(posted)))

        assert posted == [("Hello.", "111.1"), ("How can I help?", "111.1")]
        session = bot.sessions.get_session("C1:111.1")
        assert session.as_messages()[1] == {"role": "user", "content": "hi"}

    def test_thread_replies_share_session(self):
        posted: list = []
        bot, _ = self._bot(ListProvider(["Ok."]))
        say = self._say(posted)
        asyncio.run(bot.handle_mention(
            event={"text": "<@UBOT> one", "channel": "C1", "ts": "1.0"}, say=say))
        asyncio.run(bot.handle_mention(
            event={"text": "<@UBOT> two", "channel": "C1", "ts": "2.0", "thread_ts": "1.0"},
            say=say))

        contents = [m["content"] for m in bot.sessions.get_session("C1:1.0").as_messages()]
        assert contents == ["sys", "one", "Ok.", "two", "Ok."]

    def test_empty_message_ignored(self):
        posted: list = []
        bot, _ = self._bot(ListProvider(["never"]))
        asyncio.run(bot.handle_mention(
            event={"text": "<@UBOT>", "channel": "C1", "ts": "1.0"}, say=self._say(posted)))
        assert posted == []

    def test_provider_failure_reports_generic_message(self):
        posted: list = []
        bot, _ = self._bot(ListProvider([], error=RuntimeError("down")))
        asyncio.run(bot.handle_mention(
            event={"text": "<@UBOT> hi", "channel": "C1", "ts": "1.0"}, say=self._say(posted)))
        assert posted == [(GENERIC_FAILURE_MESSAGE, "1.0")]
