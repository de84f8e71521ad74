"""Slack file uploads and incoming-webhook posts through slack_sdk."""

from __future__ import annotations

import logging

import aiohttp
from pydantic import BaseModel
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient
from slack_sdk.webhook.async_client import AsyncWebhookClient

logger = logging.getLogger(__name__)

NOT_IN_CHANNEL_MESSAGE = "Bot is not in the channel. Please invite the bot to the channel."


class SlackUploadError(RuntimeError):
    """A Slack upload or webhook post failed."""


class UploadResult(BaseModel):
    filename: str
    success: bool
    error: str | None = None


class SlackUploader:
    """Uploads files to one channel and posts to an incoming webhook.

    ``files_upload_v2`` runs the external-upload flow
    (``files.getUploadURLExternal``, the byte upload, then
    ``files.completeUploadExternal``) and shares the file into the channel.
    """

    def __init__(
        self,
        token: str,
        channel_id: str,
        webhook_url: str = "",
        client: AsyncWebClient | None = None,
        webhook_client: AsyncWebhookClient | None = None,
    ) -> None:
        self.channel_id = channel_id
        self.webhook_url = webhook_url
        self._client = client or AsyncWebClient(token=token)
        self._webhook = webhook_client
        if self._webhook is None and webhook_url:
            self._webhook = AsyncWebhookClient(webhook_url)

    async def upload_file(self, filename: str, content: bytes) -> UploadResult:
        """Upload *content* as *filename*; failures become ``success=False``."""
        try:
            await self._client.files_upload_v2(
                channel=self.channel_id,
                file=content,
                filename=filename,
                title=filename,
            )
        except SlackApiError as e:
            error = e.response.get("error")
            logger.error("Failed to upload %s: %s", filename, error)
            message = NOT_IN_CHANNEL_MESSAGE if error == "not_in_channel" else str(error)
            return UploadResult(filename=filename, success=False, error=message)
        except aiohttp.ClientError as e:
            logger.error("Failed to upload %s: %s", filename, e)
            return UploadResult(filename=filename, success=False, error=str(e))

        logger.info("Uploaded %s to channel %s", filename, self.channel_id)
        return UploadResult(filename=filename, success=True)

    async def post_webhook(self, text: str) -> None:
        """Post a plain-text message to the incoming webhook."""
        if self._webhook is None:
            raise SlackUploadError("No webhook URL configured")
        resp = await self._webhook.send(text=text)
        if resp.status_code != 200:
            raise SlackUploadError(f"Webhook returned {resp.status_code}: {resp.body}")
