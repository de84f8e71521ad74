from slackrelay.slack.bot import SlackRelayBot, clean_mention
from slackrelay.slack.uploader import SlackUploader, SlackUploadError, UploadResult

__all__ = [
    "SlackRelayBot",
    "SlackUploadError",
    "SlackUploader",
    "UploadResult",
    "clean_mention",
]
