import json
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    slack_bot_token: str = ""
    slack_app_token: str = ""
    slack_channel_id: str = ""
    slack_webhook_url: str = ""
    ai_model: str = "gpt-4o"
    ai_key: str = ""
    ai_endpoint: str = ""
    # Azure AI inference api-version query parameter (provider default when empty)
    ai_api_version: str = ""
    system_prompt: str = "You are a helpful assistant."
    temperature: float = 1.0
    top_p: float = 1.0
    max_tokens: int = 1000
    # Oldest exchanges are dropped once a conversation exceeds this many turns
    max_history_turns: int = 20
    # Idle Slack threads are forgotten after this many seconds
    session_ttl_seconds: int = 3600
    max_sessions: int = 1000
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    # Legacy credential files, read when the matching settings are empty
    slack_info_file: str = "slack_info.json"
    upload_credentials_file: str = "slack_info.txt"
    webhook_file: str = "webhook.txt"

    model_config = {"env_file": ".env", "extra": "ignore"}

    @classmethod
    def from_slack_info(cls, path: str | Path, **overrides) -> "Settings":
        """Build settings from a legacy ``slack_info.json`` credentials file.

        The file holds ``{"chatbot": {"botToken", "appToken"}, "ai": {"model",
        "key", "endpoint"}}``. Keyword *overrides* win over the file.
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        chatbot = data.get("chatbot", {})
        ai = data.get("ai", {})

        values = {
            "slack_bot_token": chatbot.get("botToken", ""),
            "slack_app_token": chatbot.get("appToken", ""),
            "ai_model": ai.get("model", "gpt-4o"),
            "ai_key": ai.get("key", ""),
            "ai_endpoint": ai.get("endpoint", ""),
        }
        values.update(overrides)
        return cls(**values)


def load_upload_credentials(path: str | Path) -> tuple[str, str]:
    """Read the two-line ``slack_info.txt`` file: bot token, then channel id."""
    lines = Path(path).read_text(encoding="utf-8").splitlines()
    if len(lines) < 2:
        raise ValueError(f"{path} must contain a token line and a channel id line")
    return lines[0].strip(), lines[1].strip()


def load_webhook_url(path: str | Path) -> str:
    """Read the incoming-webhook URL from ``webhook.txt``."""
    return Path(path).read_text(encoding="utf-8").strip()


def with_legacy_upload_credentials(settings: Settings) -> Settings:
    """Fill empty upload token, channel and webhook from the legacy text files."""
    updates: dict[str, str] = {}
    credentials = Path(settings.upload_credentials_file)
    if not settings.slack_bot_token and credentials.is_file():
        token, channel_id = load_upload_credentials(credentials)
        updates["slack_bot_token"] = token
        if not settings.slack_channel_id:
            updates["slack_channel_id"] = channel_id
    webhook = Path(settings.webhook_file)
    if not settings.slack_webhook_url and webhook.is_file():
        updates["slack_webhook_url"] = load_webhook_url(webhook)
    return settings.model_copy(update=updates) if updates else settings
