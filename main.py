"""Entry point — ``python main.py server`` or ``python main.py bot``."""

import argparse
import asyncio
import logging
import os
from pathlib import Path

import uvicorn

from slackrelay.config import Settings


def load_bot_settings() -> Settings:
    """Environment settings, falling back to the legacy ``slack_info.json``."""
    settings = Settings()
    if not settings.slack_bot_token and Path(settings.slack_info_file).is_file():
        settings = Settings.from_slack_info(settings.slack_info_file)
    return settings


def run_bot() -> None:
    from slackrelay.providers import create_provider
    from slackrelay.slack.bot import SlackRelayBot

    settings = load_bot_settings()
    bot = SlackRelayBot(settings, create_provider(settings))
    asyncio.run(bot.start())


def run_server() -> None:
    settings = Settings()
    port = int(os.environ.get("PORT", settings.port))
    uvicorn.run("slackrelay.api.server:app", host=settings.host, port=port)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Slack relay services")
    parser.add_argument("service", choices=["server", "bot"])
    args = parser.parse_args()

    logging.basicConfig(
        level=Settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.service == "bot":
        run_bot()
    else:
        run_server()
