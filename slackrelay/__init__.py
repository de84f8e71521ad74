"""Slack relay — chat-model replies and file forwarding for Slack."""

__version__ = "0.1.0"
