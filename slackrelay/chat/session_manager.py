"""Conversation sessions — one transcript per Slack conversation."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

from cachetools import TTLCache

from slackrelay.chat.turns import ConversationTurn, Role


class ConversationSession:
    """Owns the ordered transcript sent to the provider for one conversation.

    The system turn, when configured, is always at index 0. Trimming drops
    whole exchanges (a user turn and the assistant turns after it), oldest
    first, and never the newest exchange. ``lock`` serialises replies so two
    mentions in one thread cannot interleave their turns.
    """

    def __init__(
        self,
        session_id: str,
        system_prompt: str = "",
        max_turns: int | None = None,
    ) -> None:
        self.session_id = session_id
        self.max_turns = max_turns
        self.lock = asyncio.Lock()
        self.history: list[ConversationTurn] = []
        if system_prompt:
            self.history.append(ConversationTurn.system(system_prompt))

    @property
    def has_system_turn(self) -> bool:
        return bool(self.history) and self.history[0].role == Role.SYSTEM

    def add_user_message(self, content: str) -> None:
        self.history.append(ConversationTurn.user(content))

    def exchanges(self) -> list[list[ConversationTurn]]:
        """Non-system turns grouped so that each group starts at a user turn."""
        head = 1 if self.has_system_turn else 0
        groups: list[list[ConversationTurn]] = []
        for turn in self.history[head:]:
            if turn.role == Role.USER or not groups:
                groups.append([turn])
            else:
                groups[-1].append(turn)
        return groups

    def trim(self) -> None:
        """Drop the oldest exchanges while more than ``max_turns`` turns remain."""
        if not self.max_turns:
            return
        groups = self.exchanges()
        total = sum(len(g) for g in groups)
        while len(groups) > 1 and total > self.max_turns:
            total -= len(groups.pop(0))
        head = self.history[:1] if self.has_system_turn else []
        self.history[:] = head + [turn for group in groups for turn in group]

    def as_messages(self) -> list[dict[str, str]]:
        """Transcript in the ``[{"role", "content"}]`` shape providers expect."""
        return [turn.to_dict() for turn in self.history]


class SessionManager:
    """Maps conversation keys (channel or channel/thread) to sessions.

    Sessions idle for longer than *ttl* seconds are evicted, and at most
    *maxsize* are kept (least recently used go first).
    """

    def __init__(
        self,
        system_prompt: str = "",
        max_turns: int | None = None,
        ttl: float = 3600,
        maxsize: int = 1000,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.system_prompt = system_prompt
        self.max_turns = max_turns
        self.active_sessions: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)

    @staticmethod
    def conversation_key(channel: str, thread_ts: str | None = None) -> str:
        return f"{channel}:{thread_ts}" if thread_ts else channel

    def get_session(self, session_id: str) -> ConversationSession:
        """Get the session for *session_id*, creating one if needed."""
        session = self.active_sessions.get(session_id)
        if session is None:
            session = ConversationSession(
                session_id,
                system_prompt=self.system_prompt,
                max_turns=self.max_turns,
            )
        # Re-inserting restarts the idle timer
        self.active_sessions[session_id] = session
        return session
