"""Sentence-level buffering for streamed provider responses."""

from __future__ import annotations

import logging
from collections.abc import Callable

from slackrelay.chat.turns import ConversationTurn

logger = logging.getLogger(__name__)

# Longer markers first so that equal start positions resolve to the longer match
TERMINATORS: tuple[str, ...] = ("...", "ㅋㅋ", "ㅎㅎ", "…", ".", "!", "?", "\n")


def _rfind_terminator(text: str) -> tuple[int, str] | None:
    """Return ``(start, terminator)`` of the right-most terminator in *text*."""
    best: tuple[int, str] | None = None
    for marker in TERMINATORS:
        idx = text.rfind(marker)
        if idx != -1 and (best is None or idx > best[0]):
            best = (idx, marker)
    return best


def _find_terminator(text: str) -> tuple[int, str] | None:
    """Return ``(start, terminator)`` of the left-most terminator in *text*."""
    best: tuple[int, str] | None = None
    for marker in TERMINATORS:
        idx = text.find(marker)
        if idx != -1 and (best is None or idx < best[0]):
            best = (idx, marker)
    return best


def split_sentences(text: str) -> list[str]:
    """Split a completed region into sentences, one per terminator, left to right.

    Text after the last terminator in *text* is attached to the final sentence.
    Adjacent terminators each close their own piece (``"Wow!!"`` gives ``"Wow!"``
    and ``"!"``), so the output never depends on where fragments were split.
    Pieces that are empty after trimming (e.g. a bare newline) are dropped.
    """
    sentences: list[str] = []
    rest = text
    while rest:
        found = _find_terminator(rest)
        if found is None:
            tail = rest.strip()
            if tail and sentences:
                sentences[-1] = f"{sentences[-1]}{tail}"
            elif tail:
                sentences.append(tail)
            break

        idx, marker = found
        end = idx + len(marker)
        piece = rest[:end].strip()
        rest = rest[end:]
        if piece:
            sentences.append(piece)
    return sentences


class SentenceBuffer:
    """Accumulates streamed text fragments and emits complete sentences.

    Each sentence is passed to *sink* as soon as its terminator arrives and is
    appended to *transcript* as an assistant turn, so a chat reply can be posted
    piece by piece while the provider is still generating.
    """

    def __init__(
        self,
        sink: Callable[[str], object] | None = None,
        transcript: list[ConversationTurn] | None = None,
    ) -> None:
        self._buffer = ""
        self._sink = sink
        self.transcript: list[ConversationTurn] = (
            transcript if transcript is not None else []
        )
        self.emitted: list[str] = []

    @property
    def pending(self) -> str:
        """Text received but not yet emitted."""
        return self._buffer

    def consume(self, fragment: str) -> list[str]:
        """Add a fragment and return the sentences it completed."""
        if not fragment:
            return []
        self._buffer += fragment
        sentences: list[str] = []

        while True:
            found = _rfind_terminator(self._buffer)
            if found is None:
                break

            idx, marker = found
            cut = idx + len(marker)
            completed = self._buffer[:cut]
            self._buffer = self._buffer[cut:].lstrip()

            for sentence in split_sentences(completed):
                self._emit(sentence)
                sentences.append(sentence)

        return sentences

    def flush(self) -> str | None:
        """Emit and return any remaining text in the buffer."""
        remaining = self._buffer.strip()
        self._buffer = ""
        if not remaining:
            return None
        self._emit(remaining)
        return remaining

    def _emit(self, sentence: str) -> None:
        logger.debug("Emitting sentence (%d chars): %s", len(sentence), sentence[:50])
        self.emitted.append(sentence)
        self.transcript.append(ConversationTurn.assistant(sentence))
        if self._sink is not None:
            self._sink(sentence)
