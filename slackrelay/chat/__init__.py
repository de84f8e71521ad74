from slackrelay.chat.relay import GENERIC_FAILURE_MESSAGE, relay_response
from slackrelay.chat.sentence_buffer import TERMINATORS, SentenceBuffer
from slackrelay.chat.session_manager import ConversationSession, SessionManager
from slackrelay.chat.turns import ConversationTurn, Role

__all__ = [
    "ConversationSession",
    "ConversationTurn",
    "GENERIC_FAILURE_MESSAGE",
    "Role",
    "SentenceBuffer",
    "SessionManager",
    "TERMINATORS",
    "relay_response",
]
