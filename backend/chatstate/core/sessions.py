import logging
from collections import OrderedDict

from chatstate.core.config import settings
from chatstate.services.composer import ConversationSession

logger = logging.getLogger(__name__)


class SessionStore:
    """In-process registry of one ConversationSession per conversation view."""

    def __init__(self, max_sessions: int) -> None:
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, ConversationSession] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, conversation_id: object) -> bool:
        return conversation_id in self._sessions

    def get_or_create(self, conversation_id: str) -> ConversationSession:
        session = self._sessions.get(conversation_id)
        if session is not None:
            self._sessions.move_to_end(conversation_id)
            return session

        session = ConversationSession()
        self._sessions[conversation_id] = session
        if len(self._sessions) > self._max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info("Session limit %d reached; dropped conversation %s", self._max_sessions, evicted)
        return session

    def get(self, conversation_id: str) -> ConversationSession | None:
        return self._sessions.get(conversation_id)

    def discard(self, conversation_id: str) -> bool:
        return self._sessions.pop(conversation_id, None) is not None


_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    global _store
    if _store is None:
        _store = SessionStore(settings.MAX_SESSIONS)
    return _store
