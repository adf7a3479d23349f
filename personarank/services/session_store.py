"""
In-memory conversation store keyed by session id.

Conversations are lost on restart. Sessions idle longer than the TTL are
dropped the next time any session is saved.
"""

from datetime import datetime, timedelta
from typing import Dict, Tuple

from ..models.chat import ConversationState
from .conversation import reset_conversation


class SessionStore:
    """Holds the ConversationState of every active browser session"""

    def __init__(self, ttl_minutes: int = 30):
        self.ttl = timedelta(minutes=ttl_minutes)
        self._sessions: Dict[str, Tuple[ConversationState, datetime]] = {}

    def get(self, session_id: str) -> ConversationState:
        entry = self._sessions.get(session_id)
        return entry[0] if entry else reset_conversation()

    def save(self, session_id: str, state: ConversationState) -> None:
        now = datetime.now()
        self._purge_expired(now)
        self._sessions[session_id] = (state, now)

    def replace(self, session_id: str, expected: ConversationState, state: ConversationState) -> bool:
        """
        Save `state` only if the session still holds `expected`

        Returns False when the session was reset or changed in the meantime;
        nothing is written in that case.
        """
        entry = self._sessions.get(session_id)
        if entry is None or entry[0] is not expected:
            return False
        self.save(session_id, state)
        return True

    def reset(self, session_id: str) -> ConversationState:
        self._sessions.pop(session_id, None)
        return reset_conversation()

    def _purge_expired(self, now: datetime) -> None:
        cutoff = now - self.ttl
        expired = [sid for sid, (_, seen) in self._sessions.items() if seen < cutoff]
        for sid in expired:
            del self._sessions[sid]

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
