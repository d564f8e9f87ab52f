# digishop/services/session.py
from typing import Dict, Optional
from uuid import UUID
from pydantic import BaseModel
from ..models.profile import Profile

class Session(BaseModel):
    """Authenticated identity plus its profile record"""
    user_id: UUID
    email: str
    profile: Optional[Profile] = None

    @property
    def is_admin(self) -> bool:
        return bool(self.profile and self.profile.is_admin)

class SessionStore:
    """Sessions of every chat user, keyed by Telegram user id.

    One store is built at startup and handed to every handler that needs
    the current identity.
    """

    def __init__(self):
        self._sessions: Dict[int, Session] = {}

    def get(self, chat_user_id: int) -> Optional[Session]:
        return self._sessions.get(chat_user_id)

    def set(self, chat_user_id: int, session: Session):
        self._sessions[chat_user_id] = session

    def update_profile(self, chat_user_id: int, profile: Profile):
        """Replace the cached profile after it was edited"""
        session = self._sessions.get(chat_user_id)
        if session:
            self._sessions[chat_user_id] = session.model_copy(update={'profile': profile})

    def clear(self, chat_user_id: int) -> bool:
        return self._sessions.pop(chat_user_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)
