from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.domain.entities import Session


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def create_session(self, session: Session) -> Session:
        """Append a new session for the session's user"""
        pass

    @abstractmethod
    async def find_by_credential(
        self, user_id: UUID, session_id: UUID, refresh_token: str
    ) -> Optional[Session]:
        """Find the session matching the (session_id, refresh_token) pair"""
        pass

    @abstractmethod
    async def update_session(
        self,
        session_id: UUID,
        refresh_token: str,
        new_refresh_token: str,
        new_expires_at: datetime,
        last_used_at: Optional[datetime] = None,
    ) -> bool:
        """
        Replace the refresh token of a session, conditioned on the old value
        still being stored. Must be a single atomic write.
        Returns True only if exactly this caller replaced the value.
        """
        pass

    @abstractmethod
    async def delete_session(
        self, user_id: UUID, session_id: UUID, refresh_token: str
    ) -> bool:
        """Delete the session matching the credential. Returns True if a row was removed."""
        pass

    @abstractmethod
    async def sweep_expired(self, now: datetime) -> int:
        """Delete every session whose expiry has passed. Returns count."""
        pass

    @abstractmethod
    async def get_by_user_id(self, user_id: UUID) -> List[Session]:
        """Get all sessions for a user"""
        pass
