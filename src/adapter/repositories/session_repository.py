from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlmodel import delete, select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import ISessionRepository
from src.domain.entities import Session


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_session(self, session_obj: Session) -> Session:
        """Append a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def find_by_credential(
        self, user_id: UUID, session_id: UUID, refresh_token: str
    ) -> Optional[Session]:
        """Find session by (session_id, refresh_token) within a user's sessions"""
        stmt = select(Session).where(
            Session.id == session_id,
            Session.user_id == user_id,
            Session.refresh_token == refresh_token,
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def update_session(
        self,
        session_id: UUID,
        refresh_token: str,
        new_refresh_token: str,
        new_expires_at: datetime,
        last_used_at: Optional[datetime] = None,
    ) -> bool:
        """
        Compare-and-swap the refresh token.

        The WHERE clause carries the old value, so of two concurrent rotations
        of the same credential only one can match; the other sees rowcount 0.
        """
        values = {"refresh_token": new_refresh_token, "expires_at": new_expires_at}
        if last_used_at is not None:
            values["last_used_at"] = last_used_at

        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.refresh_token == refresh_token)
            .values(**values)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def delete_session(
        self, user_id: UUID, session_id: UUID, refresh_token: str
    ) -> bool:
        """Delete the session matching the full credential"""
        stmt = (
            delete(Session)
            .where(
                Session.id == session_id,
                Session.user_id == user_id,
                Session.refresh_token == refresh_token,
            )
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def sweep_expired(self, now: datetime) -> int:
        """Delete all sessions at or past their expiry, across all users"""
        stmt = delete(Session).where(Session.expires_at <= now)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def get_by_user_id(self, user_id: UUID) -> List[Session]:
        """Get all sessions for a user"""
        stmt = select(Session).where(Session.user_id == user_id)
        result = await self.session.exec(stmt)
        return list(result.all())
