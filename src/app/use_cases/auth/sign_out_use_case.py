"""
Sign Out Use Case

Deletes the caller's own session and drops the cached identity.
"""

import logging
from typing import Optional
from uuid import UUID

from src.api.utils.jwt import (
    InvalidTokenError,
    TokenCodec,
    TokenExpiredError,
    decode_unverified,
)
from src.app.services.session_cache import SessionCache
from src.app.services.unit_of_work import UnitOfWork
from src.domain.identity import IdentitySnapshot
from src.domain.result import Result, Return
from .dtos import SignOutResponse

logger = logging.getLogger(__name__)


class SignOutUseCase:
    """
    Use case for sign-out.

    Business Rules:
    - Always succeeds, even with no cookies present
    - The session is deleted only by its full (session id, refresh token) pair
    - The cached identity is dropped whenever the user is known
    """

    def __init__(self, uow: UnitOfWork, cache: SessionCache, codec: TokenCodec):
        self.uow = uow
        self.cache = cache
        self.codec = codec

    async def execute(
        self,
        identity: Optional[IdentitySnapshot],
        refresh_token: Optional[str],
        session_id: Optional[str],
    ) -> Result[SignOutResponse]:
        """
        Execute sign-out use case.

        Args:
            identity: Identity resolved from the access cookie, if any
            refresh_token: Value of the refresh cookie, if any
            session_id: Value of the session id cookie, if any

        Returns:
            Result with SignOutResponse
        """
        user_id = identity.id if identity else self._subject_from_refresh(refresh_token)
        deleted = False

        if user_id and refresh_token and session_id:
            try:
                session_uuid = UUID(session_id)
            except ValueError:
                session_uuid = None

            if session_uuid:
                async with self.uow:
                    deleted = await self.uow.sessions.delete_session(
                        user_id, session_uuid, refresh_token
                    )
                    await self.uow.commit()

        if user_id:
            await self.cache.delete(user_id)
            logger.info(f"User {user_id} signed out")

        return Return.ok(SignOutResponse(identity=identity, session_deleted=deleted))

    def _subject_from_refresh(self, refresh_token: Optional[str]) -> Optional[UUID]:
        if not refresh_token:
            return None
        try:
            return self.codec.verify_refresh(refresh_token).subject_id
        except TokenExpiredError:
            # Only locates the row; deletion still requires the exact pair
            subject = decode_unverified(refresh_token).subject
        except InvalidTokenError:
            return None

        try:
            return UUID(subject)
        except (TypeError, ValueError):
            return None
