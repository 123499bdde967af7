"""
Refresh Session Use Case

The refresh-token state machine: verifies the (refresh token, session id)
credential, rotates the refresh token inside its renewal window, and cleans up
sessions whose refresh token has expired.
"""

import logging
from enum import Enum
from typing import Optional
from uuid import UUID

from src.api.utils.jwt import (
    InvalidTokenError,
    TokenClaims,
    TokenCodec,
    TokenExpiredError,
    decode_unverified,
)
from src.app.services.session_cache import SessionCache
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_from_timestamp
from src.domain.errors import Forbidden, NotFound, Unauthorized
from src.domain.identity import create_identity_snapshot
from src.domain.result import Result, Return
from .dtos import RefreshSessionResponse

logger = logging.getLogger(__name__)


class RefreshState(str, Enum):
    """State of a refresh token whose signature verified"""

    fresh = "fresh"
    renewable = "renewable"
    expired = "expired"


def classify_refresh(expires_at: int, now: int, refresh_expiry: int) -> RefreshState:
    """
    Renewable once the token is in the second half of its lifetime:
    now >= exp - REFRESH_EXPIRY / 2.
    """
    if now >= expires_at:
        return RefreshState.expired
    if now >= expires_at - refresh_expiry / 2:
        return RefreshState.renewable
    return RefreshState.fresh


class RefreshSessionUseCase:
    """
    Use case for refreshing authentication from the refresh cookies.

    Business Rules:
    - Both the refresh token and the session id are required
    - Bad signature -> Forbidden, nothing mutated
    - No session matching (session id, refresh token) -> Forbidden
    - Expired -> session deleted, Unauthorized (login again)
    - Renewable -> refresh token rotated with a conditional update;
      losing a concurrent rotation -> Forbidden, never retried
    - Fresh -> new access token only
    """

    def __init__(self, uow: UnitOfWork, cache: SessionCache, codec: TokenCodec):
        self.uow = uow
        self.cache = cache
        self.codec = codec

    async def execute(
        self, refresh_token: Optional[str], session_id: Optional[str]
    ) -> Result[RefreshSessionResponse]:
        """
        Execute refresh use case.

        Args:
            refresh_token: Value of the refresh cookie
            session_id: Value of the session id cookie

        Returns:
            Result with RefreshSessionResponse, or Unauthorized/Forbidden/NotFound
        """
        if not refresh_token or not session_id:
            return Return.err(
                Unauthorized("MISSING_CREDENTIALS", "Unauthorized refresh request!")
            )

        try:
            claims = self.codec.verify_refresh(refresh_token)
        except TokenExpiredError:
            return await self._revoke_expired(refresh_token, session_id)
        except InvalidTokenError:
            return Return.err(Forbidden("INVALID_TOKEN", "Invalid refresh request!"))

        try:
            session_uuid = UUID(session_id)
        except ValueError:
            return Return.err(Forbidden("INVALID_SESSION", "Invalid user request!"))

        return await self._refresh(claims, refresh_token, session_uuid)

    async def _refresh(
        self, claims: TokenClaims, refresh_token: str, session_id: UUID
    ) -> Result[RefreshSessionResponse]:
        new_refresh = None

        async with self.uow:
            session = await self.uow.sessions.find_by_credential(
                claims.subject_id, session_id, refresh_token
            )
            if session is None:
                return Return.err(Forbidden("INVALID_SESSION", "Invalid user request!"))

            user = await self.uow.users.get_by_id(claims.subject_id)
            if user is None:
                return Return.err(NotFound("USER_NOT_FOUND", "User not exists!"))

            now = self.codec.now()
            state = classify_refresh(claims.expires_at, now, self.codec.refresh_expiry)

            if state == RefreshState.expired:
                # Crossed the expiry between verification and lookup
                await self.uow.sessions.delete_session(user.id, session_id, refresh_token)
                await self.uow.commit()
                return Return.err(
                    Unauthorized("SESSION_EXPIRED", "Please, login again to continue!")
                )

            if state == RefreshState.renewable:
                new_refresh = self.codec.issue_refresh(user.id)
                updated = await self.uow.sessions.update_session(
                    session_id,
                    refresh_token,
                    new_refresh.token,
                    utc_from_timestamp(new_refresh.expires_at),
                    last_used_at=utc_from_timestamp(now),
                )
                if not updated:
                    logger.warning(
                        f"Refresh rotation conflict for session {session_id}"
                    )
                    return Return.err(
                        Forbidden("ROTATION_CONFLICT", "Invalid refresh request!")
                    )
                await self.uow.commit()
                logger.info(f"Rotated refresh token for session {session_id}")

            access = self.codec.issue_access(user.id)
            snapshot = create_identity_snapshot(user)

        await self.cache.set(snapshot)

        return Return.ok(
            RefreshSessionResponse(
                identity=snapshot,
                access=access,
                refresh=new_refresh,
                session_id=str(session_id),
                rotated=new_refresh is not None,
            )
        )

    async def _revoke_expired(
        self, refresh_token: str, session_id: str
    ) -> Result[RefreshSessionResponse]:
        """Delete the session of an expired refresh token and reject."""
        expired = Unauthorized("SESSION_EXPIRED", "Please, login again to continue!")

        # Signature already verified by the codec; the claims only locate the row
        unverified = decode_unverified(refresh_token)
        try:
            user_id = UUID(unverified.subject)
            session_uuid = UUID(session_id)
        except (TypeError, ValueError):
            return Return.err(expired)

        async with self.uow:
            deleted = await self.uow.sessions.delete_session(
                user_id, session_uuid, refresh_token
            )
            await self.uow.commit()

        if deleted:
            logger.info(f"Deleted expired session {session_uuid}")
        return Return.err(expired)
