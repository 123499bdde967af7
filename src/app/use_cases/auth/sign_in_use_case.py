"""
Sign In Use Case

Handles credential check and token issuance.
"""

import logging

import bcrypt

from src.api.utils.jwt import TokenCodec
from src.app.services.session_cache import SessionCache
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_from_timestamp
from src.domain.entities import Session
from src.domain.errors import Forbidden, NotFound
from src.domain.identity import create_identity_snapshot
from src.domain.result import Result, Return
from .dtos import SignInCommand, SignInResponse

logger = logging.getLogger(__name__)


class SignInUseCase:
    """
    Use case for user sign-in.

    Business Rules:
    - User is looked up by email, or by username when no email is given
    - Password verified with bcrypt; a dummy check runs for unknown users
    - Profile setup incomplete: access token only, no session is created
    - Setup complete: refresh token issued and appended as a new session
      carrying device and IP metadata
    """

    def __init__(self, uow: UnitOfWork, cache: SessionCache, codec: TokenCodec):
        self.uow = uow
        self.cache = cache
        self.codec = codec

    async def execute(self, command: SignInCommand) -> Result[SignInResponse]:
        """
        Execute sign-in use case.

        Args:
            command: SignInCommand with email or username, password and device metadata

        Returns:
            Result with SignInResponse, or NotFound(USER_NOT_FOUND) /
            Forbidden(INCORRECT_PASSWORD)
        """
        async with self.uow:
            user = None
            if command.email:
                user = await self.uow.users.get_by_email(command.email)
            elif command.username:
                user = await self.uow.users.get_by_username(command.username.lower())

            if user is None:
                # Hash dummy password to maintain constant time
                bcrypt.checkpw(b"dummy_password", bcrypt.gensalt(12))
                return Return.err(NotFound("USER_NOT_FOUND", "User not exists!"))

            password_valid = bcrypt.checkpw(
                command.password.encode(), user.password_hash.encode()
            )
            if not password_valid:
                return Return.err(Forbidden("INCORRECT_PASSWORD", "Incorrect password!"))

            access = self.codec.issue_access(user.id)
            snapshot = create_identity_snapshot(user)

            if not user.setup:
                return Return.ok(
                    SignInResponse(identity=snapshot, access=access, setup_required=True)
                )

            refresh = self.codec.issue_refresh(user.id)
            session = Session(
                user_id=user.id,
                refresh_token=refresh.token,
                expires_at=utc_from_timestamp(refresh.expires_at),
                device=command.device,
                ip_address=command.ip_address,
                last_used_at=utc_from_timestamp(refresh.issued_at),
            )
            session = await self.uow.sessions.create_session(session)
            await self.uow.commit()

        logger.info(f"User {user.id} signed in, session {session.id}")
        await self.cache.set(snapshot)

        return Return.ok(
            SignInResponse(
                identity=snapshot,
                access=access,
                refresh=refresh,
                session_id=str(session.id),
            )
        )
