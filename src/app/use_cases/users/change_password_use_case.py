"""
Change Password Use Case

Replaces the password hash of the signed-in user.
"""

import logging
from uuid import UUID

import bcrypt

from src.api.utils.jwt import TokenCodec
from src.app.services.session_cache import SessionCache
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.errors import BadRequest, Forbidden
from src.domain.identity import create_identity_snapshot
from src.domain.result import Result, Return
from .dtos import ChangePasswordCommand, ChangePasswordResponse

logger = logging.getLogger(__name__)


class ChangePasswordUseCase:
    """
    Business Rules:
    - The old password must verify against the stored hash
    - The new password must differ from the old one
    - New hash uses bcrypt cost factor 12
    - Existing sessions are kept; the cached identity and access token are renewed
    """

    def __init__(self, uow: UnitOfWork, cache: SessionCache, codec: TokenCodec):
        self.uow = uow
        self.cache = cache
        self.codec = codec

    async def execute(
        self, user_id: UUID, command: ChangePasswordCommand
    ) -> Result[ChangePasswordResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Forbidden("INVALID_AUTHORIZATION", "Invalid authorization!"))

            if command.old_password == command.new_password:
                return Return.err(
                    BadRequest("SAME_PASSWORD", "Please, choose a different password!")
                )

            if not bcrypt.checkpw(command.old_password.encode(), user.password_hash.encode()):
                return Return.err(Forbidden("INCORRECT_PASSWORD", "Incorrect old password!"))

            password_hash = bcrypt.hashpw(command.new_password.encode("utf-8"), bcrypt.gensalt(12))
            user.password_hash = password_hash.decode("utf-8")
            user.updated_at = utcnow()

            user = await self.uow.users.update(user)
            await self.uow.commit()

        logger.info(f"User {user.id} changed password")
        snapshot = create_identity_snapshot(user)
        await self.cache.set(snapshot)

        access = self.codec.issue_access(user.id)
        return Return.ok(ChangePasswordResponse(identity=snapshot, access=access))
