"""
Profile Setup Use Case

Fills in the profile and flips the setup flag that gates session creation.
"""

from uuid import UUID

from src.api.utils.jwt import TokenCodec
from src.app.repositories.user_repository import DuplicateUserError
from src.app.services.session_cache import SessionCache
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.errors import Conflict, NotFound
from src.domain.identity import create_identity_snapshot
from src.domain.result import Result, Return
from .dtos import ProfileSetupCommand, ProfileSetupResponse


class ProfileSetupUseCase:
    """
    Business Rules:
    - Username is stored lowercase without spaces and must be unique
    - setup becomes True once name, username and gender are all filled in
    - The cached identity is refreshed so readers never see the old profile
    - A new access token is issued when the profile is complete
    """

    def __init__(self, uow: UnitOfWork, cache: SessionCache, codec: TokenCodec):
        self.uow = uow
        self.cache = cache
        self.codec = codec

    async def execute(
        self, user_id: UUID, command: ProfileSetupCommand
    ) -> Result[ProfileSetupResponse]:
        username = "".join(command.username.split()).lower() if command.username else None

        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(NotFound("USER_NOT_FOUND", "User not exists!"))

            if username and username != user.username:
                existing = await self.uow.users.get_by_username(username)
                if existing is not None:
                    return Return.err(
                        Conflict("USERNAME_ALREADY_EXISTS", "Username already exists!")
                    )

            user.name = command.name or user.name
            user.username = username or user.username
            user.gender = command.gender or user.gender
            if command.bio is not None:
                user.bio = command.bio

            if user.name and user.username and user.gender:
                user.setup = True
            user.updated_at = utcnow()

            try:
                user = await self.uow.users.update(user)
            except DuplicateUserError:
                return Return.err(
                    Conflict("USERNAME_ALREADY_EXISTS", "Username already exists!")
                )
            await self.uow.commit()

        snapshot = create_identity_snapshot(user)
        await self.cache.set(snapshot)

        if not user.setup:
            return Return.ok(ProfileSetupResponse(identity=snapshot))

        access = self.codec.issue_access(user.id)
        return Return.ok(ProfileSetupResponse(identity=snapshot, access=access))
