from uuid import UUID

from src.app.services.session_cache import SessionCache
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import NotFound
from src.domain.identity import IdentitySnapshot, create_identity_snapshot
from src.domain.result import Result, Return


class ResolveIdentityUseCase:
    """
    Resolve the identity behind a verified access token.

    Cache first; on miss (or cache outage) read the store and repopulate.
    """

    def __init__(self, uow: UnitOfWork, cache: SessionCache):
        self.uow = uow
        self.cache = cache

    async def execute(self, user_id: UUID) -> Result[IdentitySnapshot]:
        cached = await self.cache.get(user_id)
        if cached is not None:
            return Return.ok(cached)

        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(NotFound("USER_NOT_FOUND", "User not exists!"))

            snapshot = create_identity_snapshot(user)

        await self.cache.set(snapshot)
        return Return.ok(snapshot)
