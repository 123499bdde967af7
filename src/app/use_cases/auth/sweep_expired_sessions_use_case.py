"""
Sweep Expired Sessions Use Case

Removes every session whose refresh token expiry has passed.
"""

import logging

from src.api.utils.jwt import TokenCodec
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_from_timestamp
from src.domain.result import Result, Return
from .dtos import SweepExpiredSessionsResponse

logger = logging.getLogger(__name__)


class SweepExpiredSessionsUseCase:
    """
    Business Rules:
    - Single bulk delete across all users
    - Idempotent; safe to run concurrently with sign-in/refresh
    """

    def __init__(self, uow: UnitOfWork, codec: TokenCodec):
        self.uow = uow
        self.codec = codec

    async def execute(self) -> Result[SweepExpiredSessionsResponse]:
        now = utc_from_timestamp(self.codec.now())

        async with self.uow:
            count = await self.uow.sessions.sweep_expired(now)
            await self.uow.commit()

        logger.info(f"Swept {count} expired session(s)")
        return Return.ok(SweepExpiredSessionsResponse(deleted_count=count))
