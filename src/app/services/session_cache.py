from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.identity import IdentitySnapshot


class SessionCache(ABC):
    """
    Advisory identity cache - application layer.

    Implementations must never raise: a backend failure is a cache miss.
    """

    @abstractmethod
    async def get(self, user_id: UUID) -> Optional[IdentitySnapshot]:
        """Cached snapshot for a user, or None on miss/outage"""
        pass

    @abstractmethod
    async def set(self, snapshot: IdentitySnapshot, ttl: Optional[int] = None) -> None:
        """Store a snapshot under its user id"""
        pass

    @abstractmethod
    async def delete(self, user_id: UUID) -> None:
        """Drop the cached snapshot for a user"""
        pass
