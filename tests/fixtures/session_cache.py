from typing import Dict, Optional
from uuid import UUID

from src.app.services.session_cache import SessionCache
from src.domain.identity import IdentitySnapshot


class InMemorySessionCache(SessionCache):
    """Dict-backed cache so tests can inspect what was cached"""

    def __init__(self):
        self.entries: Dict[UUID, IdentitySnapshot] = {}

    async def get(self, user_id: UUID) -> Optional[IdentitySnapshot]:
        return self.entries.get(user_id)

    async def set(self, snapshot: IdentitySnapshot, ttl: Optional[int] = None) -> None:
        self.entries[snapshot.id] = snapshot

    async def delete(self, user_id: UUID) -> None:
        self.entries.pop(user_id, None)

    async def close(self) -> None:
        self.entries.clear()
