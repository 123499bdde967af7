"""
Session Cache adapters

Redis-backed identity cache. Every backend failure degrades to a cache miss;
the store remains the source of truth.
"""

import logging
from typing import Optional
from uuid import UUID

import redis.asyncio as aioredis
from pydantic import ValidationError
from redis.exceptions import RedisError

from src.app.services.session_cache import SessionCache
from src.domain.identity import IdentitySnapshot

logger = logging.getLogger(__name__)


class RedisSessionCache(SessionCache):
    """
    Identity snapshots stored as JSON under "user:{id}" with a TTL.

    The connection is marked unhealthy on the first failed command. Before the
    next use a PING is attempted; if it fails the call proceeds as a miss.
    """

    KEY_PREFIX = "user:"

    def __init__(
        self,
        redis_url: str,
        default_ttl: int = 1800,
        *,
        socket_timeout: float = 5.0,
        client: Optional[aioredis.Redis] = None,
    ):
        self.redis_url = redis_url
        self.default_ttl = default_ttl
        self.client = client or aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        self.healthy = True

    def _key(self, user_id: UUID) -> str:
        return f"{self.KEY_PREFIX}{user_id}"

    def _mark_unhealthy(self, operation: str, exc: Exception) -> None:
        self.healthy = False
        logger.warning(f"Redis {operation} failed, serving cache miss: {exc}")

    async def connect(self) -> bool:
        """Check connectivity at startup; an unreachable Redis is not fatal."""
        try:
            await self.client.ping()
        except (RedisError, OSError) as exc:
            self._mark_unhealthy("ping", exc)
            return False
        self.healthy = True
        logger.info("Redis connection success!")
        return True

    async def ensure_connection(self) -> bool:
        if self.healthy:
            return True

        logger.warning("Redis is disconnected! Attempting to reconnect...")
        try:
            await self.client.ping()
        except (RedisError, OSError) as exc:
            logger.error(f"Redis reconnection failed! {exc}")
            return False

        self.healthy = True
        logger.info("Redis reconnected successfully!")
        return True

    async def get(self, user_id: UUID) -> Optional[IdentitySnapshot]:
        if not await self.ensure_connection():
            return None
        try:
            data = await self.client.get(self._key(user_id))
        except (RedisError, OSError) as exc:
            self._mark_unhealthy("get", exc)
            return None

        if not data:
            return None
        try:
            return IdentitySnapshot.model_validate_json(data)
        except ValidationError:
            logger.warning(f"Discarding malformed cached identity for {user_id}")
            return None

    async def set(self, snapshot: IdentitySnapshot, ttl: Optional[int] = None) -> None:
        if not await self.ensure_connection():
            return
        try:
            await self.client.set(
                self._key(snapshot.id),
                snapshot.model_dump_json(),
                ex=ttl or self.default_ttl,
            )
        except (RedisError, OSError) as exc:
            self._mark_unhealthy("set", exc)

    async def delete(self, user_id: UUID) -> None:
        if not await self.ensure_connection():
            return
        try:
            await self.client.delete(self._key(user_id))
        except (RedisError, OSError) as exc:
            self._mark_unhealthy("delete", exc)

    async def close(self) -> None:
        """Close Redis connection pool. Call when shutting down."""
        await self.client.aclose()


class NullSessionCache(SessionCache):
    """Cache that always misses (CACHE_BACKEND: none)"""

    async def get(self, user_id: UUID) -> Optional[IdentitySnapshot]:
        return None

    async def set(self, snapshot: IdentitySnapshot, ttl: Optional[int] = None) -> None:
        return None

    async def delete(self, user_id: UUID) -> None:
        return None

    async def close(self) -> None:
        return None
