"""
Process-scoped resources

Built once at startup and injected into request handlers through
src.depends; nothing here is a module-level singleton.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.services.session_cache import NullSessionCache, RedisSessionCache
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.utils.jwt import TokenCodec
from src.app.services.session_cache import SessionCache
from src.domain import entities  # noqa: F401  registers tables on SQLModel.metadata

logger = logging.getLogger(__name__)


class AppResources:
    """Database engine, session cache and token codec shared by all requests"""

    def __init__(
        self,
        engine: AsyncEngine,
        cache: SessionCache,
        codec: TokenCodec,
    ):
        self.engine = engine
        self.session_factory = sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )
        self.cache = cache
        self.codec = codec

    @classmethod
    async def create(cls, config) -> "AppResources":
        engine = create_async_engine(config.DB_URI, echo=False, future=True)

        if config.CACHE_BACKEND == "redis":
            cache = RedisSessionCache(config.REDIS_URL, default_ttl=config.CACHE_TTL)
            await cache.connect()
        else:
            logger.info("Session cache disabled, identities resolve from the database")
            cache = NullSessionCache()

        resources = cls(engine, cache, TokenCodec.from_config(config))
        if config.AUTO_CREATE_TABLES:
            await resources.create_tables()
        return resources

    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    def unit_of_work(self, session: AsyncSession) -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(session)

    async def close(self) -> None:
        await self.cache.close()
        await self.engine.dispose()
