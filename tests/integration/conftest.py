import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel import select

from config import ApplicationConfig
from src.adapter.services.resources import AppResources
from src.api.utils.jwt import TokenCodec
from src.domain.entities import Session
from tests.fixtures.clock import FakeClock
from tests.fixtures.session_cache import InMemorySessionCache


class IntegrationConfig(ApplicationConfig):
    ACCESS_EXPIRY = 900
    REFRESH_EXPIRY = 3600
    COOKIE_SECURE = False
    SWEEP_INTERVAL = 0
    ENABLE_LOGGING_MIDDLEWARE = False
    ADMIN_API_KEY = "integration-admin-key"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache():
    return InMemorySessionCache()


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def resources(engine, cache, clock):
    resources = AppResources(
        engine, cache, TokenCodec.from_config(IntegrationConfig, clock=clock)
    )
    await resources.create_tables()
    return resources


@pytest_asyncio.fixture
async def client(resources):
    from src.api.app import create_app

    app = create_app(IntegrationConfig, resources=resources)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def stored_sessions(resources):
    """Reads the sessions table in a fresh database session."""

    async def read():
        async with resources.session_factory() as session:
            result = await session.exec(select(Session))
            return list(result.all())

    return read
