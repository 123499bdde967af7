import pytest
from unittest.mock import AsyncMock, MagicMock

from src.api.utils.jwt import TokenCodec
from tests.fixtures.clock import FakeClock

ACCESS_EXPIRY = 900
REFRESH_EXPIRY = 3600


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_email = AsyncMock(return_value=None)
    uow.users.get_by_username = AsyncMock(return_value=None)
    uow.users.get_by_id = AsyncMock(return_value=None)
    uow.users.create = AsyncMock(side_effect=lambda user: user)
    uow.users.update = AsyncMock(side_effect=lambda user: user)

    uow.sessions = MagicMock()
    uow.sessions.create_session = AsyncMock(side_effect=lambda session: session)
    uow.sessions.find_by_credential = AsyncMock(return_value=None)
    uow.sessions.update_session = AsyncMock(return_value=True)
    uow.sessions.delete_session = AsyncMock(return_value=True)
    uow.sessions.sweep_expired = AsyncMock(return_value=0)
    return uow


@pytest.fixture
def mock_cache():
    cache = MagicMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock()
    cache.delete = AsyncMock()
    return cache


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def codec(clock):
    return TokenCodec(
        access_secret="unit-access-secret",
        access_expiry=ACCESS_EXPIRY,
        refresh_secret="unit-refresh-secret",
        refresh_expiry=REFRESH_EXPIRY,
        clock=clock,
    )
