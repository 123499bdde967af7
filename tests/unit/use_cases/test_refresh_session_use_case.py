from datetime import datetime
from uuid import UUID, uuid4

import pytest

from src.api.utils.jwt import TokenCodec
from src.app.use_cases.auth import RefreshSessionUseCase, RefreshState, classify_refresh
from src.domain.base import utc_from_timestamp
from src.domain.entities import Gender, Session, User
from src.domain.errors import Forbidden, NotFound, Unauthorized


@pytest.fixture
def user():
    return User(
        id=uuid4(),
        email="user@acme.com",
        username="user",
        password_hash="hash",
        name="Test User",
        gender=Gender.female,
        setup=True,
    )


@pytest.fixture
def signed_in(codec, user, mock_uow):
    """A session created at the clock's start, found by the repository."""
    refresh = codec.issue_refresh(user.id)
    session = Session(
        id=uuid4(),
        user_id=user.id,
        refresh_token=refresh.token,
        expires_at=utc_from_timestamp(refresh.expires_at),
    )
    mock_uow.sessions.find_by_credential.return_value = session
    mock_uow.users.get_by_id.return_value = user
    return refresh, session


@pytest.mark.parametrize(
    "now, expected",
    [
        (1700, RefreshState.fresh),
        (1799, RefreshState.fresh),
        (1800, RefreshState.renewable),
        (1900, RefreshState.renewable),
        (3599, RefreshState.renewable),
        (3600, RefreshState.expired),
        (3700, RefreshState.expired),
    ],
)
def test_classify_refresh(now, expected):
    assert classify_refresh(expires_at=3600, now=now, refresh_expiry=3600) == expected


@pytest.mark.asyncio
@pytest.mark.parametrize("refresh_token, session_id", [(None, "sid"), ("token", None), ("", "")])
async def test_missing_credentials(mock_uow, mock_cache, codec, refresh_token, session_id):
    use_case = RefreshSessionUseCase(mock_uow, mock_cache, codec)

    result = await use_case.execute(refresh_token, session_id)

    assert result.is_err()
    assert isinstance(result.error, Unauthorized)
    assert result.error.code == "MISSING_CREDENTIALS"
    mock_uow.sessions.find_by_credential.assert_not_awaited()


@pytest.mark.asyncio
async def test_bad_signature_is_forbidden_and_mutates_nothing(mock_uow, mock_cache, codec, clock):
    forger = TokenCodec("forged-access", 900, "forged-refresh", 3600, clock=clock)
    forged = forger.issue_refresh(uuid4())
    use_case = RefreshSessionUseCase(mock_uow, mock_cache, codec)

    result = await use_case.execute(forged.token, str(uuid4()))

    assert isinstance(result.error, Forbidden)
    assert result.error.code == "INVALID_TOKEN"
    mock_uow.sessions.find_by_credential.assert_not_awaited()
    mock_uow.sessions.delete_session.assert_not_awaited()
    mock_uow.sessions.update_session.assert_not_awaited()


@pytest.mark.asyncio
async def test_access_token_cannot_refresh(mock_uow, mock_cache, codec, user):
    access = codec.issue_access(user.id)
    use_case = RefreshSessionUseCase(mock_uow, mock_cache, codec)

    result = await use_case.execute(access.token, str(uuid4()))

    assert isinstance(result.error, Forbidden)
    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_unknown_session_is_forbidden(mock_uow, mock_cache, codec, user, signed_in):
    refresh, _ = signed_in
    mock_uow.sessions.find_by_credential.return_value = None
    other_session_id = uuid4()
    use_case = RefreshSessionUseCase(mock_uow, mock_cache, codec)

    result = await use_case.execute(refresh.token, str(other_session_id))

    assert isinstance(result.error, Forbidden)
    assert result.error.code == "INVALID_SESSION"
    mock_uow.sessions.find_by_credential.assert_awaited_once_with(
        user.id, other_session_id, refresh.token
    )
    mock_uow.sessions.update_session.assert_not_awaited()


@pytest.mark.asyncio
async def test_malformed_session_id_is_forbidden(mock_uow, mock_cache, codec, signed_in):
    refresh, _ = signed_in
    use_case = RefreshSessionUseCase(mock_uow, mock_cache, codec)

    result = await use_case.execute(refresh.token, "not-a-uuid")

    assert isinstance(result.error, Forbidden)
    assert result.error.code == "INVALID_SESSION"
    mock_uow.sessions.find_by_credential.assert_not_awaited()


@pytest.mark.asyncio
async def test_fresh_token_only_issues_access(mock_uow, mock_cache, codec, clock, user, signed_in):
    refresh, session = signed_in
    clock.advance(1700)
    use_case = RefreshSessionUseCase(mock_uow, mock_cache, codec)

    result = await use_case.execute(refresh.token, str(session.id))

    assert result.is_ok()
    data = result.value
    assert data.rotated is False
    assert data.refresh is None
    assert data.session_id == str(session.id)
    assert codec.verify_access(data.access.token).subject_id == user.id
    assert data.identity.id == user.id
    mock_uow.sessions.update_session.assert_not_awaited()
    mock_uow.commit.assert_not_awaited()
    mock_cache.set.assert_awaited_once_with(data.identity)


@pytest.mark.asyncio
async def test_renewable_token_is_rotated(mock_uow, mock_cache, codec, clock, user, signed_in):
    refresh, session = signed_in
    clock.advance(1900)
    use_case = RefreshSessionUseCase(mock_uow, mock_cache, codec)

    result = await use_case.execute(refresh.token, str(session.id))

    assert result.is_ok()
    data = result.value
    assert data.rotated is True
    assert data.refresh.token != refresh.token
    assert data.refresh.expires_at == refresh.issued_at + 1900 + 3600
    assert data.session_id == str(session.id)

    mock_uow.sessions.update_session.assert_awaited_once()
    args, kwargs = mock_uow.sessions.update_session.await_args
    assert args == (
        session.id,
        refresh.token,
        data.refresh.token,
        utc_from_timestamp(data.refresh.expires_at),
    )
    assert isinstance(kwargs["last_used_at"], datetime)
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_lost_rotation_race_is_forbidden(mock_uow, mock_cache, codec, clock, signed_in):
    refresh, session = signed_in
    mock_uow.sessions.update_session.return_value = False
    clock.advance(1900)
    use_case = RefreshSessionUseCase(mock_uow, mock_cache, codec)

    result = await use_case.execute(refresh.token, str(session.id))

    assert isinstance(result.error, Forbidden)
    assert result.error.code == "ROTATION_CONFLICT"
    mock_uow.sessions.update_session.assert_awaited_once()
    mock_uow.commit.assert_not_awaited()
    mock_cache.set.assert_not_awaited()


@pytest.mark.asyncio
async def test_expired_token_deletes_session(mock_uow, mock_cache, codec, clock, user, signed_in):
    refresh, session = signed_in
    clock.advance(3700)
    use_case = RefreshSessionUseCase(mock_uow, mock_cache, codec)

    result = await use_case.execute(refresh.token, str(session.id))

    assert isinstance(result.error, Unauthorized)
    assert result.error.code == "SESSION_EXPIRED"
    mock_uow.sessions.delete_session.assert_awaited_once_with(
        user.id, session.id, refresh.token
    )
    mock_uow.commit.assert_awaited_once()
    mock_uow.sessions.find_by_credential.assert_not_awaited()


@pytest.mark.asyncio
async def test_expired_token_cleanup_is_idempotent(mock_uow, mock_cache, codec, clock, signed_in):
    refresh, session = signed_in
    clock.advance(3700)
    use_case = RefreshSessionUseCase(mock_uow, mock_cache, codec)

    first = await use_case.execute(refresh.token, str(session.id))
    mock_uow.sessions.delete_session.return_value = False
    second = await use_case.execute(refresh.token, str(session.id))

    assert first.error.code == "SESSION_EXPIRED"
    assert second.error.code == "SESSION_EXPIRED"
    assert isinstance(second.error, Unauthorized)


@pytest.mark.asyncio
async def test_expired_token_with_malformed_session_id(mock_uow, mock_cache, codec, clock, signed_in):
    refresh, _ = signed_in
    clock.advance(3700)
    use_case = RefreshSessionUseCase(mock_uow, mock_cache, codec)

    result = await use_case.execute(refresh.token, "not-a-uuid")

    assert result.error.code == "SESSION_EXPIRED"
    mock_uow.sessions.delete_session.assert_not_awaited()


@pytest.mark.asyncio
async def test_deleted_user_is_not_found(mock_uow, mock_cache, codec, signed_in):
    refresh, session = signed_in
    mock_uow.users.get_by_id.return_value = None
    use_case = RefreshSessionUseCase(mock_uow, mock_cache, codec)

    result = await use_case.execute(refresh.token, str(session.id))

    assert isinstance(result.error, NotFound)
    assert result.error.code == "USER_NOT_FOUND"


@pytest.mark.asyncio
async def test_session_id_is_parsed_as_uuid(mock_uow, mock_cache, codec, signed_in):
    refresh, session = signed_in
    use_case = RefreshSessionUseCase(mock_uow, mock_cache, codec)

    await use_case.execute(refresh.token, str(session.id))

    _, session_id, _ = mock_uow.sessions.find_by_credential.await_args.args
    assert isinstance(session_id, UUID)
