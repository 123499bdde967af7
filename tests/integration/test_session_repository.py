from datetime import timedelta
from uuid import uuid4

import pytest

from src.domain.base import utcnow
from src.domain.entities import Session, User


@pytest.fixture
def new_session():
    async def create(resources, expires_in: int = 3600, expires_at=None):
        async with resources.session_factory() as db:
            uow = resources.unit_of_work(db)
            async with uow:
                user = await uow.users.create(
                    User(email=f"{uuid4().hex}@acme.com", password_hash="hash")
                )
                session = await uow.sessions.create_session(
                    Session(
                        user_id=user.id,
                        refresh_token="refresh-v1",
                        expires_at=expires_at or utcnow() + timedelta(seconds=expires_in),
                    )
                )
                await uow.commit()
        return session

    return create


@pytest.mark.asyncio
async def test_update_session_is_compare_and_swap(resources, new_session):
    session = await new_session(resources)
    new_expiry = utcnow() + timedelta(hours=2)

    async with resources.session_factory() as db:
        uow = resources.unit_of_work(db)
        async with uow:
            first = await uow.sessions.update_session(
                session.id, "refresh-v1", "refresh-v2", new_expiry
            )
            second = await uow.sessions.update_session(
                session.id, "refresh-v1", "refresh-v3", new_expiry
            )
            await uow.commit()

    assert first is True
    assert second is False

    async with resources.session_factory() as db:
        uow = resources.unit_of_work(db)
        async with uow:
            stored = await uow.sessions.find_by_credential(
                session.user_id, session.id, "refresh-v2"
            )
            stale = await uow.sessions.find_by_credential(
                session.user_id, session.id, "refresh-v1"
            )
            assert stored is not None
            assert stored.expires_at == new_expiry
            assert stale is None


@pytest.mark.asyncio
async def test_stale_value_cannot_rotate_in_a_later_transaction(resources, new_session):
    session = await new_session(resources)
    new_expiry = utcnow() + timedelta(hours=2)
    outcomes = []

    for candidate in ("refresh-a", "refresh-b"):
        async with resources.session_factory() as db:
            uow = resources.unit_of_work(db)
            async with uow:
                updated = await uow.sessions.update_session(
                    session.id, "refresh-v1", candidate, new_expiry
                )
                await uow.commit()
                outcomes.append(updated)

    assert outcomes == [True, False]


@pytest.mark.asyncio
async def test_delete_session_requires_full_credential(resources, new_session):
    session = await new_session(resources)

    async with resources.session_factory() as db:
        uow = resources.unit_of_work(db)
        async with uow:
            wrong_user = await uow.sessions.delete_session(uuid4(), session.id, "refresh-v1")
            wrong_token = await uow.sessions.delete_session(
                session.user_id, session.id, "refresh-v0"
            )
            deleted = await uow.sessions.delete_session(
                session.user_id, session.id, "refresh-v1"
            )
            deleted_again = await uow.sessions.delete_session(
                session.user_id, session.id, "refresh-v1"
            )
            await uow.commit()

    assert (wrong_user, wrong_token, deleted, deleted_again) == (False, False, True, False)


@pytest.mark.asyncio
async def test_sweep_expired_spans_all_users(resources, new_session):
    await new_session(resources, expires_in=-60)
    await new_session(resources, expires_in=-30)
    alive = await new_session(resources, expires_in=3600)

    async with resources.session_factory() as db:
        uow = resources.unit_of_work(db)
        async with uow:
            count = await uow.sessions.sweep_expired(utcnow())
            await uow.commit()
            remaining = await uow.sessions.get_by_user_id(alive.user_id)
            remaining_ids = [s.id for s in remaining]

    assert count == 2
    assert remaining_ids == [alive.id]


@pytest.mark.asyncio
async def test_sweep_deletes_session_expiring_exactly_now(resources, new_session):
    now = utcnow().replace(microsecond=0)
    boundary = await new_session(resources, expires_at=now)
    later = await new_session(resources, expires_at=now + timedelta(seconds=1))

    async with resources.session_factory() as db:
        uow = resources.unit_of_work(db)
        async with uow:
            count = await uow.sessions.sweep_expired(now)
            await uow.commit()
            boundary_left = await uow.sessions.get_by_user_id(boundary.user_id)
            later_left = [s.id for s in await uow.sessions.get_by_user_id(later.user_id)]

    assert count == 1
    assert boundary_left == []
    assert later_left == [later.id]
