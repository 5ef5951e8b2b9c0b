"""Tests for the request-scoped registry transaction."""
from contextlib import asynccontextmanager

import pytest

from pessbook.infrastructure.database import session as session_module
from pessbook.infrastructure.database.dependencies import get_uow, registry_transaction
from pessbook.infrastructure.database.models import Person
from pessbook.infrastructure.database.unit_of_work import UnitOfWork


def person(face_id):
    return Person(
        first_name="John",
        last_name="Doe",
        face_id=face_id,
        external_image_id="PNG:John_Doe.jpg",
        s3_image_path="PNG/John_Doe.jpg",
    )


@pytest.fixture
def use_test_session(monkeypatch, db_session):
    @asynccontextmanager
    async def test_session():
        yield db_session

    monkeypatch.setattr(session_module, "get_db_session", test_session)


async def test_transaction_commits_on_success(use_test_session, db_session):
    async with registry_transaction() as uow:
        await uow.people.add(person("face-1"))

    await db_session.rollback()
    async with UnitOfWork(db_session) as uow:
        assert await uow.people.get_by_face_id("face-1") is not None


async def test_transaction_rolls_back_on_error(use_test_session, db_session):
    with pytest.raises(RuntimeError):
        async with registry_transaction() as uow:
            await uow.people.add(person("face-1"))
            raise RuntimeError("request failed")

    async with UnitOfWork(db_session) as uow:
        assert await uow.people.get_by_face_id("face-1") is None


async def test_get_uow_yields_one_unit_of_work(use_test_session, db_session):
    dependency = get_uow()
    uow = await dependency.__anext__()
    await uow.people.add(person("face-2"))

    with pytest.raises(StopAsyncIteration):
        await dependency.__anext__()

    await db_session.rollback()
    async with UnitOfWork(db_session) as check:
        assert await check.people.get_by_face_id("face-2") is not None
