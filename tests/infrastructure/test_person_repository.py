"""Tests for the person repository and unit of work on SQLite."""
import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from pessbook.infrastructure.database.models import Person
from pessbook.infrastructure.database.unit_of_work import UnitOfWork


def person(face_id, first_name="John", last_name="Doe", residential_path=None):
    return Person(
        first_name=first_name,
        last_name=last_name,
        face_id=face_id,
        external_image_id=f"PNG:{first_name}_{last_name}.jpg",
        s3_image_path=f"PNG/{first_name}_{last_name}.jpg",
        residential_path=residential_path,
    )


async def test_add_assigns_id_and_timestamp(db_session):
    async with UnitOfWork(db_session) as uow:
        stored = await uow.people.add(person("face-1"))

    assert stored.id is not None
    assert stored.created_at is not None
    assert stored.full_name == "John Doe"


async def test_get_by_face_ids(db_session):
    async with UnitOfWork(db_session) as uow:
        await uow.people.add(person("face-1"))
        await uow.people.add(person("face-2", first_name="Mary", last_name="Kila"))

    async with UnitOfWork(db_session) as uow:
        found = await uow.people.get_by_face_ids(["face-2", "face-3"])
        missing = await uow.people.get_by_face_id("face-3")
        empty = await uow.people.get_by_face_ids([])

    assert [p.first_name for p in found] == ["Mary"]
    assert missing is None
    assert empty == []


async def test_list_by_residential_path_includes_sub_paths(db_session):
    async with UnitOfWork(db_session) as uow:
        await uow.people.add(person("face-1", "Zed", "Amos", "PNG:MOMASE:MADANG"))
        await uow.people.add(person("face-2", "Ann", "Amos", "PNG:MOMASE"))
        await uow.people.add(person("face-3", "Bob", "Bau", "PNG:HIGHLANDS"))

    async with UnitOfWork(db_session) as uow:
        people = await uow.people.list_by_residential_path("PNG:MOMASE")

    assert [p.first_name for p in people] == ["Ann", "Zed"]


async def test_duplicate_face_id_is_rejected(db_session):
    async with UnitOfWork(db_session) as uow:
        await uow.people.add(person("face-1"))

    with pytest.raises(IntegrityError):
        async with UnitOfWork(db_session) as uow:
            await uow.people.add(person("face-1", first_name="Other"))


async def test_unit_of_work_rolls_back_on_error(db_session):
    with pytest.raises(RuntimeError):
        async with UnitOfWork(db_session) as uow:
            await uow.people.add(person("face-1"))
            raise RuntimeError("abort")

    async with UnitOfWork(db_session) as uow:
        assert await uow.people.get_by_face_id("face-1") is None


async def test_get_by_id(db_session):
    async with UnitOfWork(db_session) as uow:
        stored = await uow.people.add(person("face-1"))

    async with UnitOfWork(db_session) as uow:
        found = await uow.people.get(stored.id)
        missing = await uow.people.get(uuid.uuid4())

    assert found.face_id == "face-1"
    assert missing is None
