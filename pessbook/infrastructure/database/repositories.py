"""Database repositories for the person registry."""
import uuid
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pessbook.infrastructure.database.models import Person


class PersonRepository:
    """Repository for registered people."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository.

        Args:
            session: Database session
        """
        self._session = session

    async def add(self, person: Person) -> Person:
        """Stage a new person and flush it so generated columns are populated."""
        self._session.add(person)
        await self._session.flush()
        return person

    async def get(self, person_id: uuid.UUID) -> Optional[Person]:
        """Get a person by registry id."""
        return await self._session.get(Person, person_id)

    async def save(self, person: Person) -> Person:
        """Flush pending changes of a loaded person."""
        await self._session.flush()
        return person

    async def get_by_face_id(self, face_id: str) -> Optional[Person]:
        """Get the person registered with a face id, if any."""
        stmt = select(Person).where(Person.face_id == face_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_face_ids(self, face_ids: Sequence[str]) -> List[Person]:
        """Get the people registered with any of the given face ids.

        Args:
            face_ids: Face identifiers from a search result

        Returns:
            List[Person]: Found people, in no particular order
        """
        if not face_ids:
            return []
        stmt = select(Person).where(Person.face_id.in_(list(face_ids)))
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_residential_path(self, residential_path: str) -> List[Person]:
        """Get the people living at, or below, a residential path."""
        stmt = (
            select(Person)
            .where(Person.residential_path.startswith(residential_path))
            .order_by(Person.last_name, Person.first_name)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
