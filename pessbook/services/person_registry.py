"""Person registry service for registering people and looking them up by face."""
import time
import uuid
from typing import Callable, List, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from pessbook.core.config import settings
from pessbook.core.exceptions import (
    DuplicatePersonError,
    NoFaceDetectedError,
    PersonNotFoundError,
    PersonRegistryError,
)
from pessbook.core.logging import get_logger
from pessbook.core.utils.paths import build_person_filename, residential_path_to_folder
from pessbook.infrastructure.database.models import Person
from pessbook.infrastructure.database.unit_of_work import UnitOfWork
from pessbook.services.face_indexing import FaceIndexingService
from pessbook.services.models import PersonDetails, PersonUpdate, RegisteredPerson

logger = get_logger(__name__)


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


class PersonRegistryService:
    """Registers people from a photo and resolves face ids to people.

    A registration uploads the photo under the person's residential
    folder, indexes the face into the default collection and records the
    person against the indexed face id.
    """

    def __init__(
        self,
        face_indexing_service: FaceIndexingService,
        clock: Callable[[], int] = _timestamp_ms,
    ) -> None:
        self._face_indexing_service = face_indexing_service
        self._clock = clock

    async def register(
        self,
        uow: UnitOfWork,
        details: PersonDetails,
        image_bytes: bytes,
    ) -> RegisteredPerson:
        """Register a person from their photo.

        Args:
            uow: Unit of work the person is stored in
            details: Person details
            image_bytes: Photo containing the person's face

        Returns:
            The stored person

        Raises:
            NoFaceDetectedError: If no face could be indexed from the photo
            StorageError: If the photo cannot be uploaded
            RecognitionProviderError: If indexing fails
            DuplicatePersonError: If the face is already registered
            PersonRegistryError: If the person cannot be stored
        """
        folder = (
            residential_path_to_folder(details.residential_path)
            if details.residential_path
            else settings.DEFAULT_ROOT_FOLDER
        )
        filename = build_person_filename(details.first_name, details.last_name, self._clock())

        index_result = await self._face_indexing_service.upload_and_index(
            image_bytes,
            folder=folder,
            filename=filename,
            collection_id=settings.DEFAULT_COLLECTION_ID,
            max_faces=1,
        )
        if not index_result.faces:
            raise NoFaceDetectedError(
                "No face found in registration photo",
                {"image_key": index_result.image_key}
            )

        face_id = index_result.faces[0].face_id
        if await uow.people.get_by_face_id(face_id) is not None:
            raise DuplicatePersonError(
                "A person is already registered with this face",
                {"face_id": face_id}
            )

        person = Person(
            **details.model_dump(),
            face_id=face_id,
            external_image_id=index_result.external_id,
            s3_image_path=index_result.image_key,
        )
        try:
            await uow.people.add(person)
        except IntegrityError as e:
            raise DuplicatePersonError(
                "A person is already registered with this face",
                {"face_id": person.face_id}
            ) from e
        except SQLAlchemyError as e:
            logger.error("Failed to store person", error=str(e), exc_info=True)
            raise PersonRegistryError(f"Failed to store person: {e}") from e

        logger.info(
            "Registered person",
            person_id=str(person.id),
            face_id=person.face_id,
            image_key=person.s3_image_path
        )
        return RegisteredPerson.model_validate(person)

    async def details_by_face_ids(
        self,
        uow: UnitOfWork,
        face_ids: Sequence[str],
    ) -> List[RegisteredPerson]:
        """Get the registered people behind a list of face ids."""
        try:
            people = await uow.people.get_by_face_ids(face_ids)
        except SQLAlchemyError as e:
            logger.error("Failed to look up people", error=str(e), exc_info=True)
            raise PersonRegistryError(f"Failed to look up people: {e}") from e

        logger.debug("Looked up people by face ids",
                     requested_count=len(face_ids), found_count=len(people))
        return [RegisteredPerson.model_validate(person) for person in people]

    async def update(
        self,
        uow: UnitOfWork,
        person_id: uuid.UUID,
        changes: PersonUpdate,
    ) -> RegisteredPerson:
        """Change the details of a registered person.

        Only the fields set on ``changes`` are written. The photo, face id
        and external image id stay as registered.

        Raises:
            PersonNotFoundError: If no person has this id
            PersonRegistryError: If the person cannot be stored
        """
        try:
            person = await uow.people.get(person_id)
            if person is None:
                raise PersonNotFoundError(f"Person not found: {person_id}", {"person_id": str(person_id)})

            updates = changes.model_dump(exclude_unset=True)
            for field, value in updates.items():
                setattr(person, field, value)
            await uow.people.save(person)
        except SQLAlchemyError as e:
            logger.error("Failed to update person", person_id=str(person_id), error=str(e), exc_info=True)
            raise PersonRegistryError(f"Failed to update person: {e}") from e

        logger.info("Updated person", person_id=str(person_id), fields=sorted(updates))
        return RegisteredPerson.model_validate(person)

    async def people_at(self, uow: UnitOfWork, residential_path: str) -> List[RegisteredPerson]:
        """Get the people registered at, or below, a residential path."""
        try:
            people = await uow.people.list_by_residential_path(residential_path)
        except SQLAlchemyError as e:
            logger.error("Failed to list people", residential_path=residential_path, error=str(e), exc_info=True)
            raise PersonRegistryError(f"Failed to list people: {e}") from e
        return [RegisteredPerson.model_validate(person) for person in people]
