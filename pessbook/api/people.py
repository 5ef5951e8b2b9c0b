"""Person registry API endpoints."""
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status

from pessbook.api.models.person import (
    DetailsByFaceIdsRequest,
    PeopleResponse,
    PersonRegistrationRequest,
    PersonRegistrationResponse,
    PersonUpdateResponse,
)
from pessbook.core.exceptions import (
    DuplicatePersonError,
    InvalidImageError,
    NoFaceDetectedError,
    PersonNotFoundError,
    PersonRegistryError,
    RecognitionProviderError,
    StorageError,
)
from pessbook.core.logging import get_logger
from pessbook.core.utils.image import decode_base64_image
from pessbook.infrastructure.database.dependencies import get_uow
from pessbook.infrastructure.database.unit_of_work import UnitOfWork
from pessbook.infrastructure.dependencies import get_person_registry_service
from pessbook.services.models import PersonDetails, PersonUpdate
from pessbook.services.person_registry import PersonRegistryService

logger = get_logger(__name__)
router = APIRouter()


@router.post(
    "/register",
    response_model=PersonRegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a person from a photo",
)
async def register_person(
    request: PersonRegistrationRequest,
    service: PersonRegistryService = Depends(get_person_registry_service),
    uow: UnitOfWork = Depends(get_uow),
) -> PersonRegistrationResponse:
    """Upload the photo, index the face and store the person."""
    try:
        image_bytes = decode_base64_image(request.image)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    details = PersonDetails.model_validate(request.model_dump(exclude={"image"}))
    try:
        person = await service.register(uow, details, image_bytes)
        return PersonRegistrationResponse(person=person)

    except (InvalidImageError, NoFaceDetectedError) as e:
        logger.warning("Registration photo rejected", error=str(e))
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        logger.error("Failed to upload image to S3", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to upload image to S3")
    except RecognitionProviderError as e:
        logger.error("Failed to index face", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to index face")
    except DuplicatePersonError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except PersonRegistryError as e:
        raise HTTPException(status_code=500, detail="Failed to store person") from e


@router.post(
    "/details-by-face-ids",
    response_model=PeopleResponse,
    summary="Look up registered people by face id",
)
async def details_by_face_ids(
    request: DetailsByFaceIdsRequest,
    service: PersonRegistryService = Depends(get_person_registry_service),
    uow: UnitOfWork = Depends(get_uow),
) -> PeopleResponse:
    """Get the registered people behind the face ids of a search result."""
    try:
        people = await service.details_by_face_ids(uow, request.face_ids)
    except PersonRegistryError as e:
        raise HTTPException(status_code=500, detail="Failed to fetch person details") from e
    return PeopleResponse(people=people)


@router.get(
    "/by-location",
    response_model=PeopleResponse,
    summary="List people registered at a location",
)
async def people_by_location(
    residential_path: str = Query(
        ..., min_length=1, description="Colon-delimited location, sub-locations included"),
    service: PersonRegistryService = Depends(get_person_registry_service),
    uow: UnitOfWork = Depends(get_uow),
) -> PeopleResponse:
    try:
        people = await service.people_at(uow, residential_path)
    except PersonRegistryError as e:
        raise HTTPException(status_code=500, detail="Failed to list people") from e
    return PeopleResponse(people=people)


@router.put(
    "/{person_id}",
    response_model=PersonUpdateResponse,
    summary="Update a person's details",
)
async def update_person(
    person_id: uuid.UUID,
    request: PersonUpdate,
    service: PersonRegistryService = Depends(get_person_registry_service),
    uow: UnitOfWork = Depends(get_uow),
) -> PersonUpdateResponse:
    """Change the set fields of a registered person; the photo and face stay as registered."""
    try:
        person = await service.update(uow, person_id, request)
    except PersonNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersonRegistryError as e:
        raise HTTPException(status_code=500, detail="Failed to update person") from e
    return PersonUpdateResponse(person=person)
