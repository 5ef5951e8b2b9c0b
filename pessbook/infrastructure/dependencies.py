"""FastAPI dependency providers."""
from typing import AsyncGenerator

from fastapi import Depends

from pessbook.core.container import ServiceContainer, container
from pessbook.core.exceptions import ServiceNotInitializedError
from pessbook.services.aws.s3 import S3Service
from pessbook.services.collections import CollectionService
from pessbook.services.face_indexing import FaceIndexingService
from pessbook.services.face_search import FaceSearchService
from pessbook.services.person_registry import PersonRegistryService


async def get_container() -> ServiceContainer:
    """Dependency provider for the global ServiceContainer instance."""
    if not container.initialized:
        # Lifespan did not run, e.g. the app is mounted elsewhere
        try:
            await container.initialize()
        except Exception as e:
            raise ServiceNotInitializedError(f"Service container could not be initialized: {e}") from e
    return container


async def get_s3_service(
    cont: ServiceContainer = Depends(get_container)
) -> AsyncGenerator[S3Service, None]:
    """Provide the initialized S3 storage service.

    Raises:
        ServiceNotInitializedError: If S3 storage service is not initialized
    """
    if cont.s3_service is None:
        raise ServiceNotInitializedError("S3 storage service not initialized")
    yield cont.s3_service


async def get_face_search_service(
    cont: ServiceContainer = Depends(get_container)
) -> AsyncGenerator[FaceSearchService, None]:
    """Dependency provider for FaceSearchService."""
    if cont.face_search_service is None:
        raise ServiceNotInitializedError("FaceSearchService not found in initialized container")
    yield cont.face_search_service


async def get_face_indexing_service(
    cont: ServiceContainer = Depends(get_container)
) -> AsyncGenerator[FaceIndexingService, None]:
    """Dependency provider for FaceIndexingService."""
    if cont.face_indexing_service is None:
        raise ServiceNotInitializedError("FaceIndexingService not found in initialized container")
    yield cont.face_indexing_service


async def get_person_registry_service(
    cont: ServiceContainer = Depends(get_container)
) -> AsyncGenerator[PersonRegistryService, None]:
    """Dependency provider for PersonRegistryService."""
    if cont.person_registry_service is None:
        raise ServiceNotInitializedError("PersonRegistryService not found in initialized container")
    yield cont.person_registry_service


async def get_collection_service(
    cont: ServiceContainer = Depends(get_container)
) -> AsyncGenerator[CollectionService, None]:
    """Dependency provider for CollectionService."""
    if cont.collection_service is None:
        raise ServiceNotInitializedError("CollectionService not found in initialized container")
    yield cont.collection_service
