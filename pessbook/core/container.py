"""Service container for dependency injection."""
from typing import Optional

from pessbook.domain.interfaces.recognition.face_recognition import FaceRecognitionProvider
from pessbook.services.aws.rekognition import RekognitionService
from pessbook.services.aws.s3 import S3Service
from pessbook.services.collections import CollectionService
from pessbook.services.face_indexing import FaceIndexingService
from pessbook.services.face_search import FaceSearchService
from pessbook.services.identity import IdentityResolver
from pessbook.services.person_registry import PersonRegistryService


class ServiceContainer:
    """Container for application services.

    This container manages the lifecycle and dependencies of all services in the application.

    Example:
        ```python
        container = ServiceContainer()
        await container.initialize()

        face_search = container.face_search_service
        ```
    """

    def __init__(self) -> None:
        """Initialize empty container."""
        # Collaborators
        self.s3_service: Optional[S3Service] = None
        self.recognition_provider: Optional[FaceRecognitionProvider] = None

        # Domain services
        self.identity_resolver: Optional[IdentityResolver] = None
        self.face_search_service: Optional[FaceSearchService] = None
        self.face_indexing_service: Optional[FaceIndexingService] = None
        self.person_registry_service: Optional[PersonRegistryService] = None
        self.collection_service: Optional[CollectionService] = None

    @property
    def initialized(self) -> bool:
        return self.face_search_service is not None

    async def initialize(self) -> None:
        """Initialize all services in the correct order."""
        self.s3_service = S3Service()
        self.recognition_provider = RekognitionService()
        self.identity_resolver = IdentityResolver(blob_store=self.s3_service)
        self.face_search_service = FaceSearchService(
            recognition_provider=self.recognition_provider,
            blob_store=self.s3_service,
            resolver=self.identity_resolver,
        )
        self.face_indexing_service = FaceIndexingService(
            s3_service=self.s3_service,
            recognition_provider=self.recognition_provider,
        )
        self.person_registry_service = PersonRegistryService(
            face_indexing_service=self.face_indexing_service,
        )
        self.collection_service = CollectionService(
            recognition_provider=self.recognition_provider,
            s3_service=self.s3_service,
        )

    async def cleanup(self) -> None:
        """Release services in reverse order of initialization."""
        self.collection_service = None
        self.person_registry_service = None
        self.face_indexing_service = None
        self.face_search_service = None
        self.identity_resolver = None

        # aioboto3 clients are closed after every operation
        self.recognition_provider = None
        self.s3_service = None


# Global container instance
container = ServiceContainer()
