"""Collection browsing service."""
from typing import List

from pessbook.core.config import settings
from pessbook.core.logging import get_logger
from pessbook.core.utils.paths import PATH_SEPARATOR, parse_external_id
from pessbook.domain.interfaces.recognition.face_recognition import FaceRecognitionProvider
from pessbook.services.aws.s3 import S3Service
from pessbook.services.models import CollectionFace, CollectionInfo, CollectionSummary

logger = get_logger(__name__)


class CollectionService:
    """Describes face collections alongside the S3 folders their images live in."""

    def __init__(
        self,
        recognition_provider: FaceRecognitionProvider,
        s3_service: S3Service,
    ) -> None:
        self._recognition_provider = recognition_provider
        self._s3_service = s3_service

    async def list_collections(self) -> List[CollectionSummary]:
        """List every collection with its root folder."""
        collection_ids = await self._recognition_provider.list_collections()
        return [
            CollectionSummary(
                collection_id=collection_id,
                root_folder=settings.root_folder_for(collection_id),
            )
            for collection_id in collection_ids
        ]

    async def collection_info(self, collection_id: str) -> CollectionInfo:
        """Describe a collection and count the images under its root folder.

        Raises:
            CollectionNotFoundError: If the collection does not exist
            RecognitionProviderError: If the provider call fails
            StorageError: If the root folder cannot be listed
        """
        description = await self._recognition_provider.describe_collection(collection_id)
        root_folder = settings.root_folder_for(collection_id)
        folder_counts = await self._s3_service.folder_stats(f"{root_folder.rstrip('/')}/")

        info = CollectionInfo(
            collection_id=collection_id,
            root_folder=root_folder,
            face_count=description.face_count,
            face_model_version=description.face_model_version,
            creation_timestamp=description.creation_timestamp,
            s3_image_count=sum(folder_counts.values()),
            folder_counts=folder_counts,
        )
        logger.info(
            "Described collection",
            collection_id=collection_id,
            face_count=info.face_count,
            s3_image_count=info.s3_image_count
        )
        return info

    async def list_faces(self, collection_id: str, max_results: int = 100) -> List[CollectionFace]:
        """List faces of a collection with the folder and file they were indexed from."""
        faces = await self._recognition_provider.list_faces(collection_id, max_results)

        collection_faces = []
        for face in faces:
            parsed = parse_external_id(face.external_id or "")
            collection_faces.append(CollectionFace(
                face_id=face.face_id,
                external_id=face.external_id,
                confidence=face.confidence,
                folder=PATH_SEPARATOR.join(parsed.display_folders),
                filename=parsed.filename,
            ))
        return collection_faces
