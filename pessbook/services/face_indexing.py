"""Face indexing service for adding stored images to a collection."""
from typing import Optional

from pessbook.core.config import settings
from pessbook.core.exceptions import (
    InvalidImageError,
    RecognitionProviderError,
    StorageError,
)
from pessbook.core.logging import get_logger
from pessbook.core.utils.paths import s3_path_to_external_id
from pessbook.domain.interfaces.recognition.face_recognition import FaceRecognitionProvider
from pessbook.domain.value_objects.recognition import IndexResult
from pessbook.services.aws.s3 import S3Service

logger = get_logger(__name__)


class FaceIndexingService:
    """Service for indexing faces of stored images.

    Every face is indexed with the external image id derived from the S3
    key of its image, which is what lets search results find their way
    back to the image.

    Example:
        ```python
        service = FaceIndexingService(S3Service(), RekognitionService())

        result = await service.index_stored_image(
            key="PNG/MOMASE/MADANG/John_Doe.jpg",
            collection_id="PNG",
        )
        ```
    """

    def __init__(
        self,
        s3_service: S3Service,
        recognition_provider: FaceRecognitionProvider,
    ) -> None:
        """Initialize the face indexing service.

        Args:
            s3_service: Service for S3 operations
            recognition_provider: Provider holding the face collections
        """
        self._s3_service = s3_service
        self._recognition_provider = recognition_provider

    async def index_stored_image(
        self,
        key: str,
        collection_id: str,
        max_faces: Optional[int] = None,
    ) -> IndexResult:
        """Index the faces of an image already stored in S3.

        Args:
            key: S3 object key (path) of the image
            collection_id: Collection the faces are indexed into
            max_faces: Maximum number of faces to index

        Returns:
            IndexResult with the indexed faces, empty if none were found

        Raises:
            StorageError: If the image cannot be retrieved from S3
            InvalidImageError: If the provider rejects the image
            RecognitionProviderError: If indexing fails
        """
        image_bytes = await self._s3_service.get_file(key)
        if not image_bytes:
            raise StorageError(f"Image is empty: {key}")
        return await self._index(image_bytes, key, collection_id, max_faces)

    async def upload_and_index(
        self,
        image_bytes: bytes,
        folder: str,
        filename: str,
        collection_id: str,
        max_faces: Optional[int] = None,
    ) -> IndexResult:
        """Upload an image into a folder, then index its faces.

        Raises:
            StorageError: If the upload fails
            InvalidImageError: If the provider rejects the image
            RecognitionProviderError: If indexing fails
        """
        key_preview = f"{folder.strip('/')}/{filename}" if folder.strip('/') else filename
        external_id = s3_path_to_external_id(key_preview)
        key = await self._s3_service.upload_image(
            image_bytes, folder, filename, external_id=external_id)
        return await self._index(image_bytes, key, collection_id, max_faces)

    async def _index(
        self,
        image_bytes: bytes,
        key: str,
        collection_id: str,
        max_faces: Optional[int],
    ) -> IndexResult:
        external_id = s3_path_to_external_id(key)
        try:
            faces = await self._recognition_provider.index_face(
                image_bytes,
                collection_id,
                external_id=external_id,
                max_faces=max_faces or settings.MAX_FACES_PER_IMAGE,
            )
        except InvalidImageError as e:
            logger.error("Invalid image format", error=str(e), key=key)
            raise
        except RecognitionProviderError as e:
            logger.error(
                "Failed to index faces",
                error=str(e),
                key=key,
                collection_id=collection_id
            )
            raise

        if not faces:
            logger.warning("No faces detected in image", key=key, collection_id=collection_id)
        else:
            logger.info(
                "Successfully indexed faces",
                key=key,
                collection_id=collection_id,
                external_id=external_id,
                faces_count=len(faces)
            )

        return IndexResult(
            collection_id=collection_id,
            image_key=key,
            external_id=external_id,
            faces=faces,
        )
