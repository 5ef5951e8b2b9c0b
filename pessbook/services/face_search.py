"""Face search service for finding registered identities in a collection."""
from typing import Optional

from pessbook.core.config import settings
from pessbook.core.exceptions import NoFaceDetectedError, StorageError
from pessbook.core.logging import get_logger
from pessbook.domain.interfaces.recognition.face_recognition import FaceRecognitionProvider
from pessbook.domain.interfaces.storage.blob_store import BlobStore
from pessbook.domain.value_objects.recognition import DetectionResult, IdentitySearchResult
from pessbook.services.identity import IdentityResolver

logger = get_logger(__name__)


class FaceSearchService:
    """Service for searching a collection and reconciling matches to stored images.

    This service:
    1. Searches the face recognition collection with the query image
    2. Lists the known images under the collection's root folder once
    3. Resolves every match to an image, a name and a folder

    Example:
        ```python
        s3_service = S3Service()
        searcher = FaceSearchService(RekognitionService(), s3_service, IdentityResolver(s3_service))

        result = await searcher.search(image_bytes, collection_id="PNG")
        ```
    """

    def __init__(
        self,
        recognition_provider: FaceRecognitionProvider,
        blob_store: BlobStore,
        resolver: Optional[IdentityResolver] = None,
    ) -> None:
        """Initialize the face search service.

        Args:
            recognition_provider: Provider holding the face collections
            blob_store: Store holding the indexed images
            resolver: Identity resolver, defaults to one over blob_store
        """
        self.recognition_provider = recognition_provider
        self.blob_store = blob_store
        self.resolver = resolver or IdentityResolver(blob_store)

    async def search(
        self,
        image_bytes: bytes,
        collection_id: str,
        max_candidates: int = 10,
        similarity_threshold: Optional[float] = None,
    ) -> IdentitySearchResult:
        """Search a collection for the face in an image.

        Args:
            image_bytes: Raw query image
            collection_id: Collection to search in
            max_candidates: Maximum number of matches
            similarity_threshold: Minimum similarity (0-100)

        Returns:
            IdentitySearchResult with one enriched match per provider match,
            empty when the image has no face

        Raises:
            InvalidImageError: If the provider rejects the image
            CollectionNotFoundError: If the collection does not exist
            RecognitionProviderError: If the provider search fails
            StorageError: If the known images cannot be listed
        """
        threshold = settings.SIMILARITY_THRESHOLD if similarity_threshold is None else similarity_threshold
        root_path = settings.root_folder_for(collection_id)
        empty_result = IdentitySearchResult(collection_id=collection_id, root_path=root_path)

        try:
            search_result = await self.recognition_provider.search_by_image(
                image_bytes, collection_id, max_candidates, threshold
            )
        except NoFaceDetectedError:
            logger.warning("No face detected in query image", collection_id=collection_id)
            return empty_result

        if not search_result.candidates:
            logger.info("No matches in collection", collection_id=collection_id)
            return empty_result.model_copy(update={
                "searched_face_bounding_box": search_result.searched_face_bounding_box,
                "searched_face_confidence": search_result.searched_face_confidence,
            })

        try:
            known_blobs = await self.blob_store.list_all_blobs(root_path)
        except StorageError as e:
            logger.error(
                "Failed to list known images, cannot resolve matches",
                collection_id=collection_id,
                root_path=root_path,
                error=str(e)
            )
            raise

        matches = await self.resolver.resolve_identities(
            search_result.candidates, root_path, known_blobs
        )

        return IdentitySearchResult(
            collection_id=collection_id,
            root_path=root_path,
            searched_face_bounding_box=search_result.searched_face_bounding_box,
            searched_face_confidence=search_result.searched_face_confidence,
            matches=matches,
        )

    async def detect_faces(self, image_bytes: bytes) -> DetectionResult:
        """Detect the faces in an image without searching or storing them.

        Lets a caller check a query image holds a face before searching.
        """
        result = await self.recognition_provider.detect_faces(image_bytes)
        logger.info("Detected faces in image", face_count=len(result.faces))
        return result
