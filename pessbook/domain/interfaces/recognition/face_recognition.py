"""Face recognition provider interface."""
from abc import ABC, abstractmethod
from typing import List, Optional

from ...entities.face import IndexedFace
from ...value_objects.recognition import CollectionDescription, DetectionResult, SearchResult


class FaceRecognitionProvider(ABC):
    """Interface for a hosted face recognition service."""

    @abstractmethod
    async def search_by_image(
        self,
        image_bytes: bytes,
        collection_id: str,
        max_candidates: int,
        similarity_threshold: float,
    ) -> SearchResult:
        """
        Search a collection for faces similar to the largest face in an image.

        Args:
            image_bytes: Raw image data
            collection_id: Collection to search
            max_candidates: Maximum number of matches to return
            similarity_threshold: Minimum similarity score (0-100)

        Returns:
            SearchResult with candidates ordered by descending similarity

        Raises:
            NoFaceDetectedError: If the image contains no face
            InvalidImageError: If the image format is invalid
            CollectionNotFoundError: If the collection does not exist
            RecognitionProviderError: For any other provider failure
        """
        pass

    @abstractmethod
    async def index_face(
        self,
        image_bytes: bytes,
        collection_id: str,
        external_id: Optional[str] = None,
        max_faces: Optional[int] = None,
    ) -> List[IndexedFace]:
        """
        Index the faces of an image into a collection.

        Args:
            image_bytes: Raw image data
            collection_id: Collection to index into
            external_id: Opaque id attached to every indexed face
            max_faces: Maximum number of faces to index (None for provider default)

        Returns:
            The indexed faces, empty if none were found

        Raises:
            InvalidImageError: If the image format is invalid
            CollectionNotFoundError: If the collection does not exist
            RecognitionProviderError: For any other provider failure
        """
        pass

    @abstractmethod
    async def detect_faces(self, image_bytes: bytes) -> DetectionResult:
        """
        Detect faces in an image without storing them.

        Raises:
            InvalidImageError: If the image format is invalid
            RecognitionProviderError: For any other provider failure
        """
        pass

    @abstractmethod
    async def list_collections(self) -> List[str]:
        """List the ids of every collection."""
        pass

    @abstractmethod
    async def describe_collection(self, collection_id: str) -> CollectionDescription:
        """
        Get the face count and model details of a collection.

        Raises:
            CollectionNotFoundError: If the collection does not exist
            RecognitionProviderError: For any other provider failure
        """
        pass

    @abstractmethod
    async def list_faces(self, collection_id: str, max_results: int = 100) -> List[IndexedFace]:
        """
        List faces stored in a collection, in provider order.

        Raises:
            CollectionNotFoundError: If the collection does not exist
            RecognitionProviderError: For any other provider failure
        """
        pass
