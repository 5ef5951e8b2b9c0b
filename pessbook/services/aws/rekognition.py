"""
AWS Rekognition implementation of the face recognition provider.

Faces live in Rekognition collections; every indexed face carries an
external image id that ties it back to the S3 image it came from.

Example:
    ```python
    service = RekognitionService()
    result = await service.search_by_image(image_bytes, "PNG", 10, 70)
    for candidate in result.candidates:
        print(candidate.face_id, candidate.similarity, candidate.external_id)
    ```
"""
import re
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional

import aioboto3
from botocore.exceptions import ClientError, NoCredentialsError

from pessbook.core.config import settings
from pessbook.core.exceptions import (
    CollectionNotFoundError,
    FaceRecognitionError,
    InvalidImageError,
    NoFaceDetectedError,
    RecognitionProviderError,
)
from pessbook.core.logging import get_logger
from pessbook.domain.entities.face import BoundingBox, DetectedFace, IndexedFace
from pessbook.domain.entities.identity import FaceMatchCandidate
from pessbook.domain.interfaces.recognition.face_recognition import FaceRecognitionProvider
from pessbook.domain.value_objects.recognition import (
    CollectionDescription,
    DetectionResult,
    SearchResult,
)

logger = get_logger(__name__)

_INVALID_IMAGE_CODES = {"InvalidImageFormatException", "ImageTooLargeException"}
_NO_FACE_MESSAGE = re.compile(r"\bno faces?\b", re.IGNORECASE)


def _to_bounding_box(box: Optional[Dict[str, float]]) -> Optional[BoundingBox]:
    if not box:
        return None
    return BoundingBox(
        left=box.get("Left", 0.0),
        top=box.get("Top", 0.0),
        width=box.get("Width", 0.0),
        height=box.get("Height", 0.0),
    )


def _map_client_error(error: ClientError, collection_id: Optional[str] = None) -> FaceRecognitionError:
    """Translate a Rekognition client error into a service exception."""
    code = error.response.get("Error", {}).get("Code", "")
    message = error.response.get("Error", {}).get("Message", str(error))
    details = {"code": code, "collection_id": collection_id}

    if code == "ResourceNotFoundException":
        return CollectionNotFoundError(f"Collection not found: {collection_id}", details)
    if code in _INVALID_IMAGE_CODES:
        return InvalidImageError(message, details)
    # Rekognition reports an image without faces as an invalid parameter
    if code == "InvalidParameterException" and _NO_FACE_MESSAGE.search(message):
        return NoFaceDetectedError(message, details)
    return RecognitionProviderError(f"Rekognition request failed: {message}", details)


class RekognitionService(FaceRecognitionProvider):
    """Face recognition provider backed by AWS Rekognition collections."""

    def __init__(
        self,
        region_name: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
    ) -> None:
        """Store configuration, clients are opened per operation."""
        self.region_name = region_name or settings.AWS_REGION
        self.access_key_id = access_key_id or settings.AWS_ACCESS_KEY_ID
        self.secret_access_key = secret_access_key or settings.AWS_SECRET_ACCESS_KEY
        self._session = aioboto3.Session()

    @asynccontextmanager
    async def _get_client(self) -> AsyncGenerator[Any, None]:
        """Async context manager yielding a Rekognition client."""
        client_args = {"region_name": self.region_name or "us-east-1"}
        if self.access_key_id and self.secret_access_key:
            client_args["aws_access_key_id"] = self.access_key_id
            client_args["aws_secret_access_key"] = self.secret_access_key

        try:
            async with self._session.client("rekognition", **client_args) as client:
                yield client
        except NoCredentialsError as e:
            logger.error("AWS credentials not found for Rekognition", error=str(e))
            raise RecognitionProviderError("AWS credentials not found or configured correctly.") from e

    async def search_by_image(
        self,
        image_bytes: bytes,
        collection_id: str,
        max_candidates: int,
        similarity_threshold: float,
    ) -> SearchResult:
        """Search a collection with the largest face of an image."""
        logger.info(
            "Searching collection by image",
            collection_id=collection_id,
            max_candidates=max_candidates,
            threshold=similarity_threshold
        )
        try:
            async with self._get_client() as client:
                response = await client.search_faces_by_image(
                    CollectionId=collection_id,
                    Image={"Bytes": image_bytes},
                    MaxFaces=max_candidates,
                    FaceMatchThreshold=similarity_threshold,
                )
        except ClientError as e:
            error = _map_client_error(e, collection_id)
            logger.warning("Face search failed", collection_id=collection_id, error=str(error))
            raise error from e

        candidates = [
            FaceMatchCandidate(
                face_id=match["Face"]["FaceId"],
                similarity=match.get("Similarity", 0.0),
                external_id=match["Face"].get("ExternalImageId"),
            )
            for match in response.get("FaceMatches", [])
            if match.get("Face", {}).get("FaceId")
        ]
        logger.info(
            "Found face matches",
            collection_id=collection_id,
            matches_count=len(candidates)
        )
        return SearchResult(
            searched_face_bounding_box=_to_bounding_box(response.get("SearchedFaceBoundingBox")),
            searched_face_confidence=response.get("SearchedFaceConfidence"),
            candidates=candidates,
        )

    async def index_face(
        self,
        image_bytes: bytes,
        collection_id: str,
        external_id: Optional[str] = None,
        max_faces: Optional[int] = None,
    ) -> List[IndexedFace]:
        """Index the faces of an image into a collection."""
        params: Dict[str, Any] = {
            "CollectionId": collection_id,
            "Image": {"Bytes": image_bytes},
            "DetectionAttributes": ["DEFAULT"],
        }
        if external_id:
            params["ExternalImageId"] = external_id
        if max_faces:
            params["MaxFaces"] = max_faces

        try:
            async with self._get_client() as client:
                response = await client.index_faces(**params)
        except ClientError as e:
            error = _map_client_error(e, collection_id)
            logger.error(
                "Face indexing failed",
                collection_id=collection_id,
                external_id=external_id,
                error=str(error)
            )
            raise error from e

        faces = [
            IndexedFace(
                face_id=record["Face"]["FaceId"],
                external_id=record["Face"].get("ExternalImageId"),
                confidence=record["Face"].get("Confidence", 0.0),
                bounding_box=_to_bounding_box(record["Face"].get("BoundingBox"))
                or BoundingBox(left=0.0, top=0.0, width=0.0, height=0.0),
            )
            for record in response.get("FaceRecords", [])
        ]
        logger.info(
            "Indexed faces",
            collection_id=collection_id,
            external_id=external_id,
            faces_count=len(faces),
            unindexed_count=len(response.get("UnindexedFaces", []))
        )
        return faces

    async def detect_faces(self, image_bytes: bytes) -> DetectionResult:
        """Detect faces without storing them."""
        try:
            async with self._get_client() as client:
                response = await client.detect_faces(
                    Image={"Bytes": image_bytes},
                    Attributes=["DEFAULT"],
                )
        except ClientError as e:
            error = _map_client_error(e)
            logger.error("Face detection failed", error=str(error))
            raise error from e

        faces = [
            DetectedFace(
                confidence=detail.get("Confidence", 0.0),
                bounding_box=_to_bounding_box(detail.get("BoundingBox"))
                or BoundingBox(left=0.0, top=0.0, width=0.0, height=0.0),
            )
            for detail in response.get("FaceDetails", [])
        ]
        return DetectionResult(faces=faces)

    async def list_collections(self) -> List[str]:
        """List the ids of every Rekognition collection."""
        collection_ids: List[str] = []
        try:
            async with self._get_client() as client:
                paginator = client.get_paginator("list_collections")
                async for page in paginator.paginate():
                    collection_ids.extend(page.get("CollectionIds", []))
        except ClientError as e:
            error = _map_client_error(e)
            logger.error("Failed to list collections", error=str(error))
            raise error from e
        return collection_ids

    async def describe_collection(self, collection_id: str) -> CollectionDescription:
        """Get face count and model details of a collection."""
        try:
            async with self._get_client() as client:
                response = await client.describe_collection(CollectionId=collection_id)
        except ClientError as e:
            error = _map_client_error(e, collection_id)
            logger.warning("Failed to describe collection", collection_id=collection_id, error=str(error))
            raise error from e

        return CollectionDescription(
            collection_id=collection_id,
            face_count=response.get("FaceCount", 0),
            face_model_version=response.get("FaceModelVersion"),
            collection_arn=response.get("CollectionARN"),
            creation_timestamp=response.get("CreationTimestamp"),
        )

    async def list_faces(self, collection_id: str, max_results: int = 100) -> List[IndexedFace]:
        """List up to ``max_results`` faces stored in a collection."""
        faces: List[IndexedFace] = []
        try:
            async with self._get_client() as client:
                paginator = client.get_paginator("list_faces")
                async for page in paginator.paginate(
                    CollectionId=collection_id,
                    PaginationConfig={"MaxItems": max_results}
                ):
                    for face in page.get("Faces", []):
                        faces.append(IndexedFace(
                            face_id=face["FaceId"],
                            external_id=face.get("ExternalImageId"),
                            confidence=face.get("Confidence", 0.0),
                            bounding_box=_to_bounding_box(face.get("BoundingBox"))
                            or BoundingBox(left=0.0, top=0.0, width=0.0, height=0.0),
                        ))
        except ClientError as e:
            error = _map_client_error(e, collection_id)
            logger.error("Failed to list faces", collection_id=collection_id, error=str(error))
            raise error from e
        return faces
