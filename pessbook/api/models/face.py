"""API specific face models."""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from pessbook.core.config import settings
from pessbook.domain.entities.face import BoundingBox, DetectedFace
from pessbook.domain.value_objects.recognition import (
    DetectionResult,
    IdentitySearchResult,
    IndexResult,
)

# Constants for validation ranges used in API models
MIN_SIMILARITY = 0.0
MAX_SIMILARITY = 100.0
COLLECTION_ID_PATTERN = "^[a-zA-Z0-9_.-]+$"


class FaceSearchRequest(BaseModel):
    """Request model for the /search endpoint."""
    image: str = Field(
        ...,
        description="Base64 encoded query image, a data URL prefix is allowed",
        min_length=1
    )
    collection_id: str = Field(
        ...,
        description="Collection to search in",
        min_length=1, max_length=255, pattern=COLLECTION_ID_PATTERN
    )
    max_faces: int = Field(
        10,
        ge=1,
        le=settings.MAX_MATCHES,
        description=f"Maximum number of matches to return (1-{settings.MAX_MATCHES})"
    )
    face_match_threshold: float = Field(
        70.0,
        description="Minimum similarity score for matches (0 to 100)",
        ge=MIN_SIMILARITY, le=MAX_SIMILARITY
    )


class FaceMatch(BaseModel):
    """API model representing a single resolved face match."""
    face_id: str = Field(..., description="Identifier of the matched face")
    similarity: float = Field(..., description="Similarity score (0 to 100)",
                              ge=MIN_SIMILARITY, le=MAX_SIMILARITY)
    external_image_id: Optional[str] = Field(None, description="External image id of the matched face")
    image_src: str = Field(..., description="URL of the matched image, or the placeholder image")
    folder: str = Field(..., description="Folder the matched image lives in")
    display_name: str = Field(..., description="Best-effort name of the matched person")
    person_info: Optional[Dict[str, Any]] = Field(None, description="Metadata encoded in the external image id")


class FaceSearchResponse(BaseModel):
    """Response model for the /search endpoint."""
    collection_id: str = Field(..., description="Collection that was searched")
    searched_face_bounding_box: Optional[BoundingBox] = Field(
        None, description="Face in the query image that was searched for")
    searched_face_confidence: Optional[float] = Field(None)
    face_matches: List[FaceMatch] = Field(..., description="Matches in provider ranking order")

    @classmethod
    def from_service_response(cls, service_response: IdentitySearchResult) -> "FaceSearchResponse":
        """Convert the service layer result to the API response model."""
        return cls(
            collection_id=service_response.collection_id,
            searched_face_bounding_box=service_response.searched_face_bounding_box,
            searched_face_confidence=service_response.searched_face_confidence,
            face_matches=[
                FaceMatch(
                    face_id=match.face_id,
                    similarity=match.similarity,
                    external_image_id=match.external_id,
                    image_src=match.image_src,
                    folder=match.folder,
                    display_name=match.display_name,
                    person_info=match.person_info,
                )
                for match in service_response.matches
            ],
        )


class FaceIndexingRequest(BaseModel):
    """Request model for the /index endpoint."""
    key: str = Field(
        ...,
        description="S3 object key (path) of the image",
        min_length=1, max_length=1024
    )
    collection_id: str = Field(
        ...,
        description="Collection where faces will be indexed",
        min_length=1, max_length=255, pattern=COLLECTION_ID_PATTERN
    )
    max_faces: Optional[int] = Field(
        5,
        description="Maximum number of faces to index", ge=1, le=100
    )


class FaceRecord(BaseModel):
    """API model for a single indexed face."""
    face_id: str = Field(..., description="Unique identifier for the face")
    bounding_box: BoundingBox = Field(..., description="Face bounding box coordinates")
    confidence: float = Field(..., description="Face detection confidence score")


class FaceIndexingResponse(BaseModel):
    """Response model for the /index endpoint."""
    face_records: List[FaceRecord] = Field(..., description="List of indexed face records")
    image_key: str = Field(..., description="S3 object key (path) of the source image")
    external_image_id: str = Field(..., description="External image id attached to the faces")

    @classmethod
    def from_service_response(cls, service_response: IndexResult) -> "FaceIndexingResponse":
        """Convert the service layer result to the API response model."""
        return cls(
            face_records=[
                FaceRecord(
                    face_id=face.face_id,
                    bounding_box=face.bounding_box,
                    confidence=face.confidence,
                )
                for face in service_response.faces
            ],
            image_key=service_response.image_key,
            external_image_id=service_response.external_id,
        )


class FaceDetectionRequest(BaseModel):
    """Request model for the /detect endpoint."""
    image: str = Field(
        ...,
        description="Base64 encoded image, a data URL prefix is allowed",
        min_length=1
    )


class FaceDetectionResponse(BaseModel):
    """Response model for the /detect endpoint."""
    faces: List[DetectedFace] = Field(..., description="Faces found in the image")
    face_count: int = Field(..., description="Number of faces found")

    @classmethod
    def from_service_response(cls, service_response: DetectionResult) -> "FaceDetectionResponse":
        return cls(faces=service_response.faces, face_count=len(service_response.faces))
