"""Face recognition value objects."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from pessbook.domain.entities.face import BoundingBox, DetectedFace, IndexedFace
from pessbook.domain.entities.identity import EnrichedMatch, FaceMatchCandidate


class DetectionResult(BaseModel):
    """Result of face detection operation."""
    faces: List[DetectedFace] = Field(..., description="List of detected faces")


class SearchResult(BaseModel):
    """Raw result of a search-by-image call."""
    searched_face_bounding_box: Optional[BoundingBox] = Field(
        None, description="Face in the query image that was searched for")
    searched_face_confidence: Optional[float] = Field(
        None, description="Detection confidence of the searched face")
    candidates: List[FaceMatchCandidate] = Field(
        default_factory=list, description="Matches ordered by descending similarity")


class CollectionDescription(BaseModel):
    """Provider-side details of a face collection."""
    collection_id: str
    face_count: int = Field(0, description="Number of faces stored in the collection")
    face_model_version: Optional[str] = Field(None)
    collection_arn: Optional[str] = Field(None)
    creation_timestamp: Optional[datetime] = Field(None)


class IndexResult(BaseModel):
    """Result of indexing an image into a collection."""
    collection_id: str = Field(..., description="Collection the faces were indexed into")
    image_key: str = Field(..., description="S3 key of the indexed image")
    external_id: str = Field(..., description="External image id attached to the faces")
    faces: List[IndexedFace] = Field(default_factory=list, description="Indexed faces")


class IdentitySearchResult(BaseModel):
    """Search result with every match reconciled to a stored identity."""
    collection_id: str = Field(..., description="Collection that was searched")
    root_path: str = Field(..., description="S3 folder the known images were listed from")
    searched_face_bounding_box: Optional[BoundingBox] = Field(None)
    searched_face_confidence: Optional[float] = Field(None)
    matches: List[EnrichedMatch] = Field(default_factory=list)
