"""Entities used to reconcile face matches with stored images."""
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class FaceMatchCandidate(BaseModel):
    """Single match returned by a face search, in provider ranking order."""
    model_config = ConfigDict(frozen=True)

    face_id: str = Field(..., description="Opaque provider face identifier")
    similarity: float = Field(..., description="Similarity score", ge=0.0, le=100.0)
    external_id: Optional[str] = Field(None, description="External image id attached at index time")


class BlobEntry(BaseModel):
    """Known image in the blob store."""
    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Full S3 key of the image")
    external_id: Optional[str] = Field(None, description="External image id stored with the object")

    @property
    def lookup_key(self) -> str:
        """Key this entry is indexed under."""
        return self.external_id or self.key


class EnrichedMatch(FaceMatchCandidate):
    """Face match annotated with its best-effort image, name and folder."""
    image_src: str = Field(..., description="Presentable URL of the matched image, or the placeholder")
    folder: str = Field(..., description="Folder the matched image lives in")
    display_name: str = Field(..., description="Human readable name")
    person_info: Optional[Dict[str, Any]] = Field(
        None, description="Structured metadata decoded from the external image id")
    matched_key: Optional[str] = Field(None, description="S3 key the match was resolved to")
    resolved_by: Optional[str] = Field(None, description="Name of the strategy that resolved the match")
