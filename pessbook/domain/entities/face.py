"""Core face domain entities."""
from typing import Optional

from pydantic import BaseModel, Field


class BoundingBox(BaseModel):
    """Face bounding box, as ratios of the overall image size."""
    left: float = Field(..., description="Left coordinate of the bounding box")
    top: float = Field(..., description="Top coordinate of the bounding box")
    width: float = Field(..., description="Width of the bounding box")
    height: float = Field(..., description="Height of the bounding box")


class DetectedFace(BaseModel):
    """Face found in an image, not stored anywhere."""
    confidence: float = Field(..., description="Detection confidence (0-100)")
    bounding_box: BoundingBox = Field(..., description="Bounding box coordinates")


class IndexedFace(BaseModel):
    """Face stored in a recognition collection."""
    face_id: str = Field(..., description="Provider-assigned face identifier")
    external_id: Optional[str] = Field(None, description="External image id attached at index time")
    confidence: float = Field(..., description="Detection confidence (0-100)")
    bounding_box: BoundingBox = Field(..., description="Bounding box coordinates")
