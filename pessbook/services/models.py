"""Service-specific models.

This module contains models used by services that are independent of the API layer.
"""
import uuid
from datetime import date, datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class PersonDetails(BaseModel):
    """Details captured when a person is registered."""
    first_name: str = Field(..., min_length=1, description="First name")
    middle_name: Optional[str] = Field(None, description="Middle name")
    last_name: str = Field(..., min_length=1, description="Last name")
    gender: Optional[str] = Field(None)
    date_of_birth: Optional[date] = Field(None)
    occupation: Optional[str] = Field(None)
    religion: Optional[str] = Field(None)
    denomination: Optional[str] = Field(None)
    clan: Optional[str] = Field(None)
    residential_path: Optional[str] = Field(
        None, description="Colon-delimited location, e.g. PNG:MOMASE:MADANG")


class RegisteredPerson(PersonDetails):
    """Person as stored in the registry."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID = Field(..., description="Registry identifier")
    face_id: str = Field(..., description="Face identifier in the recognition collection")
    external_image_id: str = Field(..., description="External image id the face was indexed with")
    s3_image_path: str = Field(..., description="S3 key of the registration photo")
    created_at: Optional[datetime] = Field(None)


class PersonUpdate(BaseModel):
    """Editable person details, only the fields that are set are changed."""
    first_name: Optional[str] = Field(None, min_length=1)
    middle_name: Optional[str] = None
    last_name: Optional[str] = Field(None, min_length=1)
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    occupation: Optional[str] = None
    religion: Optional[str] = None
    denomination: Optional[str] = None
    clan: Optional[str] = None
    residential_path: Optional[str] = None


class CollectionSummary(BaseModel):
    """Collection together with the S3 folder holding its images."""
    collection_id: str
    root_folder: str


class CollectionInfo(CollectionSummary):
    """Collection details combined with image counts of its S3 folder."""
    face_count: int = 0
    face_model_version: Optional[str] = None
    creation_timestamp: Optional[datetime] = None
    s3_image_count: int = Field(0, description="Images stored under the root folder")
    folder_counts: Dict[str, int] = Field(
        default_factory=dict, description="Images per folder under the root folder")


class CollectionFace(BaseModel):
    """Face stored in a collection, placed in the folder its image came from."""
    face_id: str
    external_id: Optional[str] = None
    confidence: float
    folder: str = Field("", description="Display folder derived from the external image id")
    filename: str = Field("", description="Image file name derived from the external image id")
