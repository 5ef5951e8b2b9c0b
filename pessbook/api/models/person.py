"""API specific person models."""
from typing import List

from pydantic import BaseModel, Field

from pessbook.services.models import PersonDetails, RegisteredPerson


class PersonRegistrationRequest(PersonDetails):
    """Request model for the /people/register endpoint."""
    image: str = Field(
        ...,
        description="Base64 encoded photo of the person, a data URL prefix is allowed",
        min_length=1
    )


class PersonRegistrationResponse(BaseModel):
    """Response model for the /people/register endpoint."""
    message: str = Field("Person registered successfully")
    person: RegisteredPerson


class DetailsByFaceIdsRequest(BaseModel):
    """Request model for the /people/details-by-face-ids endpoint."""
    face_ids: List[str] = Field(..., min_length=1, description="Face ids to look up")


class PeopleResponse(BaseModel):
    """Registered people found for a set of face ids."""
    people: List[RegisteredPerson] = Field(default_factory=list)


class PersonUpdateResponse(BaseModel):
    """Response model for PUT /people/{person_id}."""
    message: str = Field("Person updated successfully")
    person: RegisteredPerson
