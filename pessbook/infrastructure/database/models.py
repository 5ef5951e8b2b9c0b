"""SQLAlchemy models for the person registry."""
import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import Date, DateTime, Index, String, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Person(Base):
    """Registered person, linked to the face indexed from their photo."""

    __tablename__ = "people"
    __table_args__ = (
        Index("idx_people_residential_path", "residential_path"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    middle_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    gender: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    occupation: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    religion: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    denomination: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    clan: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    face_id: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
        comment="Face identifier in the recognition collection"
    )
    external_image_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="External image id the face was indexed with"
    )
    s3_image_path: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        comment="S3 key of the registration photo"
    )
    residential_path: Mapped[Optional[str]] = mapped_column(
        String(512),
        nullable=True,
        comment="Colon-delimited geographic location, e.g. PNG:MOMASE:MADANG"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow
    )

    @property
    def full_name(self) -> str:
        """First, middle and last name joined by spaces."""
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(part for part in parts if part)
