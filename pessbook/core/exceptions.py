"""Custom exceptions for the face search service."""
from typing import Optional


class FaceRecognitionError(Exception):
    """Base exception for face search and registration operations."""

    def __init__(self, message: str, details: Optional[dict] = None):
        """
        Initialize face recognition error.

        Args:
            message: Error description
            details: Additional error context
        """
        super().__init__(message)
        self.details = details or {}


class InvalidImageError(FaceRecognitionError):
    """Raised when the provided image is invalid or cannot be processed."""
    pass


class NoFaceDetectedError(FaceRecognitionError):
    """Raised when no face is detected in the image."""
    pass


class RecognitionProviderError(FaceRecognitionError):
    """Raised when the face recognition provider fails."""
    pass


class CollectionNotFoundError(RecognitionProviderError):
    """Raised when attempting to access a non-existent collection."""
    pass


class StorageError(FaceRecognitionError):
    """Raised when the blob store cannot be read or written."""
    pass


class PersonRegistryError(FaceRecognitionError):
    """Raised when a person record cannot be stored or read."""
    pass


class ServiceNotInitializedError(FaceRecognitionError):
    """Raised when a service is requested before the container is initialized."""
    pass


class DuplicatePersonError(PersonRegistryError):
    """Raised when a face is already registered to a person."""
    pass


class PersonNotFoundError(PersonRegistryError):
    """Raised when no person is registered under an id."""
    pass
