"""Service interfaces package."""
from .recognition import FaceRecognitionProvider
from .storage import BlobStore

__all__ = ["BlobStore", "FaceRecognitionProvider"]
