from .face_recognition import FaceRecognitionProvider

__all__ = ["FaceRecognitionProvider"]
