"""Shared fixtures and fakes."""
from typing import AsyncGenerator, Dict, List, Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from pessbook.core.exceptions import CollectionNotFoundError, StorageError
from pessbook.core.utils.paths import parent_folder
from pessbook.domain.entities.face import IndexedFace
from pessbook.domain.entities.identity import BlobEntry
from pessbook.domain.interfaces.recognition.face_recognition import FaceRecognitionProvider
from pessbook.domain.interfaces.storage.blob_store import BlobStore
from pessbook.domain.value_objects.recognition import (
    CollectionDescription,
    DetectionResult,
    SearchResult,
)
from pessbook.infrastructure.database.models import Base


class FakeBlobStore(BlobStore):
    """In-memory blob store with presigned-looking URLs."""

    def __init__(
        self,
        blobs: Optional[List[BlobEntry]] = None,
        failing_keys: Optional[Dict[str, Exception]] = None,
        missing_url_keys: Optional[List[str]] = None,
        list_error: Optional[Exception] = None,
    ) -> None:
        self.blobs = blobs or []
        self.failing_keys = failing_keys or {}
        self.missing_url_keys = missing_url_keys or []
        self.list_error = list_error
        self.listed_roots: List[str] = []
        self.url_requests: List[str] = []

    async def list_all_blobs(self, root: str) -> List[BlobEntry]:
        self.listed_roots.append(root)
        if self.list_error:
            raise self.list_error
        return list(self.blobs)

    async def resolve_display_url(self, key: str) -> Optional[str]:
        self.url_requests.append(key)
        if key in self.failing_keys:
            raise self.failing_keys[key]
        if key in self.missing_url_keys:
            return None
        return f"https://bucket.example/{key}?signed"


@pytest.fixture
def make_blob_store():
    """Build a FakeBlobStore with given blobs and failures."""
    return FakeBlobStore


class FakeRecognitionProvider(FaceRecognitionProvider):
    """Recognition provider returning canned results."""

    def __init__(
        self,
        search_result: Optional[SearchResult] = None,
        search_error: Optional[Exception] = None,
        indexed_faces: Optional[List[IndexedFace]] = None,
        index_error: Optional[Exception] = None,
        detection_result: Optional[DetectionResult] = None,
        description: Optional[CollectionDescription] = None,
        collection_faces: Optional[List[IndexedFace]] = None,
        collections: Optional[List[str]] = None,
    ) -> None:
        self.search_result = search_result or SearchResult()
        self.search_error = search_error
        self.indexed_faces = indexed_faces if indexed_faces is not None else []
        self.index_error = index_error
        self.index_calls: List[dict] = []
        self.detection_result = detection_result or DetectionResult(faces=[])
        self.description = description
        self.collection_faces = collection_faces or []
        self.collections = collections if collections is not None else ["PNG"]

    async def search_by_image(self, image_bytes, collection_id, max_candidates, similarity_threshold):
        if self.search_error:
            raise self.search_error
        return self.search_result

    async def index_face(self, image_bytes, collection_id, external_id=None, max_faces=None):
        self.index_calls.append({
            "collection_id": collection_id,
            "external_id": external_id,
            "max_faces": max_faces,
        })
        if self.index_error:
            raise self.index_error
        return self.indexed_faces

    async def detect_faces(self, image_bytes):
        return self.detection_result

    async def list_collections(self):
        return list(self.collections)

    async def describe_collection(self, collection_id):
        if collection_id not in self.collections:
            raise CollectionNotFoundError(f"Collection {collection_id} not found")
        return self.description or CollectionDescription(collection_id=collection_id)

    async def list_faces(self, collection_id, max_results=100):
        if collection_id not in self.collections:
            raise CollectionNotFoundError(f"Collection {collection_id} not found")
        return self.collection_faces[:max_results]


@pytest.fixture
def make_recognition_provider():
    """Build a FakeRecognitionProvider with canned results."""
    return FakeRecognitionProvider


class FakeImageStore:
    """Stand-in for S3Service holding uploaded images in memory."""

    def __init__(self, files: Optional[Dict[str, bytes]] = None) -> None:
        self.files = dict(files or {})
        self.uploads: List[dict] = []

    async def upload_image(self, image_bytes, folder, filename, external_id=None):
        key = f"{folder.strip('/')}/{filename}" if folder.strip("/") else filename
        self.uploads.append({"key": key, "external_id": external_id})
        self.files[key] = image_bytes
        return key

    async def get_file(self, key):
        if key not in self.files:
            raise StorageError(f"File not found: {key}")
        return self.files[key]

    async def list_images(self, prefix="", max_keys=1000):
        keys = [key for key in self.files if key.startswith(prefix)]
        return [{"key": key, "last_modified": None} for key in keys[:max_keys]]

    async def folder_stats(self, prefix=""):
        counts: Dict[str, int] = {}
        for key in self.files:
            if key.startswith(prefix):
                folder = parent_folder(key)
                counts[folder] = counts.get(folder, 0) + 1
        return counts


@pytest.fixture
def image_store() -> FakeImageStore:
    return FakeImageStore()


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Session on a fresh in-memory SQLite person registry."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()
