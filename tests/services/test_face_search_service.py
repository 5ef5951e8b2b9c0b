"""Tests for the face search service."""
import pytest

from pessbook.core.config import settings
from pessbook.core.exceptions import CollectionNotFoundError, NoFaceDetectedError, StorageError
from pessbook.domain.entities.face import BoundingBox
from pessbook.domain.entities.identity import BlobEntry, FaceMatchCandidate
from pessbook.domain.value_objects.recognition import SearchResult
from pessbook.services.face_search import FaceSearchService

BOX = BoundingBox(left=0.1, top=0.2, width=0.3, height=0.4)


def search_result(*candidates):
    return SearchResult(
        searched_face_bounding_box=BOX,
        searched_face_confidence=99.5,
        candidates=list(candidates),
    )


async def test_search_resolves_matches_against_collection_root(
    make_recognition_provider, make_blob_store
):
    provider = make_recognition_provider(search_result(
        FaceMatchCandidate(face_id="f1", similarity=98.0, external_id="PNG:Momase:John_Doe.jpg"),
        FaceMatchCandidate(face_id="f2", similarity=80.0, external_id="nobody-known"),
    ))
    store = make_blob_store([BlobEntry(key="PNG/Momase/John_Doe.jpg")])
    service = FaceSearchService(provider, store)

    result = await service.search(b"image", "PNG")

    assert store.listed_roots == ["PNG"]
    assert result.collection_id == "PNG"
    assert result.root_path == "PNG"
    assert result.searched_face_bounding_box == BOX
    assert [m.face_id for m in result.matches] == ["f1", "f2"]
    assert result.matches[0].image_src == "https://bucket.example/PNG/Momase/John_Doe.jpg?signed"
    assert result.matches[1].image_src == settings.PLACEHOLDER_IMAGE
    assert result.matches[1].display_name == "nobody known"


async def test_search_uses_configured_collection_root(
    make_recognition_provider, make_blob_store, monkeypatch
):
    monkeypatch.setitem(settings.COLLECTION_ROOTS, "people-2024", "archive/2024")
    provider = make_recognition_provider(search_result(
        FaceMatchCandidate(face_id="f1", similarity=90.0),
    ))
    store = make_blob_store([])
    service = FaceSearchService(provider, store)

    result = await service.search(b"image", "people-2024")

    assert store.listed_roots == ["archive/2024"]
    assert result.matches[0].folder == "archive/2024"


async def test_no_matches_skips_listing(make_recognition_provider, make_blob_store):
    store = make_blob_store([BlobEntry(key="PNG/a.jpg")])
    service = FaceSearchService(make_recognition_provider(search_result()), store)

    result = await service.search(b"image", "PNG")

    assert result.matches == []
    assert result.searched_face_confidence == 99.5
    assert store.listed_roots == []


async def test_no_face_returns_empty_result(make_recognition_provider, make_blob_store):
    provider = make_recognition_provider(search_error=NoFaceDetectedError("no faces"))
    service = FaceSearchService(provider, make_blob_store([]))

    result = await service.search(b"image", "PNG")

    assert result.matches == []
    assert result.searched_face_bounding_box is None


async def test_listing_failure_propagates(make_recognition_provider, make_blob_store):
    provider = make_recognition_provider(search_result(
        FaceMatchCandidate(face_id="f1", similarity=90.0, external_id="PNG:a.jpg"),
    ))
    store = make_blob_store(list_error=StorageError("bucket unreachable"))
    service = FaceSearchService(provider, store)

    with pytest.raises(StorageError):
        await service.search(b"image", "PNG")


async def test_provider_errors_propagate(make_recognition_provider, make_blob_store):
    provider = make_recognition_provider(search_error=CollectionNotFoundError("missing"))
    service = FaceSearchService(provider, make_blob_store([]))

    with pytest.raises(CollectionNotFoundError):
        await service.search(b"image", "missing")
