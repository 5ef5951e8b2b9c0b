"""Tests for the S3 blob store against a fake client."""
from contextlib import asynccontextmanager

import pytest
from botocore.exceptions import ClientError

from pessbook.core.exceptions import StorageError
from pessbook.domain.entities.identity import BlobEntry
from pessbook.services.aws.s3 import EXTERNAL_ID_METADATA_KEY, S3Service


class FakePaginator:
    def __init__(self, pages, calls, error=None):
        self.pages = pages
        self.calls = calls
        self.error = error

    async def paginate(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        # botocore stops once MaxItems objects have been yielded
        remaining = kwargs.get("PaginationConfig", {}).get("MaxItems")
        for page in self.pages:
            if remaining is not None:
                if remaining <= 0:
                    return
                contents = page.get("Contents", [])[:remaining]
                remaining -= len(contents)
                page = {**page, "Contents": contents}
            yield page


class FakeS3Client:
    def __init__(self, pages=None, metadata=None, list_error=None, head_error=None):
        self.pages = pages or []
        self.metadata = metadata or {}
        self.list_error = list_error
        self.head_error = head_error
        self.paginate_calls = []
        self.put_calls = []

    def get_paginator(self, name):
        assert name == "list_objects_v2"
        return FakePaginator(self.pages, self.paginate_calls, self.list_error)

    async def head_object(self, Bucket, Key):
        if self.head_error:
            raise self.head_error
        if Key not in self.metadata:
            raise ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, "HeadObject")
        return {"Metadata": self.metadata[Key]}

    async def generate_presigned_url(self, operation, Params, ExpiresIn):
        return f"https://signed/{Params['Bucket']}/{Params['Key']}?expires={ExpiresIn}"

    async def put_object(self, **kwargs):
        self.put_calls.append(kwargs)

    async def get_object(self, Bucket, Key):
        raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")


def make_service(monkeypatch, client, read_external_ids=False):
    service = S3Service(bucket_name="test-bucket", read_external_ids=read_external_ids)

    @asynccontextmanager
    async def fake_client():
        yield client

    monkeypatch.setattr(service, "_get_client", fake_client)
    return service


async def test_list_all_blobs_lists_recursively_and_skips_folder_markers(monkeypatch):
    client = FakeS3Client(pages=[
        {"Contents": [{"Key": "PNG/"}, {"Key": "PNG/Momase/John_Doe.jpg"}]},
        {"Contents": [{"Key": "PNG/Momase/Madang/"}, {"Key": "PNG/Momase/Madang/Mary.jpg"}]},
    ])
    service = make_service(monkeypatch, client)

    blobs = await service.list_all_blobs("PNG")

    assert blobs == [
        BlobEntry(key="PNG/Momase/John_Doe.jpg"),
        BlobEntry(key="PNG/Momase/Madang/Mary.jpg"),
    ]
    assert client.paginate_calls[0]["Prefix"] == "PNG/"
    assert client.paginate_calls[0]["Bucket"] == "test-bucket"


async def test_list_all_blobs_reads_external_ids_from_metadata(monkeypatch):
    client = FakeS3Client(
        pages=[{"Contents": [{"Key": "PNG/a.jpg"}, {"Key": "PNG/b.jpg"}]}],
        metadata={"PNG/a.jpg": {EXTERNAL_ID_METADATA_KEY: "PNG:a.jpg"}},
    )
    service = make_service(monkeypatch, client, read_external_ids=True)

    blobs = await service.list_all_blobs("PNG/")

    assert blobs == [
        BlobEntry(key="PNG/a.jpg", external_id="PNG:a.jpg"),
        BlobEntry(key="PNG/b.jpg"),
    ]


async def test_list_all_blobs_wraps_client_errors(monkeypatch):
    error = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "ListObjectsV2")
    service = make_service(monkeypatch, FakeS3Client(list_error=error))

    with pytest.raises(StorageError):
        await service.list_all_blobs("PNG")


async def test_resolve_display_url_presigns_key(monkeypatch):
    service = make_service(monkeypatch, FakeS3Client())

    url = await service.resolve_display_url("PNG/a.jpg")

    assert url.startswith("https://signed/test-bucket/PNG/a.jpg")


async def test_list_images_filters_non_images(monkeypatch):
    client = FakeS3Client(pages=[{"Contents": [
        {"Key": "PNG/a.JPG", "LastModified": None},
        {"Key": "PNG/notes.txt"},
        {"Key": "PNG/sub/"},
        {"Key": "PNG/sub/b.png"},
    ]}])
    service = make_service(monkeypatch, client)

    images = await service.list_images("PNG/")

    assert [image["key"] for image in images] == ["PNG/a.JPG", "PNG/sub/b.png"]


async def test_list_folders_returns_common_prefixes(monkeypatch):
    client = FakeS3Client(pages=[{"CommonPrefixes": [{"Prefix": "PNG/Momase/"}, {"Prefix": "PNG/Islands/"}]}])
    service = make_service(monkeypatch, client)

    assert await service.list_folders("PNG/") == ["PNG/Momase/", "PNG/Islands/"]
    assert client.paginate_calls[0]["Delimiter"] == "/"


async def test_upload_image_stores_external_id_metadata(monkeypatch):
    client = FakeS3Client()
    service = make_service(monkeypatch, client)

    key = await service.upload_image(b"jpeg", "PNG/Momase/", "1_John_Doe.jpg", external_id="PNG:Momase:1_John_Doe.jpg")

    assert key == "PNG/Momase/1_John_Doe.jpg"
    assert client.put_calls[0]["Metadata"] == {EXTERNAL_ID_METADATA_KEY: "PNG:Momase:1_John_Doe.jpg"}


async def test_get_file_maps_missing_key(monkeypatch):
    service = make_service(monkeypatch, FakeS3Client())

    with pytest.raises(StorageError, match="File not found"):
        await service.get_file("PNG/missing.jpg")


def key_pages(count, page_size=1000):
    keys = [f"PNG/folder-{i % 7}/person_{i}.jpg" for i in range(count)]
    return [
        {"Contents": [{"Key": key} for key in keys[start:start + page_size]]}
        for start in range(0, count, page_size)
    ]


async def test_list_all_blobs_returns_every_key_of_large_buckets(monkeypatch):
    client = FakeS3Client(pages=key_pages(10001))
    service = make_service(monkeypatch, client)

    blobs = await service.list_all_blobs("PNG")

    assert len(blobs) == 10001
    assert blobs[-1].key == "PNG/folder-4/person_10000.jpg"
    assert client.paginate_calls[0]["PaginationConfig"] == {}


async def test_list_images_stops_at_max_keys(monkeypatch):
    client = FakeS3Client(pages=key_pages(2500))
    service = make_service(monkeypatch, client)

    images = await service.list_images("PNG/", max_keys=1200)

    assert len(images) == 1200
    assert client.paginate_calls[0]["PaginationConfig"] == {"MaxItems": 1200}


async def test_list_all_blobs_keeps_entry_when_metadata_is_unreadable(monkeypatch):
    client = FakeS3Client(
        pages=[{"Contents": [{"Key": "PNG/a.jpg"}]}],
        head_error=ClientError({"Error": {"Code": "403", "Message": "Forbidden"}}, "HeadObject"),
    )
    service = make_service(monkeypatch, client, read_external_ids=True)

    assert await service.list_all_blobs("PNG") == [BlobEntry(key="PNG/a.jpg")]


async def test_list_all_blobs_wraps_connection_errors_reading_metadata(monkeypatch):
    client = FakeS3Client(
        pages=[{"Contents": [{"Key": "PNG/a.jpg"}, {"Key": "PNG/b.jpg"}]}],
        head_error=ConnectionResetError("connection reset by peer"),
    )
    service = make_service(monkeypatch, client, read_external_ids=True)

    with pytest.raises(StorageError, match="connection reset"):
        await service.list_all_blobs("PNG")


async def test_folder_stats_counts_images_per_folder(monkeypatch):
    client = FakeS3Client(pages=[{"Contents": [
        {"Key": "cover.jpg"},
        {"Key": "PNG/Momase/"},
        {"Key": "PNG/Momase/a.jpg"},
        {"Key": "PNG/Momase/b.PNG"},
        {"Key": "PNG/Momase/notes.txt"},
        {"Key": "PNG/Momase/Madang/c.jpeg"},
    ]}])
    service = make_service(monkeypatch, client)

    assert await service.folder_stats() == {
        "": 1,
        "PNG/Momase": 2,
        "PNG/Momase/Madang": 1,
    }
