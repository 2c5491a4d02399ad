"""Pytest configuration for repository test runs."""

from __future__ import annotations

import io
import sys
from pathlib import Path
from typing import Any

import pytest
from botocore.exceptions import ClientError


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


def _client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class _FakePaginator:
    def __init__(self, client: "FakeS3Client") -> None:
        self._client = client

    def paginate(self, Bucket: str, Prefix: str = "") -> list[dict[str, Any]]:
        self._client.require_bucket(Bucket, "ListObjectsV2")
        keys = sorted(key for key in self._client.objects[Bucket] if key.startswith(Prefix))
        pages = [keys[index : index + 2] for index in range(0, len(keys), 2)] or [[]]
        return [
            {"Contents": [{"Key": key} for key in page]} if page else {"KeyCount": 0}
            for page in pages
        ]


class FakeS3Client:
    """In-memory stand-in for the subset of the boto3 S3 client the store uses."""

    def __init__(self, buckets: tuple[str, ...] = ()) -> None:
        self.objects: dict[str, dict[str, bytes]] = {bucket: {} for bucket in buckets}
        self.created_buckets: list[dict[str, Any]] = []
        self.closed = False
        self.fail_create_with: str | None = None
        self.fail_with: dict[str, str] = {}

    def require_bucket(self, bucket: str, operation: str) -> None:
        if operation in self.fail_with:
            raise _client_error(self.fail_with[operation], operation)
        if bucket not in self.objects:
            raise _client_error("NoSuchBucket", operation)

    def head_bucket(self, Bucket: str) -> dict[str, Any]:
        if Bucket not in self.objects:
            raise _client_error("404", "HeadBucket")
        return {}

    def create_bucket(self, **request: Any) -> dict[str, Any]:
        if self.fail_create_with:
            raise _client_error(self.fail_create_with, "CreateBucket")
        self.created_buckets.append(request)
        self.objects[request["Bucket"]] = {}
        return {}

    def get_paginator(self, operation_name: str) -> _FakePaginator:
        assert operation_name == "list_objects_v2"
        return _FakePaginator(self)

    def get_object(self, Bucket: str, Key: str) -> dict[str, Any]:
        self.require_bucket(Bucket, "GetObject")
        if Key not in self.objects[Bucket]:
            raise _client_error("NoSuchKey", "GetObject")
        return {"Body": io.BytesIO(self.objects[Bucket][Key])}

    def put_object(self, Bucket: str, Key: str, Body: bytes, **_: Any) -> dict[str, Any]:
        self.require_bucket(Bucket, "PutObject")
        self.objects[Bucket][Key] = bytes(Body)
        return {}

    def head_object(self, Bucket: str, Key: str) -> dict[str, Any]:
        self.require_bucket(Bucket, "HeadObject")
        if Key not in self.objects[Bucket]:
            raise _client_error("404", "HeadObject")
        return {"ContentLength": len(self.objects[Bucket][Key])}

    def delete_object(self, Bucket: str, Key: str) -> dict[str, Any]:
        self.require_bucket(Bucket, "DeleteObject")
        self.objects[Bucket].pop(Key, None)
        return {}

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_s3_client() -> FakeS3Client:
    """S3 client double with no buckets."""
    return FakeS3Client()


@pytest.fixture
def json_snapshot() -> bytes:
    """Small JSON cluster snapshot."""
    return b'{"name": "prod", "cloud": "aws", "nodes": 3}\n'
