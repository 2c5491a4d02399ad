"""Shared typed models.

This module defines the immutable backend configuration variants.
Each store kind consumes exactly one of these shapes.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from core.constants import DEFAULT_GIT_AUTHOR_EMAIL, DEFAULT_GIT_AUTHOR_NAME


@dataclass(frozen=True)
class FilesystemBackendConfig:
    """Configuration for the ``fs`` and ``jsonfs`` backends.

    Attributes:
        base_path: Directory holding one entry per cluster.
    """

    base_path: Path


@dataclass(frozen=True)
class GitBackendConfig:
    """Configuration for the ``git`` backend.

    Attributes:
        base_path: Repository working tree holding one entry per cluster.
        author_name: Commit author and committer name.
        author_email: Commit author and committer email.
    """

    base_path: Path
    author_name: str = DEFAULT_GIT_AUTHOR_NAME
    author_email: str = DEFAULT_GIT_AUTHOR_EMAIL


@dataclass(frozen=True)
class ObjectStoreBackendConfig:
    """Configuration for the ``s3`` backend.

    Attributes:
        base_path: Key prefix under which cluster objects live.
        endpoint_url: S3-compatible endpoint, with or without scheme.
        access_key: Access key id.
        secret_key: Secret access key.
        bucket_name: Bucket holding cluster objects.
        bucket_location: Bucket region, empty for the provider default.
    """

    base_path: str
    endpoint_url: str
    access_key: str
    secret_key: str
    bucket_name: str
    bucket_location: str = ""


BackendConfig = Union[FilesystemBackendConfig, GitBackendConfig, ObjectStoreBackendConfig]
