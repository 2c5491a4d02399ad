"""Public surface of the cluster state store.

This module provides a stable import path for tooling that persists
cluster snapshots. It re-exports the store contract, backends, and selector.
"""

from __future__ import annotations

from core.config import StateStoreSettings
from core.errors import (
    StateBackendUnreachableError,
    StateConfigError,
    StateCorruptSnapshotError,
    StateNotFoundError,
    StatePermissionError,
    StateStoreError,
)
from core.types import (
    BackendConfig,
    FilesystemBackendConfig,
    GitBackendConfig,
    ObjectStoreBackendConfig,
)
from store.base import ClusterStore
from store.filesystem_store import FilesystemStore
from store.git_store import GitStore
from store.json_store import JSONFilesystemStore
from store.object_store import ObjectStore
from store.selector import build_backend_config, create_cluster_store, open_cluster_store

__all__ = [
    "BackendConfig",
    "ClusterStore",
    "FilesystemBackendConfig",
    "FilesystemStore",
    "GitBackendConfig",
    "GitStore",
    "JSONFilesystemStore",
    "ObjectStore",
    "ObjectStoreBackendConfig",
    "StateBackendUnreachableError",
    "StateConfigError",
    "StateCorruptSnapshotError",
    "StateNotFoundError",
    "StatePermissionError",
    "StateStoreError",
    "StateStoreSettings",
    "build_backend_config",
    "create_cluster_store",
    "open_cluster_store",
]
