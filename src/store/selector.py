"""Store selection.

This module maps a backend kind plus its configuration onto exactly
one live cluster store. Configuration errors are raised before any IO.
"""

from __future__ import annotations

from core.config import StateStoreSettings, expand_state_path
from core.constants import (
    STORE_KIND_FS,
    STORE_KIND_GIT,
    STORE_KIND_JSONFS,
    STORE_KIND_S3,
    SUPPORTED_STORE_KINDS,
)
from core.errors import StateConfigError
from core.logging_config import get_logger
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

_LOGGER = get_logger(__name__)

_CONFIG_TYPES: dict[str, type] = {
    STORE_KIND_FS: FilesystemBackendConfig,
    STORE_KIND_JSONFS: FilesystemBackendConfig,
    STORE_KIND_GIT: GitBackendConfig,
    STORE_KIND_S3: ObjectStoreBackendConfig,
}


def create_cluster_store(kind: str, config: BackendConfig) -> ClusterStore:
    """Construct the cluster store for a backend kind.

    Args:
        kind: Backend kind, one of ``SUPPORTED_STORE_KINDS``.
        config: Configuration variant matching the kind.

    Returns:
        Ready-to-use cluster store.

    Raises:
        StateConfigError: If the kind is unknown or the config shape does not match.
        StateBackendUnreachableError: If the object store bucket cannot be confirmed.
    """
    expected_type = _CONFIG_TYPES.get(kind)
    if expected_type is None:
        raise StateConfigError(
            f"Unknown state store '{kind}': expected one of {', '.join(SUPPORTED_STORE_KINDS)}."
        )
    if type(config) is not expected_type:
        raise StateConfigError(
            f"State store '{kind}' requires {expected_type.__name__}, "
            f"got {type(config).__name__}."
        )
    if isinstance(config, ObjectStoreBackendConfig):
        _validate_object_store_config(config)
    _LOGGER.debug("state_store_selected", store=kind)
    if kind == STORE_KIND_FS:
        return FilesystemStore(config)
    if kind == STORE_KIND_JSONFS:
        return JSONFilesystemStore(config)
    if kind == STORE_KIND_GIT:
        return GitStore(config)
    return ObjectStore(config)


def build_backend_config(settings: StateStoreSettings) -> BackendConfig:
    """Build the configuration variant for the settings' store kind.

    Args:
        settings: Flat state store settings.

    Returns:
        Configuration variant for ``settings.state_store``.

    Raises:
        StateConfigError: If the store kind is unknown.
    """
    kind = settings.state_store
    if kind in (STORE_KIND_FS, STORE_KIND_JSONFS):
        return FilesystemBackendConfig(base_path=expand_state_path(settings.state_store_path))
    if kind == STORE_KIND_GIT:
        return GitBackendConfig(
            base_path=expand_state_path(settings.state_store_path),
            author_name=settings.git_author_name,
            author_email=settings.git_author_email,
        )
    if kind == STORE_KIND_S3:
        return ObjectStoreBackendConfig(
            base_path=settings.state_store_path,
            endpoint_url=settings.s3_endpoint,
            access_key=settings.s3_access_key,
            secret_key=settings.s3_secret_key,
            bucket_name=settings.s3_bucket,
            bucket_location=settings.s3_location,
        )
    raise StateConfigError(
        f"Unknown state store '{kind}': expected one of {', '.join(SUPPORTED_STORE_KINDS)}."
    )


def open_cluster_store(settings: StateStoreSettings) -> ClusterStore:
    """Construct the cluster store described by flat settings."""
    return create_cluster_store(settings.state_store, build_backend_config(settings))


def _validate_object_store_config(config: ObjectStoreBackendConfig) -> None:
    """Reject object store configs missing a bucket name.

    Raises:
        StateConfigError: If the bucket name is empty.
    """
    if not config.bucket_name.strip():
        raise StateConfigError(
            "Object storage state store requires a bucket name. "
            "Set CLUSTER_S3_BUCKET or --s3-bucket."
        )
