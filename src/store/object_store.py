"""S3-compatible object storage cluster state store.

Objects are stored as JSON snapshots:
    s3://<bucket>/<prefix>/<cluster_name>/cluster.json

The bucket is confirmed, or created, when the store is constructed.
Backends never retry; transport failures surface immediately.
"""

from __future__ import annotations

from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from core.cluster_name import is_valid_cluster_name, validate_cluster_name
from core.constants import DEFAULT_S3_REGION, JSON_STATE_FILE_NAME, STORE_KIND_S3
from core.errors import (
    StateBackendUnreachableError,
    StateConfigError,
    StateNotFoundError,
    StatePermissionError,
    StateStoreError,
)
from core.logging_config import get_logger
from core.types import ObjectStoreBackendConfig
from store.base import ClusterStore
from store.json_store import decode_json_snapshot

_LOGGER = get_logger(__name__)

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})
_PERMISSION_CODES = frozenset(
    {"403", "AccessDenied", "Forbidden", "InvalidAccessKeyId", "SignatureDoesNotMatch"}
)
_BUCKET_OWNED_CODES = frozenset({"BucketAlreadyOwnedByYou"})


class ObjectStore(ClusterStore):
    """Cluster store backed by one bucket of an S3-compatible service."""

    kind = STORE_KIND_S3

    def __init__(self, config: ObjectStoreBackendConfig, client: Any | None = None) -> None:
        """Initialize object store and make sure its bucket exists.

        Args:
            config: Object storage backend configuration.
            client: Optional pre-built S3 client; built from config when omitted.

        Raises:
            StateBackendUnreachableError: If the bucket is absent and cannot be created.
        """
        super().__init__()
        self._bucket = config.bucket_name
        self._location = config.bucket_location
        self._prefix = normalize_key_prefix(config.base_path)
        self._client = client if client is not None else create_s3_client(config)
        try:
            self._ensure_bucket()
        except StateStoreError:
            self._client.close()
            raise

    @property
    def bucket(self) -> str:
        return self._bucket

    def list(self) -> list[str]:
        """List clusters with a state object under the key prefix.

        Returns:
            Sorted cluster names; empty when nothing is persisted.
        """
        self._ensure_open()
        list_prefix = self._list_prefix()
        paginator = self._client.get_paginator("list_objects_v2")
        names: set[str] = set()
        try:
            for page in paginator.paginate(Bucket=self._bucket, Prefix=list_prefix):
                for obj in page.get("Contents", []):
                    name = self._name_from_key(obj["Key"])
                    if name is not None:
                        names.add(name)
        except ClientError as error:
            raise _map_client_error(error, "list", f"s3://{self._bucket}/{list_prefix}") from error
        except BotoCoreError as error:
            raise _transport_error(error, "list", self._bucket) from error
        return sorted(names)

    def read(self, name: str) -> bytes:
        """Fetch the current snapshot object for a cluster.

        Args:
            name: Cluster name.

        Returns:
            Snapshot bytes.

        Raises:
            StateNotFoundError: If no object exists, including one deleted after listing.
            StateCorruptSnapshotError: If the object is not JSON.
        """
        validate_cluster_name(name)
        self._ensure_open()
        key = self.object_key(name)
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
            snapshot = response["Body"].read()
        except ClientError as error:
            raise _map_client_error(error, "read", self._uri(key), name) from error
        except BotoCoreError as error:
            raise _transport_error(error, "read", self._bucket) from error
        decode_json_snapshot(name, snapshot)
        return snapshot

    def write(self, name: str, snapshot: bytes) -> None:
        """Upload a snapshot object, replacing any previous one.

        Args:
            name: Cluster name.
            snapshot: JSON snapshot bytes.
        """
        validate_cluster_name(name)
        self._ensure_open()
        decode_json_snapshot(name, snapshot)
        key = self.object_key(name)
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=snapshot,
                ContentType="application/json",
            )
        except ClientError as error:
            raise _map_client_error(error, "write", self._uri(key), name) from error
        except BotoCoreError as error:
            raise _transport_error(error, "write", self._bucket) from error
        _LOGGER.info(
            "cluster_state_written",
            store=self.kind,
            cluster_name=name,
            uri=self._uri(key),
            size_bytes=len(snapshot),
        )

    def delete(self, name: str) -> None:
        """Delete a cluster snapshot object.

        Raises:
            StateNotFoundError: If no object exists for the cluster.
        """
        validate_cluster_name(name)
        self._ensure_open()
        key = self.object_key(name)
        if not self.exists(name):
            raise StateNotFoundError(
                f"Cannot delete cluster '{name}': no object at {self._uri(key)}. "
                "Use list to discover persisted clusters."
            )
        try:
            self._client.delete_object(Bucket=self._bucket, Key=key)
        except ClientError as error:
            raise _map_client_error(error, "delete", self._uri(key), name) from error
        except BotoCoreError as error:
            raise _transport_error(error, "delete", self._bucket) from error
        _LOGGER.info("cluster_state_deleted", store=self.kind, cluster_name=name)

    def exists(self, name: str) -> bool:
        validate_cluster_name(name)
        self._ensure_open()
        key = self.object_key(name)
        try:
            self._client.head_object(Bucket=self._bucket, Key=key)
        except ClientError as error:
            if _error_code(error) in _NOT_FOUND_CODES:
                return False
            raise _map_client_error(error, "inspect", self._uri(key), name) from error
        except BotoCoreError as error:
            raise _transport_error(error, "inspect", self._bucket) from error
        return True

    def close(self) -> None:
        if not self.closed:
            self._client.close()
        super().close()

    def object_key(self, name: str) -> str:
        return f"{self._list_prefix()}{name}/{JSON_STATE_FILE_NAME}"

    def _list_prefix(self) -> str:
        return f"{self._prefix}/" if self._prefix else ""

    def _name_from_key(self, key: str) -> str | None:
        """Recover a cluster name from an object key, or None for foreign keys."""
        remainder = key[len(self._list_prefix()):]
        name, separator, file_name = remainder.partition("/")
        if not separator or file_name != JSON_STATE_FILE_NAME:
            return None
        return name if is_valid_cluster_name(name) else None

    def _uri(self, key: str) -> str:
        return f"s3://{self._bucket}/{key}"

    def _ensure_bucket(self) -> None:
        """Confirm the bucket exists, creating it when the service reports 404."""
        try:
            self._client.head_bucket(Bucket=self._bucket)
            return
        except ClientError as error:
            if _error_code(error) not in _NOT_FOUND_CODES | {"NoSuchBucket"}:
                raise _bucket_error(self._bucket, error) from error
        except BotoCoreError as error:
            raise _bucket_error(self._bucket, error) from error
        self._create_bucket()

    def _create_bucket(self) -> None:
        request: dict[str, Any] = {"Bucket": self._bucket}
        if self._location and self._location != DEFAULT_S3_REGION:
            request["CreateBucketConfiguration"] = {"LocationConstraint": self._location}
        try:
            self._client.create_bucket(**request)
        except ClientError as error:
            if _error_code(error) in _BUCKET_OWNED_CODES:
                return
            raise _bucket_error(self._bucket, error) from error
        except BotoCoreError as error:
            raise _bucket_error(self._bucket, error) from error
        _LOGGER.info("bucket_created", bucket=self._bucket, location=self._location or None)


def create_s3_client(config: ObjectStoreBackendConfig) -> Any:
    """Create a boto3 S3 client for an S3-compatible endpoint.

    Args:
        config: Object storage config with endpoint and credentials.

    Returns:
        Boto3 S3 client.

    Raises:
        StateConfigError: If the endpoint URL or region is malformed.
        StateBackendUnreachableError: If botocore cannot build the client.
    """
    session_kwargs: dict[str, str] = {}
    if config.access_key:
        session_kwargs["aws_access_key_id"] = config.access_key
    if config.secret_key:
        session_kwargs["aws_secret_access_key"] = config.secret_key
    if config.bucket_location:
        session_kwargs["region_name"] = config.bucket_location
    endpoint_url = normalize_endpoint_url(config.endpoint_url)
    try:
        session = boto3.session.Session(**session_kwargs)
        return session.client("s3", endpoint_url=endpoint_url)
    except ValueError as error:
        raise StateConfigError(
            f"Invalid object storage endpoint '{endpoint_url}' or location "
            f"'{config.bucket_location}': {error}. "
            "Set CLUSTER_S3_ENDPOINT and CLUSTER_S3_LOCATION to valid values."
        ) from error
    except BotoCoreError as error:
        raise StateBackendUnreachableError(
            f"Failed to create object storage client for '{endpoint_url}': {error}. "
            "Check the endpoint and credentials."
        ) from error


def normalize_endpoint_url(endpoint_url: str) -> str | None:
    """Return an endpoint URL with scheme, or None for the provider default.

    Bare ``host:port`` endpoints are treated as TLS endpoints.
    """
    endpoint = endpoint_url.strip()
    if not endpoint:
        return None
    if "://" not in endpoint:
        return f"https://{endpoint}"
    return endpoint


def normalize_key_prefix(base_path: str) -> str:
    """Turn a base path such as ``./_state/`` into a key prefix ``_state``."""
    prefix = str(base_path).strip()
    while prefix.startswith("./"):
        prefix = prefix[2:]
    return prefix.strip("/")


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def _map_client_error(
    error: ClientError, operation: str, uri: str, name: str | None = None
) -> StateStoreError:
    """Translate a client error into a state store error.

    Args:
        error: Client error raised by boto3.
        operation: Operation label for the message.
        uri: Object or prefix URI involved.
        name: Cluster name, when the operation targets one.

    Returns:
        Matching state store error instance.
    """
    code = _error_code(error)
    if name is not None and code in _NOT_FOUND_CODES:
        return StateNotFoundError(
            f"No state found for cluster '{name}' at {uri}. "
            "Use list to discover persisted clusters."
        )
    if code in _PERMISSION_CODES:
        return StatePermissionError(
            f"Object storage denied {operation} of {uri} ({code}). "
            "Check the access key, secret key, and bucket policy."
        )
    return StateBackendUnreachableError(
        f"Object storage {operation} failed for {uri}: {error}. "
        "Check the endpoint and retry."
    )


def _transport_error(error: BotoCoreError, operation: str, bucket: str) -> StateBackendUnreachableError:
    return StateBackendUnreachableError(
        f"Object storage {operation} could not reach bucket '{bucket}': {error}. "
        "Check the endpoint URL and network connectivity."
    )


def _bucket_error(bucket: str, error: Exception) -> StateBackendUnreachableError:
    return StateBackendUnreachableError(
        f"Bucket '{bucket}' could not be confirmed or created: {error}. "
        "Check the endpoint, credentials, and bucket location."
    )
