"""JSON filesystem cluster state store.

Same layout as the plain filesystem store, but every snapshot must
decode as JSON. Decode failures surface as corrupt snapshots.
"""

from __future__ import annotations

import json
from typing import Any

from core.constants import JSON_STATE_FILE_NAME, STORE_KIND_JSONFS
from core.errors import StateCorruptSnapshotError
from store.filesystem_store import FilesystemStore


class JSONFilesystemStore(FilesystemStore):
    """Filesystem store that enforces JSON-encoded snapshots."""

    kind = STORE_KIND_JSONFS
    state_file_name = JSON_STATE_FILE_NAME

    def read_document(self, name: str) -> Any:
        """Read a snapshot and return its decoded JSON document."""
        return decode_json_snapshot(name, self.read(name))

    def write_document(self, name: str, document: Any) -> None:
        """Serialize a JSON document and persist it as the cluster snapshot."""
        self.write(name, encode_json_snapshot(document))

    def _check_snapshot(self, name: str, snapshot: bytes) -> None:
        decode_json_snapshot(name, snapshot)


def encode_json_snapshot(document: Any) -> bytes:
    """Serialize a document with stable key ordering.

    Args:
        document: JSON-serializable value.

    Returns:
        UTF-8 encoded JSON bytes.
    """
    return (json.dumps(document, indent=2, sort_keys=True) + "\n").encode("utf-8")


def decode_json_snapshot(name: str, snapshot: bytes) -> Any:
    """Decode JSON snapshot bytes.

    Args:
        name: Cluster name used in error messages.
        snapshot: Raw snapshot bytes.

    Returns:
        Decoded JSON value.

    Raises:
        StateCorruptSnapshotError: If the bytes are not valid UTF-8 JSON.
    """
    try:
        return json.loads(snapshot.decode("utf-8"))
    except UnicodeDecodeError as error:
        raise StateCorruptSnapshotError(
            f"Snapshot for cluster '{name}' is not valid UTF-8: {error.reason}. "
            "Rewrite the cluster state from a known-good copy."
        ) from error
    except RecursionError as error:
        raise StateCorruptSnapshotError(
            f"Snapshot for cluster '{name}' is nested too deeply to decode. "
            "Rewrite the cluster state from a known-good copy."
        ) from error
    except json.JSONDecodeError as error:
        raise StateCorruptSnapshotError(
            f"Failed to parse snapshot for cluster '{name}': {error.msg} "
            f"at line {error.lineno} column {error.colno}. "
            "Rewrite the cluster state from a known-good copy."
        ) from error
