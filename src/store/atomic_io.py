"""Filesystem IO helpers for state files.

This module writes files through a temp-file-then-rename sequence
and maps OS failures onto the state store error taxonomy.
"""

from __future__ import annotations

import os
from pathlib import Path
import tempfile

from core.constants import TEMP_FILE_PREFIX
from core.errors import (
    StateBackendUnreachableError,
    StateNotFoundError,
    StatePermissionError,
    StateStoreError,
)


def write_bytes_atomic(target_path: Path, payload: bytes) -> None:
    """Replace a file's content without exposing partial writes.

    Args:
        target_path: Final file location.
        payload: Bytes to persist.

    Raises:
        StatePermissionError: If the directory is not writable.
        StateBackendUnreachableError: For other IO failures.
    """
    try:
        target_path.parent.mkdir(parents=True, exist_ok=True)
        file_descriptor, temp_name = tempfile.mkstemp(
            prefix=TEMP_FILE_PREFIX, dir=str(target_path.parent)
        )
    except OSError as error:
        raise map_os_error(error, target_path, "write") from error
    try:
        with os.fdopen(file_descriptor, "wb") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_name, target_path)
    except OSError as error:
        _discard_temp_file(temp_name)
        raise map_os_error(error, target_path, "write") from error


def read_bytes(target_path: Path, cluster_name: str) -> bytes:
    """Read a state file, mapping absence onto ``StateNotFoundError``.

    Args:
        target_path: State file location.
        cluster_name: Cluster the file belongs to.

    Returns:
        File content.
    """
    try:
        return target_path.read_bytes()
    except FileNotFoundError as error:
        raise StateNotFoundError(
            f"No state found for cluster '{cluster_name}' at {target_path}. "
            "Use list to discover persisted clusters."
        ) from error
    except OSError as error:
        raise map_os_error(error, target_path, "read") from error


def map_os_error(error: OSError, target_path: Path, operation: str) -> StateStoreError:
    """Translate an OS error into a state store error.

    Args:
        error: Original OS error.
        target_path: Path involved in the failed operation.
        operation: Operation label for the message.

    Returns:
        Matching state store error instance.
    """
    if isinstance(error, PermissionError):
        return StatePermissionError(
            f"Permission denied during {operation} of {target_path}: {error.strerror}. "
            "Check ownership and mode of the state store path."
        )
    return StateBackendUnreachableError(
        f"Filesystem {operation} failed for {target_path}: {error}. "
        "Check that the state store path is available."
    )


def _discard_temp_file(temp_name: str) -> None:
    try:
        os.unlink(temp_name)
    except FileNotFoundError:
        pass
