"""Filesystem-backed cluster state store.

Layout: one directory per cluster under the base path, each holding
a single state file. Writes replace the file through an atomic rename.
"""

from __future__ import annotations

from pathlib import Path
import shutil

from core.cluster_name import is_valid_cluster_name, validate_cluster_name
from core.constants import STORE_KIND_FS, YAML_STATE_FILE_NAME
from core.errors import StateNotFoundError
from core.logging_config import get_logger
from core.types import FilesystemBackendConfig
from store.atomic_io import map_os_error, read_bytes, write_bytes_atomic
from store.base import ClusterStore

_LOGGER = get_logger(__name__)


class FilesystemStore(ClusterStore):
    """Cluster store over a local directory tree.

    Construction performs no IO; a missing base path lists as empty
    and is created on first write.
    """

    kind = STORE_KIND_FS
    state_file_name = YAML_STATE_FILE_NAME

    def __init__(self, config: FilesystemBackendConfig) -> None:
        """Initialize filesystem store from config.

        Args:
            config: Filesystem backend configuration.
        """
        super().__init__()
        self._base_path = Path(config.base_path)

    @property
    def base_path(self) -> Path:
        return self._base_path

    def list(self) -> list[str]:
        """List clusters that have a state file under the base path.

        Returns:
            Sorted cluster names; empty when nothing is persisted.

        Raises:
            StatePermissionError: If the base path cannot be read.
            StateBackendUnreachableError: For other IO failures.
        """
        self._ensure_open()
        try:
            if not self._base_path.exists():
                return []
            names = [
                entry.name
                for entry in self._base_path.iterdir()
                if not entry.name.startswith(".")
                and is_valid_cluster_name(entry.name)
                and (entry / self.state_file_name).is_file()
            ]
        except OSError as error:
            raise map_os_error(error, self._base_path, "list") from error
        return sorted(names)

    def read(self, name: str) -> bytes:
        """Read the current snapshot for a cluster.

        Args:
            name: Cluster name.

        Returns:
            Snapshot bytes.

        Raises:
            StateNotFoundError: If the cluster has no state file.
            StateCorruptSnapshotError: If the content fails validation.
        """
        validate_cluster_name(name)
        self._ensure_open()
        snapshot = read_bytes(self.state_path(name), name)
        self._check_snapshot(name, snapshot)
        return snapshot

    def write(self, name: str, snapshot: bytes) -> None:
        """Persist a snapshot for a cluster, replacing any previous one.

        Args:
            name: Cluster name.
            snapshot: Snapshot bytes.
        """
        validate_cluster_name(name)
        self._ensure_open()
        self._check_snapshot(name, snapshot)
        state_path = self.state_path(name)
        write_bytes_atomic(state_path, snapshot)
        _LOGGER.info(
            "cluster_state_written",
            store=self.kind,
            cluster_name=name,
            path=str(state_path),
            size_bytes=len(snapshot),
        )

    def delete(self, name: str) -> None:
        """Remove a cluster directory and its state file.

        Args:
            name: Cluster name.

        Raises:
            StateNotFoundError: If the cluster has no state file.
            StatePermissionError: If the directory cannot be removed.
        """
        validate_cluster_name(name)
        self._ensure_open()
        if not self.exists(name):
            raise StateNotFoundError(
                f"Cannot delete cluster '{name}': no state at {self.state_path(name)}. "
                "Use list to discover persisted clusters."
            )
        cluster_dir = self.cluster_dir(name)
        try:
            shutil.rmtree(cluster_dir)
        except OSError as error:
            raise map_os_error(error, cluster_dir, "delete") from error
        _LOGGER.info("cluster_state_deleted", store=self.kind, cluster_name=name)

    def exists(self, name: str) -> bool:
        validate_cluster_name(name)
        self._ensure_open()
        state_path = self.state_path(name)
        try:
            return state_path.is_file()
        except OSError as error:
            raise map_os_error(error, state_path, "inspect") from error

    def cluster_dir(self, name: str) -> Path:
        return self._base_path / name

    def state_path(self, name: str) -> Path:
        return self.cluster_dir(name) / self.state_file_name

    def _check_snapshot(self, name: str, snapshot: bytes) -> None:
        """Validate snapshot content; plain files accept any bytes."""
