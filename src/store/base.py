"""Storage contract shared by all cluster state backends.

Callers program against ``ClusterStore`` and never need to know
which medium holds the snapshots.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType

from core.cluster_name import validate_cluster_name
from core.errors import StateConfigError, StateStoreError


class ClusterStore(ABC):
    """Base interface for cluster state backends.

    Snapshots are opaque bytes keyed by cluster name. Every write
    replaces the previous snapshot for that name.
    """

    kind = ""

    def __init__(self) -> None:
        self._closed = False

    @abstractmethod
    def list(self) -> list[str]:
        """Return sorted distinct names of persisted clusters."""

    @abstractmethod
    def read(self, name: str) -> bytes:
        """Return the current snapshot for a cluster."""

    @abstractmethod
    def write(self, name: str, snapshot: bytes) -> None:
        """Persist a snapshot, replacing any previous one."""

    @abstractmethod
    def delete(self, name: str) -> None:
        """Remove a cluster snapshot."""

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Return whether a snapshot is persisted for a cluster."""

    def rename(self, old_name: str, new_name: str) -> None:
        """Move a snapshot to a new cluster name.

        Args:
            old_name: Existing cluster name.
            new_name: Target cluster name, which must be unused.

        Raises:
            StateNotFoundError: If ``old_name`` has no snapshot.
            StateConfigError: If ``new_name`` already has a snapshot.
        """
        validate_cluster_name(new_name)
        snapshot = self.read(old_name)
        if self.exists(new_name):
            raise StateConfigError(
                f"Cannot rename cluster '{old_name}' to '{new_name}': target already exists. "
                "Delete the target cluster or choose another name."
            )
        self.write(new_name, snapshot)
        self.delete(old_name)

    def close(self) -> None:
        """Release backend resources. Safe to call more than once."""
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "ClusterStore":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise StateStoreError(
                f"The {self.kind or 'cluster'} state store is closed. "
                "Create a new store handle before issuing operations."
            )
