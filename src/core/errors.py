"""Cluster state store exception hierarchy.

This module defines the failure taxonomy shared by every backend.
Callers catch these types without knowing which backend is active.
"""

from __future__ import annotations


class StateStoreError(Exception):
    """Base exception for all state store failures."""


class StateConfigError(StateStoreError):
    """Raised for invalid store kinds, parameters, or cluster names."""


class StateNotFoundError(StateStoreError):
    """Raised when a named cluster snapshot does not exist."""


class StateCorruptSnapshotError(StateStoreError):
    """Raised when snapshot content is present but cannot be decoded."""


class StatePermissionError(StateStoreError):
    """Raised when the storage medium rejects an operation on access rights."""


class StateBackendUnreachableError(StateStoreError):
    """Raised for network or IO failures reaching the storage medium."""
