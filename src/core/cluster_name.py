"""Cluster name validation.

Cluster names address directories, git paths, and object keys,
so they are restricted to a portable character set.
"""

from __future__ import annotations

import re

from core.constants import MAX_CLUSTER_NAME_LENGTH
from core.errors import StateConfigError

_CLUSTER_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def validate_cluster_name(name: str) -> str:
    """Validate a cluster name and return it unchanged.

    Args:
        name: Candidate cluster name.

    Returns:
        The validated name.

    Raises:
        StateConfigError: If the name is empty, too long, or unsafe.
    """
    if not isinstance(name, str) or not name:
        raise StateConfigError("Cluster name must be a non-empty string.")
    if len(name) > MAX_CLUSTER_NAME_LENGTH:
        raise StateConfigError(
            f"Cluster name '{name[:32]}...' exceeds {MAX_CLUSTER_NAME_LENGTH} characters. "
            "Choose a shorter cluster name."
        )
    if not _CLUSTER_NAME_PATTERN.match(name):
        raise StateConfigError(
            f"Invalid cluster name '{name}': use letters, digits, '.', '_' or '-', "
            "starting with a letter or digit."
        )
    return name


def is_valid_cluster_name(name: str) -> bool:
    """Return whether a discovered entry name is a usable cluster name."""
    try:
        validate_cluster_name(name)
    except StateConfigError:
        return False
    return True
