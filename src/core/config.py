"""Runtime configuration model for the cluster state store.

This module owns all environment variable parsing and validation.
Other modules consume a typed settings object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_GIT_AUTHOR_EMAIL,
    DEFAULT_GIT_AUTHOR_NAME,
    DEFAULT_STATE_STORE,
    DEFAULT_STATE_STORE_PATH,
    SUPPORTED_STORE_KINDS,
)
from core.errors import StateConfigError


@dataclass(frozen=True)
class StateStoreSettings:
    """Validated state store settings.

    Attributes:
        state_store: Backend kind, one of ``SUPPORTED_STORE_KINDS``.
        state_store_path: Base location; a directory or an object key prefix.
        s3_access_key: Object storage access key.
        s3_secret_key: Object storage secret key.
        s3_endpoint: Object storage endpoint URL.
        s3_location: Object storage bucket location.
        s3_bucket: Object storage bucket name.
        git_author_name: Author name for git-backed commits.
        git_author_email: Author email for git-backed commits.
    """

    state_store: str
    state_store_path: str
    s3_access_key: str = ""
    s3_secret_key: str = ""
    s3_endpoint: str = ""
    s3_location: str = ""
    s3_bucket: str = ""
    git_author_name: str = DEFAULT_GIT_AUTHOR_NAME
    git_author_email: str = DEFAULT_GIT_AUTHOR_EMAIL

    @classmethod
    def from_env(cls, state_store: str | None = None) -> "StateStoreSettings":
        """Build settings from process environment variables.

        Args:
            state_store: Optional store kind that replaces ``CLUSTER_STATE_STORE``.

        Returns:
            A validated settings object.

        Raises:
            StateConfigError: If environment values are invalid.
        """
        raw_kind = state_store or os.getenv("CLUSTER_STATE_STORE", DEFAULT_STATE_STORE)
        return cls(
            state_store=parse_store_kind(raw_kind),
            state_store_path=os.getenv("CLUSTER_STATE_STORE_PATH", DEFAULT_STATE_STORE_PATH),
            s3_access_key=os.getenv("CLUSTER_S3_ACCESS_KEY", ""),
            s3_secret_key=os.getenv("CLUSTER_S3_SECRET_KEY", ""),
            s3_endpoint=os.getenv("CLUSTER_S3_ENDPOINT", ""),
            s3_location=os.getenv("CLUSTER_S3_LOCATION", ""),
            s3_bucket=os.getenv("CLUSTER_S3_BUCKET", ""),
            git_author_name=os.getenv("CLUSTER_GIT_AUTHOR_NAME", DEFAULT_GIT_AUTHOR_NAME),
            git_author_email=os.getenv("CLUSTER_GIT_AUTHOR_EMAIL", DEFAULT_GIT_AUTHOR_EMAIL),
        )

    def local_base_path(self) -> Path:
        """Return the state store path as an expanded absolute directory."""
        return expand_state_path(self.state_store_path)


def parse_store_kind(raw_value: str) -> str:
    """Parse a state store kind value.

    Args:
        raw_value: Raw kind string from environment or flags.

    Returns:
        Normalized store kind.

    Raises:
        StateConfigError: If the kind is not supported.
    """
    kind = raw_value.strip().lower()
    if kind not in SUPPORTED_STORE_KINDS:
        raise StateConfigError(
            f"Unsupported state store '{raw_value}': "
            f"expected one of {', '.join(SUPPORTED_STORE_KINDS)}. "
            "Set CLUSTER_STATE_STORE or --state-store to a supported kind."
        )
    return kind


def expand_state_path(raw_path: str) -> Path:
    """Expand ``~`` and resolve a local state store path."""
    return Path(raw_path).expanduser().resolve()
