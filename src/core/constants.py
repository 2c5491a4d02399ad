"""Core constants used across state store modules.

This module centralizes layout names, defaults, and supported kinds.
Keeping values here avoids magic literals in backend logic.
"""

from __future__ import annotations

DEFAULT_STATE_STORE = "fs"
DEFAULT_STATE_STORE_PATH = "./_state"
STORE_KIND_FS = "fs"
STORE_KIND_GIT = "git"
STORE_KIND_JSONFS = "jsonfs"
STORE_KIND_S3 = "s3"
SUPPORTED_STORE_KINDS = (STORE_KIND_FS, STORE_KIND_GIT, STORE_KIND_JSONFS, STORE_KIND_S3)
YAML_STATE_FILE_NAME = "cluster.yaml"
JSON_STATE_FILE_NAME = "cluster.json"
TEMP_FILE_PREFIX = ".tmp-"
MAX_CLUSTER_NAME_LENGTH = 253
DEFAULT_GIT_AUTHOR_NAME = "clusterstate"
DEFAULT_GIT_AUTHOR_EMAIL = "clusterstate@localhost"
DEFAULT_S3_REGION = "us-east-1"
