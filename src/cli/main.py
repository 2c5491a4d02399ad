"""Cluster state CLI entry points.
This module exposes list, get, put, delete, and rename commands.
It maps argparse commands onto the cluster store contract.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
import sys
from typing import Any, Sequence

from core.config import StateStoreSettings
from core.errors import StateConfigError, StateStoreError
from core.logging_config import get_logger
from store.base import ClusterStore
from store.selector import open_cluster_store

_LOGGER = get_logger(__name__)

_SETTINGS_FLAGS = {
    "state_store_path": "state_store_path",
    "s3_access": "s3_access_key",
    "s3_secret": "s3_secret_key",
    "s3_endpoint": "s3_endpoint",
    "s3_location": "s3_location",
    "s3_bucket": "s3_bucket",
}


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="clusterstate", description="Cluster state store CLI")
    parser.add_argument(
        "-s", "--state-store", help="State store type: fs, git, jsonfs or s3 (CLUSTER_STATE_STORE)"
    )
    parser.add_argument(
        "-S", "--state-store-path", help="State store path or key prefix (CLUSTER_STATE_STORE_PATH)"
    )
    parser.add_argument("--s3-access", help="The s3 access key (CLUSTER_S3_ACCESS_KEY)")
    parser.add_argument("--s3-secret", help="The s3 secret key (CLUSTER_S3_SECRET_KEY)")
    parser.add_argument("--s3-endpoint", help="The s3 endpoint url (CLUSTER_S3_ENDPOINT)")
    parser.add_argument("--s3-location", help="The s3 bucket location (CLUSTER_S3_LOCATION)")
    parser.add_argument("--s3-bucket", help="The s3 bucket name (CLUSTER_S3_BUCKET)")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_list_command(subparsers)
    _add_get_command(subparsers)
    _add_put_command(subparsers)
    _add_delete_command(subparsers)
    _add_rename_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the cluster state CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = build_settings(args)
        with open_cluster_store(settings) as store:
            return _run_command(store, args)
    except StateStoreError as error:
        _LOGGER.error("command_failed", command=args.command, error=str(error))
        print(f"error: {error}", file=sys.stderr)
        return 1


def build_settings(args: argparse.Namespace) -> StateStoreSettings:
    """Merge environment settings with command-line overrides.

    Args:
        args: Parsed CLI args.

    Returns:
        Settings with flag values taking precedence.
    """
    settings = StateStoreSettings.from_env(state_store=args.state_store)
    overrides: dict[str, Any] = {
        field_name: getattr(args, flag)
        for flag, field_name in _SETTINGS_FLAGS.items()
        if getattr(args, flag) is not None
    }
    return replace(settings, **overrides)


def _run_command(store: ClusterStore, args: argparse.Namespace) -> int:
    if args.command == "list":
        return _run_list_command(store, args)
    if args.command == "get":
        return _run_get_command(store, args)
    if args.command == "put":
        return _run_put_command(store, args)
    if args.command == "delete":
        return _run_delete_command(store, args)
    if args.command == "rename":
        return _run_rename_command(store, args)
    raise StateConfigError(f"Unsupported command: {args.command}")


def _add_list_command(subparsers: Any) -> None:
    """Register list command."""
    parser = subparsers.add_parser("list", help="List available states")
    parser.add_argument(
        "-n", "--no-headers", action="store_true", help="Show the list containing names only"
    )


def _add_get_command(subparsers: Any) -> None:
    """Register get command."""
    parser = subparsers.add_parser("get", help="Print the stored state of a cluster")
    parser.add_argument("name", help="Cluster name")


def _add_put_command(subparsers: Any) -> None:
    """Register put command."""
    parser = subparsers.add_parser("put", help="Store the state of a cluster")
    parser.add_argument("name", help="Cluster name")
    parser.add_argument("--file", required=True, help="Snapshot file, or - for stdin")


def _add_delete_command(subparsers: Any) -> None:
    """Register delete command."""
    parser = subparsers.add_parser("delete", help="Delete the stored state of a cluster")
    parser.add_argument("name", help="Cluster name")


def _add_rename_command(subparsers: Any) -> None:
    """Register rename command."""
    parser = subparsers.add_parser("rename", help="Rename a stored cluster state")
    parser.add_argument("old_name", help="Current cluster name")
    parser.add_argument("new_name", help="New cluster name")


def _run_list_command(store: ClusterStore, args: argparse.Namespace) -> int:
    """Handle list command.

    Args:
        store: Selected cluster store.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    names = store.list()
    if not args.no_headers:
        print(f"CLUSTERS ({store.kind})")
    for name in names:
        print(name)
    return 0


def _run_get_command(store: ClusterStore, args: argparse.Namespace) -> int:
    snapshot = store.read(args.name)
    sys.stdout.buffer.write(snapshot)
    sys.stdout.flush()
    return 0


def _run_put_command(store: ClusterStore, args: argparse.Namespace) -> int:
    """Handle put command.

    Args:
        store: Selected cluster store.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    store.write(args.name, _read_snapshot_input(args.file))
    print(args.name)
    return 0


def _run_delete_command(store: ClusterStore, args: argparse.Namespace) -> int:
    store.delete(args.name)
    print(args.name)
    return 0


def _run_rename_command(store: ClusterStore, args: argparse.Namespace) -> int:
    store.rename(args.old_name, args.new_name)
    print(args.new_name)
    return 0


def _read_snapshot_input(source: str) -> bytes:
    """Read snapshot bytes from a file path or stdin.

    Raises:
        StateConfigError: If the input file cannot be read.
    """
    if source == "-":
        return sys.stdin.buffer.read()
    try:
        return Path(source).expanduser().read_bytes()
    except OSError as error:
        raise StateConfigError(
            f"Cannot read snapshot file {source}: {error}. Provide a readable file path."
        ) from error
