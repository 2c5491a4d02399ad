"""Unit tests for the filesystem cluster store."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from core.errors import (
    StateConfigError,
    StateNotFoundError,
    StatePermissionError,
    StateStoreError,
)
from core.types import FilesystemBackendConfig
from store.filesystem_store import FilesystemStore


def _store(tmp_path) -> FilesystemStore:
    return FilesystemStore(FilesystemBackendConfig(base_path=tmp_path / "_state"))


def test_list_returns_empty_for_missing_base_path(tmp_path) -> None:
    """Listing should succeed with no clusters before anything is written."""
    store = _store(tmp_path)

    assert store.list() == []
    assert not (tmp_path / "_state").exists()


def test_write_then_read_round_trips_bytes(tmp_path) -> None:
    store = _store(tmp_path)

    store.write("prod", b"kind: Cluster\nname: prod\n")

    assert store.read("prod") == b"kind: Cluster\nname: prod\n"
    assert (tmp_path / "_state" / "prod" / "cluster.yaml").is_file()


def test_write_overwrites_previous_snapshot(tmp_path) -> None:
    """Second write should replace the snapshot and keep one listing entry."""
    store = _store(tmp_path)
    store.write("prod", b"first")

    store.write("prod", b"second")

    assert store.read("prod") == b"second"
    assert store.list() == ["prod"]


def test_write_leaves_no_temp_files(tmp_path) -> None:
    store = _store(tmp_path)

    store.write("prod", b"payload")

    assert os.listdir(tmp_path / "_state" / "prod") == ["cluster.yaml"]


def test_list_skips_hidden_and_incomplete_entries(tmp_path) -> None:
    """Hidden entries, stray files, and directories without state are not clusters."""
    store = _store(tmp_path)
    store.write("prod", b"a")
    store.write("dev", b"b")
    (tmp_path / "_state" / ".cache").mkdir()
    (tmp_path / "_state" / "empty").mkdir()
    (tmp_path / "_state" / "notes.txt").write_text("x", encoding="utf-8")

    assert store.list() == ["dev", "prod"]


def test_read_raises_not_found_for_unknown_cluster(tmp_path) -> None:
    store = _store(tmp_path)

    with pytest.raises(StateNotFoundError):
        store.read("missing")


def test_delete_removes_cluster_directory(tmp_path) -> None:
    store = _store(tmp_path)
    store.write("prod", b"a")

    store.delete("prod")

    assert store.list() == [] and not (tmp_path / "_state" / "prod").exists()


def test_delete_raises_not_found_for_unknown_cluster(tmp_path) -> None:
    store = _store(tmp_path)

    with pytest.raises(StateNotFoundError):
        store.delete("missing")


def test_rename_moves_snapshot(tmp_path) -> None:
    store = _store(tmp_path)
    store.write("old", b"payload")

    store.rename("old", "new")

    assert store.list() == ["new"] and store.read("new") == b"payload"


def test_rename_refuses_existing_target(tmp_path) -> None:
    """Rename should not silently overwrite another cluster."""
    store = _store(tmp_path)
    store.write("old", b"a")
    store.write("new", b"b")

    with pytest.raises(StateConfigError):
        store.rename("old", "new")

    assert store.read("new") == b"b"


def test_invalid_name_is_rejected_before_io(tmp_path) -> None:
    store = _store(tmp_path)

    with pytest.raises(StateConfigError):
        store.write("../escape", b"a")

    assert not (tmp_path / "_state").exists()


def test_closed_store_rejects_operations(tmp_path) -> None:
    with _store(tmp_path) as store:
        store.write("prod", b"a")

    with pytest.raises(StateStoreError):
        store.list()


def _raise_permission_error(self: Path) -> bool:
    raise PermissionError(13, "Permission denied", str(self))


def test_list_maps_unreadable_cluster_directory(tmp_path, monkeypatch) -> None:
    """A permission failure while probing entries should surface as a store error."""
    store = _store(tmp_path)
    store.write("prod", b"a")
    monkeypatch.setattr(Path, "is_file", _raise_permission_error)

    with pytest.raises(StatePermissionError):
        store.list()


def test_exists_and_delete_map_permission_errors(tmp_path, monkeypatch) -> None:
    store = _store(tmp_path)
    store.write("prod", b"a")
    monkeypatch.setattr(Path, "is_file", _raise_permission_error)

    with pytest.raises(StatePermissionError):
        store.exists("prod")
    with pytest.raises(StatePermissionError):
        store.delete("prod")
