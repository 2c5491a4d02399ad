"""Unit tests for the git-backed cluster store."""

from __future__ import annotations

import pygit2
import pytest

from core.errors import StateCorruptSnapshotError, StateNotFoundError
from core.types import GitBackendConfig
from store.git_store import GitStore


def _store(tmp_path) -> GitStore:
    return GitStore(
        GitBackendConfig(base_path=tmp_path / "state", author_name="tester", author_email="t@x.io")
    )


def _commit_count(repo_path) -> int:
    repo = pygit2.Repository(str(repo_path))
    if repo.head_is_unborn:
        return 0
    return sum(1 for _ in repo.walk(repo.head.target))


def test_construction_performs_no_io(tmp_path) -> None:
    store = _store(tmp_path)

    assert store.list() == []
    assert not (tmp_path / "state").exists()


def test_first_write_initializes_repository_and_commits(tmp_path, json_snapshot: bytes) -> None:
    """First write should create the repository and record one commit."""
    store = _store(tmp_path)

    store.write("prod", json_snapshot)

    repo = pygit2.Repository(str(tmp_path / "state"))
    head_commit = repo[repo.head.target]
    assert head_commit.author.name == "tester"
    assert head_commit.tree["prod/cluster.json"].data == json_snapshot
    assert _commit_count(tmp_path / "state") == 1


def test_identical_write_is_noop_success(tmp_path, json_snapshot: bytes) -> None:
    """Writing unchanged content should not fail and should not add a commit."""
    store = _store(tmp_path)
    store.write("prod", json_snapshot)

    store.write("prod", json_snapshot)

    assert _commit_count(tmp_path / "state") == 1


def test_list_ignores_git_directory(tmp_path, json_snapshot: bytes) -> None:
    store = _store(tmp_path)
    store.write("prod", json_snapshot)
    store.write("dev", json_snapshot)

    assert store.list() == ["dev", "prod"]


def test_read_uses_working_tree(tmp_path, json_snapshot: bytes) -> None:
    store = _store(tmp_path)
    store.write("prod", json_snapshot)
    store.write("prod", b'{"nodes": 5}')

    assert store.read("prod") == b'{"nodes": 5}'


def test_history_lists_commits_newest_first(tmp_path, json_snapshot: bytes) -> None:
    store = _store(tmp_path)
    store.write("prod", json_snapshot)
    store.write("dev", json_snapshot)
    store.write("prod", b'{"nodes": 5}')

    history = store.history("prod")

    repo = pygit2.Repository(str(tmp_path / "state"))
    assert len(history) == 2 and history[0] == str(repo.head.target)


def test_delete_commits_removal(tmp_path, json_snapshot: bytes) -> None:
    store = _store(tmp_path)
    store.write("prod", json_snapshot)

    store.delete("prod")

    repo = pygit2.Repository(str(tmp_path / "state"))
    head_commit = repo[repo.head.target]
    assert store.list() == []
    with pytest.raises(KeyError):
        head_commit.tree["prod/cluster.json"]
    assert _commit_count(tmp_path / "state") == 2


def test_delete_missing_cluster_is_not_found(tmp_path) -> None:
    with pytest.raises(StateNotFoundError):
        _store(tmp_path).delete("prod")


def test_write_refuses_non_json_payload(tmp_path) -> None:
    store = _store(tmp_path)

    with pytest.raises(StateCorruptSnapshotError):
        store.write("prod", b"not json")

    assert not (tmp_path / "state").exists()


def test_close_releases_repository(tmp_path, json_snapshot: bytes) -> None:
    store = _store(tmp_path)
    store.write("prod", json_snapshot)

    store.close()
    store.close()

    assert store.closed


def test_history_without_repository_does_not_initialize(tmp_path) -> None:
    """Querying history should not create a repository as a side effect."""
    store = _store(tmp_path)

    assert store.history("prod") == []
    assert not (tmp_path / "state" / ".git").exists()
