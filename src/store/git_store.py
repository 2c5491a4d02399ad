"""Git-backed cluster state store.

Snapshots use the JSON filesystem layout inside a git repository
rooted at the base path. Every write and delete is committed, so the
repository carries a durable history per cluster.
"""

from __future__ import annotations

from pathlib import Path

import pygit2

from core.cluster_name import validate_cluster_name
from core.constants import STORE_KIND_GIT
from core.errors import StateBackendUnreachableError
from core.logging_config import get_logger
from core.types import FilesystemBackendConfig, GitBackendConfig
from store.json_store import JSONFilesystemStore

_LOGGER = get_logger(__name__)


class GitStore(JSONFilesystemStore):
    """JSON filesystem store that commits each change to git.

    The repository is opened, or initialized, on first use. Reads and
    listings use the working tree, not history.
    """

    kind = STORE_KIND_GIT

    def __init__(self, config: GitBackendConfig) -> None:
        """Initialize git store from config.

        Args:
            config: Git backend configuration.
        """
        super().__init__(FilesystemBackendConfig(base_path=config.base_path))
        self._author_name = config.author_name
        self._author_email = config.author_email
        self._repo: pygit2.Repository | None = None

    def write(self, name: str, snapshot: bytes) -> None:
        """Persist and commit a snapshot.

        A write whose content matches the last commit creates no commit
        and still succeeds.

        Args:
            name: Cluster name.
            snapshot: JSON snapshot bytes.
        """
        super().write(name, snapshot)
        self._commit_state_file(name, f'Commit state for cluster "{name}"', removed=False)

    def delete(self, name: str) -> None:
        """Remove a cluster state file and commit the removal."""
        super().delete(name)
        self._commit_state_file(name, f'Delete state for cluster "{name}"', removed=True)

    def history(self, name: str) -> list[str]:
        """Return ids of commits that changed a cluster's state, newest first.

        Args:
            name: Cluster name.

        Returns:
            Commit id strings; empty when nothing was committed.
        """
        validate_cluster_name(name)
        self._ensure_open()
        if self._repo is None and not (self.base_path / ".git").exists():
            return []
        repo = self._repository()
        if repo.head_is_unborn:
            return []
        relative_path = self._relative_state_path(name)
        commit_ids: list[str] = []
        try:
            for commit in repo.walk(repo.head.target):
                current_id = _tree_entry_id(commit.tree, relative_path)
                parent_id = (
                    _tree_entry_id(commit.parents[0].tree, relative_path)
                    if commit.parents
                    else None
                )
                if current_id != parent_id:
                    commit_ids.append(str(commit.id))
        except pygit2.GitError as error:
            raise _unreachable(self.base_path, "read history", error) from error
        return commit_ids

    def close(self) -> None:
        if self._repo is not None:
            self._repo.free()
            self._repo = None
        super().close()

    def _commit_state_file(self, name: str, message: str, removed: bool) -> str | None:
        """Stage one state file and commit it when the tree changed.

        Args:
            name: Cluster name.
            message: Commit message.
            removed: Whether the file was deleted from the working tree.

        Returns:
            New commit id, or None for a no-op.
        """
        repo = self._repository()
        relative_path = self._relative_state_path(name)
        try:
            index = repo.index
            index.read()
            if removed:
                if relative_path in index:
                    index.remove(relative_path)
            else:
                index.add(relative_path)
            index.write()
            tree_id = index.write_tree()
            parents: list[pygit2.Oid] = []
            if not repo.head_is_unborn:
                head_commit = repo[repo.head.target]
                if head_commit.tree_id == tree_id:
                    _LOGGER.info("cluster_state_commit_skipped", cluster_name=name)
                    return None
                parents = [head_commit.id]
            signature = pygit2.Signature(self._author_name, self._author_email)
            commit_id = repo.create_commit("HEAD", signature, signature, message, tree_id, parents)
        except pygit2.GitError as error:
            raise _unreachable(self.base_path, "commit", error) from error
        _LOGGER.info("cluster_state_committed", cluster_name=name, commit_id=str(commit_id))
        return str(commit_id)

    def _repository(self) -> pygit2.Repository:
        """Open the repository at the base path, initializing it if absent."""
        if self._repo is not None:
            return self._repo
        base_path = self.base_path
        try:
            if (base_path / ".git").exists():
                self._repo = pygit2.Repository(str(base_path))
            else:
                base_path.mkdir(parents=True, exist_ok=True)
                self._repo = pygit2.init_repository(str(base_path))
                _LOGGER.info("state_repository_initialized", path=str(base_path))
        except (pygit2.GitError, OSError) as error:
            raise _unreachable(base_path, "open repository", error) from error
        return self._repo

    def _relative_state_path(self, name: str) -> str:
        return f"{name}/{self.state_file_name}"


def _tree_entry_id(tree: pygit2.Tree, relative_path: str) -> pygit2.Oid | None:
    try:
        return tree[relative_path].id
    except KeyError:
        return None


def _unreachable(base_path: Path, operation: str, error: Exception) -> StateBackendUnreachableError:
    return StateBackendUnreachableError(
        f"Git {operation} failed for state repository {base_path}: {error}. "
        "Check the repository is not locked or corrupted."
    )
