"""Orphan branch storage backend.

Stores every JSONL collection as a blob in the tree of ``binnacle-data``, a
branch whose history starts at a parentless commit and never joins the
project's own history. All reads and writes go through plumbing commands, so
the working tree, the index and ``HEAD`` are never touched.

Storage structure of the branch tip::

    tasks.jsonl          tasks and test nodes
    commits.jsonl        commit-to-task links
    test-results.jsonl   test run history

Collections that are not in the tree read as empty and are added on first
write.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from binnacle_store.exceptions import NotInitializedError
from binnacle_store.schemas import DEFAULT_COLLECTIONS, BackendType
from binnacle_store.storage.backend import GitBackendBase
from binnacle_store.storage.git_client import GitClient, TreeEntry

logger = logging.getLogger(__name__)

BINNACLE_BRANCH = "binnacle-data"
BRANCH_REF = f"refs/heads/{BINNACLE_BRANCH}"
INIT_MESSAGE = "Initialize binnacle data storage"


class OrphanBranchBackend(GitBackendBase):
    """Storage backend that uses a git orphan branch."""

    BACKEND_TYPE = BackendType.ORPHAN_BRANCH.value

    def __init__(
        self,
        repo_path: Union[str, Path],
        git: Optional[GitClient] = None,
        seed_collections: Optional[Sequence[str]] = None,
    ):
        """Create an orphan branch backend.

        Args:
            repo_path: Path to the git repository
            git: Plumbing client (defaults to a subprocess client on repo_path)
            seed_collections: Filenames created empty with the branch
        """
        super().__init__(repo_path, git)
        if seed_collections is None:
            seed_collections = DEFAULT_COLLECTIONS
        self.seed_collections = list(seed_collections)

    def location(self) -> str:
        return f"git branch: {BINNACLE_BRANCH}"

    def branch_exists(self) -> bool:
        return self._structure_exists(self.git)

    def _structure_exists(self, git: GitClient) -> bool:
        return git.rev_parse(BRANCH_REF) is not None

    def _create_structure(self) -> None:
        self.create_branch()

    def create_branch(self) -> str:
        """Create the branch with an empty blob per seed collection.

        Returns:
            SHA of the root commit
        """
        entries = []
        for filename in self.seed_collections:
            blob = self.git.hash_object_stdin("")
            entries.append(TreeEntry.blob(blob, filename))

        tree = self.git.mktree(entries) if entries else self.git.empty_tree()
        commit = self.git.commit_tree(tree, INIT_MESSAGE)
        self.git.update_ref(BRANCH_REF, commit)
        logger.info("Created orphan branch %s at %s in %s", BINNACLE_BRANCH, commit[:12], self.repo_path)
        return commit

    def _read_content(self, filename: str) -> str:
        return self.read_file(filename)

    def _write_content(self, filename: str, content: str) -> None:
        self.write_file(filename, content)

    def read_file(self, filename: str) -> str:
        """Return the content of ``filename`` at the branch tip ("" if absent)."""
        content = self.git.show(f"{BRANCH_REF}:{filename}")
        return content or ""

    def write_file(self, filename: str, content: str) -> str:
        """Commit ``content`` as ``filename`` on top of the branch tip.

        mktree always takes a complete listing, so the whole tree is rebuilt
        with the one entry replaced (or added).

        Returns:
            SHA of the new commit

        Raises:
            NotInitializedError: If the branch was deleted after init
        """
        parent = self.git.rev_parse(BRANCH_REF)
        if parent is None:
            raise NotInitializedError(self.backend_type(), self.location())
        current_tree = self.git.resolve(f"{parent}^{{tree}}")
        blob = self.git.hash_object_stdin(content)
        entries = rebuild_entries(self.git.ls_tree(current_tree), filename, blob)
        new_tree = self.git.mktree(entries)

        commit = self.git.commit_tree(new_tree, f"Update {filename}", parents=[parent])
        self.git.update_ref(BRANCH_REF, commit)
        logger.debug("Committed %s as %s on %s", filename, commit[:12], BINNACLE_BRANCH)
        return commit


def rebuild_entries(entries: Sequence[TreeEntry], filename: str, blob: str) -> List[TreeEntry]:
    """Return ``entries`` with ``filename`` pointing at ``blob``.

    Other entries keep their mode, type and position; a new name is appended.
    """
    rebuilt = []
    found = False
    for entry in entries:
        if entry.name == filename:
            rebuilt.append(TreeEntry.blob(blob, filename))
            found = True
        else:
            rebuilt.append(entry)
    if not found:
        rebuilt.append(TreeEntry.blob(blob, filename))
    return rebuilt
