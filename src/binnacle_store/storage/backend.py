"""Storage backend interface and shared JSONL handling.

Backends persist named JSONL collections (``tasks.jsonl``, ``commits.jsonl``,
``test-results.jsonl``, ...). Each collection is an ordered list of non-blank
lines; the backend never inspects or reorders the lines themselves.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Union

from binnacle_store.exceptions import NotAGitRepositoryError, NotInitializedError
from binnacle_store.storage.git_client import GitClient, SubprocessGitClient


class StorageBackend(Protocol):
    """Abstract interface for storage backends."""

    def init(self, repo_path: Optional[Union[str, Path]] = None) -> None:
        """Initialize storage for a repository, creating it if absent.

        Args:
            repo_path: Repository to bind to (defaults to the current one)

        Raises:
            NotAGitRepositoryError: If the path is not a git repository
        """
        ...

    def exists(self, repo_path: Optional[Union[str, Path]] = None) -> bool:
        """Check whether storage already exists, without creating anything."""
        ...

    def read_jsonl(self, filename: str) -> List[str]:
        """Read all non-blank lines of a collection, in write order.

        Raises:
            NotInitializedError: If storage has not been initialized
        """
        ...

    def append_jsonl(self, filename: str, line: str) -> None:
        """Append one line to a collection."""
        ...

    def write_jsonl(self, filename: str, lines: Sequence[str]) -> None:
        """Replace a collection with ``lines``."""
        ...

    def location(self) -> str:
        """Human readable storage location."""
        ...

    def backend_type(self) -> str:
        """Static backend tag, e.g. ``git-notes``."""
        ...


def split_lines(content: str) -> List[str]:
    """Split stored content into its non-blank lines.

    Only ``\\n`` separates records; a trailing ``\\r`` is dropped.
    """
    lines = []
    for raw in content.split("\n"):
        line = raw[:-1] if raw.endswith("\r") else raw
        if line.strip():
            lines.append(line)
    return lines


def join_lines(lines: Sequence[str]) -> str:
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def append_line(content: str, line: str) -> str:
    if content and not content.endswith("\n"):
        content += "\n"
    return content + line + "\n"


class GitBackendBase:
    """Shared behavior for backends that live in the git object database.

    Subclasses provide ``_structure_exists``, ``_create_structure``,
    ``_read_content`` and ``_write_content``; nothing is cached between calls
    because other processes may update the refs at any time.
    """

    BACKEND_TYPE = ""

    def __init__(self, repo_path: Union[str, Path], git: Optional[GitClient] = None):
        self.repo_path = Path(repo_path)
        self.git: GitClient = git if git is not None else SubprocessGitClient(self.repo_path)
        self.initialized = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.repo_path)!r})"

    def _bind(self, repo_path: Optional[Union[str, Path]]) -> GitClient:
        if repo_path is None or Path(repo_path) == self.repo_path:
            return self.git
        return self.git.with_repo(repo_path)

    def init(self, repo_path: Optional[Union[str, Path]] = None) -> None:
        git = self._bind(repo_path)
        if git is not self.git:
            self.repo_path = Path(repo_path)
            self.git = git
            self.initialized = False

        if not self.git.is_git_repo():
            raise NotAGitRepositoryError(str(self.repo_path), self.backend_type())

        if not self._structure_exists(self.git):
            self._create_structure()
        self.initialized = True

    def exists(self, repo_path: Optional[Union[str, Path]] = None) -> bool:
        git = self._bind(repo_path)
        if not git.is_git_repo():
            return False
        return self._structure_exists(git)

    def _require_initialized(self) -> None:
        if not self.initialized and not self._structure_exists(self.git):
            raise NotInitializedError(self.backend_type(), self.location())

    def read_jsonl(self, filename: str) -> List[str]:
        self._require_initialized()
        return split_lines(self._read_content(filename))

    def append_jsonl(self, filename: str, line: str) -> None:
        self._require_initialized()
        content = self._read_content(filename)
        self._write_content(filename, append_line(content, line))

    def write_jsonl(self, filename: str, lines: Sequence[str]) -> None:
        self._require_initialized()
        self._write_content(filename, join_lines(lines))

    def backend_type(self) -> str:
        return self.BACKEND_TYPE

    def location(self) -> str:  # pragma: no cover - overridden
        raise NotImplementedError

    def _structure_exists(self, git: GitClient) -> bool:  # pragma: no cover - overridden
        raise NotImplementedError

    def _create_structure(self) -> None:  # pragma: no cover - overridden
        raise NotImplementedError

    def _read_content(self, filename: str) -> str:  # pragma: no cover - overridden
        raise NotImplementedError

    def _write_content(self, filename: str, content: str) -> None:  # pragma: no cover - overridden
        raise NotImplementedError
