"""Storage backend and configuration schemas."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from .base import SchemaBase

DEFAULT_COLLECTIONS = ["tasks.jsonl", "commits.jsonl", "test-results.jsonl"]

_BACKEND_ALIASES = {
    "file": "file",
    "external": "file",
    "default": "file",
    "orphan": "orphan-branch",
    "orphan-branch": "orphan-branch",
    "branch": "orphan-branch",
    "notes": "git-notes",
    "git-notes": "git-notes",
}


def _canonical_backend(text: str) -> str:
    canonical = _BACKEND_ALIASES.get(text.strip().lower())
    if canonical is None:
        raise ValueError(f"unknown backend type: {text}")
    return canonical


class BackendType(str, Enum):
    """Available storage backend types.

    ``FILE`` is the external plain-file store; it is listed so configuration
    written for it parses, but this package only builds the git-native ones.
    """

    FILE = "file"
    ORPHAN_BRANCH = "orphan-branch"
    GIT_NOTES = "git-notes"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: str) -> "BackendType":
        """Parse a backend name, accepting the short aliases used in configs.

        Raises:
            StorageConfigError: If the name matches no backend
        """
        try:
            return cls(_canonical_backend(text))
        except ValueError as exc:
            from binnacle_store.exceptions import StorageConfigError

            raise StorageConfigError("backend", str(exc)) from exc


class StorageConfig(SchemaBase):
    backend: BackendType = Field(default=BackendType.ORPHAN_BRANCH)
    repo_path: str = Field(default=".")
    git_binary: str = Field(default="git")
    git_timeout: Optional[float] = Field(default=None, description="seconds; None waits forever")
    seed_collections: List[str] = Field(default_factory=lambda: list(DEFAULT_COLLECTIONS))

    @field_validator("backend", mode="before")
    @classmethod
    def _parse_backend(cls, value):
        if not isinstance(value, str):
            return value
        return _canonical_backend(value)
