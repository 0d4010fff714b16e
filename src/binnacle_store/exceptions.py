"""
Custom exception classes for binnacle storage.

Every exception carries a ``StorageErrorCode`` and can be converted to a
``StorageFailure`` record so callers can tell a tolerated absence from a
genuine failure without matching on message text.
"""

from typing import Any, Dict, Optional

from binnacle_store.schemas.errors import StorageErrorCode, StorageFailure


class StorageError(Exception):
    """Base exception for all binnacle storage errors."""

    code = StorageErrorCode.UNKNOWN
    backend_type: Optional[str] = None

    def details(self) -> Dict[str, Any]:
        return {}

    def to_failure(self) -> StorageFailure:
        """Return a structured record describing this error."""
        return StorageFailure(
            code=self.code,
            message=str(self),
            backend_type=self.backend_type,
            details=self.details(),
        )


class NotAGitRepositoryError(StorageError):
    """Backend initialized against a directory that is not a git repository."""

    code = StorageErrorCode.NOT_A_GIT_REPOSITORY

    def __init__(self, repo_path: str, backend_type: str):
        self.repo_path = str(repo_path)
        self.backend_type = backend_type
        super().__init__(
            f"Not a git repository: {self.repo_path}. "
            f"The {backend_type} backend requires a git repository."
        )

    def details(self) -> Dict[str, Any]:
        return {"repo_path": self.repo_path}


class NotInitializedError(StorageError):
    """Operation attempted before the backend's durable structure exists."""

    code = StorageErrorCode.NOT_INITIALIZED

    def __init__(self, backend_type: str, location: str):
        self.backend_type = backend_type
        self.location = location
        super().__init__(f"Storage not initialized ({location}). Run init first.")

    def details(self) -> Dict[str, Any]:
        return {"location": self.location}


class GitSubprocessError(StorageError):
    """A git invocation exited non-zero (or could not be spawned)."""

    code = StorageErrorCode.GIT_SUBPROCESS_FAILURE

    def __init__(self, subcommand: str, stderr: str, returncode: Optional[int] = None):
        self.subcommand = subcommand
        self.stderr = stderr
        self.returncode = returncode
        if returncode is None:
            super().__init__(f"Failed to run git {subcommand}: {stderr.strip()}")
        else:
            super().__init__(
                f"git {subcommand} failed with exit code {returncode}: {stderr.strip()}"
            )

    def details(self) -> Dict[str, Any]:
        return {
            "subcommand": self.subcommand,
            "stderr": self.stderr,
            "returncode": self.returncode,
        }


class MalformedGitOutputError(StorageError):
    """git succeeded but printed something that could not be parsed."""

    code = StorageErrorCode.MALFORMED_GIT_OUTPUT

    def __init__(self, subcommand: str, output: str, expected: str):
        self.subcommand = subcommand
        self.output = output
        self.expected = expected
        super().__init__(
            f"Unexpected output from git {subcommand} (expected {expected}): {output!r}"
        )

    def details(self) -> Dict[str, Any]:
        return {"subcommand": self.subcommand, "output": self.output, "expected": self.expected}


class StorageConfigError(StorageError):
    """Invalid storage configuration."""

    code = StorageErrorCode.CONFIG

    def __init__(self, source: str, message: str):
        self.source = source
        self.message = message
        super().__init__(f"Error loading {source}: {message}")

    def details(self) -> Dict[str, Any]:
        return {"source": self.source}
