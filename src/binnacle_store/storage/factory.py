"""Backend selection for the git-native stores."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from binnacle_store.exceptions import StorageConfigError
from binnacle_store.schemas import BackendType, StorageConfig
from binnacle_store.storage.backend import GitBackendBase
from binnacle_store.storage.git_client import GitClient, SubprocessGitClient
from binnacle_store.storage.git_notes import GitNotesBackend
from binnacle_store.storage.orphan_branch import OrphanBranchBackend

# Probe order for detect_backend
GIT_BACKENDS = (BackendType.ORPHAN_BRANCH, BackendType.GIT_NOTES)


def create_backend(
    backend: Union[BackendType, str],
    repo_path: Union[str, Path],
    git: Optional[GitClient] = None,
    config: Optional[StorageConfig] = None,
) -> GitBackendBase:
    """Build an uninitialized backend of the requested type.

    Args:
        backend: BackendType or any accepted alias ("notes", "orphan", ...)
        repo_path: Repository the backend stores into
        git: Plumbing client; defaults to a subprocess client for repo_path
        config: Supplies git binary, timeout and seed collections

    Raises:
        StorageConfigError: If the type is unknown or not provided here
    """
    if not isinstance(backend, BackendType):
        backend = BackendType.parse(backend)
    config = config or StorageConfig()

    if git is None:
        git = SubprocessGitClient(repo_path, git_binary=config.git_binary, timeout=config.git_timeout)

    if backend == BackendType.GIT_NOTES:
        return GitNotesBackend(repo_path, git)
    if backend == BackendType.ORPHAN_BRANCH:
        return OrphanBranchBackend(repo_path, git, seed_collections=config.seed_collections)
    raise StorageConfigError("backend", f"{backend} backend is not a git-native backend")


def create_backend_from_config(config: StorageConfig, git: Optional[GitClient] = None) -> GitBackendBase:
    return create_backend(config.backend, config.repo_path, git=git, config=config)


def detect_backend(repo_path: Union[str, Path], git: Optional[GitClient] = None) -> Optional[BackendType]:
    """Return the first git-native backend whose storage exists in repo_path."""
    for backend_type in GIT_BACKENDS:
        if create_backend(backend_type, repo_path, git=git).exists():
            return backend_type
    return None
