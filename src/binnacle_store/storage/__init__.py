"""Git-native storage backends for binnacle JSONL collections.

- ``OrphanBranchBackend`` - collections as blobs on the ``binnacle-data`` branch
- ``GitNotesBackend`` - collections as notes under ``refs/notes/binnacle``
"""

from .backend import GitBackendBase, StorageBackend
from .factory import create_backend, create_backend_from_config, detect_backend
from .git_client import GitClient, SubprocessGitClient, TreeEntry
from .git_notes import GitNotesBackend
from .orphan_branch import OrphanBranchBackend

__all__ = [
    "StorageBackend",
    "GitBackendBase",
    "GitClient",
    "SubprocessGitClient",
    "TreeEntry",
    "GitNotesBackend",
    "OrphanBranchBackend",
    "create_backend",
    "create_backend_from_config",
    "detect_backend",
]
