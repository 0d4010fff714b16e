"""binnacle_store package root.

Git-native persistence for binnacle's JSONL collections. The public surface is
the backend contract, the two git-native backends, the factory helpers, the
configuration schema and the error types.
"""

__version__ = "0.1.0"

from binnacle_store.config_loader import load_storage_config  # noqa: F401
from binnacle_store.exceptions import (  # noqa: F401
    GitSubprocessError,
    MalformedGitOutputError,
    NotAGitRepositoryError,
    NotInitializedError,
    StorageConfigError,
    StorageError,
)
from binnacle_store.schemas import *  # noqa: F401,F403
from binnacle_store.schemas import __all__ as SCHEMA_EXPORTS
from binnacle_store.storage import (  # noqa: F401
    GitNotesBackend,
    OrphanBranchBackend,
    StorageBackend,
    create_backend,
    create_backend_from_config,
    detect_backend,
)

__all__ = [
    "__version__",
    "load_storage_config",
    "StorageError",
    "NotAGitRepositoryError",
    "NotInitializedError",
    "GitSubprocessError",
    "MalformedGitOutputError",
    "StorageConfigError",
    "StorageBackend",
    "GitNotesBackend",
    "OrphanBranchBackend",
    "create_backend",
    "create_backend_from_config",
    "detect_backend",
] + SCHEMA_EXPORTS
