"""Storage failure codes and records."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import Field

from .base import SchemaBase


class StorageErrorCode(str, Enum):
    UNKNOWN = "unknown"
    NOT_A_GIT_REPOSITORY = "not_a_git_repository"
    NOT_INITIALIZED = "not_initialized"
    GIT_SUBPROCESS_FAILURE = "git_subprocess_failure"
    MALFORMED_GIT_OUTPUT = "malformed_git_output"
    CONFIG = "config"


class StorageFailure(SchemaBase):
    code: StorageErrorCode
    message: str
    backend_type: Optional[str] = Field(default=None)
    details: Dict[str, Any] = Field(default_factory=dict)
