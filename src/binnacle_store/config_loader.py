"""Configuration loader for binnacle storage."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from pydantic import ValidationError

from binnacle_store.schemas import StorageConfig, StorageErrorCode, StorageFailure

DEFAULT_CONFIG_NAME = "binnacle.yaml"


def load_storage_config(
    path: Optional[Path],
    *,
    required: bool = False,
    overrides: Optional[Dict[str, Any]] = None,
) -> Tuple[Optional[StorageConfig], Optional[StorageFailure]]:
    """Load storage settings from a YAML file.

    Settings may sit at the top level or under a ``storage:`` key. A missing
    file yields the defaults unless ``required`` is set.

    Args:
        path: YAML file to read (None means defaults only)
        required: Report a failure when the file is absent
        overrides: Values applied on top of the file contents

    Returns:
        ``(config, None)`` on success, ``(None, failure)`` otherwise
    """
    payload, err = _load_file(path, required=required)
    if err:
        return None, err

    payload = dict(payload or {})
    if overrides:
        payload.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return StorageConfig.model_validate(payload), None
    except ValidationError as exc:
        return None, _error(f"Invalid storage config: {_first_error(exc)}", path)


def _load_file(path: Optional[Path], *, required: bool):
    if path is None:
        if required:
            return None, _error("Required config path not provided", path)
        return None, None

    path = Path(path)
    if not path.exists():
        if required:
            return None, _error(f"Config not found: {path}", path)
        return None, None

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        return None, _error(f"Invalid YAML: {exc}", path)

    if data is None:
        return {}, None
    if not isinstance(data, dict):
        return None, _error("Config root must be a mapping", path)
    if "storage" in data:
        data = data["storage"] or {}
        if not isinstance(data, dict):
            return None, _error("'storage' section must be a mapping", path)
    return data, None


def _first_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


def _error(message: str, path: Optional[Path]) -> StorageFailure:
    return StorageFailure(
        code=StorageErrorCode.CONFIG,
        message=message,
        details={"path": str(path) if path is not None else None},
    )
