"""Git notes storage backend.

Stores each JSONL collection as a note under ``refs/notes/binnacle``. Notes
need an object to hang on, so every collection gets a deterministic blob whose
content is ``binnacle:<filename>``; the blob's SHA is only an addressing key.
"""

from __future__ import annotations

import logging

from binnacle_store.schemas import BackendType
from binnacle_store.storage.backend import GitBackendBase
from binnacle_store.storage.git_client import GitClient

logger = logging.getLogger(__name__)

NOTES_REF = "refs/notes/binnacle"
NOTE_PREFIX = "binnacle:"
BOOTSTRAP_KEY = "meta"
BOOTSTRAP_MESSAGE = "binnacle init"


class GitNotesBackend(GitBackendBase):
    """Storage backend that uses git notes."""

    BACKEND_TYPE = BackendType.GIT_NOTES.value

    def location(self) -> str:
        return f"git notes: {NOTES_REF}"

    def note_target(self, filename: str) -> str:
        """Write (or re-derive) the key blob for ``filename`` and return its SHA."""
        return self.git.hash_object_stdin(f"{NOTE_PREFIX}{filename}")

    def notes_ref_exists(self) -> bool:
        return self.git.ref_exists(NOTES_REF)

    def _structure_exists(self, git: GitClient) -> bool:
        return git.ref_exists(NOTES_REF)

    def _create_structure(self) -> None:
        target = self.note_target(BOOTSTRAP_KEY)
        self.git.notes_add(NOTES_REF, target, BOOTSTRAP_MESSAGE)
        logger.info("Created notes ref %s in %s", NOTES_REF, self.repo_path)

    def _read_content(self, filename: str) -> str:
        note = self.git.notes_show(NOTES_REF, self.note_target(filename))
        return note or ""

    def _write_content(self, filename: str, content: str) -> None:
        target = self.note_target(filename)
        if not content:
            if not self.git.notes_remove(NOTES_REF, target):
                logger.debug("No note to remove for %s", filename)
            return
        self.git.notes_add(NOTES_REF, target, content)
