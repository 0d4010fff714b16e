"""Git plumbing client used by the git-native storage backends.

``GitClient`` is the seam between backend logic and the ``git`` executable.
``SubprocessGitClient`` spawns one ``git`` process per call with the working
directory set to the repository root; tests substitute an in-memory client.

Absence is reported through return values (``None`` / ``False``), never by
raising, so backends can treat a missing note or tree entry as empty content.
Any other non-zero exit raises ``GitSubprocessError`` carrying the raw stderr.
"""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Union

from binnacle_store.exceptions import GitSubprocessError, MalformedGitOutputError

logger = logging.getLogger(__name__)

_SHA_RE = re.compile(r"^(?:[0-9a-f]{40}|[0-9a-f]{64})$")

BLOB_MODE = "100644"


@dataclass(frozen=True)
class TreeEntry:
    """One line of ``git ls-tree`` output / ``git mktree`` input."""

    mode: str
    type: str
    sha: str
    name: str

    @classmethod
    def blob(cls, sha: str, name: str) -> "TreeEntry":
        return cls(mode=BLOB_MODE, type="blob", sha=sha, name=name)

    def format(self) -> str:
        return f"{self.mode} {self.type} {self.sha}\t{self.name}"

    @classmethod
    def parse(cls, record: str) -> "TreeEntry":
        """Parse ``<mode> SP <type> SP <sha> TAB <name>``.

        Raises:
            MalformedGitOutputError: If the record does not have that shape
        """
        meta, sep, name = record.partition("\t")
        parts = meta.split()
        if not sep or not name or len(parts) != 3 or not _SHA_RE.match(parts[2]):
            raise MalformedGitOutputError("ls-tree", record, "<mode> <type> <sha>\\t<name>")
        return cls(mode=parts[0], type=parts[1], sha=parts[2], name=name)


class GitClient(Protocol):
    """Plumbing operations needed by the storage backends."""

    repo_path: Path

    def with_repo(self, repo_path: Union[str, Path]) -> "GitClient":
        """Return a client of the same kind bound to another repository."""
        ...

    def is_git_repo(self) -> bool:
        """True if ``repo_path`` is inside a git repository."""
        ...

    def ref_exists(self, ref: str) -> bool:
        """True if the fully qualified ``ref`` exists."""
        ...

    def rev_parse(self, revision: str) -> Optional[str]:
        """Resolve ``revision`` to a SHA, or None if it does not resolve."""
        ...

    def resolve(self, revision: str) -> str:
        """Resolve ``revision`` to a SHA, raising if git cannot."""
        ...

    def hash_object_stdin(self, content: str) -> str:
        """Write ``content`` as a blob and return its SHA."""
        ...

    def empty_tree(self) -> str:
        """Return the SHA of the empty tree."""
        ...

    def notes_show(self, notes_ref: str, target: str) -> Optional[str]:
        """Return the note attached to ``target``, or None if there is none."""
        ...

    def notes_add(self, notes_ref: str, target: str, content: str) -> None:
        """Attach ``content`` to ``target`` byte for byte, overwriting any existing note."""
        ...

    def notes_remove(self, notes_ref: str, target: str) -> bool:
        """Remove the note on ``target``. False if there was no note."""
        ...

    def mktree(self, entries: Sequence[TreeEntry]) -> str:
        """Write a tree holding exactly ``entries`` and return its SHA."""
        ...

    def ls_tree(self, tree: str) -> List[TreeEntry]:
        """List the entries of ``tree``."""
        ...

    def commit_tree(self, tree: str, message: str, parents: Sequence[str] = ()) -> str:
        """Create a commit for ``tree`` and return its SHA."""
        ...

    def update_ref(self, ref: str, new_value: str) -> None:
        """Point ``ref`` at ``new_value`` unconditionally."""
        ...

    def show(self, spec: str) -> Optional[str]:
        """Return the content named by ``spec`` (e.g. ``branch:file``), or None."""
        ...


class SubprocessGitClient:
    """GitClient that shells out to the ``git`` executable."""

    def __init__(
        self,
        repo_path: Union[str, Path],
        git_binary: str = "git",
        timeout: Optional[float] = None,
    ):
        """Bind a client to a repository.

        Args:
            repo_path: Repository root (or any directory inside it)
            git_binary: Executable to invoke
            timeout: Seconds to wait per invocation; None waits indefinitely
        """
        self.repo_path = Path(repo_path)
        self.git_binary = git_binary
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"SubprocessGitClient({str(self.repo_path)!r})"

    def with_repo(self, repo_path: Union[str, Path]) -> "SubprocessGitClient":
        return SubprocessGitClient(repo_path, git_binary=self.git_binary, timeout=self.timeout)

    def _run(
        self,
        args: Sequence[str],
        *,
        input_text: Optional[str] = None,
        check: bool = True,
        subcommand: Optional[str] = None,
    ) -> subprocess.CompletedProcess:
        """Run ``git <args>`` in the repository and capture its output as bytes.

        Raises:
            GitSubprocessError: If git cannot be spawned, times out, or exits
                non-zero while ``check`` is set
        """
        subcommand = subcommand or args[0]
        cmd = [self.git_binary, *args]
        kwargs = {}
        if input_text is None:
            kwargs["stdin"] = subprocess.DEVNULL
        else:
            kwargs["input"] = input_text.encode("utf-8")

        try:
            result = subprocess.run(
                cmd,
                cwd=self.repo_path,
                capture_output=True,
                timeout=self.timeout,
                check=False,
                **kwargs,
            )
        except subprocess.TimeoutExpired as exc:
            raise GitSubprocessError(subcommand, f"timed out after {exc.timeout}s") from exc
        except OSError as exc:
            raise GitSubprocessError(subcommand, str(exc)) from exc

        logger.debug("git %s -> exit %d (%s)", " ".join(args), result.returncode, self.repo_path)

        if check and result.returncode != 0:
            raise GitSubprocessError(subcommand, _decode(result.stderr), result.returncode)
        return result

    def _sha(self, result: subprocess.CompletedProcess, subcommand: str) -> str:
        output = _decode(result.stdout).strip()
        if not _SHA_RE.match(output):
            raise MalformedGitOutputError(subcommand, output, "object SHA")
        return output

    def is_git_repo(self) -> bool:
        if not self.repo_path.is_dir():
            return False
        result = self._run(["rev-parse", "--git-dir"], check=False)
        return result.returncode == 0

    def ref_exists(self, ref: str) -> bool:
        result = self._run(["show-ref", "--verify", "--quiet", ref], check=False)
        return result.returncode == 0

    def rev_parse(self, revision: str) -> Optional[str]:
        result = self._run(["rev-parse", "--verify", "--quiet", revision], check=False)
        if result.returncode != 0:
            return None
        return self._sha(result, "rev-parse")

    def resolve(self, revision: str) -> str:
        result = self._run(["rev-parse", "--verify", revision])
        return self._sha(result, "rev-parse")

    def hash_object_stdin(self, content: str) -> str:
        result = self._run(["hash-object", "-w", "--stdin"], input_text=content)
        return self._sha(result, "hash-object")

    def empty_tree(self) -> str:
        result = self._run(["hash-object", "-t", "tree", "/dev/null"], check=False)
        if result.returncode == 0:
            return self._sha(result, "hash-object")

        logger.warning(
            "git hash-object -t tree /dev/null failed (%s); falling back to mktree",
            _decode(result.stderr).strip(),
        )
        return self.mktree([])

    def notes_show(self, notes_ref: str, target: str) -> Optional[str]:
        result = self._run(
            ["notes", "--ref", notes_ref, "show", target],
            check=False,
            subcommand="notes show",
        )
        if result.returncode != 0:
            return None
        return _decode(result.stdout)

    def notes_add(self, notes_ref: str, target: str, content: str) -> None:
        # -F would run stripspace on the message; -C attaches the blob as is
        blob = self.hash_object_stdin(content)
        self._run(
            ["notes", "--ref", notes_ref, "add", "-f", "-C", blob, target],
            subcommand="notes add",
        )

    def notes_remove(self, notes_ref: str, target: str) -> bool:
        result = self._run(
            ["notes", "--ref", notes_ref, "remove", target],
            check=False,
            subcommand="notes remove",
        )
        if result.returncode == 0:
            return True
        stderr = _decode(result.stderr)
        if "no note" in stderr:
            return False
        raise GitSubprocessError("notes remove", stderr, result.returncode)

    def mktree(self, entries: Sequence[TreeEntry]) -> str:
        # -z keeps names verbatim; ls-tree/mktree would otherwise C-quote them
        payload = "".join(entry.format() + "\0" for entry in entries)
        result = self._run(["mktree", "-z"], input_text=payload)
        return self._sha(result, "mktree")

    def ls_tree(self, tree: str) -> List[TreeEntry]:
        result = self._run(["ls-tree", "-z", tree])
        records = _decode(result.stdout).split("\0")
        return [TreeEntry.parse(record) for record in records if record]

    def commit_tree(self, tree: str, message: str, parents: Sequence[str] = ()) -> str:
        args = ["commit-tree", tree]
        for parent in parents:
            args.extend(["-p", parent])
        args.extend(["-m", message])
        result = self._run(args)
        return self._sha(result, "commit-tree")

    def update_ref(self, ref: str, new_value: str) -> None:
        self._run(["update-ref", ref, new_value])

    def show(self, spec: str) -> Optional[str]:
        result = self._run(["show", spec], check=False)
        if result.returncode != 0:
            return None
        return _decode(result.stdout)


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")
