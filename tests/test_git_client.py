"""Tests for the subprocess git client."""

import shutil

import pytest

from binnacle_store.exceptions import GitSubprocessError, MalformedGitOutputError
from binnacle_store.storage.git_client import SubprocessGitClient, TreeEntry
from tests.helpers.git_cmd import git_stdout

EMPTY_BLOB = "e69de29bb2d1d6434b8b29ae775ad8c2e48c5391"
EMPTY_TREE = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"


class TestTreeEntry:
    def test_parse(self):
        entry = TreeEntry.parse(f"100644 blob {EMPTY_BLOB}\ttasks.jsonl")
        assert entry == TreeEntry.blob(EMPTY_BLOB, "tasks.jsonl")

    def test_parse_keeps_tabs_and_spaces_in_name(self):
        entry = TreeEntry.parse(f"100644 blob {EMPTY_BLOB}\tmy file\twith tab")
        assert entry.name == "my file\twith tab"

    def test_format(self):
        entry = TreeEntry.blob(EMPTY_BLOB, "tasks.jsonl")
        assert entry.format() == f"100644 blob {EMPTY_BLOB}\ttasks.jsonl"

    @pytest.mark.parametrize(
        "record",
        [
            "",
            "100644 blob",
            f"100644 blob {EMPTY_BLOB}",
            "100644 blob nothex\ttasks.jsonl",
            f"blob {EMPTY_BLOB}\ttasks.jsonl",
        ],
    )
    def test_parse_rejects_malformed(self, record):
        with pytest.raises(MalformedGitOutputError):
            TreeEntry.parse(record)


class TestSubprocessGitClient:
    def test_is_git_repo(self, git_repo, plain_dir, tmp_path):
        assert SubprocessGitClient(git_repo).is_git_repo()
        assert not SubprocessGitClient(plain_dir).is_git_repo()
        assert not SubprocessGitClient(tmp_path / "missing").is_git_repo()

    def test_hash_object_writes_blob(self, git_repo):
        client = SubprocessGitClient(git_repo)

        sha = client.hash_object_stdin("")

        assert sha == EMPTY_BLOB
        assert git_stdout(git_repo, "cat-file", "-t", sha).strip() == "blob"

    def test_empty_tree(self, git_repo):
        assert SubprocessGitClient(git_repo).empty_tree() == EMPTY_TREE

    def test_mktree_ls_tree_round_trip(self, git_repo):
        client = SubprocessGitClient(git_repo)
        blob = client.hash_object_stdin('{"id":"a"}\n')
        entries = [TreeEntry.blob(blob, "tasks.jsonl"), TreeEntry.blob(EMPTY_BLOB, 'odd "name"\tx.jsonl')]
        client.hash_object_stdin("")

        tree = client.mktree(entries)

        assert sorted(client.ls_tree(tree), key=lambda e: e.name) == sorted(entries, key=lambda e: e.name)

    def test_mktree_empty(self, git_repo):
        assert SubprocessGitClient(git_repo).mktree([]) == EMPTY_TREE

    def test_commit_update_ref_and_show(self, git_repo):
        client = SubprocessGitClient(git_repo)
        blob = client.hash_object_stdin("line\n")
        tree = client.mktree([TreeEntry.blob(blob, "data.jsonl")])

        root = client.commit_tree(tree, "root")
        child = client.commit_tree(tree, "child", parents=[root])
        client.update_ref("refs/heads/scratch", child)

        assert client.ref_exists("refs/heads/scratch")
        assert client.rev_parse("refs/heads/scratch") == child
        assert client.rev_parse("refs/heads/scratch^{tree}") == tree
        assert client.resolve("refs/heads/scratch^{tree}") == tree
        assert client.resolve(child) == child
        assert client.show("refs/heads/scratch:data.jsonl") == "line\n"
        assert client.show("refs/heads/scratch:missing.jsonl") is None
        assert git_stdout(git_repo, "rev-parse", f"{child}^").strip() == root

    def test_rev_parse_missing(self, git_repo):
        client = SubprocessGitClient(git_repo)
        assert client.rev_parse("refs/heads/nope") is None
        assert not client.ref_exists("refs/heads/nope")

    def test_resolve_failure_carries_git_stderr(self, git_repo):
        client = SubprocessGitClient(git_repo)

        with pytest.raises(GitSubprocessError) as excinfo:
            client.resolve("refs/heads/nope^{tree}")

        assert excinfo.value.subcommand == "rev-parse"
        assert excinfo.value.returncode not in (None, 0)
        assert excinfo.value.stderr.strip()

    def test_notes_lifecycle(self, git_repo):
        client = SubprocessGitClient(git_repo)
        target = client.hash_object_stdin("binnacle:test")
        ref = "refs/notes/scratch"

        assert client.notes_show(ref, target) is None
        assert client.notes_remove(ref, target) is False

        client.notes_add(ref, target, "one\n")
        client.notes_add(ref, target, "two\n")
        assert client.notes_show(ref, target) == "two\n"

        assert client.notes_remove(ref, target) is True
        assert client.notes_show(ref, target) is None

    def test_notes_add_stores_content_verbatim(self, git_repo):
        client = SubprocessGitClient(git_repo)
        target = client.hash_object_stdin("binnacle:test")
        ref = "refs/notes/scratch"
        content = '{"a":1}  \n# comment\n\n  {"b":2}'

        client.notes_add(ref, target, content)

        assert client.notes_show(ref, target) == content

    def test_failure_carries_stderr(self, git_repo):
        client = SubprocessGitClient(git_repo)

        with pytest.raises(GitSubprocessError) as excinfo:
            client.ls_tree("0" * 40)

        error = excinfo.value
        assert error.subcommand == "ls-tree"
        assert error.returncode != 0
        assert error.stderr
        assert error.stderr.strip() in str(error)

    def test_missing_binary(self, git_repo):
        client = SubprocessGitClient(git_repo, git_binary="definitely-not-git-binary")

        with pytest.raises(GitSubprocessError) as excinfo:
            client.hash_object_stdin("x")

        assert excinfo.value.returncode is None

    @pytest.mark.skipif(shutil.which("echo") is None, reason="echo not available")
    def test_unparseable_sha(self, tmp_path):
        client = SubprocessGitClient(tmp_path, git_binary="echo")

        with pytest.raises(MalformedGitOutputError) as excinfo:
            client.hash_object_stdin("x")

        assert excinfo.value.subcommand == "hash-object"

    def test_with_repo_keeps_settings(self, tmp_path):
        client = SubprocessGitClient(tmp_path, git_binary="git2", timeout=3.0)

        other = client.with_repo(tmp_path / "other")

        assert other.repo_path == tmp_path / "other"
        assert other.git_binary == "git2"
        assert other.timeout == 3.0
