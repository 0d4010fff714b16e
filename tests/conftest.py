"""Shared fixtures: real temporary git repositories and the in-memory fake."""

import shutil
from pathlib import Path

import pytest

from tests.helpers.fake_git import FakeGitClient, FakeGitWorld
from tests.helpers.git_cmd import run_git


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Provide an initialized git repository with a commit identity."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    repo = tmp_path / "repo"
    repo.mkdir()
    run_git(repo, "init", "-q")
    run_git(repo, "config", "user.email", "test@test.com")
    run_git(repo, "config", "user.name", "Test")
    run_git(repo, "config", "commit.gpgsign", "false")
    return repo


@pytest.fixture
def plain_dir(tmp_path: Path, monkeypatch) -> Path:
    """Provide a directory that is not inside any git repository."""
    directory = tmp_path / "not-a-repo"
    directory.mkdir()
    # keep git from discovering a repository above the temp dir
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    return directory


@pytest.fixture
def fake_world() -> FakeGitWorld:
    world = FakeGitWorld()
    world.add_repo("/repo")
    return world


@pytest.fixture
def fake_git(fake_world: FakeGitWorld) -> FakeGitClient:
    return FakeGitClient(fake_world, "/repo")
