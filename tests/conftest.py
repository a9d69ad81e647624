"""Shared test fixtures."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from build_publish.models import BuildTag, BuildTagSnapshot

GIT_IDENTITY = (
    "-c",
    "user.name=Test User",
    "-c",
    "user.email=test@example.com",
    "-c",
    "commit.gpgsign=false",
    "-c",
    "tag.gpgsign=false",
)


class GitRepo:
    """Throwaway git repository driven through the git CLI."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.git("init", "-q")

    def git(self, *args: str) -> str:
        result = subprocess.run(
            ["git", *GIT_IDENTITY, *args],
            cwd=self.path,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()

    def commit(self, message: str) -> str:
        """Create an empty commit and return its SHA."""
        self.git("commit", "-q", "--allow-empty", "-m", message)
        return self.sha()

    def tag(self, name: str, message: str | None = None, rev: str = "HEAD") -> None:
        """Create a lightweight tag, or an annotated one when ``message`` is given."""
        if message is None:
            self.git("tag", name, rev)
        else:
            self.git("tag", "-a", name, "-m", message, rev)

    def sha(self, rev: str = "HEAD") -> str:
        return self.git("rev-parse", rev)


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepo:
    """Create an empty git repository."""
    path = tmp_path / "repo"
    path.mkdir()
    return GitRepo(path)


@pytest.fixture
def released_repo(git_repo: GitRepo) -> GitRepo:
    """Repository with two debug builds and two changelog commits between them.

    History (oldest first):
        C1 "Initial commit"                    ← v1.0.1-debug
        C2 "CHANGELOG: [X-1] Add login screen"
        C3 "CHANGELOG: [X-2] Fix crash on start" ← v1.0.2-debug
    """
    git_repo.commit("Initial commit")
    git_repo.tag("v1.0.1-debug")
    git_repo.commit("Add login\n\nCHANGELOG: [X-1] Add login screen")
    git_repo.commit("Fix crash\n\nCHANGELOG: [X-2] Fix crash on start")
    git_repo.tag("v1.0.2-debug")
    return git_repo


def make_tag(
    name: str = "v1.0.2-debug",
    commit_sha: str = "c3" * 20,
    build_number: int = 2,
    build_version: str = "1.0",
    build_variant: str = "debug",
    message: str = "",
) -> BuildTag:
    """BuildTag with sensible defaults for unit tests."""
    return BuildTag(
        name=name,
        commit_sha=commit_sha,
        message=message,
        build_version=build_version,
        build_variant=build_variant,
        build_number=build_number,
    )


@pytest.fixture
def sample_snapshot() -> BuildTagSnapshot:
    """Snapshot with both previous tags present and on different commits."""
    return BuildTagSnapshot(
        current=make_tag(),
        previous_in_order=make_tag("v1.0.1-debug", "c1" * 20, 1),
        previous_on_different_commit=make_tag("v1.0.1-debug", "c1" * 20, 1),
    )
