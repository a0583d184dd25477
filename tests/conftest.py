"""Shared fixtures for the gen-changelog test suite."""

from __future__ import annotations

import os
import shutil
import subprocess
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from gen_changelog.vcs.git import Commit, TagRef

EPOCH = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


class FakeRepository:
    """In-memory stand-in for GitRepository with a linear history.

    Commits are added oldest first; ``iter_commits`` yields them newest
    first like ``git log``.
    """

    def __init__(self, remote_url: str | None = "https://github.com/o/r.git") -> None:
        self.path = Path(".")
        self.remote_url = remote_url
        self.history: list[Commit] = []
        self.tags: list[TagRef] = []
        self.files: dict[str, list[str]] = {}

    def add(
        self,
        message: str,
        files: list[str] | None = None,
        tag: str | None = None,
        date: datetime | None = None,
    ) -> Commit:
        commit = Commit(
            sha=f"{len(self.history) + 1:040x}",
            message=message,
            author_name="Test",
            author_email="test@example.com",
            date=date or EPOCH + timedelta(days=len(self.history)),
        )
        self.history.append(commit)
        self.files[commit.sha] = files or []
        if tag is not None:
            self.tag(tag, commit)
        return commit

    def tag(self, name: str, commit: Commit | None = None) -> None:
        commit = commit or self.history[-1]
        self.tags.append(TagRef(name=name, sha=commit.sha, date=commit.date))

    def has_commits(self) -> bool:
        return bool(self.history)

    def get_remote_url(self, remote: str = "origin") -> str | None:
        return self.remote_url

    def list_tags(self) -> list[TagRef]:
        return list(self.tags)

    def changed_files(self, sha: str) -> list[str]:
        return self.files.get(sha, [])

    def _index(self, ref: str) -> int:
        if ref == "HEAD":
            return len(self.history) - 1
        return next(i for i, commit in enumerate(self.history) if commit.sha == ref)

    def iter_commits(self, tip: str = "HEAD", stop: str | None = None):
        end = self._index(tip)
        start = self._index(stop) + 1 if stop else 0
        yield from reversed(self.history[start : end + 1])


class GitRepoBuilder:
    """Creates commits and tags in a real repository with fixed dates."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._count = 0
        self.git("init", "-q")
        self.git("symbolic-ref", "HEAD", "refs/heads/main")

    def git(self, *args: str, when: datetime | None = None) -> str:
        env = os.environ.copy()
        if when is not None:
            stamp = when.isoformat()
            env["GIT_AUTHOR_DATE"] = stamp
            env["GIT_COMMITTER_DATE"] = stamp
        result = subprocess.run(
            [
                "git",
                "-c",
                "user.name=Test User",
                "-c",
                "user.email=test@example.com",
                "-c",
                "commit.gpgsign=false",
                "-c",
                "tag.gpgsign=false",
                *args,
            ],
            cwd=self.path,
            capture_output=True,
            text=True,
            env=env,
            check=True,
        )
        return result.stdout.strip()

    def _next_date(self, when: datetime | None) -> datetime:
        when = when or EPOCH + timedelta(days=self._count)
        self._count += 1
        return when

    def commit(
        self,
        message: str,
        files: dict[str, str] | None = None,
        when: datetime | None = None,
        verbatim: bool = False,
    ) -> str:
        when = self._next_date(when)
        for name, content in (files or {}).items():
            target = self.path / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
            self.git("add", name)
        cleanup = ["--cleanup=verbatim"] if verbatim else []
        self.git("commit", "-q", "--allow-empty", *cleanup, "-m", message, when=when)
        return self.git("rev-parse", "HEAD")

    def checkout(self, branch: str, create: bool = False) -> None:
        self.git("checkout", "-q", *(["-b"] if create else []), branch)

    def merge(self, branch: str, message: str, when: datetime | None = None) -> str:
        self.git("merge", "-q", "--no-ff", "-m", message, branch, when=self._next_date(when))
        return self.git("rev-parse", "HEAD")

    def tag(self, name: str, annotated: bool = False) -> None:
        if annotated:
            self.git("tag", "-a", name, "-m", f"Release {name}")
        else:
            self.git("tag", name)

    def set_remote(self, url: str) -> None:
        self.git("remote", "add", "origin", url)


@pytest.fixture
def fake_repo() -> FakeRepository:
    """An empty in-memory repository with a GitHub remote."""
    return FakeRepository()


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepoBuilder:
    """A fresh git repository in a temporary directory."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    path = tmp_path / "repo"
    path.mkdir()
    return GitRepoBuilder(path)


@pytest.fixture
def make_commit():
    """Factory for Commit objects."""

    def _make(message: str, sha: str = "abc1234def") -> Commit:
        return Commit(
            sha=sha,
            message=message,
            author_name="Test",
            author_email="test@example.com",
            date=EPOCH,
        )

    return _make
