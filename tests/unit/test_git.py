"""Tests for git repository access against real repositories."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from gen_changelog.core.changelog import generate_changelog
from gen_changelog.core.packages import Package
from gen_changelog.exceptions import GitError
from gen_changelog.vcs.git import GitRepository


class TestGitRepository:
    """Tests for GitRepository."""

    def test_not_a_repository(self, tmp_path: Path, git_repo):
        """Plain directories are rejected."""
        plain = tmp_path / "plain"
        plain.mkdir()

        with pytest.raises(GitError, match="Not a git repository"):
            GitRepository(plain)

    def test_missing_path(self, tmp_path: Path):
        """Missing directories are rejected."""
        with pytest.raises(GitError, match="does not exist"):
            GitRepository(tmp_path / "missing")

    def test_git_not_installed(self, tmp_path: Path):
        """A missing git executable raises GitError."""
        with patch("subprocess.run", side_effect=FileNotFoundError), pytest.raises(GitError, match="not found"):
            GitRepository(tmp_path)

    def test_path_is_top_level(self, git_repo):
        """The repository path is the working tree root."""
        sub = git_repo.path / "sub"
        sub.mkdir()

        assert GitRepository(sub).path.resolve() == git_repo.path.resolve()

    def test_empty_repository(self, git_repo):
        """A fresh repository has no commits, tags or remote."""
        repo = GitRepository(git_repo.path)

        assert not repo.has_commits()
        assert repo.list_tags() == []
        assert repo.get_remote_url() is None

    def test_iter_commits_ranges(self, git_repo):
        """Commits are yielded newest first within a range."""
        first = git_repo.commit("feat: one")
        second = git_repo.commit("fix: two")
        git_repo.commit("docs: three")
        repo = GitRepository(git_repo.path)

        everything = list(repo.iter_commits())
        tail = list(repo.iter_commits("HEAD", first))
        middle = list(repo.iter_commits(second, first))

        assert [c.summary for c in everything] == ["docs: three", "fix: two", "feat: one"]
        assert [c.summary for c in tail] == ["docs: three", "fix: two"]
        assert [c.sha for c in middle] == [second]
        assert everything[-1].date == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        assert everything[-1].author_email == "test@example.com"

    def test_iter_commits_bad_range(self, git_repo):
        """An unknown revision raises GitError once consumed."""
        git_repo.commit("feat: one")
        repo = GitRepository(git_repo.path)

        with pytest.raises(GitError):
            list(repo.iter_commits("no-such-ref"))

    def test_list_tags_peels_annotated_tags(self, git_repo):
        """Lightweight and annotated tags both point at commits."""
        first = git_repo.commit("feat: one")
        git_repo.tag("v0.1.0")
        second = git_repo.commit("feat: two")
        git_repo.tag("v0.2.0", annotated=True)
        repo = GitRepository(git_repo.path)

        tags = {tag.name: tag for tag in repo.list_tags()}

        assert tags["v0.1.0"].sha == first
        assert tags["v0.2.0"].sha == second
        assert tags["v0.2.0"].date == datetime(2024, 1, 2, 12, 0, tzinfo=UTC)

    def test_changed_files(self, git_repo):
        """Changed files are listed relative to the root."""
        sha = git_repo.commit("feat: add", files={"crates/core/src/lib.rs": "x", "README.md": "y"})
        repo = GitRepository(git_repo.path)

        assert sorted(repo.changed_files(sha)) == ["README.md", "crates/core/src/lib.rs"]

    def test_multi_line_subject(self, git_repo):
        """Lines after the first stay out of the summary even without a blank line."""
        git_repo.commit("feat: first line\nsecond line of the paragraph")
        repo = GitRepository(git_repo.path)

        (commit,) = repo.iter_commits()

        assert commit.summary == "feat: first line"
        assert commit.message == "feat: first line\nsecond line of the paragraph"

    def test_carriage_return_in_message(self, git_repo):
        """A bare carriage return does not split a commit in two."""
        git_repo.commit("feat: mid\rline\n", verbatim=True)
        git_repo.commit("fix: after")
        repo = GitRepository(git_repo.path)

        commits = list(repo.iter_commits())

        assert [c.summary for c in commits] == ["fix: after", "feat: mid\rline"]

    def test_changed_files_of_merge(self, git_repo):
        """A merge lists the files it brings in from the merged branch."""
        git_repo.commit("chore: init", files={"README.md": "a"})
        git_repo.checkout("topic", create=True)
        git_repo.commit("wip", files={"crates/core/a.rs": "x"})
        git_repo.checkout("main")
        git_repo.commit("docs: readme", files={"README.md": "b"})
        merge = git_repo.merge("topic", "feat(core): merge topic")
        repo = GitRepository(git_repo.path)

        assert repo.changed_files(merge) == ["crates/core/a.rs"]

    def test_remote_url(self, git_repo):
        """The origin URL is read from the configuration."""
        git_repo.set_remote("git@github.com:o/r.git")

        assert GitRepository(git_repo.path).get_remote_url() == "git@github.com:o/r.git"


class TestGenerateFromRepository:
    """Tests for generate_changelog() on a real repository."""

    def test_generate(self, git_repo):
        """Tags split the history into dated sections."""
        git_repo.set_remote("https://github.com/o/r.git")
        git_repo.commit("feat: first feature")
        git_repo.tag("v1.0.0")
        git_repo.commit("fix: a bug (#3)")
        git_repo.tag("v1.0.1", annotated=True)
        git_repo.commit("feat: unreleased")

        text = generate_changelog(GitRepository(git_repo.path)).text

        assert "## [Unreleased]\n\n### Added\n - unreleased\n" in text
        assert "## [1.0.1] - 2024-01-02\n\n### Fixed\n - a bug ([#3])\n" in text
        assert "## [1.0.0] - 2024-01-01\n\n### Added\n - first feature\n" in text
        assert "[1.0.1]: https://github.com/o/r/compare/v1.0.0...v1.0.1\n" in text
        assert "[1.0.0]: https://github.com/o/r/commits/v1.0.0\n" in text

    def test_multi_line_message_renders_first_line(self, git_repo):
        """Only the first line of a message becomes the bullet."""
        git_repo.commit("feat: first line\nsecond line of the paragraph")

        text = generate_changelog(GitRepository(git_repo.path)).text

        assert " - first line\n" in text
        assert "second line" not in text

    def test_package_keeps_merge_commits(self, git_repo):
        """Merges bringing in package files belong to the package changelog."""
        git_repo.commit("chore: init", files={"README.md": "a"})
        git_repo.checkout("topic", create=True)
        git_repo.commit("wip", files={"crates/core/a.rs": "x"})
        git_repo.checkout("main")
        git_repo.commit("feat: outside", files={"README.md": "b"})
        git_repo.merge("topic", "feat(core): merge topic")

        package = Package(name="core", root="crates/core")
        text = generate_changelog(GitRepository(git_repo.path), package=package).text

        assert " - merge topic\n" in text
        assert "outside" not in text
