"""Tests for the command line interface."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from gen_changelog.cli.app import cli


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI reconfigures the root logger; undo it after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def project(git_repo):
    """A repository with one release and unreleased work."""
    git_repo.set_remote("https://github.com/o/r.git")
    git_repo.commit("feat: first feature")
    git_repo.tag("v1.0.0")
    git_repo.commit("fix: a bug")
    git_repo.commit("test: more tests")
    return git_repo.path


class TestGenerateCommand:
    """Tests for 'gen-changelog generate'."""

    def test_writes_changelog(self, runner: CliRunner, project: Path):
        """The changelog is written to the repository root."""
        result = runner.invoke(cli, ["generate", "--repository-dir", str(project)])

        assert result.exit_code == 0, result.output
        text = (project / "CHANGELOG.md").read_text()
        assert text.startswith("# Changelog\n")
        assert "## [Unreleased]\n\n### Fixed\n - a bug\n" in text
        assert "## [1.0.0] - 2024-01-01" in text

    def test_show_without_saving(self, runner: CliRunner, project: Path):
        """--show prints the changelog and --no-save skips the file."""
        result = runner.invoke(cli, ["generate", "--repository-dir", str(project), "--show", "--no-save"])

        assert result.exit_code == 0, result.output
        assert "### Fixed\n - a bug\n" in result.output
        assert not (project / "CHANGELOG.md").exists()

    def test_options(self, runner: CliRunner, project: Path):
        """Version, summaries, groups and limits come from the options."""
        result = runner.invoke(
            cli,
            [
                "generate",
                "--repository-dir",
                str(project),
                "--next-version",
                "1.1.0",
                "--display-summaries",
                "--add-groups",
                "testing",
                "--releases",
                "2",
                "--output",
                "HISTORY.md",
            ],
        )

        assert result.exit_code == 0, result.output
        text = (project / "HISTORY.md").read_text()
        assert "## [1.1.0] - " in text
        assert "Summary: Fixed[1], Testing[1]" in text
        assert "### Testing\n - more tests\n" in text
        assert "## [1.0.0]" not in text
        assert "[Unreleased]: https://github.com/o/r/compare/v1.1.0...HEAD" in text

    def test_config_file(self, runner: CliRunner, project: Path):
        """Settings are read from gen-changelog.toml in the repository."""
        (project / "gen-changelog.toml").write_text('display-sections = "one"\n')

        result = runner.invoke(cli, ["generate", "--repository-dir", str(project), "--show", "--no-save"])

        assert result.exit_code == 0, result.output
        assert "## [Unreleased]" in result.output
        assert "## [1.0.0]" not in result.output

    def test_not_a_repository(self, runner: CliRunner, tmp_path: Path):
        """Failures name the stage and write nothing."""
        result = runner.invoke(cli, ["generate", "--repository-dir", str(tmp_path / "missing")])

        assert result.exit_code == 1
        assert "Error during repository access" in result.output

    def test_unknown_package(self, runner: CliRunner, project: Path):
        """An unknown package stops generation."""
        result = runner.invoke(cli, ["generate", "--repository-dir", str(project), "--package", "nope"])

        assert result.exit_code == 1
        assert "Error during package discovery" in result.output
        assert not (project / "CHANGELOG.md").exists()

    def test_invalid_release_count(self, runner: CliRunner, project: Path):
        """Release counts must be positive."""
        result = runner.invoke(cli, ["generate", "--repository-dir", str(project), "--releases", "0"])

        assert result.exit_code == 2


class TestConfigCommand:
    """Tests for 'gen-changelog config'."""

    def test_prints_default_config(self, runner: CliRunner):
        """Without --save the configuration is printed."""
        result = runner.invoke(cli, ["config"])

        assert result.exit_code == 0, result.output
        assert 'display-sections = "3"' in result.output
        assert "[groups.Added]" in result.output

    def test_saves_default_config(self, runner: CliRunner, tmp_path: Path):
        """--save writes the configuration to a file."""
        target = tmp_path / "custom.toml"

        result = runner.invoke(cli, ["config", "--save", "--file", str(target)])

        assert result.exit_code == 0, result.output
        assert 'display-sections = "3"' in target.read_text()

    def test_version(self, runner: CliRunner):
        """--version prints the package version."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "gen-changelog" in result.output
