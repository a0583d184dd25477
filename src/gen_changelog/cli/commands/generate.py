"""Implementation of the 'generate' command.

The generate command walks the repository, renders the changelog and
writes it to disk.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.panel import Panel

from gen_changelog.config import load_config
from gen_changelog.core.changelog import ChangeLogBuilder
from gen_changelog.exceptions import GenChangelogError
from gen_changelog.project.workspace import find_package
from gen_changelog.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console

    from gen_changelog.config.models import ChangeLogConfig


def _fail(err_console: Console, error: GenChangelogError) -> SystemExit:
    err_console.print(f"[red]Error during {error.stage}:[/] {error}")
    return SystemExit(1)


def build_config(
    config_file: str | None,
    project_path: Path,
    releases: int | None,
    add_groups: list[str],
    remove_groups: list[str],
) -> ChangeLogConfig:
    """Load the configuration and apply command line overrides."""
    config = load_config(Path(config_file) if config_file else None, start=project_path)

    config.publish_group("Security")
    config.set_display_sections(releases)
    config.add_commit_groups(add_groups)
    config.remove_commit_groups(remove_groups)
    return config


def run_generate(
    repository_dir: str | None,
    next_version: str | None,
    releases: int | None,
    config_file: str | None,
    display_summaries: bool,
    add_groups: list[str],
    remove_groups: list[str],
    package: str | None,
    output: str,
    no_save: bool,
    show: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the generate command.

    Args:
        repository_dir: Path to the repository, defaults to the current directory
        next_version: Promote the Unreleased section to this version
        releases: Number of most recent sections to render
        config_file: Explicit configuration file
        display_summaries: Add a summary line to every section
        add_groups: Groups to publish in addition to the configured ones
        remove_groups: Groups to stop publishing
        package: Restrict the changelog to one workspace package
        output: File to write, relative to the repository
        no_save: Do not write the file
        show: Print the changelog to standard output
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(repository_dir) if repository_dir else Path.cwd()

    try:
        repo = GitRepository(project_path)
    except GenChangelogError as e:
        raise _fail(err_console, e) from e

    try:
        config = build_config(config_file, repo.path, releases, add_groups, remove_groups)
    except GenChangelogError as e:
        raise _fail(err_console, e) from e
    except ValueError as e:
        err_console.print(f"[red]Invalid option:[/] {e}")
        raise SystemExit(1) from e

    try:
        scope = find_package(repo.path, package) if package else None
        change_log = (
            ChangeLogBuilder()
            .with_config(config)
            .with_summary_flag(display_summaries)
            .with_package(scope)
            .walk_repository(repo)
            .promote(next_version)
            .build()
        )
    except GenChangelogError as e:
        raise _fail(err_console, e) from e

    if show:
        console.out(change_log.text, end="", highlight=False)

    if no_save:
        return

    changelog_path = Path(output)
    if not changelog_path.is_absolute():
        root = repo.path / scope.root if scope and scope.root else repo.path
        changelog_path = root / changelog_path

    try:
        changelog_path.write_text(change_log.text, encoding="utf-8")
    except OSError as e:
        err_console.print(f"[red]Error writing {changelog_path}:[/] {e}")
        raise SystemExit(1) from e

    shown = ", ".join(section.label for section in change_log.sections) or "none"
    err_console.print(
        Panel(
            f"[green]Wrote {changelog_path}[/]\n\nSections: [cyan]{shown}[/]",
            title="[green]Changelog Generated[/]",
            border_style="green",
        )
    )
