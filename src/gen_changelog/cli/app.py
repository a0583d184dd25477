"""Command line interface for gen-changelog."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from gen_changelog import __version__
from gen_changelog.cli.commands.config import run_config
from gen_changelog.cli.commands.generate import run_generate

console = Console()
err_console = Console(stderr=True)

# -q, default, -v, -vv
_LEVELS = [logging.ERROR, logging.WARNING, logging.INFO, logging.DEBUG]


def configure_logging(verbose: int, quiet: int) -> None:
    """Send log records to stderr through rich."""
    index = max(0, min(len(_LEVELS) - 1, 1 + verbose - quiet))
    level = _LEVELS[index]
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=level <= logging.DEBUG)],
        force=True,
    )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, prog_name="gen-changelog")
@click.option("-v", "--verbose", count=True, help="Increase logging verbosity.")
@click.option("-q", "--quiet", count=True, help="Decrease logging verbosity.")
def cli(verbose: int, quiet: int) -> None:
    """Generate a Keep a Changelog file from Conventional Commits."""
    configure_logging(verbose, quiet)


@cli.command()
@click.option("-n", "--next-version", help="Version to give the unreleased changes.")
@click.option(
    "-r",
    "--releases",
    type=click.IntRange(min=1),
    help="Number of sections (releases) to show in the changelog.",
)
@click.option("-c", "--config-file", type=click.Path(dir_okay=False), help="Configuration file to use.")
@click.option(
    "--repository-dir",
    type=click.Path(file_okay=False),
    default=".",
    show_default=True,
    help="Path to the repository.",
)
@click.option("-d", "--display-summaries", is_flag=True, help="Add a summary of the commits to each section.")
@click.option("--add-groups", multiple=True, help="Publish an additional commit group.")
@click.option("--remove-groups", multiple=True, help="Stop publishing a commit group.")
@click.option("-p", "--package", help="Generate the changelog for one package of the workspace.")
@click.option("-o", "--output", default="CHANGELOG.md", show_default=True, help="File to write.")
@click.option("-S", "--no-save", is_flag=True, help="Do not save the changelog.")
@click.option("-s", "--show", is_flag=True, help="Print the changelog to standard output.")
def generate(
    next_version: str | None,
    releases: int | None,
    config_file: str | None,
    repository_dir: str,
    display_summaries: bool,
    add_groups: tuple[str, ...],
    remove_groups: tuple[str, ...],
    package: str | None,
    output: str,
    no_save: bool,
    show: bool,
) -> None:
    """Generate the changelog."""
    run_generate(
        repository_dir=repository_dir,
        next_version=next_version,
        releases=releases,
        config_file=config_file,
        display_summaries=display_summaries,
        add_groups=list(add_groups),
        remove_groups=list(remove_groups),
        package=package,
        output=output,
        no_save=no_save,
        show=show,
        console=console,
        err_console=err_console,
    )


@cli.command()
@click.option("-s", "--save", is_flag=True, help="Save the default configuration to a file.")
@click.option("-f", "--file", type=click.Path(dir_okay=False), help="File to save to.")
def config(save: bool, file: str | None) -> None:
    """Show or save the default configuration."""
    run_config(save=save, file=file, console=console, err_console=err_console)


def main() -> None:
    cli(prog_name="gen-changelog")
