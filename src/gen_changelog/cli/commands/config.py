"""Implementation of the 'config' command."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from gen_changelog.config import ChangeLogConfig, dump_config
from gen_changelog.config.loader import DEFAULT_CONFIG_FILE

if TYPE_CHECKING:
    from rich.console import Console

DEFAULT_DISPLAY_SECTIONS = 3


def run_config(save: bool, file: str | None, console: Console, err_console: Console) -> None:
    """Print the default configuration, or save it to a file.

    Args:
        save: Write the configuration instead of printing it
        file: Target file, defaults to ``gen-changelog.toml``
        console: Console for standard output
        err_console: Console for error output
    """
    config = ChangeLogConfig()
    config.set_display_sections(DEFAULT_DISPLAY_SECTIONS)
    text = dump_config(config)

    if not save:
        console.out(text, end="", highlight=False)
        return

    path = Path(file or DEFAULT_CONFIG_FILE)
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        err_console.print(f"[red]Error writing {path}:[/] {e}")
        raise SystemExit(1) from e
    err_console.print(f"[green]✓[/] Saved the default configuration to [cyan]{path}[/]")
