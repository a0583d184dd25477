"""Command line interface for gen-changelog."""

from __future__ import annotations

from gen_changelog.cli.app import cli, main

__all__ = ["cli", "main"]
