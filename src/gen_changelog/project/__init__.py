"""Project and workspace manifest handling."""

from __future__ import annotations

from gen_changelog.project.workspace import discover_packages, find_package

__all__ = ["discover_packages", "find_package"]
