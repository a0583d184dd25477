"""Core business logic for gen-changelog.

This module contains the fundamental building blocks:
- Semantic version parsing and ordering
- Conventional commit parsing and classification
- Release tag resolution
- Section building and markdown rendering
- Changelog orchestration
"""

from __future__ import annotations

from gen_changelog.core.changelog import (
    ChangeLog,
    ChangeLogBuilder,
    WalkedChangeLog,
    generate_changelog,
)
from gen_changelog.core.commits import ConventionalCommit, format_commit_for_changelog
from gen_changelog.core.groups import UNCATEGORISED, GroupRegistry
from gen_changelog.core.links import Link, Remote, parse_remote
from gen_changelog.core.packages import Package
from gen_changelog.core.render import Header, render_changelog
from gen_changelog.core.section import UNRELEASED, Section, build_section
from gen_changelog.core.tags import Tag, resolve_tags
from gen_changelog.core.version import SemVer, parse_version

__all__ = [
    "ChangeLog",
    "ChangeLogBuilder",
    "ConventionalCommit",
    "GroupRegistry",
    "Header",
    "Link",
    "Package",
    "Remote",
    "Section",
    "SemVer",
    "Tag",
    "UNCATEGORISED",
    "UNRELEASED",
    "WalkedChangeLog",
    "build_section",
    "format_commit_for_changelog",
    "generate_changelog",
    "parse_remote",
    "parse_version",
    "render_changelog",
    "resolve_tags",
]
