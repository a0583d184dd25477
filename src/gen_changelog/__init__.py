"""gen-changelog: Keep a Changelog documents from Conventional Commits."""

from __future__ import annotations

from gen_changelog.config import ChangeLogConfig, Group, load_config
from gen_changelog.core import ChangeLog, ChangeLogBuilder, generate_changelog
from gen_changelog.exceptions import GenChangelogError
from gen_changelog.vcs import GitRepository

__version__ = "0.1.0"

__all__ = [
    "ChangeLog",
    "ChangeLogBuilder",
    "ChangeLogConfig",
    "GenChangelogError",
    "GitRepository",
    "Group",
    "__version__",
    "generate_changelog",
    "load_config",
]
