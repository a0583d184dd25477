"""Configuration management for gen-changelog."""

from __future__ import annotations

from gen_changelog.config.loader import dump_config, find_config_file, load_config
from gen_changelog.config.models import (
    ChangeLogConfig,
    Group,
    ReleasePattern,
    compile_release_pattern,
)

__all__ = [
    "ChangeLogConfig",
    "Group",
    "ReleasePattern",
    "compile_release_pattern",
    "dump_config",
    "find_config_file",
    "load_config",
]
