"""Version control access for gen-changelog."""

from __future__ import annotations

from gen_changelog.vcs.git import Commit, GitRepository, TagRef

__all__ = ["Commit", "GitRepository", "TagRef"]
