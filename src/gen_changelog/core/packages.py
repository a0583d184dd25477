"""Scoping commits to one package of a multi-package repository."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from gen_changelog.core.commits import ConventionalCommit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Package:
    """A workspace member: where its sources live and what it depends on.

    ``root`` is relative to the repository root, using ``/`` separators.
    An empty root means the package is the repository itself.
    """

    name: str
    root: str
    dependencies: tuple[str, ...] = ()

    def contains(self, path: str) -> bool:
        if not self.root:
            return True
        root = self.root.rstrip("/")
        return path == root or path.startswith(root + "/")

    def is_dependency_update(self, commit: ConventionalCommit) -> bool:
        """True when the commit bumps one of this package's dependencies.

        Matches the conventional scope exactly, or a bot style
        ``update crate <name>`` description.
        """
        if commit.scope is not None and commit.scope in self.dependencies:
            return True
        crate = commit.updated_crate()
        return crate is not None and crate in self.dependencies

    def is_related(self, commit: ConventionalCommit, files: Iterable[str]) -> bool:
        """Decide whether a commit belongs in this package's changelog."""
        if self.is_dependency_update(commit):
            logger.debug("Commit %s updates a dependency of %s", commit.sha[:7], self.name)
            return True
        if any(self.contains(path) for path in files):
            logger.debug("Commit %s touches files in %s", commit.sha[:7], self.root)
            return True
        return False
