"""Changelog sections.

A section covers the commits between two release boundaries, or
between the newest release and HEAD for the "Unreleased" section.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from gen_changelog.core.commits import ConventionalCommit
from gen_changelog.core.groups import UNCATEGORISED
from gen_changelog.core.links import Link

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import date

    from gen_changelog.core.groups import GroupRegistry
    from gen_changelog.core.links import Remote
    from gen_changelog.core.packages import Package
    from gen_changelog.vcs.git import Commit

logger = logging.getLogger(__name__)

UNRELEASED = "Unreleased"


@dataclass(frozen=True)
class Section:
    """The commits of one version range, bucketed by group.

    Attributes:
        version: Version label, or None for the Unreleased section
        date: Release date, None for the Unreleased section
        tag_name: Tag at the newest end of the range (None means HEAD)
        base_tag: Tag at the oldest end of the range, excluded from it
        groups: Group name to commits, newest first within each group
        uncategorised: Commits that matched no group
    """

    version: str | None = None
    date: date | None = None
    tag_name: str | None = None
    base_tag: str | None = None
    groups: dict[str, tuple[ConventionalCommit, ...]] = field(default_factory=dict)
    uncategorised: int = 0

    @property
    def is_unreleased(self) -> bool:
        return self.version is None

    @property
    def label(self) -> str:
        return self.version if self.version is not None else UNRELEASED

    @property
    def heading(self) -> str:
        if self.is_unreleased:
            return f"## [{UNRELEASED}]"
        if self.date is None:
            return f"## [{self.version}]"
        return f"## [{self.version}] - {self.date.isoformat()}"

    def counts(self) -> dict[str, int]:
        """Commits per group, including unpublished groups."""
        return {name: len(commits) for name, commits in self.groups.items() if commits}

    @property
    def total(self) -> int:
        return sum(self.counts().values()) + self.uncategorised

    def summary(self) -> str:
        """One-line summary such as ``Summary: Added[2], Fixed[1]``."""
        terms = [f"{name}[{count}]" for name, count in sorted(self.counts().items())]
        if self.uncategorised:
            terms.append(f"{UNCATEGORISED}[{self.uncategorised}]")
        return "Summary: " + (", ".join(terms) if terms else "no changes")

    def link(self, remote: Remote) -> Link:
        """Footer link comparing this section's boundaries."""
        head = self.tag_name or "HEAD"
        if self.base_tag:
            url = remote.compare_url(self.base_tag, head)
        else:
            url = remote.commits_url(head)
        return Link(anchor=self.label, url=url)

    def report_status(self) -> str:
        lines = [f"Section {self.label} contains:"]
        lines.extend(f"  {count} commits under {name}" for name, count in self.counts().items())
        if self.uncategorised:
            lines.append(f"  {self.uncategorised} uncategorised commits")
        return "\n".join(lines)


def build_section(
    commits: Iterable[Commit],
    registry: GroupRegistry,
    *,
    version: str | None = None,
    date: date | None = None,
    tag_name: str | None = None,
    base_tag: str | None = None,
    package: Package | None = None,
    changed_files: Callable[[str], Iterable[str]] | None = None,
) -> Section:
    """Classify the commits of one range into a section.

    Args:
        commits: Commits of the range, newest first; consumed once
        registry: Type to group table
        version: Version label, None for Unreleased
        date: Release date
        tag_name: Tag at the newest end of the range
        base_tag: Tag at the oldest end of the range
        package: Restrict the section to commits related to this package
        changed_files: Lookup of the files a commit touches, needed with ``package``

    Returns:
        The populated section
    """
    groups: dict[str, list[ConventionalCommit]] = {}
    uncategorised = 0

    for commit in commits:
        parsed = ConventionalCommit.from_commit(commit)

        if package is not None:
            files = changed_files(commit.sha) if changed_files is not None else ()
            if not package.is_related(parsed, files):
                continue

        group = registry.classify(parsed)
        logger.debug("Commit %s classified as %s: %s", commit.short_sha, group, parsed.raw)
        if group == UNCATEGORISED:
            uncategorised += 1
            continue
        groups.setdefault(group, []).append(parsed)

    section = Section(
        version=version,
        date=date,
        tag_name=tag_name,
        base_tag=base_tag,
        groups={name: tuple(items) for name, items in groups.items()},
        uncategorised=uncategorised,
    )
    logger.debug("%s", section.report_status())
    return section
