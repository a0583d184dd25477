"""Release tag resolution.

Turns the repository's tags into the ordered list of release boundaries
that split the history into changelog sections.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from gen_changelog.config.models import compile_release_pattern
from gen_changelog.core.version import SemVer, parse_version
from gen_changelog.exceptions import NoTagsFoundError

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from gen_changelog.config.models import ReleasePattern
    from gen_changelog.vcs.git import TagRef

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tag:
    """A release tag: the commit where one version's history ends."""

    name: str
    version: SemVer | None
    sha: str
    date: datetime | None = None

    @property
    def is_version_tag(self) -> bool:
        return self.version is not None

    def __str__(self) -> str:
        return self.name


def parse_tag(ref: TagRef, release_pattern: ReleasePattern, package: str | None = None) -> Tag:
    """Interpret one tag, leaving ``version`` unset when it is not a release."""
    match = compile_release_pattern(release_pattern, package).match(ref.name)
    version = parse_version(match.group("version")) if match else None
    if version is None:
        logger.debug("Tag %s is not a release tag", ref.name)
    else:
        logger.debug("Identified %s as version %s", ref.name, version)
    return Tag(name=ref.name, version=version, sha=ref.sha, date=ref.date)


def resolve_tags(
    refs: Iterable[TagRef],
    release_pattern: ReleasePattern,
    *,
    package: str | None = None,
    required: int = 0,
) -> list[Tag]:
    """Resolve release boundaries, newest version first.

    Args:
        refs: Tags listed by the repository
        release_pattern: Release tag configuration
        package: Package name used when tags carry a package prefix
        required: Minimum number of boundaries the caller needs

    Returns:
        Release tags sorted by semantic version, descending

    Raises:
        InvalidTagPatternError: If the release pattern is malformed
        NoTagsFoundError: If fewer than ``required`` release tags exist
    """
    # Validate the pattern even when the repository has no tags.
    compile_release_pattern(release_pattern, package)

    tags = [tag for tag in (parse_tag(ref, release_pattern, package) for ref in refs) if tag.is_version_tag]

    # One boundary per commit; the highest version wins a shared commit.
    by_sha: dict[str, Tag] = {}
    for tag in sorted(tags, key=lambda t: (t.version, t.name), reverse=True):
        if tag.sha in by_sha:
            logger.warning("Tags %s and %s mark the same commit; using %s", by_sha[tag.sha], tag, by_sha[tag.sha])
            continue
        by_sha[tag.sha] = tag
    boundaries = list(by_sha.values())

    logger.debug("Release tags: %s", ", ".join(t.name for t in boundaries) or "none")

    if len(boundaries) < required:
        raise NoTagsFoundError(f"Expected at least {required} release tag(s), found {len(boundaries)}")

    return boundaries
