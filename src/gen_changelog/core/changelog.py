"""Changelog generation from repository history.

Generation runs in stages, each producing a new immutable object:

1. :class:`ChangeLogBuilder` collects configuration, header, summary flag
   and an optional package scope.
2. :meth:`ChangeLogBuilder.walk_repository` resolves release tags and
   builds one section per version range, giving a :class:`WalkedChangeLog`.
3. :meth:`WalkedChangeLog.promote` optionally relabels the Unreleased
   section as the next version.
4. :meth:`WalkedChangeLog.build` renders the final :class:`ChangeLog`.

Nothing is written to disk; persisting the document is up to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date as date_type
from typing import TYPE_CHECKING

from gen_changelog.config.models import ChangeLogConfig
from gen_changelog.core.groups import GroupRegistry
from gen_changelog.core.links import parse_remote
from gen_changelog.core.render import Header, limit_sections, render_changelog
from gen_changelog.core.section import Section, build_section
from gen_changelog.core.tags import resolve_tags
from gen_changelog.core.version import parse_version
from gen_changelog.exceptions import NoUnreleasedSectionError, RemoteError

if TYPE_CHECKING:
    from gen_changelog.core.links import Remote
    from gen_changelog.core.packages import Package
    from gen_changelog.core.tags import Tag
    from gen_changelog.vcs.git import GitRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommitRange:
    """Commits reachable from ``tip`` but not from ``stop``."""

    tip: str
    stop: str | None = None
    version: str | None = None
    date: date_type | None = None
    tag_name: str | None = None
    base_tag: str | None = None


@dataclass(frozen=True)
class ChangeLog:
    """A finished changelog document."""

    header: Header
    sections: tuple[Section, ...]
    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class WalkedChangeLog:
    """Sections built from the repository, ready to promote and render."""

    sections: tuple[Section, ...]
    header: Header
    headings: tuple[str, ...]
    summary_flag: bool
    section_limit: int | None
    tag_prefix: str
    remote: Remote | None = None

    def _next_tag_name(self, label: str) -> str:
        """Name the tag for ``label`` the way the newest release tag is named.

        ``release/1.2.0`` gives ``release/1.3.0``. Without a previous release
        the configured prefix is used.
        """
        newest = next((s for s in self.sections if not s.is_unreleased), None)
        if newest is not None and newest.tag_name and newest.version and newest.version in newest.tag_name:
            head, _, tail = newest.tag_name.rpartition(newest.version)
            return f"{head}{label}{tail}"
        return f"{self.tag_prefix}{label}"

    def promote(self, version: str | None, today: date_type | None = None) -> WalkedChangeLog:
        """Relabel the Unreleased section as ``version``.

        The promoted section keeps its commits and is dated ``today``. A new,
        empty Unreleased section is placed above it, starting from the new
        version's tag. Passing None returns the changelog unchanged.

        Raises:
            NoUnreleasedSectionError: If the newest section is already released
        """
        if version is None:
            return self

        if not self.sections or not self.sections[0].is_unreleased:
            raise NoUnreleasedSectionError(
                f"Cannot promote to {version}: there is no Unreleased section"
            )

        label = version
        if self.tag_prefix and version.startswith(self.tag_prefix):
            stripped = version[len(self.tag_prefix) :]
            if parse_version(stripped) is not None:
                label = stripped
        if parse_version(label) is None:
            logger.warning("Next version '%s' is not a semantic version", label)
        tag_name = self._next_tag_name(label)

        current = self.sections[0]
        promoted = replace(current, version=label, date=today or date_type.today(), tag_name=tag_name)
        unreleased = Section(base_tag=tag_name)
        logger.info("Promoted Unreleased to %s", label)

        return replace(self, sections=(unreleased, promoted, *self.sections[1:]))

    def build(self) -> ChangeLog:
        """Render the document."""
        text = render_changelog(
            self.header,
            self.sections,
            self.headings,
            summary=self.summary_flag,
            remote=self.remote,
            limit=self.section_limit,
        )
        shown = limit_sections(self.sections, self.section_limit)
        return ChangeLog(header=self.header, sections=tuple(shown), text=text)


@dataclass(frozen=True)
class ChangeLogBuilder:
    """Collects everything needed before walking the repository."""

    config: ChangeLogConfig = field(default_factory=ChangeLogConfig)
    header: Header = field(default_factory=Header)
    summary_flag: bool = False
    package: Package | None = None
    require_links: bool = False

    def with_config(self, config: ChangeLogConfig) -> ChangeLogBuilder:
        # Later changes to the caller's config must not leak into this stage.
        return replace(self, config=config.model_copy(deep=True))

    def with_header(self, header: Header) -> ChangeLogBuilder:
        return replace(self, header=header)

    def with_summary_flag(self, value: bool) -> ChangeLogBuilder:
        return replace(self, summary_flag=value)

    def with_package(self, package: Package | None) -> ChangeLogBuilder:
        return replace(self, package=package)

    def with_links_required(self, value: bool = True) -> ChangeLogBuilder:
        return replace(self, require_links=value)

    @property
    def tag_prefix(self) -> str:
        pattern = self.config.release_pattern
        if self.package is not None and pattern.package_tags:
            return f"{self.package.name}-{pattern.prefix}"
        return pattern.prefix

    def _remote(self, repository: GitRepository) -> Remote | None:
        url = repository.get_remote_url()
        remote = parse_remote(url)
        if remote is None:
            if self.require_links:
                raise RemoteError(f"Cannot derive owner and repository from remote {url!r}")
            logger.warning("Unable to build links: remote %r is not a GitHub repository", url)
        return remote

    @staticmethod
    def _ranges(boundaries: list[Tag]) -> list[CommitRange]:
        """Version ranges from HEAD back to the first commit, newest first."""
        newest = boundaries[0] if boundaries else None
        ranges = [
            CommitRange(
                tip="HEAD",
                stop=newest.sha if newest else None,
                base_tag=newest.name if newest else None,
            )
        ]
        for tag, older in zip(boundaries, [*boundaries[1:], None]):
            ranges.append(
                CommitRange(
                    tip=tag.sha,
                    stop=older.sha if older else None,
                    version=str(tag.version),
                    date=tag.date.date() if tag.date else None,
                    tag_name=tag.name,
                    base_tag=older.name if older else None,
                )
            )
        return ranges

    def walk_repository(self, repository: GitRepository) -> WalkedChangeLog:
        """Build a section for every release range plus Unreleased.

        Raises:
            InvalidTagPatternError: If the release pattern is malformed
            RemoteError: If links are required but the remote is not usable
            GitError: If reading the repository fails
        """
        registry = GroupRegistry.from_config(self.config)
        logger.debug("Headings to publish: %s", ", ".join(registry.headings))

        remote = self._remote(repository)
        boundaries = resolve_tags(
            repository.list_tags(),
            self.config.release_pattern,
            package=self.package.name if self.package else None,
        )

        if self.package is not None:
            logger.info("Restricting changelog to package %s (%s)", self.package.name, self.package.root or ".")

        sections = []
        if not repository.has_commits():
            logger.warning("Repository has no commits")
            sections.append(Section())
        else:
            for commit_range in self._ranges(boundaries):
                logger.debug("Walking %s..%s", commit_range.stop or "start", commit_range.tip)
                sections.append(
                    build_section(
                        repository.iter_commits(commit_range.tip, commit_range.stop),
                        registry,
                        version=commit_range.version,
                        date=commit_range.date,
                        tag_name=commit_range.tag_name,
                        base_tag=commit_range.base_tag,
                        package=self.package,
                        changed_files=repository.changed_files,
                    )
                )

        return WalkedChangeLog(
            sections=tuple(sections),
            header=self.header,
            headings=registry.headings,
            summary_flag=self.summary_flag,
            section_limit=self.config.section_limit,
            tag_prefix=self.tag_prefix,
            remote=remote,
        )


def generate_changelog(
    repo: GitRepository,
    config: ChangeLogConfig | None = None,
    *,
    next_version: str | None = None,
    summary: bool = False,
    package: Package | None = None,
) -> ChangeLog:
    """Generate a changelog in one call.

    Args:
        repo: Git repository instance
        config: Changelog configuration, defaults when None
        next_version: Promote the Unreleased section to this version
        summary: Add summary lines to the sections
        package: Restrict the changelog to one workspace package

    Returns:
        The rendered changelog
    """
    builder = ChangeLogBuilder().with_summary_flag(summary).with_package(package)
    if config is not None:
        builder = builder.with_config(config)
    return builder.walk_repository(repo).promote(next_version).build()
