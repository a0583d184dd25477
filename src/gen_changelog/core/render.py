"""Markdown rendering of the changelog document.

Rendering is a pure function of the sections and the display settings,
so identical inputs always give byte-identical output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from gen_changelog.core.commits import format_commit_for_changelog
from gen_changelog.core.links import Link

if TYPE_CHECKING:
    from collections.abc import Sequence

    from gen_changelog.core.links import Remote
    from gen_changelog.core.section import Section

DEFAULT_TITLE = "Changelog"

DEFAULT_PARAGRAPHS = (
    "All notable changes to this project will be documented in this file.",
    "The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.0.0/), "
    "and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html).",
)


@dataclass(frozen=True)
class Header:
    """Title and introductory paragraphs."""

    title: str = DEFAULT_TITLE
    paragraphs: tuple[str, ...] = field(default=DEFAULT_PARAGRAPHS)

    def render(self) -> str:
        text = f"# {self.title}\n"
        for paragraph in self.paragraphs:
            text += f"\n{paragraph}\n"
        return text


def limit_sections(sections: Sequence[Section], limit: int | None) -> list[Section]:
    """Keep the ``limit`` most recent sections; None keeps them all."""
    if limit is None:
        return list(sections)
    return list(sections[:limit])


def render_section(section: Section, headings: Sequence[str], *, summary: bool = False) -> str:
    """Render one section.

    Only headings that received commits are written; headings must
    already be restricted to published groups.
    """
    lines = [section.heading]
    if summary:
        lines.append(section.summary())
    lines.append("")

    for heading in headings:
        commits = section.groups.get(heading)
        if not commits:
            continue
        lines.append(f"### {heading}")
        lines.extend(f" - {format_commit_for_changelog(commit)}" for commit in commits)
        lines.append("")

    return "\n".join(lines) + "\n"


def footer_links(sections: Sequence[Section], remote: Remote | None) -> list[Link]:
    """Reference links for the rendered sections and the PRs they mention."""
    if remote is None:
        return []

    links = [section.link(remote) for section in sections]

    pr_numbers = sorted(
        {
            commit.pr_number
            for section in sections
            for commits in section.groups.values()
            for commit in commits
            if commit.pr_number is not None
        }
    )
    links.extend(Link(anchor=f"#{number}", url=remote.pull_url(number)) for number in pr_numbers)
    return links


def render_changelog(
    header: Header,
    sections: Sequence[Section],
    headings: Sequence[str],
    *,
    summary: bool = False,
    remote: Remote | None = None,
    limit: int | None = None,
) -> str:
    """Render the complete changelog document.

    Args:
        header: Title and intro paragraphs
        sections: All sections, newest first
        headings: Published group names in render order
        summary: Add a summary line under each section heading
        remote: Repository for footer links; None omits the links
        limit: Number of most recent sections to render

    Returns:
        The markdown document, ending with a single newline
    """
    shown = limit_sections(sections, limit)

    # Every rendered section ends with a blank line.
    text = header.render() + "\n"
    text += "".join(render_section(section, headings, summary=summary) for section in shown)

    links = footer_links(shown, remote)
    if links:
        text += "\n".join(str(link) for link in links) + "\n"

    return text.rstrip("\n") + "\n"
