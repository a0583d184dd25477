"""Conventional commit parsing.

Parses the summary line of a commit following the Conventional Commits
convention::

    [emoji ]type[(scope)][!]: description[ (pr [#N])]

Examples:
    feat: add user authentication
    ✨ feat(ui): add dark mode toggle
    fix(api)!: change response format
    🐛 fix(deps): update crate foo to 1.2.3 (pr [#42])

Only the first line of the message is analysed. Summaries that do not
follow the grammar are kept verbatim as non-conventional commits.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gen_changelog.vcs.git import Commit

logger = logging.getLogger(__name__)

CONVENTIONAL_PATTERN = re.compile(
    r"^(?P<emoji>[^\w\s]\S*\s+)?"
    r"(?P<type>[A-Za-z]+)"
    r"(?:\((?P<scope>[^()]+)\))?"
    r"(?P<breaking>!)?"
    r":\s+"
    r"(?P<description>\S.*)$"
)

# (pr [#12]), (PR #12), ([#12]), (#12)
PR_REFERENCE_PATTERN = re.compile(
    r"\s*\((?:pr\s*)?\[?#(?P<number>\d+)\]?\)\s*$",
    re.IGNORECASE,
)

# Bot generated dependency bumps, e.g. "update rust crate serde to 1.0.200"
CRATE_UPDATE_PATTERN = re.compile(r"update (?:rust )?crate (?P<crate>[\w-]+)", re.IGNORECASE)


@dataclass(frozen=True)
class ConventionalCommit:
    """A commit summary parsed as a conventional commit."""

    raw: str
    sha: str = ""
    emoji: str | None = None
    commit_type: str | None = None
    scope: str | None = None
    is_breaking: bool = False
    description: str = ""
    pr_number: int | None = None

    @property
    def is_conventional(self) -> bool:
        return self.commit_type is not None

    @classmethod
    def parse(cls, message: str, sha: str = "") -> ConventionalCommit:
        """Parse the first line of a commit message."""
        summary = message.split("\n", 1)[0].strip()

        match = CONVENTIONAL_PATTERN.match(summary)
        if not match:
            logger.debug("Non-conventional commit: %s", summary)
            return cls(raw=summary, sha=sha, description=summary)

        description = match.group("description").strip()
        pr_number = None
        pr_match = PR_REFERENCE_PATTERN.search(description)
        if pr_match and pr_match.start() > 0:
            pr_number = int(pr_match.group("number"))
            description = description[: pr_match.start()].rstrip()

        emoji = match.group("emoji")
        scope = match.group("scope")
        return cls(
            raw=summary,
            sha=sha,
            emoji=emoji.strip() if emoji else None,
            commit_type=match.group("type").lower(),
            scope=scope.strip() if scope else None,
            is_breaking=match.group("breaking") is not None,
            description=description,
            pr_number=pr_number,
        )

    @classmethod
    def from_commit(cls, commit: Commit) -> ConventionalCommit:
        return cls.parse(commit.message, commit.sha)

    def updated_crate(self) -> str | None:
        """Name of the dependency bumped by this commit, if it reads like a bump."""
        match = CRATE_UPDATE_PATTERN.search(self.description)
        return match.group("crate") if match else None


def format_commit_for_changelog(commit: ConventionalCommit) -> str:
    """Format a commit as the text of a changelog bullet.

    The PR reference becomes a reference-style link label.
    """
    text = commit.description
    if commit.pr_number is not None:
        text += f" ([#{commit.pr_number}])"
    return text
