"""Reference links for the changelog footer."""

from __future__ import annotations

import re
from dataclasses import dataclass

GITHUB_REMOTE = re.compile(
    r"^(?:https://github\.com/|ssh://git@github\.com/|git@github\.com:)"
    r"(?P<owner>[\w.-]+)/(?P<repo>[\w.-]+?)(?:\.git)?/?$"
)


@dataclass(frozen=True)
class Link:
    """A reference-style markdown link definition."""

    anchor: str
    url: str

    def __str__(self) -> str:
        return f"[{self.anchor}]: {self.url}"


@dataclass(frozen=True)
class Remote:
    """A GitHub repository identified by owner and name."""

    owner: str
    repo: str

    @property
    def base_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}"

    def compare_url(self, base: str, head: str) -> str:
        return f"{self.base_url}/compare/{base}...{head}"

    def commits_url(self, ref: str) -> str:
        return f"{self.base_url}/commits/{ref}"

    def pull_url(self, number: int) -> str:
        return f"{self.base_url}/pull/{number}"


def parse_remote(url: str | None) -> Remote | None:
    """Extract owner and repository from a GitHub remote URL.

    Returns None for anything that is not a GitHub remote.
    """
    if not url:
        return None
    match = GITHUB_REMOTE.match(url.strip())
    if not match:
        return None
    return Remote(owner=match.group("owner"), repo=match.group("repo"))
