"""Git repository access.

All interaction with the repository goes through the ``git`` executable.
The repository is only ever read: tags, commit messages, changed files
and the remote URL.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from gen_changelog.exceptions import GitError

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

_FIELD_SEP = "\x1f"

# name, object, peeled object, object type, peeled type, date, peeled date
_TAG_FORMAT = _FIELD_SEP.join(
    [
        "%(refname:short)",
        "%(objectname)",
        "%(*objectname)",
        "%(objecttype)",
        "%(*objecttype)",
        "%(committerdate:unix)",
        "%(*committerdate:unix)",
    ]
)

# Full raw message; records end with a separator so messages may hold newlines
_RECORD_SEP = b"\x1e"
_COMMIT_FORMAT = "%x1f".join(["%H", "%an", "%ae", "%at", "%B"]) + "%x1e"
_READ_SIZE = 65536


@dataclass(frozen=True)
class Commit:
    """A single commit as read from the repository."""

    sha: str
    message: str
    author_name: str
    author_email: str
    date: datetime

    @property
    def summary(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0].strip()

    @property
    def short_sha(self) -> str:
        return self.sha[:7]


@dataclass(frozen=True)
class TagRef:
    """A tag as listed by the repository, peeled to the commit it marks."""

    name: str
    sha: str
    date: datetime | None = None


class GitRepository:
    """Read-only wrapper around a git working copy."""

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else Path.cwd()
        if not self.path.exists():
            raise GitError(f"Repository path does not exist: {self.path}")
        result = self._run(["rev-parse", "--show-toplevel"], check=False)
        if result.returncode != 0:
            raise GitError(f"Not a git repository: {self.path}", stderr=result.stderr)
        self.path = Path(result.stdout.strip())

    def _run(self, args: list[str], check: bool = True) -> subprocess.CompletedProcess[str]:
        """Run a git command in the repository.

        Raises:
            GitError: If ``check`` is set and the command fails
        """
        logger.debug("git %s", " ".join(args))
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=self.path,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e

        if check and result.returncode != 0:
            raise GitError(f"git {args[0]} failed with exit code {result.returncode}", stderr=result.stderr)
        return result

    def has_commits(self) -> bool:
        """Return True if HEAD points at a commit."""
        return self._run(["rev-parse", "--verify", "--quiet", "HEAD"], check=False).returncode == 0

    def get_remote_url(self, remote: str = "origin") -> str | None:
        """Return the URL of a remote, or None if it is not configured."""
        result = self._run(["config", "--get", f"remote.{remote}.url"], check=False)
        url = result.stdout.strip()
        return url or None

    def list_tags(self) -> list[TagRef]:
        """List every tag that marks a commit.

        Annotated tags are peeled so that ``sha`` and ``date`` always refer to
        the tagged commit.
        """
        result = self._run(["for-each-ref", f"--format={_TAG_FORMAT}", "refs/tags"])

        tags = []
        for line in result.stdout.splitlines():
            if not line.strip():
                continue
            name, obj, peeled, obj_type, peeled_type, date, peeled_date = line.split(_FIELD_SEP)
            if peeled:
                obj, obj_type, date = peeled, peeled_type, peeled_date
            if obj_type != "commit":
                logger.debug("Skipping tag %s pointing at a %s", name, obj_type)
                continue
            tags.append(
                TagRef(
                    name=name,
                    sha=obj,
                    date=datetime.fromtimestamp(int(date), tz=UTC) if date else None,
                )
            )
        return tags

    def iter_commits(self, tip: str = "HEAD", stop: str | None = None) -> Iterator[Commit]:
        """Yield commits reachable from ``tip`` but not from ``stop``.

        Commits are produced lazily, newest author date first. The iterator
        can be consumed only once.

        Raises:
            GitError: If git reports a failure once the output is consumed
        """
        rev_range = f"{stop}..{tip}" if stop else tip
        args = ["git", "log", "--author-date-order", f"--format={_COMMIT_FORMAT}", rev_range, "--"]
        logger.debug("%s", " ".join(args))

        try:
            # Read bytes; messages may contain a bare \r.
            process = subprocess.Popen(args, cwd=self.path, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e

        with process:
            pending = b""
            for chunk in iter(lambda: process.stdout.read1(_READ_SIZE), b""):
                *records, pending = (pending + chunk).split(_RECORD_SEP)
                for record in records:
                    commit = _parse_commit_record(record)
                    if commit is not None:
                        yield commit
            commit = _parse_commit_record(pending)
            if commit is not None:
                yield commit
            stderr = process.stderr.read().decode("utf-8", errors="replace")

        if process.returncode != 0:
            raise GitError(f"git log {rev_range} failed with exit code {process.returncode}", stderr=stderr)

    def _parents(self, sha: str) -> list[str]:
        result = self._run(["rev-list", "--parents", "-n", "1", sha])
        return result.stdout.split()[1:]

    def changed_files(self, sha: str) -> list[str]:
        """Return the paths touched by a commit, relative to the repository root.

        A merge commit is compared with its first parent, giving the files
        the merge brought in.
        """
        parents = self._parents(sha)
        if len(parents) > 1:
            args = ["diff", "--name-only", parents[0], sha, "--"]
        else:
            args = ["diff-tree", "--no-commit-id", "--name-only", "-r", "--root", sha]
        result = self._run(args)
        return [line for line in result.stdout.splitlines() if line]


def _parse_commit_record(record: bytes) -> Commit | None:
    """Decode one ``git log`` record, or None for the blank tail of the output.

    Raises:
        GitError: If the record does not have the expected fields
    """
    text = record.decode("utf-8", errors="replace").lstrip("\n")
    if not text.strip():
        return None
    fields = text.split(_FIELD_SEP, 4)
    if len(fields) != 5:
        raise GitError(f"Unexpected git log output: {text[:80]!r}")
    sha, author_name, author_email, timestamp, message = fields
    return Commit(
        sha=sha,
        message=message.rstrip("\n"),
        author_name=author_name,
        author_email=author_email,
        date=datetime.fromtimestamp(int(timestamp), tz=UTC),
    )
