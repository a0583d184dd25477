"""Exception hierarchy for gen-changelog.

Every stage of changelog generation raises a subclass of
:class:`GenChangelogError`, so callers can catch one type and still
report which stage failed.
"""

from __future__ import annotations


class GenChangelogError(Exception):
    """Base class for all gen-changelog errors."""

    stage = "changelog"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# =============================================================================
# Configuration
# =============================================================================


class ConfigError(GenChangelogError):
    """Configuration could not be read."""

    stage = "configuration"


class ConfigNotFoundError(ConfigError):
    """A configuration file was requested but does not exist."""


class ConfigValidationError(ConfigError):
    """Configuration content does not match the expected schema."""


class InvalidTagPatternError(ConfigError):
    """The release tag pattern is not a usable regular expression."""

    stage = "tag resolution"


# =============================================================================
# Repository access
# =============================================================================


class GitError(GenChangelogError):
    """A git command failed."""

    stage = "repository access"

    def __init__(self, message: str, stderr: str | None = None) -> None:
        self.stderr = stderr
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


class RemoteError(GenChangelogError):
    """Owner and repository could not be derived from the remote URL."""

    stage = "remote detection"


class NoTagsFoundError(GenChangelogError):
    """Release boundaries were required but no release tags exist."""

    stage = "tag resolution"


# =============================================================================
# Packages
# =============================================================================


class ManifestError(GenChangelogError):
    """A workspace manifest could not be read."""

    stage = "package discovery"


class PackageNotFoundError(GenChangelogError):
    """The requested package is not a member of the workspace."""

    stage = "package discovery"

    def __init__(self, package: str, available: list[str] | None = None) -> None:
        self.package = package
        self.available = available or []
        message = f"Package '{package}' not found in the workspace"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


# =============================================================================
# Assembly
# =============================================================================


class NoUnreleasedSectionError(GenChangelogError):
    """Promotion was requested but the newest section is already released."""

    stage = "version promotion"
