"""Configuration models for gen-changelog.

The configuration describes *what* goes into the changelog:

- groups: named buckets of conventional commit types, each with a
  publish flag
- headings: the ordered subset of groups rendered as ``###`` headings
- display-sections: how many of the most recent sections to render
- release-pattern: which tags mark releases

All models use kebab-case aliases so that TOML keys such as
``display-sections`` and ``cc-types`` load directly.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator, model_validator

logger = logging.getLogger(__name__)

MISCELLANEOUS = "Miscellaneous"

# name, conventional commit types, published by default
DEFAULT_GROUPS: list[tuple[str, list[str], bool]] = [
    ("Added", ["feat"], True),
    ("Fixed", ["fix"], True),
    ("Changed", ["refactor"], True),
    ("Security", ["security", "dependency"], True),
    ("Build", ["build"], False),
    ("Documentation", ["doc", "docs"], False),
    ("Chore", ["chore"], False),
    ("Continuous Integration", ["ci"], False),
    ("Testing", ["test"], False),
    ("Deprecated", ["deprecated"], False),
    ("Removed", ["removed"], False),
    (MISCELLANEOUS, ["misc"], False),
]

DEFAULT_HEADINGS = ["Added", "Fixed", "Changed", "Security"]


def _kebab(name: str) -> str:
    return name.replace("_", "-")


def _title(name: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in name.split())


def _parse_display_sections(value: Any) -> Any:
    # Table form: [display-sections] custom = n
    if isinstance(value, dict) and set(value) == {"custom"}:
        value = value["custom"]
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "all":
            return "all"
        if lowered == "one":
            return 1
        if lowered.isdigit():
            return int(lowered)
    return value


class _Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=_kebab,
        populate_by_name=True,
        extra="forbid",
    )


class Group(_Model):
    """A named collection of conventional commit types."""

    name: str
    publish: bool = False
    cc_types: list[str] = Field(default_factory=list)

    @field_validator("cc_types")
    @classmethod
    def _normalise_types(cls, value: list[str]) -> list[str]:
        seen: list[str] = []
        for cc_type in value:
            cc_type = cc_type.strip().lower()
            if cc_type and cc_type not in seen:
                seen.append(cc_type)
        return seen


class ReleasePattern(_Model):
    """How release tags are recognised.

    By default a tag is a release when it is a strict semantic version,
    optionally preceded by ``prefix``. A custom ``pattern`` must contain a
    named group ``version``.
    """

    prefix: str = "v"
    pattern: str | None = None
    package_tags: bool = False


class ChangeLogConfig(_Model):
    """Top-level changelog configuration."""

    groups: dict[str, Group] = Field(default_factory=dict)
    headings: list[str] = Field(default_factory=list)
    display_sections: Literal["all"] | PositiveInt = "all"
    release_pattern: ReleasePattern = Field(default_factory=ReleasePattern)
    dependency_scopes: list[str] = Field(default_factory=lambda: ["deps", "dependency"])
    dependency_group: str = "Security"

    @model_validator(mode="before")
    @classmethod
    def _apply_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "groups" not in data:
            data["groups"] = {
                name: {"name": name, "publish": publish, "cc-types": list(types)}
                for name, types, publish in DEFAULT_GROUPS
            }
        if "headings" not in data:
            data["headings"] = list(DEFAULT_HEADINGS)
        return data

    @field_validator("groups", mode="before")
    @classmethod
    def _key_groups_by_name(cls, value: Any) -> Any:
        # Table keys name the group when the table itself omits the name.
        if isinstance(value, dict):
            return {
                key: ({"name": key, **group} if isinstance(group, dict) else group)
                for key, group in value.items()
            }
        return value

    @field_validator("headings", mode="before")
    @classmethod
    def _order_headings(cls, value: Any) -> Any:
        """Accept headings as a list or as a position mapping.

        Both ``{"Added": 1, "Fixed": 2}`` and ``{1: "Added", 2: "Fixed"}``
        are ordered by position.
        """
        if not isinstance(value, dict):
            return value
        pairs = []
        for key, item in value.items():
            if isinstance(item, int) and not isinstance(item, bool):
                pairs.append((item, str(key)))
            else:
                pairs.append((int(key), str(item)))
        return [name for _, name in sorted(pairs)]

    @field_validator("display_sections", mode="before")
    @classmethod
    def _check_display_sections(cls, value: Any) -> Any:
        return _parse_display_sections(value)

    @model_validator(mode="after")
    def _enforce_unique_types(self) -> ChangeLogConfig:
        self.groups = {group.name: group for group in self.groups.values()}

        # Later groups win a contested type.
        owner: dict[str, str] = {}
        for group in self.groups.values():
            for cc_type in group.cc_types:
                previous = owner.get(cc_type)
                if previous is not None and previous != group.name:
                    logger.warning(
                        "Type '%s' claimed by both '%s' and '%s'; using '%s'",
                        cc_type,
                        previous,
                        group.name,
                        group.name,
                    )
                    old = self.groups[previous]
                    old.cc_types = [t for t in old.cc_types if t != cc_type]
                owner[cc_type] = group.name
        if MISCELLANEOUS in self.headings and self.headings[-1] != MISCELLANEOUS:
            self.headings = [*(h for h in self.headings if h != MISCELLANEOUS), MISCELLANEOUS]
        return self

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def section_limit(self) -> int | None:
        """Number of sections to render, or None for all."""
        return None if self.display_sections == "all" else self.display_sections

    def groups_mapping(self) -> dict[str, str]:
        """Map each conventional commit type to its group name."""
        mapping: dict[str, str] = {}
        for group in self.groups.values():
            for cc_type in group.cc_types:
                mapping[cc_type] = group.name
        return mapping

    def published_headings(self) -> list[str]:
        """Headings in render order, limited to published groups."""
        return [h for h in self.headings if h in self.groups and self.groups[h].publish]

    def _find_group(self, name: str) -> Group | None:
        group = self.groups.get(name)
        if group is None:
            group = next((g for g in self.groups.values() if g.name.lower() == name.lower()), None)
        return group

    # -------------------------------------------------------------------------
    # Configuration-time changes
    # -------------------------------------------------------------------------

    def add_group(self, group: Group) -> ChangeLogConfig:
        """Add or replace a group.

        Types claimed by the new group are taken from any other group, and a
        published group is appended to the headings.
        """
        for other in self.groups.values():
            if other.name != group.name:
                other.cc_types = [t for t in other.cc_types if t not in group.cc_types]
        self.groups[group.name] = group
        if group.publish:
            self._add_heading(group.name)
        return self

    def remove_group(self, name: str) -> ChangeLogConfig:
        group = self._find_group(name)
        if group is None:
            logger.warning("Group '%s' was not found", name)
            return self
        del self.groups[group.name]
        self._remove_heading(group.name)
        return self

    def add_type_to_group(self, cc_type: str, group_name: str) -> ChangeLogConfig:
        """Assign a conventional commit type to a group, moving it if owned elsewhere."""
        group = self._find_group(group_name)
        if group is None:
            logger.warning("Group '%s' was not found", group_name)
            return self
        cc_type = cc_type.strip().lower()
        for other in self.groups.values():
            if other is not group and cc_type in other.cc_types:
                other.cc_types = [t for t in other.cc_types if t != cc_type]
        if cc_type not in group.cc_types:
            group.cc_types = [*group.cc_types, cc_type]
        return self

    def remove_type_from_group(self, cc_type: str, group_name: str) -> ChangeLogConfig:
        group = self._find_group(group_name)
        if group is None:
            logger.warning("Group '%s' was not found", group_name)
            return self
        cc_type = cc_type.strip().lower()
        group.cc_types = [t for t in group.cc_types if t != cc_type]
        return self

    def publish_group(self, name: str) -> ChangeLogConfig:
        """Publish a group and add it to the headings."""
        group = self._find_group(name)
        if group is None:
            logger.warning("Group to publish '%s' was not found", name)
            return self
        group.publish = True
        self._add_heading(group.name)
        return self

    def unpublish_group(self, name: str) -> ChangeLogConfig:
        """Stop publishing a group and drop it from the headings."""
        group = self._find_group(name)
        if group is None:
            logger.warning("Group to unpublish '%s' was not found", name)
            return self
        group.publish = False
        self._remove_heading(group.name)
        return self

    def add_commit_groups(self, names: list[str]) -> ChangeLogConfig:
        """Publish groups given by name in any case, e.g. ``testing``."""
        for name in names:
            self.publish_group(_title(name))
        return self

    def remove_commit_groups(self, names: list[str]) -> ChangeLogConfig:
        for name in names:
            self.unpublish_group(_title(name))
        return self

    def move_heading(self, name: str, position: int) -> ChangeLogConfig:
        """Move a heading to a zero-based position in the render order."""
        if name not in self.headings:
            logger.warning("Heading '%s' is not in the headings", name)
            return self
        headings = [h for h in self.headings if h != name]
        position = max(0, min(position, len(headings)))
        headings.insert(position, name)
        self.headings = headings
        return self

    def set_display_sections(self, value: int | str | None) -> ChangeLogConfig:
        """Limit the number of rendered sections; None leaves it unchanged.

        Raises:
            ValueError: If the value is neither ``"all"`` nor a positive integer
        """
        if value is not None:
            parsed = _parse_display_sections(value)
            if parsed != "all" and not (isinstance(parsed, int) and parsed > 0):
                raise ValueError(f"display-sections must be 'all' or a positive integer, not {value!r}")
            self.display_sections = parsed
        logger.debug("Display sections: %s", self.display_sections)
        return self

    def _add_heading(self, name: str) -> None:
        if name in self.headings:
            return
        if name != MISCELLANEOUS and MISCELLANEOUS in self.headings:
            self.headings = [*self.headings[:-1], name, MISCELLANEOUS]
        else:
            self.headings = [*self.headings, name]

    def _remove_heading(self, name: str) -> None:
        if name in self.headings:
            self.headings = [h for h in self.headings if h != name]


def compile_release_pattern(pattern: ReleasePattern, package: str | None = None) -> re.Pattern[str]:
    """Build the regular expression that recognises release tags.

    Raises:
        InvalidTagPatternError: If a custom pattern is malformed
    """
    from gen_changelog.core.version import SEMVER_PATTERN
    from gen_changelog.exceptions import InvalidTagPatternError

    if pattern.pattern is not None:
        try:
            compiled = re.compile(pattern.pattern)
        except re.error as e:
            raise InvalidTagPatternError(f"Invalid release pattern {pattern.pattern!r}: {e}") from e
        if "version" not in compiled.groupindex:
            raise InvalidTagPatternError(
                f"Release pattern {pattern.pattern!r} must contain a named group 'version'"
            )
        return compiled

    prefix = f"(?:{re.escape(pattern.prefix)})?" if pattern.prefix else ""
    if package and pattern.package_tags:
        prefix = f"{re.escape(package)}-{prefix}"
    return re.compile(f"^{prefix}(?P<version>{SEMVER_PATTERN})$")
