"""Classification of conventional commits into changelog groups."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from gen_changelog.config.models import ChangeLogConfig
    from gen_changelog.core.commits import ConventionalCommit

UNCATEGORISED = "Uncategorised"


@dataclass(frozen=True)
class GroupRegistry:
    """Lookup table from conventional commit type to group name.

    Built once from a configuration and passed explicitly to whatever
    classifies commits. Unknown and missing types fall into the
    unpublished ``Uncategorised`` bucket.
    """

    type_map: Mapping[str, str]
    headings: tuple[str, ...]
    dependency_scopes: frozenset[str]
    dependency_group: str

    @classmethod
    def from_config(cls, config: ChangeLogConfig) -> GroupRegistry:
        return cls(
            type_map=MappingProxyType(config.groups_mapping()),
            headings=tuple(config.published_headings()),
            dependency_scopes=frozenset(config.dependency_scopes),
            dependency_group=config.dependency_group,
        )

    def group_for(self, commit_type: str | None) -> str:
        if not commit_type:
            return UNCATEGORISED
        return self.type_map.get(commit_type.lower(), UNCATEGORISED)

    def is_dependency_update(self, commit: ConventionalCommit) -> bool:
        return commit.is_conventional and commit.scope in self.dependency_scopes

    def classify(self, commit: ConventionalCommit) -> str:
        """Return the group a commit belongs to.

        A dependency scope routes the commit to the dependency group
        whatever its type.
        """
        if self.is_dependency_update(commit):
            return self.dependency_group
        return self.group_for(commit.commit_type)

    def published_headings(self) -> list[str]:
        return list(self.headings)
