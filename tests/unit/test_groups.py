"""Tests for commit classification."""

from __future__ import annotations

import pytest

from gen_changelog.config.models import ChangeLogConfig, Group
from gen_changelog.core.commits import ConventionalCommit
from gen_changelog.core.groups import UNCATEGORISED, GroupRegistry


@pytest.fixture
def registry() -> GroupRegistry:
    return GroupRegistry.from_config(ChangeLogConfig())


def classify(registry: GroupRegistry, message: str) -> str:
    return registry.classify(ConventionalCommit.parse(message))


class TestGroupRegistry:
    """Tests for GroupRegistry."""

    @pytest.mark.parametrize(
        ("message", "group"),
        [
            ("feat: add thing", "Added"),
            ("fix(api): handle null", "Fixed"),
            ("refactor: simplify", "Changed"),
            ("security: escape input", "Security"),
            ("chore: bump tooling", "Chore"),
            ("docs: update readme", "Documentation"),
            ("FEAT: shouting", "Added"),
        ],
    )
    def test_default_groups(self, registry: GroupRegistry, message: str, group: str):
        """Default types map to their groups."""
        assert classify(registry, message) == group

    def test_dependency_scope_overrides_type(self, registry: GroupRegistry):
        """A dependency scope routes the commit to Security."""
        assert classify(registry, "🐛 fix(deps): update crate foo to 1.2.3") == "Security"
        assert classify(registry, "feat(dependency): bump serde") == "Security"

    def test_non_conventional(self, registry: GroupRegistry):
        """Non-conventional commits are uncategorised."""
        assert classify(registry, "random unconventional message") == UNCATEGORISED

    def test_unknown_type(self, registry: GroupRegistry):
        """Types no group claims are uncategorised."""
        assert classify(registry, "perf: faster parsing") == UNCATEGORISED
        assert registry.group_for(None) == UNCATEGORISED

    def test_registry_follows_config_changes(self):
        """A rebuilt registry reflects the latest group that claimed a type."""
        config = ChangeLogConfig().add_group(Group(name="Features", publish=True, cc_types=["feat"]))

        registry = GroupRegistry.from_config(config)

        assert registry.group_for("feat") == "Features"
        assert "Features" in registry.published_headings()

    def test_registry_is_read_only(self, registry: GroupRegistry):
        """The type table cannot be changed after construction."""
        with pytest.raises(TypeError):
            registry.type_map["feat"] = "Changed"  # type: ignore[index]

    def test_published_headings(self, registry: GroupRegistry):
        """Only published groups become headings."""
        assert registry.published_headings() == ["Added", "Fixed", "Changed", "Security"]
