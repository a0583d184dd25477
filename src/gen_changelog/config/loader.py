"""Configuration loading.

Configuration is looked up in this order:

1. an explicit file passed by the caller
2. ``gen-changelog.toml`` in the project directory
3. the ``[tool.gen-changelog]`` table of ``pyproject.toml``
4. built-in defaults
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from gen_changelog.config.models import ChangeLogConfig
from gen_changelog.exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "gen-changelog.toml"
PYPROJECT_TABLE = "gen-changelog"

GROUPS_COMMENT = """\
# Group tables define the third-level headings used to organise commits.
# Each group has the following properties:
#   - name: display name of the group (matches the table name)
#   - publish: whether the group appears in the published changelog
#   - cc-types: conventional commit types that belong to the group
#
# Each commit type belongs to one group only; a later group claiming a
# type takes it from an earlier one.
"""

HEADINGS_COMMENT = """\
# Display order of the groups in the changelog (lower numbers first).
# Only published groups listed here are rendered.
"""

DISPLAY_SECTIONS_COMMENT = """\
# Number of sections (second-level headings) to render: "all" or a
# positive number. The "Unreleased" section counts as one.
"""


def load_toml(path: Path) -> dict[str, Any]:
    """Read a TOML file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def find_config_file(start: Path | None = None) -> Path | None:
    """Find the configuration file for a project directory.

    Returns:
        Path to ``gen-changelog.toml`` or to a ``pyproject.toml`` that holds
        a ``[tool.gen-changelog]`` table, or None
    """
    directory = (start or Path.cwd()).resolve()

    candidate = directory / DEFAULT_CONFIG_FILE
    if candidate.is_file():
        return candidate

    pyproject = directory / "pyproject.toml"
    if pyproject.is_file() and PYPROJECT_TABLE in load_toml(pyproject).get("tool", {}):
        return pyproject

    return None


def extract_config(data: dict[str, Any], path: Path) -> dict[str, Any]:
    """Select the configuration table from parsed TOML."""
    if path.name == "pyproject.toml":
        return data.get("tool", {}).get(PYPROJECT_TABLE, {})
    return data


def load_config(path: Path | None = None, *, start: Path | None = None) -> ChangeLogConfig:
    """Load the changelog configuration.

    Args:
        path: Explicit configuration file; must exist when given
        start: Directory to search when no explicit file is given

    Returns:
        The validated configuration, or the defaults when nothing is found

    Raises:
        ConfigNotFoundError: If an explicit file does not exist
        ConfigValidationError: If the content does not match the schema
    """
    if path is None:
        path = find_config_file(start)
        if path is None:
            logger.debug("No configuration file found, using defaults")
            return ChangeLogConfig()

    logger.debug("Loading configuration from %s", path)
    data = extract_config(load_toml(path), path)

    try:
        return ChangeLogConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration in {path}:\n{e}") from e


def _toml_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _toml_key(key: str) -> str:
    if key.replace("-", "").replace("_", "").isalnum():
        return key
    return _toml_string(key)


def dump_config(config: ChangeLogConfig) -> str:
    """Render a configuration as commented TOML."""
    lines = [DISPLAY_SECTIONS_COMMENT.rstrip("\n")]
    lines.append(f"display-sections = {_toml_string(str(config.display_sections))}")
    lines.append(f"dependency-scopes = [{', '.join(_toml_string(s) for s in config.dependency_scopes)}]")
    lines.append(f"dependency-group = {_toml_string(config.dependency_group)}")
    lines.append("")

    lines.append("[release-pattern]")
    lines.append(f"prefix = {_toml_string(config.release_pattern.prefix)}")
    if config.release_pattern.pattern is not None:
        lines.append(f"pattern = {_toml_string(config.release_pattern.pattern)}")
    lines.append(f"package-tags = {str(config.release_pattern.package_tags).lower()}")
    lines.append("")

    lines.append(GROUPS_COMMENT.rstrip("\n"))
    for group in config.groups.values():
        lines.append(f"[groups.{_toml_key(group.name)}]")
        lines.append(f"name = {_toml_string(group.name)}")
        lines.append(f"publish = {str(group.publish).lower()}")
        lines.append(f"cc-types = [{', '.join(_toml_string(t) for t in group.cc_types)}]")
        lines.append("")

    lines.append(HEADINGS_COMMENT.rstrip("\n"))
    lines.append("[headings]")
    for position, heading in enumerate(config.headings, start=1):
        lines.append(f"{_toml_key(heading)} = {position}")

    return "\n".join(lines) + "\n"
