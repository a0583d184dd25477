"""Workspace manifest discovery.

Finds the packages of a multi-package repository and the names of the
dependencies each one declares. Two layouts are understood:

- Cargo workspaces: ``[workspace].members`` in the root ``Cargo.toml``
- Python workspaces: ``[tool.uv.workspace].members`` in the root
  ``pyproject.toml``

A root manifest that declares a package of its own is registered too.
"""

from __future__ import annotations

import logging
import re
import tomllib
from pathlib import Path
from typing import Any

from gen_changelog.core.packages import Package
from gen_changelog.exceptions import ManifestError, PackageNotFoundError

logger = logging.getLogger(__name__)

# Distribution name at the start of a PEP 508 requirement
_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


def _read_manifest(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ManifestError(f"Cannot read {path}: {e}") from e


def _expand_members(root: Path, members: list[str]) -> list[Path]:
    paths: list[Path] = []
    for member in members:
        if any(ch in member for ch in "*?["):
            paths.extend(sorted(p for p in root.glob(member) if p.is_dir()))
        else:
            paths.append(root / member)
    return paths


def _relative_root(root: Path, package_dir: Path) -> str:
    relative = package_dir.resolve().relative_to(root.resolve()).as_posix()
    return "" if relative == "." else relative


def _cargo_package(root: Path, package_dir: Path) -> Package | None:
    manifest_path = package_dir / "Cargo.toml"
    if not manifest_path.is_file():
        logger.warning("No Cargo.toml found in %s", package_dir)
        return None
    manifest = _read_manifest(manifest_path)
    package = manifest.get("package")
    if not package or "name" not in package:
        return None

    dependencies: list[str] = []
    for table in ("dependencies", "dev-dependencies", "build-dependencies"):
        dependencies.extend(manifest.get(table, {}).keys())

    return Package(
        name=package["name"],
        root=_relative_root(root, package_dir),
        dependencies=tuple(dependencies),
    )


def _python_package(root: Path, package_dir: Path) -> Package | None:
    manifest_path = package_dir / "pyproject.toml"
    if not manifest_path.is_file():
        logger.warning("No pyproject.toml found in %s", package_dir)
        return None
    project = _read_manifest(manifest_path).get("project")
    if not project or "name" not in project:
        return None

    requirements = list(project.get("dependencies", []))
    for extra in project.get("optional-dependencies", {}).values():
        requirements.extend(extra)

    dependencies = []
    for requirement in requirements:
        match = _REQUIREMENT_NAME.match(requirement)
        if match and match.group(1) not in dependencies:
            dependencies.append(match.group(1))

    return Package(
        name=project["name"],
        root=_relative_root(root, package_dir),
        dependencies=tuple(dependencies),
    )


def discover_packages(root: Path) -> dict[str, Package]:
    """Collect the packages of the workspace rooted at ``root``.

    Returns:
        Packages by name; empty when the root holds no known manifest

    Raises:
        ManifestError: If a manifest cannot be parsed
    """
    logger.debug("Discovering packages from %s", root)
    packages: dict[str, Package] = {}

    cargo = root / "Cargo.toml"
    if cargo.is_file():
        if (package := _cargo_package(root, root)) is not None:
            packages[package.name] = package
        members = _read_manifest(cargo).get("workspace", {}).get("members", [])
        for member in _expand_members(root, members):
            if (package := _cargo_package(root, member)) is not None:
                packages[package.name] = package

    pyproject = root / "pyproject.toml"
    if pyproject.is_file():
        if (package := _python_package(root, root)) is not None:
            packages.setdefault(package.name, package)
        data = _read_manifest(pyproject)
        members = data.get("tool", {}).get("uv", {}).get("workspace", {}).get("members", [])
        for member in _expand_members(root, members):
            if (package := _python_package(root, member)) is not None:
                packages.setdefault(package.name, package)

    logger.debug("Found packages: %s", ", ".join(sorted(packages)) or "none")
    return packages


def find_package(root: Path, name: str) -> Package:
    """Look up one package of the workspace.

    Raises:
        PackageNotFoundError: If no member of the workspace has that name
    """
    packages = discover_packages(root)
    try:
        return packages[name]
    except KeyError:
        raise PackageNotFoundError(name, sorted(packages)) from None
