"""Cargo.toml discovery and package metadata.

Locates the manifest of the package being packaged, the workspace it
belongs to, and the handful of ``[package]`` fields a recipe needs.
Fields written as ``{ workspace = true }`` are inherited from the
workspace root's ``[workspace.package]`` table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional, Set, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cargobake.config.loader import parse_toml
from cargobake.errors import ManifestError

logger = logging.getLogger("cargobake.manifest")

MANIFEST_NAME = "Cargo.toml"

_INHERITABLE = ("version", "description", "homepage", "repository", "license", "license-file")


class PackageMetadata(BaseModel):
    """The ``[package]`` fields used to generate a recipe."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    version: str = "0.0.0"
    description: Optional[str] = None
    homepage: Optional[str] = None
    repository: Optional[str] = None
    license: Optional[str] = None
    license_file: Optional[str] = Field(default=None, alias="license-file")


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        return parse_toml(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ManifestError(f"Cannot read {path}: {e}") from e
    except ValueError as e:
        raise ManifestError(f"Invalid TOML in {path}: {e}") from e


def find_root_manifest(start: Union[str, Path]) -> Path:
    """Find the nearest Cargo.toml at or above ``start``.

    Args:
        start: A Cargo.toml path or any directory inside the package.

    Raises:
        ManifestError: If no manifest exists up to the filesystem root.
    """
    start = Path(start).resolve()
    if start.is_file():
        if start.name == MANIFEST_NAME:
            return start
        start = start.parent

    for directory in (start, *start.parents):
        candidate = directory / MANIFEST_NAME
        if candidate.is_file():
            return candidate
    raise ManifestError(f"could not find `{MANIFEST_NAME}` in `{start}` or any parent directory")


def find_workspace_root(manifest_path: Path) -> Path:
    """Return the directory of the workspace containing ``manifest_path``.

    A package that is not part of a workspace is its own workspace root.
    """
    package_dir = manifest_path.parent
    for directory in (package_dir, *package_dir.parents):
        candidate = directory / MANIFEST_NAME
        if not candidate.is_file():
            continue
        if "workspace" in _read_toml(candidate):
            return directory
    return package_dir


@dataclass
class PackageInfo:
    """The package we are generating a recipe for.

    Attributes:
        manifest_path: Absolute path to its Cargo.toml.
        workspace_root: Directory of the enclosing workspace.
        metadata: Parsed ``[package]`` fields.
        dev_only_dependencies: Packages only listed under dev-dependencies.
    """

    manifest_path: Path
    workspace_root: Path
    metadata: PackageMetadata
    dev_only_dependencies: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def version(self) -> str:
        return self.metadata.version

    @property
    def crate_root(self) -> Path:
        return self.manifest_path.parent

    @property
    def rel_dir(self) -> Path:
        """Package directory relative to the workspace root."""
        try:
            return self.crate_root.relative_to(self.workspace_root)
        except ValueError as e:
            raise ManifestError(
                f"Unable to determine if {MANIFEST_NAME} is in a sub directory of "
                f"{self.workspace_root}"
            ) from e


def _inherit_workspace_fields(
    package: Dict[str, Any],
    workspace_root: Path,
    manifest_path: Path,
) -> Dict[str, Any]:
    inherited = [
        key for key in _INHERITABLE
        if isinstance(package.get(key), dict) and package[key].get("workspace") is True
    ]
    if not inherited:
        return package

    root_manifest = workspace_root / MANIFEST_NAME
    ws_package = _read_toml(root_manifest).get("workspace", {}).get("package", {})
    resolved = dict(package)
    for key in inherited:
        if key not in ws_package:
            raise ManifestError(
                f"{manifest_path}: `{key}` inherits from the workspace but "
                f"`workspace.package.{key}` is not set in {root_manifest}"
            )
        resolved[key] = ws_package[key]
    return resolved


def _dependency_names(table: Any) -> Set[str]:
    if not isinstance(table, dict):
        return set()
    names = set()
    for key, spec in table.items():
        # renamed dependencies point at the real package name
        if isinstance(spec, dict) and isinstance(spec.get("package"), str):
            names.add(spec["package"])
        else:
            names.add(key)
    return names


def _dev_only_dependencies(data: Dict[str, Any]) -> FrozenSet[str]:
    """Return dev-dependency names never used for normal or build deps."""
    sections = [data]
    targets = data.get("target", {})
    if isinstance(targets, dict):
        sections.extend(t for t in targets.values() if isinstance(t, dict))

    dev: Set[str] = set()
    used: Set[str] = set()
    for section in sections:
        dev |= _dependency_names(section.get("dev-dependencies"))
        dev |= _dependency_names(section.get("dev_dependencies"))
        used |= _dependency_names(section.get("dependencies"))
        used |= _dependency_names(section.get("build-dependencies"))
        used |= _dependency_names(section.get("build_dependencies"))
    return frozenset(dev - used)


def load_package(manifest_path: Union[str, Path, None] = None) -> PackageInfo:
    """Load the package whose manifest is at or above ``manifest_path``.

    Args:
        manifest_path: Cargo.toml path or directory; defaults to the cwd.

    Returns:
        PackageInfo: Package metadata and workspace location.

    Raises:
        ManifestError: If the manifest is missing, malformed or virtual.
    """
    path = find_root_manifest(manifest_path if manifest_path is not None else Path.cwd())
    data = _read_toml(path)

    package = data.get("package")
    if not isinstance(package, dict):
        raise ManifestError(
            f"manifest path `{path}` is a virtual manifest, but this command "
            "requires running against an actual package"
        )

    workspace_root = find_workspace_root(path)
    package = _inherit_workspace_fields(package, workspace_root, path)

    try:
        metadata = PackageMetadata.model_validate(package)
    except ValidationError as e:
        raise ManifestError(f"Invalid [package] table in {path}: {e}") from e

    logger.debug(
        "Loaded package %s %s from %s (workspace root %s)",
        metadata.name,
        metadata.version,
        path,
        workspace_root,
    )
    if "_" in metadata.name:
        logger.warning("Package name contains an underscore")

    return PackageInfo(
        manifest_path=path,
        workspace_root=workspace_root,
        metadata=metadata,
        dev_only_dependencies=_dev_only_dependencies(data),
    )
