"""Origin descriptors for resolved packages.

A resolved package always comes from exactly one of four places:

* a crate registry index (``RegistryIndexed``)
* a path on the local filesystem (``LocalPath``)
* a git repository (``VersionControl``)
* some other URL (``OtherUrl``)

Git origins additionally carry the symbolic reference that was requested
in Cargo.toml (``Tag``, ``Rev``, ``Branch`` or ``DefaultBranch``). The
lockfile may also record the precise commit the reference resolved to;
that lives on ``ResolvedPackage.precise_revision``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


# ---------------------------------------------------------------------------
# Git references
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Tag:
    """A git tag name."""

    name: str


@dataclass(frozen=True)
class Rev:
    """A commit id, possibly abbreviated."""

    commit_id: str


@dataclass(frozen=True)
class Branch:
    """A named branch."""

    name: str


@dataclass(frozen=True)
class DefaultBranch:
    """Whatever the remote's HEAD points at."""


GitReference = Union[Tag, Rev, Branch, DefaultBranch]


# ---------------------------------------------------------------------------
# Origins
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RegistryIndexed:
    """Package downloaded as an archive from a registry index.

    Attributes:
        index_name: Host-like name of the index (e.g. ``crates.io``).
    """

    index_name: str


@dataclass(frozen=True)
class LocalPath:
    """Package living on the local filesystem (workspace member or path dep)."""

    path: Optional[str] = None


@dataclass(frozen=True)
class VersionControl:
    """Package checked out from a git repository.

    Attributes:
        protocol: Version control system, always ``git`` for Cargo.
        remote_url: Repository URL without query or fragment.
        reference: Symbolic reference requested by the manifest.
    """

    protocol: str
    remote_url: str
    reference: GitReference = DefaultBranch()


@dataclass(frozen=True)
class OtherUrl:
    """Package fetched from an arbitrary URL."""

    raw_url: str


OriginDescriptor = Union[RegistryIndexed, LocalPath, VersionControl, OtherUrl]


@dataclass(frozen=True)
class ResolvedPackage:
    """One node of the resolved dependency set.

    Attributes:
        name: Package name.
        version: Exact version string as recorded by the resolver.
        origin: Where the package comes from.
        precise_revision: Exact commit id pinned by the resolver, if any.
    """

    name: str
    version: str
    origin: OriginDescriptor
    precise_revision: Optional[str] = None

    @property
    def package_id(self) -> str:
        """Return ``name@version``, used for log messages and graph keys."""
        return f"{self.name}@{self.version}"
