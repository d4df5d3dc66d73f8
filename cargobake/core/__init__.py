"""Core data model shared by the resolver and recipe generation."""

from cargobake.core.origin import (
    Branch,
    DefaultBranch,
    GitReference,
    LocalPath,
    OriginDescriptor,
    OtherUrl,
    RegistryIndexed,
    ResolvedPackage,
    Rev,
    Tag,
    VersionControl,
)

__all__ = [
    "Branch",
    "DefaultBranch",
    "GitReference",
    "LocalPath",
    "OriginDescriptor",
    "OtherUrl",
    "RegistryIndexed",
    "ResolvedPackage",
    "Rev",
    "Tag",
    "VersionControl",
]
