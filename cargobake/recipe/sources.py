"""Classify resolved packages into BitBake SRC_URI entries.

Each dependency is turned into one fetch line for the ``.inc`` file.
Git dependencies additionally need pinning directives in the ``.bb``
file so BitBake knows which revision to check out and cargo knows where
the checkout lives.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from cargobake.core.origin import (
    Branch,
    DefaultBranch,
    LocalPath,
    OtherUrl,
    RegistryIndexed,
    ResolvedPackage,
    Rev,
    Tag,
    VersionControl,
)
from cargobake.errors import RevisionFormatError
from cargobake.git.url import GitPrefix, git_to_yocto_git_url

logger = logging.getLogger("cargobake.recipe.sources")

AUTOREV = "${AUTOREV}"

DEFAULT_ARCHIVE_SCHEME = "crate"

_FULL_COMMIT_LEN = 40


@dataclass
class RecipeSources:
    """Output of classification.

    Attributes:
        src_uris: Sorted SRC_URI lines, each ``    <uri> \\`` plus newline.
        extras: Auxiliary directives (SRCREV_FORMAT, SRCREV_*,
            EXTRA_OECARGO_PATHS) in emission order.
    """

    src_uris: List[str] = field(default_factory=list)
    extras: List[str] = field(default_factory=list)


def _uri_line(uri: str) -> str:
    return f"    {uri} \\\n"


def select_git_revision(pkg: ResolvedPackage, reproducible: bool) -> str:
    """Pick the SRCREV value for a git dependency.

    Args:
        pkg: A package whose origin is ``VersionControl``.
        reproducible: Prefer the lockfile's exact commit when available.

    Returns:
        str: A tag name, branch name, full commit id or ``${AUTOREV}``.

    Raises:
        RevisionFormatError: For an abbreviated rev with no precise commit.
    """
    if reproducible and pkg.precise_revision:
        return pkg.precise_revision

    reference = pkg.origin.reference
    if isinstance(reference, Tag):
        return reference.name
    if isinstance(reference, Rev):
        if len(reference.commit_id) == _FULL_COMMIT_LEN:
            return reference.commit_id
        # short hashes are not stable pins
        if pkg.precise_revision:
            return pkg.precise_revision
        raise RevisionFormatError(
            f"cannot find rev in correct format for {pkg.package_id}: "
            f"'{reference.commit_id}' is not a full commit id"
        )
    if isinstance(reference, Branch):
        return AUTOREV if reference.name == "master" else reference.name
    if isinstance(reference, DefaultBranch):
        return AUTOREV
    raise TypeError(f"Unsupported git reference: {reference!r}")


def classify_sources(
    packages: Iterable[ResolvedPackage],
    root_name: str,
    reproducible: bool = False,
    archive_scheme: str = DEFAULT_ARCHIVE_SCHEME,
) -> RecipeSources:
    """Build SRC_URI lines and pinning directives for the resolved set.

    Args:
        packages: Resolved packages, iterated once.
        root_name: Name of the package being packaged; never fetched.
        reproducible: Pin git dependencies to the lockfile commit.
        archive_scheme: Fetcher scheme for registry archives.

    Returns:
        RecipeSources: Sorted URIs and auxiliary directives.
    """
    result = RecipeSources()

    for pkg in packages:
        if pkg.name == root_name:
            continue

        origin = pkg.origin
        if isinstance(origin, RegistryIndexed):
            uri = f"{archive_scheme}://{origin.index_name}/{pkg.name}/{pkg.version}"
        elif isinstance(origin, LocalPath):
            # path dependencies ship inside the source tree being packaged
            logger.debug("Skipping path dependency %s", pkg.package_id)
            continue
        elif isinstance(origin, VersionControl):
            uri = git_to_yocto_git_url(origin.remote_url, pkg.name, GitPrefix.GIT)
            rev = select_git_revision(pkg, reproducible)
            result.extras.append(f'SRCREV_FORMAT .= "_{pkg.name}"')
            result.extras.append(f'SRCREV_{pkg.name} = "{rev}"')
            result.extras.append(f'EXTRA_OECARGO_PATHS += "${{WORKDIR}}/{pkg.name}"')
        elif isinstance(origin, OtherUrl):
            uri = origin.raw_url
        else:
            raise TypeError(f"Unsupported origin for {pkg.package_id}: {origin!r}")

        result.src_uris.append(_uri_line(uri))

    result.src_uris.sort()
    logger.info(
        "Classified %d fetch URI(s) and %d extra directive(s)",
        len(result.src_uris),
        len(result.extras),
    )
    return result
