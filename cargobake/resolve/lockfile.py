"""Load the resolved dependency set from Cargo.lock.

The lockfile records every package cargo resolved for the workspace
together with its source id::

    registry+https://github.com/rust-lang/crates.io-index
    git+https://github.com/org/repo?branch=dev#<commit>

Packages are put into a directed graph following each entry's
``dependencies`` list and only those reachable from the package being
packaged are returned, so unrelated workspace members stay out of the
recipe.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import parse_qs, urlparse, urlunparse

import networkx as nx

from cargobake.config.loader import parse_toml
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
from cargobake.errors import ResolveError

logger = logging.getLogger("cargobake.resolve.lockfile")

LOCKFILE_NAME = "Cargo.lock"

CRATES_IO_INDEXES = frozenset(
    {
        "https://github.com/rust-lang/crates.io-index",
        "https://index.crates.io/",
        "https://index.crates.io",
    }
)

# (name, version, source) uniquely identifies a lockfile entry
PackageKey = Tuple[str, str, Optional[str]]


def _git_reference(query: Dict[str, List[str]]) -> GitReference:
    if "tag" in query:
        return Tag(query["tag"][0])
    if "rev" in query:
        return Rev(query["rev"][0])
    if "branch" in query:
        return Branch(query["branch"][0])
    return DefaultBranch()


def parse_source_id(
    source: Optional[str],
    crates_io_name: str = "crates.io",
) -> Tuple[OriginDescriptor, Optional[str]]:
    """Turn a lockfile ``source`` string into an origin.

    Args:
        source: The ``source`` value, or None for path packages.
        crates_io_name: Index name to use for crates.io.

    Returns:
        Tuple of the origin and the precise commit (git sources only).
    """
    if source is None:
        return LocalPath(), None

    kind, sep, url = source.partition("+")
    if not sep:
        return OtherUrl(source), None

    if kind in ("registry", "sparse"):
        if url in CRATES_IO_INDEXES:
            return RegistryIndexed(crates_io_name), None
        parsed = urlparse(url)
        return RegistryIndexed(parsed.hostname or url), None

    if kind == "git":
        url, _, precise = url.partition("#")
        parsed = urlparse(url)
        reference = _git_reference(parse_qs(parsed.query))
        remote_url = urlunparse(parsed._replace(query="", fragment=""))
        return VersionControl("git", remote_url, reference), (precise or None)

    if kind == "path":
        return LocalPath(url), None

    return OtherUrl(url), None


def _parse_dependency(dep: str) -> Tuple[str, Optional[str], Optional[str]]:
    """Split ``name [version [(source)]]`` from a lockfile dependency entry."""
    name, _, rest = dep.strip().partition(" ")
    version, _, source = rest.strip().partition(" ")
    source = source.strip()
    if source.startswith("(") and source.endswith(")"):
        source = source[1:-1]
    return name, (version or None), (source or None)


def _match_dependency(
    dep: str,
    by_name: Dict[str, List[PackageKey]],
) -> Optional[PackageKey]:
    name, version, source = _parse_dependency(dep)
    candidates = by_name.get(name, [])
    if version is not None:
        candidates = [key for key in candidates if key[1] == version]
    if source is not None:
        candidates = [key for key in candidates if key[2] == source]
    if len(candidates) == 1:
        return candidates[0]
    logger.warning("Ambiguous or unknown dependency '%s' in lockfile", dep)
    return None


def build_lock_graph(entries: Iterable[Dict[str, Any]]) -> nx.DiGraph:
    """Build the package graph of a parsed lockfile.

    Nodes are ``(name, version, source)`` keys carrying the raw entry under
    the ``entry`` attribute; edges point from a package to its dependencies.
    """
    graph = nx.DiGraph()
    by_name: Dict[str, List[PackageKey]] = {}

    for entry in entries:
        try:
            key: PackageKey = (entry["name"], entry["version"], entry.get("source"))
        except KeyError as e:
            raise ResolveError(f"Lockfile package entry missing {e}") from e
        graph.add_node(key, entry=entry)
        by_name.setdefault(key[0], []).append(key)

    for key, data in graph.nodes(data=True):
        for dep in data["entry"].get("dependencies", []):
            target = _match_dependency(dep, by_name)
            if target is not None:
                graph.add_edge(key, target)
    return graph


def _find_root(graph: nx.DiGraph, root_name: str, root_version: Optional[str]) -> PackageKey:
    candidates = [
        key for key in graph.nodes
        if key[0] == root_name and key[2] is None
        and (root_version is None or key[1] == root_version)
    ]
    if len(candidates) != 1:
        raise ResolveError(
            f"Unable to find package '{root_name}' in {LOCKFILE_NAME}; "
            "run `cargo generate-lockfile` and try again"
        )
    return candidates[0]


def load_resolved_packages(
    lock_path: Path,
    root_name: str,
    root_version: Optional[str] = None,
    dev_only: Iterable[str] = (),
    crates_io_name: str = "crates.io",
) -> List[ResolvedPackage]:
    """Read Cargo.lock and return everything the root package needs.

    Args:
        lock_path: Path to Cargo.lock.
        root_name: Name of the package being packaged.
        root_version: Its version, to disambiguate workspace members.
        dev_only: Names of the root's dev-only dependencies; edges to them
            from the root are ignored.
        crates_io_name: Index name to use for crates.io.

    Returns:
        List[ResolvedPackage]: The root and all packages reachable from it,
        in lockfile order.

    Raises:
        ResolveError: If the lockfile is missing, malformed or lacks the root.
    """
    try:
        data = parse_toml(lock_path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ResolveError(
            f"No {LOCKFILE_NAME} found at {lock_path}; run `cargo generate-lockfile` first"
        ) from e
    except OSError as e:
        raise ResolveError(f"Cannot read {lock_path}: {e}") from e
    except ValueError as e:
        raise ResolveError(f"Invalid TOML in {lock_path}: {e}") from e

    entries = data.get("package", [])
    if not isinstance(entries, list):
        raise ResolveError(f"{lock_path}: `package` must be an array of tables")

    graph = build_lock_graph(entries)
    root = _find_root(graph, root_name, root_version)

    dev_only = set(dev_only)
    for target in list(graph.successors(root)):
        if target[0] in dev_only:
            graph.remove_edge(root, target)

    reachable = nx.descendants(graph, root) | {root}
    logger.info(
        "Resolved %d of %d locked package(s) for %s",
        len(reachable),
        graph.number_of_nodes(),
        root_name,
    )

    packages: List[ResolvedPackage] = []
    for key in graph.nodes:
        if key not in reachable:
            continue
        origin, precise = parse_source_id(key[2], crates_io_name)
        packages.append(
            ResolvedPackage(name=key[0], version=key[1], origin=origin, precise_revision=precise)
        )
    return packages
