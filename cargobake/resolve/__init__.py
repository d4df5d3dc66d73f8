"""Resolved dependency set loading."""

from cargobake.resolve.lockfile import (
    LOCKFILE_NAME,
    build_lock_graph,
    load_resolved_packages,
    parse_source_id,
)

__all__ = ["LOCKFILE_NAME", "build_lock_graph", "load_resolved_packages", "parse_source_id"]
