"""License evidence for LIC_FILES_CHKSUM.

For every component of the package's license expression (``MIT/Apache-2.0``
has two) we try to find a file on disk and record its MD5 so BitBake can
detect license changes. When nothing suitable exists a ``generateme``
placeholder is emitted for a human to fill in.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import List, Union

logger = logging.getLogger("cargobake.license")

CLOSED_LICENSE = "CLOSED"

PLACEHOLDER_MD5 = "generateme"

_CHUNK_SIZE = 64 * 1024


def file_md5(license_file: Union[str, Path]) -> str:
    """Return the lowercase hex MD5 of a file, read in chunks."""
    context = hashlib.md5()
    with open(license_file, "rb") as fh:
        for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
            context.update(chunk)
    return context.hexdigest()


def _evidence_line(rel_path: Union[str, Path], abs_path: Path) -> str:
    try:
        md5sum = file_md5(abs_path)
    except OSError as e:
        logger.warning("Unable to checksum %s: %s", abs_path, e)
        md5sum = PLACEHOLDER_MD5
    return f"file://{Path(rel_path).as_posix()};md5={md5sum} \\\n"


def license_file(
    crate_root: Path,
    rel_dir: Path,
    license_name: str,
    single_license: bool,
) -> str:
    """Build the LIC_FILES_CHKSUM entry for one license component.

    Lookup order under ``crate_root``: ``<license_name>``,
    ``LICENSE-<license_name>``, then a bare ``LICENSE`` but only when the
    expression has a single component.

    Args:
        crate_root: Directory holding the package's Cargo.toml.
        rel_dir: ``crate_root`` relative to the workspace root; used in the
            emitted ``file://`` path.
        license_name: One component of the license expression.
        single_license: True when the expression has exactly one component.

    Returns:
        str: The evidence line, or an empty string for ``CLOSED``.
    """
    if license_name == CLOSED_LICENSE:
        return ""

    candidates = [license_name, f"LICENSE-{license_name}"]
    if single_license:
        candidates.append("LICENSE")

    for candidate in candidates:
        abs_path = crate_root / candidate
        if abs_path.exists():
            logger.debug("License %s matched %s", license_name, abs_path)
            return _evidence_line(rel_dir / candidate, abs_path)

    logger.warning(
        "No license file found for %s; update the md5 for it by hand", license_name
    )
    return f"file://{license_name};md5={PLACEHOLDER_MD5} \\\n"


def split_license(license_expr: str) -> List[str]:
    """Split a ``/`` separated license expression into trimmed components."""
    return [part.strip() for part in license_expr.split("/")]


def license_files(crate_root: Path, rel_dir: Path, license_expr: str) -> List[str]:
    """Resolve evidence lines for every component of ``license_expr``."""
    components = split_license(license_expr)
    single_license = len(components) == 1
    return [
        license_file(crate_root, rel_dir, component, single_license)
        for component in components
    ]


def display_license(license_expr: str) -> str:
    """Render a license expression the way BitBake's LICENSE expects it."""
    return " | ".join(split_license(license_expr))
