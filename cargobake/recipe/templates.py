"""Built-in BitBake templates and template loading.

Templates are plain ``str.format`` strings. Literal BitBake ``${...}``
expansions are written with doubled braces.

Fields available to the recipe template: ``name``, ``version``,
``summary``, ``homepage``, ``license``, ``lic_files``,
``src_uri_inc_path``, ``src_uri_extras``, ``project_rel_dir``,
``project_src_uri``, ``project_src_rev``, ``git_srcpv`` and
``generator_version``. The include template receives ``src_uri``.
"""

from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, Optional

from cargobake.errors import TemplateError

logger = logging.getLogger("cargobake.recipe.templates")

BITBAKE_TEMPLATE = """\
# Auto-Generated by cargobake {generator_version}
#
inherit cargo

# If this is git based prefer versioned ones if they exist
# DEFAULT_PREFERENCE = "-1"

# how to get {name} could be as easy as but default to a git checkout:
# SRC_URI += "crate://crates.io/{name}/{version}"
SRC_URI += "{project_src_uri}"
SRCREV = "{project_src_rev}"
S = "${{WORKDIR}}/git"
CARGO_SRC_DIR = "{project_rel_dir}"
{git_srcpv}

# please note if you have entries that do not begin with crate://
# you must change them to how that package can be fetched
require {src_uri_inc_path}

{src_uri_extras}

# FIXME: update generateme with the real MD5 of the license file
LIC_FILES_CHKSUM = " \\
{lic_files}"

SUMMARY = "{summary}"
HOMEPAGE = "{homepage}"
LICENSE = "{license}"

# includes this file if it exists but does not fail
# this is useful for anything you may want to override from
# what cargobake generates.
include {name}-{version}.inc
include {name}.inc
"""

BITBAKE_INC_TEMPLATE = """\
# Autogenerated with cargobake

SRC_URI += " \\
{src_uri}"
"""


def generator_version() -> str:
    """Version of this tool, stamped into generated recipes."""
    try:
        return version("cargobake")
    except PackageNotFoundError:
        return "unknown"


def load_template(path: Optional[Path], default: str) -> str:
    """Return the template text at ``path``, or ``default`` when unset."""
    if path is None:
        return default
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise TemplateError(f"Unable to read template {path}: {e}") from e
    logger.info("Using template %s", path)
    return text


def render(template: str, **fields: Any) -> str:
    """Substitute ``fields`` into ``template``."""
    try:
        return template.format(**fields)
    except KeyError as e:
        raise TemplateError(f"Template references unknown field {e}") from e
    except (IndexError, ValueError) as e:
        raise TemplateError(f"Malformed template: {e}") from e
