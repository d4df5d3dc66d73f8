"""Assemble and write the BitBake recipe for a package.

Two files are produced per run:

* ``<name>_<version>.inc`` - the SRC_URI list of every dependency
* ``<name>_<version>.bb`` - metadata, license evidence and git pins,
  ``require``-ing the include file
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Tuple

from cargobake.config.schema import RecipeConfig
from cargobake.core.origin import ResolvedPackage
from cargobake.errors import MissingHomepageError, RecipeWriteError
from cargobake.git.repo import ProjectRepo
from cargobake.license import CLOSED_LICENSE, display_license, license_files
from cargobake.manifest import PackageInfo, PackageMetadata
from cargobake.recipe.sources import classify_sources
from cargobake.recipe.templates import (
    BITBAKE_INC_TEMPLATE,
    BITBAKE_TEMPLATE,
    generator_version,
    load_template,
    render,
)

logger = logging.getLogger("cargobake.recipe.assemble")

_SRCPV_LEN = 10


@dataclass
class Recipe:
    """Rendered recipe ready to be written.

    Attributes:
        name: Package name.
        version: Package version.
        inc_text: Content of the include file.
        bb_text: Content of the recipe file.
    """

    name: str
    version: str
    inc_text: str
    bb_text: str

    @property
    def inc_filename(self) -> str:
        return f"{self.name}_{self.version}.inc"

    @property
    def bb_filename(self) -> str:
        return f"{self.name}_{self.version}.bb"


def resolve_summary(metadata: PackageMetadata) -> str:
    """package.description, falling back to the package name."""
    if metadata.description is None:
        logger.warning("No package.description set in your Cargo.toml, using package.name")
        return metadata.name
    return metadata.description.strip().replace("\n", " \\\n")


def resolve_homepage(metadata: PackageMetadata) -> str:
    """package.homepage, falling back to package.repository.

    Raises:
        MissingHomepageError: If neither is set.
    """
    if metadata.homepage is not None:
        return metadata.homepage.strip()
    logger.warning("No package.homepage set in your Cargo.toml, trying package.repository")
    if metadata.repository is None:
        raise MissingHomepageError("No package.repository set in your Cargo.toml")
    return metadata.repository.strip()


def resolve_license(metadata: PackageMetadata) -> str:
    """package.license, then package.license-file, then CLOSED."""
    if metadata.license is not None:
        return metadata.license
    logger.warning("No package.license set in your Cargo.toml, trying package.license_file")
    if metadata.license_file is not None:
        return metadata.license_file
    logger.warning(
        "No package.license_file set in your Cargo.toml; assuming %s license",
        CLOSED_LICENSE,
    )
    return CLOSED_LICENSE


def version_pin(repo: ProjectRepo, legacy_overrides: bool = False) -> str:
    """PV append directive keeping sstate valid for untagged revisions.

    Returns an empty string when HEAD is tagged or the revision is unknown.
    """
    if repo.tag or len(repo.rev) <= _SRCPV_LEN:
        return ""
    key = "PV_append" if legacy_overrides else "PV:append"
    # ${SRCPV} cannot be used here, see meta-rust/meta-rust#136
    return f'{key} = ".AUTOINC+{repo.rev[:_SRCPV_LEN]}"'


def assemble_recipe(
    package: PackageInfo,
    packages: Iterable[ResolvedPackage],
    repo: ProjectRepo,
    config: Optional[RecipeConfig] = None,
) -> Recipe:
    """Render the include and recipe text for ``package``.

    Args:
        package: The package being packaged.
        packages: Its resolved dependency set (the package itself may be
            included; it is skipped).
        repo: Upstream repository facts, possibly the empty default.
        config: Run configuration; defaults when omitted.

    Returns:
        Recipe: The rendered files.

    Raises:
        MissingHomepageError: If no homepage or repository is set.
        RevisionFormatError: For git dependencies pinned to short revs.
        TemplateError: If a custom template cannot be used.
    """
    config = config or RecipeConfig.default()
    metadata = package.metadata

    sources = classify_sources(
        packages,
        package.name,
        reproducible=config.reproducible,
        archive_scheme=config.archive_scheme,
    )

    summary = resolve_summary(metadata)
    homepage = resolve_homepage(metadata)
    license_expr = resolve_license(metadata)

    rel_dir = package.rel_dir
    lic_files = [
        f"    {line}"
        for line in license_files(package.crate_root, rel_dir, license_expr)
    ]

    recipe = Recipe(name=package.name, version=package.version, inc_text="", bb_text="")

    inc_template = load_template(config.inc_template, BITBAKE_INC_TEMPLATE)
    recipe.inc_text = render(inc_template, src_uri="".join(sources.src_uris))

    bb_template = load_template(config.bb_template, BITBAKE_TEMPLATE)
    recipe.bb_text = render(
        bb_template,
        name=package.name,
        version=package.version,
        summary=summary,
        homepage=homepage,
        license=display_license(license_expr),
        lic_files="".join(lic_files),
        src_uri_inc_path=recipe.inc_filename,
        src_uri_extras="\n".join(sources.extras),
        project_rel_dir=rel_dir.as_posix() if rel_dir.parts else "",
        project_src_uri=repo.uri,
        project_src_rev=repo.rev,
        git_srcpv=version_pin(repo, config.legacy_overrides),
        generator_version=generator_version(),
    )
    return recipe


def _write(path: Path, text: str, kind: str) -> None:
    try:
        with open(path, "w", encoding="utf-8", newline="\n") as fh:
            fh.write(text)
    except OSError as e:
        raise RecipeWriteError(f"Unable to write {kind} file with: {e}") from e


def write_recipe(recipe: Recipe, output_dir: Path) -> Tuple[Path, Path]:
    """Write the include and recipe files, truncating existing ones.

    Returns:
        Tuple of the include path and the recipe path.

    Raises:
        RecipeWriteError: If either file cannot be written.
    """
    inc_path = Path(output_dir) / recipe.inc_filename
    bb_path = Path(output_dir) / recipe.bb_filename

    _write(inc_path, recipe.inc_text, "bitbake recipe inc")
    logger.debug("Wrote %d bytes to %s", len(recipe.inc_text), inc_path)
    _write(bb_path, recipe.bb_text, "bitbake recipe")
    logger.debug("Wrote %d bytes to %s", len(recipe.bb_text), bb_path)
    return inc_path, bb_path
