"""bitbake command implementation.

Generates ``<name>_<version>.bb`` and ``<name>_<version>.inc`` for the
Cargo package found at or above the current directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console

from cargobake.config import RecipeConfig, load_recipe_config
from cargobake.errors import FatalError, RecipeWriteError
from cargobake.git.repo import ProjectRepo
from cargobake.manifest import load_package
from cargobake.recipe.assemble import assemble_recipe, write_recipe
from cargobake.resolve.lockfile import LOCKFILE_NAME, load_resolved_packages

logger = logging.getLogger("cargobake.cli.bitbake")


def _build_config(args) -> RecipeConfig:
    """Load the config file (if any) and apply command-line overrides."""
    config = load_recipe_config(getattr(args, "config", None))
    overrides = {}
    if getattr(args, "reproducible", False):
        overrides["reproducible"] = True
    if getattr(args, "legacy_overrides", False):
        overrides["legacy_overrides"] = True
    output_dir = getattr(args, "output_dir", None)
    if output_dir:
        overrides["output_dir"] = Path(output_dir)
    if overrides:
        config = RecipeConfig.model_validate({**config.model_dump(), **overrides})
    return config


def bitbake_command(args, console: Optional[Console] = None) -> int:
    """Execute bitbake command.

    Args:
        args: Parsed command-line arguments.
        console: Console used to report written files.

    Returns:
        int: Exit code.
    """
    console = console or Console()
    quiet = getattr(args, "quiet", False)

    try:
        config = _build_config(args)
    except (OSError, TypeError, ValueError) as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    try:
        package = load_package(getattr(args, "manifest_path", None))
        logger.debug("Packaging %s %s", package.name, package.version)

        packages = load_resolved_packages(
            package.workspace_root / LOCKFILE_NAME,
            package.name,
            root_version=package.version,
            dev_only=package.dev_only_dependencies,
            crates_io_name=config.crates_io_name,
        )

        repo = ProjectRepo.discover_or_default(package.crate_root)
        recipe = assemble_recipe(package, packages, repo, config)

        try:
            config.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RecipeWriteError(
                f"Unable to create output directory {config.output_dir}: {e}"
            ) from e
        inc_path, bb_path = write_recipe(recipe, config.output_dir)
    except FatalError as e:
        logger.error("%s", e)
        return 1

    if not quiet:
        console.print(f"Wrote: {inc_path}", highlight=False)
        console.print(f"Wrote: {bb_path}", highlight=False)
    return 0
