"""Recipe generation: source classification, assembly and templates."""

from cargobake.recipe.assemble import (
    Recipe,
    assemble_recipe,
    resolve_homepage,
    resolve_license,
    resolve_summary,
    version_pin,
    write_recipe,
)
from cargobake.recipe.sources import AUTOREV, RecipeSources, classify_sources, select_git_revision

__all__ = [
    "AUTOREV",
    "Recipe",
    "RecipeSources",
    "assemble_recipe",
    "classify_sources",
    "resolve_homepage",
    "resolve_license",
    "resolve_summary",
    "select_git_revision",
    "version_pin",
    "write_recipe",
]
