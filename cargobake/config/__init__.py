"""Configuration models and loaders."""

from cargobake.config.loader import load_recipe_config, parse_toml
from cargobake.config.schema import RecipeConfig

__all__ = ["RecipeConfig", "load_recipe_config", "parse_toml"]
