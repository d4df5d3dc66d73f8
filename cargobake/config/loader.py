"""Helpers for loading recipe configuration from TOML/JSON sources.

``load_recipe_config`` accepts:

* None -> default RecipeConfig
* dict -> validated as-is
* Path / path-like string -> load .toml/.json from filesystem
* Inline JSON/TOML strings

Settings may sit at the top level or under a ``[bitbake]`` table.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from cargobake.config.schema import RecipeConfig

logger = logging.getLogger("cargobake.config.loader")

ConfigSource = Union[str, Path, Dict[str, Any], None]


def parse_toml(text: str) -> Dict[str, Any]:
    """Parse TOML text into a dict.

    Uses stdlib tomllib on Python 3.11+ and falls back to ``tomli`` on
    older interpreters.
    """
    try:
        import tomllib  # type: ignore[attr-defined]
    except ImportError:  # pragma: no cover - Python <3.11 path
        import tomli as tomllib  # type: ignore[no-redef]
    return tomllib.loads(text)


def _from_mapping(data: Dict[str, Any]) -> RecipeConfig:
    section = data.get("bitbake", data)
    if not isinstance(section, dict):
        raise ValueError("[bitbake] configuration must be a table")
    return RecipeConfig.model_validate(section)


def _guess_format(path: Path, text: str) -> str:
    suffix = path.suffix.lower()
    if suffix in {".toml", ".tml"}:
        return "toml"
    if suffix == ".json":
        return "json"
    return "json" if text.lstrip().startswith(("{", "[")) else "toml"


def load_recipe_config(source: ConfigSource) -> RecipeConfig:
    """Load RecipeConfig from various configuration sources.

    Args:
        source: None, a mapping, a path to a .toml/.json file, or inline
            TOML/JSON text.

    Returns:
        RecipeConfig instance.

    Raises:
        ValueError: If the content is not a mapping or fails validation.
        TypeError: For unsupported source types.
    """
    if source is None:
        return RecipeConfig.default()
    if isinstance(source, dict):
        return _from_mapping(source)
    if not isinstance(source, (str, Path)):
        raise TypeError(f"Unsupported config source type: {type(source)!r}")

    path = Path(source)
    if path.is_file():
        text = path.read_text(encoding="utf-8")
        fmt = _guess_format(path, text)
        logger.info("Loading configuration from %s", path)
    else:
        text = str(source)
        fmt = _guess_format(Path(), text)
        logger.debug("Loading inline %s configuration", fmt)

    data = json.loads(text) if fmt == "json" else parse_toml(text)
    if not isinstance(data, dict):
        raise ValueError("Top-level configuration must be a mapping/dict")
    return _from_mapping(data)


__all__ = ["load_recipe_config", "parse_toml"]
