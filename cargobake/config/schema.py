"""Recipe generation settings validated with Pydantic.

Settings come from an optional TOML/JSON config file (see
``cargobake.config.loader``) and are overridden by command-line flags.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class RecipeConfig(BaseModel):
    """Configuration for one recipe generation run.

    Attributes:
        reproducible: Pin git dependencies to the exact locked commit.
        legacy_overrides: Use ``PV_append`` instead of ``PV:append``.
        output_dir: Directory the ``.bb`` and ``.inc`` files are written to.
        archive_scheme: BitBake fetcher scheme for registry archives.
        crates_io_name: Index name emitted for crates.io packages.
        bb_template: Optional path overriding the built-in recipe template.
        inc_template: Optional path overriding the built-in include template.
    """

    reproducible: bool = False
    legacy_overrides: bool = False
    output_dir: Path = Field(default_factory=lambda: Path("."))
    archive_scheme: str = "crate"
    crates_io_name: str = "crates.io"
    bb_template: Optional[Path] = None
    inc_template: Optional[Path] = None

    model_config = {"extra": "forbid"}

    @field_validator("archive_scheme", "crates_io_name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty scheme/index names; they would yield broken URIs."""
        if not v or not v.strip():
            raise ValueError("value must be a non-empty string")
        if any(ch in v for ch in " /:;"):
            raise ValueError(f"Invalid character in '{v}'")
        return v.strip()

    @classmethod
    def default(cls) -> "RecipeConfig":
        """Return the built-in defaults."""
        return cls()
