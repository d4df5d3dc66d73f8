"""Exception hierarchy for recipe generation.

Two categories matter to the CLI:

* ``FatalError`` - aborts the run; rendered as a single-line message and
  a non-zero exit code.
* ``RecoverableError`` - the caller substitutes a documented default and
  keeps going.
"""


# =============================================================================
# Fatal errors
# =============================================================================

class FatalError(Exception):
    """Base class for errors that abort recipe generation."""
    pass


class ManifestError(FatalError):
    """Cargo.toml could not be located, read or understood."""
    pass


class ResolveError(FatalError):
    """The resolved dependency set could not be loaded.

    Raised when Cargo.lock is missing, malformed, or does not contain
    the package being packaged.
    """
    pass


class RecipeWriteError(FatalError):
    """An output recipe file could not be opened or written."""
    pass


class MissingHomepageError(FatalError):
    """Neither package.homepage nor package.repository is set."""
    pass


class RevisionFormatError(FatalError):
    """A git dependency is pinned to an abbreviated commit id.

    Only full 40 character ids are accepted as pins; when the lockfile
    does not record the precise commit there is nothing safe to emit.
    """
    pass


class TemplateError(FatalError):
    """A recipe template could not be loaded or rendered."""
    pass


# =============================================================================
# Recoverable errors
# =============================================================================

class RecoverableError(Exception):
    """Base class for errors handled by falling back to a default."""
    pass


class ProbeError(RecoverableError):
    """The upstream git repository of the project could not be inspected."""
    pass
