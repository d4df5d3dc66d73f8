"""Best-effort discovery of the upstream git repository being packaged.

The generated recipe fetches the project itself from its ``origin``
remote at the exact commit currently checked out. Everything here shells
out to ``git``; any failure raises ``ProbeError`` and callers are expected
to fall back to an empty ``ProjectRepo`` via ``discover_or_default``.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from cargobake.errors import ProbeError
from cargobake.git.url import GitPrefix, git_to_yocto_git_url

logger = logging.getLogger("cargobake.git.repo")

# branches that are implied by the fetcher and left out of SRC_URI
_DEFAULT_BRANCHES = ("master", "HEAD")


def _git(args: List[str], cwd: Path) -> str:
    """Run a git command and return its stripped stdout.

    Raises:
        ProbeError: If git is missing or the command fails.
    """
    cmd = ["git", *args]
    logger.debug("Running: %s (cwd=%s)", " ".join(cmd), cwd)
    try:
        res = subprocess.run(
            cmd,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        raise ProbeError(f"Unable to run git: {e}") from e

    if res.returncode != 0:
        raise ProbeError(res.stderr.strip() or f"git {' '.join(args)} failed")
    return res.stdout.strip()


@dataclass
class ProjectRepo:
    """Upstream repository facts for the project being packaged.

    Attributes:
        uri: BitBake fetch URL of the ``origin`` remote.
        branch: Branch checked out at HEAD.
        rev: Full commit id of HEAD.
        tag: Whether HEAD is exactly a tagged commit.
    """

    uri: str = ""
    branch: str = ""
    rev: str = ""
    tag: bool = False

    @classmethod
    def discover(cls, cwd: Union[str, Path]) -> "ProjectRepo":
        """Inspect the git checkout containing ``cwd``.

        Args:
            cwd: Any directory inside the checkout.

        Returns:
            ProjectRepo: Facts about the checkout.

        Raises:
            ProbeError: If any required piece of information is missing.
        """
        cwd = Path(cwd)
        try:
            toplevel = Path(_git(["rev-parse", "--show-toplevel"], cwd))
        except ProbeError as e:
            raise ProbeError(f"Unable to determine git repo for this project: {e}") from e

        try:
            remotes = _git(["remote"], toplevel).splitlines()
        except ProbeError as e:
            raise ProbeError(f"Unable to list remotes for this project: {e}") from e
        if "origin" not in remotes:
            raise ProbeError("Unable to find remote 'origin' for this project")

        try:
            submodules = _git(["submodule", "status"], toplevel)
        except ProbeError as e:
            raise ProbeError(f"Unable to determine the submodules: {e}") from e
        prefix = GitPrefix.GIT_SUBMODULE if submodules else GitPrefix.GIT

        try:
            remote_url = _git(["config", "--get", "remote.origin.url"], toplevel)
        except ProbeError:
            remote_url = ""
        if not remote_url:
            raise ProbeError("No URL for remote 'origin'")
        uri = git_to_yocto_git_url(remote_url, None, prefix)

        try:
            branch = _git(["rev-parse", "--abbrev-ref", "HEAD"], toplevel)
        except ProbeError as e:
            raise ProbeError(f"Unable to find HEAD: {e}") from e
        if not branch:
            raise ProbeError("Unable resolve HEAD to a branch")

        if branch not in _DEFAULT_BRANCHES:
            uri = f"{uri};branch={branch}"

        try:
            rev = _git(["rev-parse", "--verify", "HEAD^{commit}"], toplevel).lower()
        except ProbeError as e:
            raise ProbeError(f"Unable to resolve HEAD to a commit: {e}") from e

        repo = cls(uri=uri, branch=branch, rev=rev, tag=cls._rev_is_tag(toplevel, rev))
        logger.debug("Discovered upstream repo: %s", repo)
        return repo

    @classmethod
    def discover_or_default(cls, cwd: Union[str, Path]) -> "ProjectRepo":
        """Like ``discover`` but logs the failure and returns an empty repo."""
        try:
            return cls.discover(cwd)
        except ProbeError as e:
            logger.warning("%s", e)
            return cls()

    @staticmethod
    def _rev_is_tag(toplevel: Path, rev: str) -> bool:
        """Return True if any tag peels to ``rev``.

        Each tag is resolved with ``<tag>^{commit}`` so tags of annotated
        tags are followed down to the commit.
        """
        try:
            refs = _git(["for-each-ref", "--format=%(refname)", "refs/tags"], toplevel)
        except ProbeError as e:
            logger.debug("Unable to list tags: %s", e)
            return False

        for ref in refs.splitlines():
            try:
                commit = _git(["rev-parse", "--verify", f"{ref}^{{commit}}"], toplevel)
            except ProbeError as e:
                # tags of trees or blobs have no commit
                logger.debug("Unable to peel %s: %s", ref, e)
                continue
            if commit.lower() == rev:
                return True
        return False
