"""Translate git remote URLs into BitBake fetcher URLs.

BitBake's git fetcher only understands ``git://`` (and ``gitsm://`` for
repositories with submodules); the real transport goes in a
``;protocol=`` parameter::

    https://github.com/rust-lang/cargo.git
    -> git://github.com/rust-lang/cargo.git;protocol=https;nobranch=1
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional

# scp-like remotes without a scheme, e.g. git@github.com:cardoe/cargo-bitbake.git
_SSH_STYLE_REMOTE = re.compile(r"^[^:/@]+@[^:/]+:")

_TRANSLATED_SCHEMES = ("ssh", "http", "https")


class GitPrefix(Enum):
    """Fetcher prefix used for the translated URL."""

    GIT = "git"
    GIT_SUBMODULE = "gitsm"

    def __str__(self) -> str:
        return self.value


def git_to_yocto_git_url(
    url: str,
    name: Optional[str] = None,
    prefix: GitPrefix = GitPrefix.GIT,
) -> str:
    """Convert a git remote URL to a BitBake git fetcher URL.

    Every call appends parameters, so translate a URL exactly once.

    Args:
        url: Remote URL as given to git.
        name: Checkout name; adds ``;name=`` and ``;destsuffix=`` so several
            git dependencies do not collide in ``${WORKDIR}``.
        prefix: ``git`` or ``gitsm``.

    Returns:
        str: The BitBake URL.
    """
    if _SSH_STYLE_REMOTE.match(url):
        url = "ssh://" + url.replace(":", "/", 1)

    scheme, sep, rest = url.partition(":")
    if sep and scheme in _TRANSLATED_SCHEMES:
        yocto_url = f"{prefix}:{rest};protocol={scheme}"
    else:
        yocto_url = url

    # bitbake only looks for revisions on the master branch by default
    yocto_url += ";nobranch=1"

    if name is not None:
        yocto_url += f";name={name};destsuffix={name}"
    return yocto_url
