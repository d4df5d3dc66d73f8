"""git remote URL translation tests."""

from __future__ import annotations

import pytest

from cargobake.git.url import GitPrefix, git_to_yocto_git_url


@pytest.mark.parametrize(
    ("remote", "expected"),
    [
        (
            "http://github.com/rust-lang/cargo.git",
            "git://github.com/rust-lang/cargo.git;protocol=http;nobranch=1;name=cargo;destsuffix=cargo",
        ),
        (
            "https://github.com/rust-lang/cargo.git",
            "git://github.com/rust-lang/cargo.git;protocol=https;nobranch=1;name=cargo;destsuffix=cargo",
        ),
        (
            "git@github.com:rust-lang/cargo.git",
            "git://git@github.com/rust-lang/cargo.git;protocol=ssh;nobranch=1;name=cargo;destsuffix=cargo",
        ),
        (
            "ssh://git@github.com/rust-lang/cargo.git",
            "git://git@github.com/rust-lang/cargo.git;protocol=ssh;nobranch=1;name=cargo;destsuffix=cargo",
        ),
    ],
)
def test_remote_with_name(remote: str, expected: str) -> None:
    """Known transports become git:// with the protocol as a parameter."""
    assert git_to_yocto_git_url(remote, "cargo", GitPrefix.GIT) == expected


@pytest.mark.parametrize(
    ("remote", "expected"),
    [
        ("http://github.com/rust-lang/cargo.git", "git://github.com/rust-lang/cargo.git;protocol=http;nobranch=1"),
        ("https://github.com/rust-lang/cargo.git", "git://github.com/rust-lang/cargo.git;protocol=https;nobranch=1"),
        ("git@github.com:rust-lang/cargo.git", "git://git@github.com/rust-lang/cargo.git;protocol=ssh;nobranch=1"),
    ],
)
def test_remote_without_name(remote: str, expected: str) -> None:
    """No name means no name/destsuffix parameters."""
    assert git_to_yocto_git_url(remote, None, GitPrefix.GIT) == expected


def test_example_urls() -> None:
    url = "https://example.com/r.git"
    assert (
        git_to_yocto_git_url(url, "pkg", GitPrefix.GIT)
        == "git://example.com/r.git;protocol=https;nobranch=1;name=pkg;destsuffix=pkg"
    )
    assert git_to_yocto_git_url(url) == "git://example.com/r.git;protocol=https;nobranch=1"


def test_scp_style_remote_becomes_ssh_path() -> None:
    """user@host:path is rewritten to ssh://user@host/path before translation."""
    url = git_to_yocto_git_url("git@github.com:org/repo.git")
    assert url.startswith("git://git@github.com/org/repo.git;")
    assert ";protocol=ssh" in url


def test_ssh_url_with_port_is_not_treated_as_scp_style() -> None:
    url = git_to_yocto_git_url("ssh://git@example.com:2222/org/repo.git")
    assert url == "git://git@example.com:2222/org/repo.git;protocol=ssh;nobranch=1"


@pytest.mark.parametrize(
    "remote",
    [
        "https://github.com/rust-lang/cargo.git",
        "git@github.com:rust-lang/cargo.git",
        "http://example.com/repo",
    ],
)
def test_submodule_prefix(remote: str) -> None:
    """gitsm replaces git and nothing else changes."""
    plain = git_to_yocto_git_url(remote, "cargo", GitPrefix.GIT)
    submodule = git_to_yocto_git_url(remote, "cargo", GitPrefix.GIT_SUBMODULE)
    assert plain.startswith("git://")
    assert submodule.startswith("gitsm://")
    assert submodule == "gitsm" + plain[len("git"):]


@pytest.mark.parametrize(
    ("remote", "expected"),
    [
        ("git://example.com/repo.git", "git://example.com/repo.git;nobranch=1"),
        ("file:///srv/git/repo", "file:///srv/git/repo;nobranch=1"),
        ("relative/path", "relative/path;nobranch=1"),
    ],
)
def test_other_schemes_pass_through(remote: str, expected: str) -> None:
    assert git_to_yocto_git_url(remote) == expected


@pytest.mark.parametrize(
    "remote",
    [
        "https://example.com/r.git",
        "git@example.com:r.git",
        "ssh://example.com/r.git",
        "git://example.com/r.git",
    ],
)
def test_single_protocol_parameter(remote: str) -> None:
    assert git_to_yocto_git_url(remote, "r").count(";protocol=") <= 1
