"""Recipe assembly tests."""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from cargobake.config import RecipeConfig
from cargobake.core import Branch, LocalPath, RegistryIndexed, ResolvedPackage, VersionControl
from cargobake.errors import MissingHomepageError, RecipeWriteError, TemplateError
from cargobake.git.repo import ProjectRepo
from cargobake.manifest import PackageInfo, PackageMetadata
from cargobake.recipe.assemble import (
    assemble_recipe,
    resolve_homepage,
    resolve_license,
    resolve_summary,
    version_pin,
    write_recipe,
)

REV = "0123456789abcdef0123456789abcdef01234567"


def _package(tmp_path: Path, **fields) -> PackageInfo:
    crate_root = tmp_path / "crates" / "demo"
    crate_root.mkdir(parents=True, exist_ok=True)
    fields.setdefault("name", "demo")
    fields.setdefault("version", "0.2.0")
    fields.setdefault("homepage", "https://example.com/demo")
    return PackageInfo(
        manifest_path=crate_root / "Cargo.toml",
        workspace_root=tmp_path,
        metadata=PackageMetadata(**fields),
    )


def _packages():
    return [
        ResolvedPackage("demo", "0.2.0", LocalPath()),
        ResolvedPackage("zlib", "1.0.0", RegistryIndexed("crates.io")),
        ResolvedPackage("anyhow", "1.0.80", RegistryIndexed("crates.io")),
        ResolvedPackage(
            "bar",
            "0.1.0",
            VersionControl("git", "https://github.com/org/bar", Branch("master")),
            precise_revision=REV,
        ),
    ]


def test_summary_fallbacks(caplog: pytest.LogCaptureFixture) -> None:
    assert resolve_summary(PackageMetadata(name="demo", description="  line one\nline two ")) == (
        "line one \\\nline two"
    )
    with caplog.at_level("WARNING"):
        assert resolve_summary(PackageMetadata(name="demo")) == "demo"
    assert "package.description" in caplog.text


def test_homepage_fallbacks() -> None:
    assert resolve_homepage(PackageMetadata(name="d", homepage=" https://h ", repository="r")) == "https://h"
    assert resolve_homepage(PackageMetadata(name="d", repository="https://r ")) == "https://r"
    with pytest.raises(MissingHomepageError):
        resolve_homepage(PackageMetadata(name="d"))


def test_license_fallbacks() -> None:
    assert resolve_license(PackageMetadata(name="d", license="MIT")) == "MIT"
    assert resolve_license(PackageMetadata(name="d", **{"license-file": "COPYING"})) == "COPYING"
    assert resolve_license(PackageMetadata(name="d")) == "CLOSED"


def test_version_pin() -> None:
    untagged = ProjectRepo(uri="u", branch="master", rev="abcdef012345", tag=False)
    tagged = ProjectRepo(uri="u", branch="master", rev="abcdef012345", tag=True)

    assert version_pin(untagged) == 'PV:append = ".AUTOINC+abcdef0123"'
    assert version_pin(untagged, legacy_overrides=True) == 'PV_append = ".AUTOINC+abcdef0123"'
    assert version_pin(tagged) == ""
    assert version_pin(ProjectRepo()) == ""
    assert version_pin(ProjectRepo(rev="abcdef0123")) == ""


def test_assemble_recipe(tmp_path: Path) -> None:
    info = _package(tmp_path, license="MIT/Apache-2.0", description="Demo crate")
    (info.crate_root / "LICENSE-MIT").write_text("mit", encoding="utf-8")
    repo = ProjectRepo(
        uri="git://github.com/org/demo.git;protocol=https;nobranch=1",
        branch="master",
        rev=REV,
        tag=False,
    )

    recipe = assemble_recipe(info, _packages(), repo)

    assert recipe.inc_filename == "demo_0.2.0.inc"
    assert recipe.bb_filename == "demo_0.2.0.bb"
    assert recipe.inc_text.endswith(
        'SRC_URI += " \\\n'
        "    crate://crates.io/anyhow/1.0.80 \\\n"
        "    crate://crates.io/zlib/1.0.0 \\\n"
        "    git://github.com/org/bar;protocol=https;nobranch=1;name=bar;destsuffix=bar \\\n"
        '"\n'
    )
    assert "demo/0.2.0" not in recipe.inc_text

    bb = recipe.bb_text
    mit_md5 = hashlib.md5(b"mit").hexdigest()
    assert 'SUMMARY = "Demo crate"' in bb
    assert 'HOMEPAGE = "https://example.com/demo"' in bb
    assert 'LICENSE = "MIT | Apache-2.0"' in bb
    assert f"    file://crates/demo/LICENSE-MIT;md5={mit_md5} \\\n" in bb
    assert "    file://Apache-2.0;md5=generateme \\\n" in bb
    assert "require demo_0.2.0.inc\n" in bb
    assert 'SRCREV_bar = "${AUTOREV}"' in bb
    assert 'EXTRA_OECARGO_PATHS += "${WORKDIR}/bar"' in bb
    assert 'SRC_URI += "git://github.com/org/demo.git;protocol=https;nobranch=1"' in bb
    assert f'SRCREV = "{REV}"' in bb
    assert 'CARGO_SRC_DIR = "crates/demo"' in bb
    assert 'S = "${WORKDIR}/git"' in bb
    assert 'PV:append = ".AUTOINC+0123456789"' in bb


def test_assemble_reproducible_and_legacy(tmp_path: Path) -> None:
    info = _package(tmp_path, license="MIT")
    config = RecipeConfig(reproducible=True, legacy_overrides=True)
    repo = ProjectRepo(uri="u", branch="master", rev=REV, tag=False)

    bb = assemble_recipe(info, _packages(), repo, config).bb_text

    assert f'SRCREV_bar = "{REV}"' in bb
    assert 'PV_append = ".AUTOINC+0123456789"' in bb


def test_assemble_tagged_has_no_version_pin(tmp_path: Path) -> None:
    info = _package(tmp_path, license="MIT")
    repo = ProjectRepo(uri="u", branch="master", rev=REV, tag=True)

    bb = assemble_recipe(info, [], repo).bb_text

    assert "PV:append" not in bb
    assert "AUTOINC" not in bb


def test_assemble_with_default_repo_and_closed_license(tmp_path: Path) -> None:
    info = _package(tmp_path)

    bb = assemble_recipe(info, [], ProjectRepo()).bb_text

    assert 'LICENSE = "CLOSED"' in bb
    assert 'SRCREV = ""' in bb
    assert "file://" not in bb


def test_missing_homepage_is_fatal(tmp_path: Path) -> None:
    info = _package(tmp_path, homepage=None)

    with pytest.raises(MissingHomepageError):
        assemble_recipe(info, [], ProjectRepo())


def test_custom_templates(tmp_path: Path) -> None:
    info = _package(tmp_path, license="MIT")
    bb_template = tmp_path / "bb.template"
    bb_template.write_text("{name}-{version}: {license}\n{src_uri_extras}\n", encoding="utf-8")
    inc_template = tmp_path / "inc.template"
    inc_template.write_text("URIS:\n{src_uri}", encoding="utf-8")
    config = RecipeConfig(bb_template=bb_template, inc_template=inc_template)

    recipe = assemble_recipe(info, _packages(), ProjectRepo(), config)

    assert recipe.bb_text.startswith("demo-0.2.0: MIT\nSRCREV_FORMAT")
    assert recipe.inc_text.startswith("URIS:\n    crate://crates.io/anyhow/1.0.80 \\\n")


def test_bad_template_field(tmp_path: Path) -> None:
    info = _package(tmp_path, license="MIT")
    bad = tmp_path / "bad.template"
    bad.write_text("{nope}", encoding="utf-8")

    with pytest.raises(TemplateError, match="nope"):
        assemble_recipe(info, [], ProjectRepo(), RecipeConfig(bb_template=bad))


def test_write_recipe_truncates(tmp_path: Path) -> None:
    info = _package(tmp_path, license="MIT")
    recipe = assemble_recipe(info, _packages(), ProjectRepo())
    out = tmp_path / "out"
    out.mkdir()
    (out / recipe.bb_filename).write_text("stale" * 10000, encoding="utf-8")

    inc_path, bb_path = write_recipe(recipe, out)

    assert inc_path.read_text(encoding="utf-8") == recipe.inc_text
    assert bb_path.read_text(encoding="utf-8") == recipe.bb_text


def test_write_recipe_failure(tmp_path: Path) -> None:
    info = _package(tmp_path, license="MIT")
    recipe = assemble_recipe(info, [], ProjectRepo())

    with pytest.raises(RecipeWriteError, match="inc"):
        write_recipe(recipe, tmp_path / "does" / "not" / "exist")


def test_required_include_matches_written_file(tmp_path: Path) -> None:
    """The ``require`` line names the include file that is written."""
    info = _package(tmp_path, license="MIT", version="1.0.0-rc.1+build.5")
    recipe = assemble_recipe(info, _packages(), ProjectRepo())
    out = tmp_path / "out"
    out.mkdir()

    inc_path, bb_path = write_recipe(recipe, out)

    assert f"require {inc_path.name}\n" in recipe.bb_text
    assert inc_path.name == "demo_1.0.0-rc.1+build.5.inc"
    assert bb_path.name == "demo_1.0.0-rc.1+build.5.bb"
