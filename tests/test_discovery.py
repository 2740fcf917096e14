"""
Tests for instance discovery.
"""

import os
from pathlib import Path

import pytest

from penguin_exporter.errors import DiscoveryError, IdentityError
from penguin_exporter.utils.discovery import Instance, InstancePattern, walk_pattern

MC_PATTERN = InstancePattern(
    "devices/system/edac/mc/mc[0-9]*",
    r".*devices/system/edac/mc/mc([0-9]+)",
)


def make_dirs(root: Path, *names: str) -> None:
    for name in names:
        (root / "devices/system/edac/mc" / name).mkdir(parents=True)


def test_missing_root_yields_nothing(tmp_path: Path) -> None:
    """A tree without the subsystem has zero instances, not an error."""
    assert MC_PATTERN.discover(tmp_path / "does-not-exist") == []
    assert MC_PATTERN.discover(tmp_path) == []


def test_discover_natural_order(tmp_path: Path) -> None:
    """Test that instances are ordered by numeric identity."""
    make_dirs(tmp_path, "mc10", "mc2", "mc0")

    instances = MC_PATTERN.discover(tmp_path)

    assert [i.identity for i in instances] == [("0",), ("2",), ("10",)]
    assert instances[0].path == tmp_path / "devices/system/edac/mc/mc0"


def test_discover_is_repeatable(tmp_path: Path) -> None:
    """Two walks of an unchanged tree give the same result."""
    make_dirs(tmp_path, "mc1", "mc0")

    assert MC_PATTERN.discover(tmp_path) == MC_PATTERN.discover(tmp_path)


def test_discover_ignores_non_matching_names(tmp_path: Path) -> None:
    """Entries the glob does not match are not instances."""
    make_dirs(tmp_path, "mc0", "power")
    (tmp_path / "devices/system/edac/mc/uevent").write_text("")

    assert [i.identity for i in MC_PATTERN.discover(tmp_path)] == [("0",)]


def test_identity_mismatch_raises(tmp_path: Path) -> None:
    """A glob match the regex rejects is an error naming the path."""
    make_dirs(tmp_path, "mc0", "mc0x")

    with pytest.raises(IdentityError) as exc_info:
        MC_PATTERN.discover(tmp_path)

    assert exc_info.value.path.endswith("mc0x")
    assert "didn't match" in str(exc_info.value)


def test_duplicate_identity_raises(tmp_path: Path) -> None:
    """Two paths that parse to the same identity are rejected."""
    pattern = InstancePattern("devices/system/edac/mc/mc*", r".*/mc0*([0-9]+)")
    make_dirs(tmp_path, "mc1", "mc01")

    with pytest.raises(IdentityError, match="duplicate identity"):
        pattern.discover(tmp_path)


def test_enumeration_failure_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Errors other than a missing directory abort discovery."""
    make_dirs(tmp_path, "mc0")

    def denied(path):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(os, "scandir", denied)

    with pytest.raises(DiscoveryError, match="couldn't enumerate"):
        MC_PATTERN.discover(tmp_path)


def test_extract_identity_multiple_groups() -> None:
    """Test identities with one component per topology level."""
    pattern = InstancePattern("mc*/csrow*", r".*/mc([0-9]+)/csrow([0-9]+)")

    assert pattern.extract_identity("/sys/mc1/csrow3") == ("1", "3")

    with pytest.raises(IdentityError):
        pattern.extract_identity("/sys/mc1/csrow3/extra")


def test_pattern_requires_group() -> None:
    """Test that a regex without capture groups is rejected."""
    with pytest.raises(ValueError):
        InstancePattern("mc*", r".*/mc[0-9]+")


def test_walk_pattern_fixed_and_wildcard(tmp_path: Path) -> None:
    """Test walking mixed fixed and wildcard segments."""
    (tmp_path / "a/x1/leaf").mkdir(parents=True)
    (tmp_path / "a/x2").mkdir(parents=True)
    (tmp_path / "a/.x3/leaf").mkdir(parents=True)

    assert walk_pattern(tmp_path, ["a", "x*", "leaf"]) == [tmp_path / "a/x1/leaf"]
    assert walk_pattern(tmp_path, ["a", "*"]) == [tmp_path / "a/x1", tmp_path / "a/x2"]


def test_instance_str() -> None:
    """Instance string shows identity and path."""
    instance = Instance(path=Path("/sys/mc/mc0"), identity=("0",))

    assert str(instance) == "0 (/sys/mc/mc0)"


@pytest.mark.skipif(os.geteuid() == 0, reason="root ignores directory permissions")
def test_unsearchable_intermediate_directory(tmp_path: Path) -> None:
    """A locked directory above the instances is a discovery error, not zero matches."""
    make_dirs(tmp_path, "mc0")
    edac = tmp_path / "devices/system/edac"
    edac.chmod(0)

    try:
        with pytest.raises(DiscoveryError, match="couldn't enumerate"):
            MC_PATTERN.discover(tmp_path)
    finally:
        edac.chmod(0o755)


def test_fixed_leaf_stat_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """A fixed path that cannot be checked raises instead of being skipped."""
    pattern = InstancePattern("devices/system/edac/mc/mc0", r".*/mc([0-9]+)")
    make_dirs(tmp_path, "mc0")
    real_stat = os.stat

    def stat(path, *args, **kwargs):
        if isinstance(path, (str, os.PathLike)) and Path(path).name == "mc0":
            raise PermissionError(13, "Permission denied", str(path))
        return real_stat(path, *args, **kwargs)

    monkeypatch.setattr(os, "stat", stat)

    with pytest.raises(DiscoveryError, match="mc0"):
        pattern.discover(tmp_path)


def test_fixed_leaf_missing(tmp_path: Path) -> None:
    pattern = InstancePattern("devices/system/edac/mc/mc0", r".*/mc([0-9]+)")

    assert pattern.discover(tmp_path) == []

    make_dirs(tmp_path, "mc0")
    assert [i.identity for i in pattern.discover(tmp_path)] == [("0",)]


def test_file_where_directory_expected(tmp_path: Path) -> None:
    """A wildcard match that is a plain file has nothing below it."""
    (tmp_path / "a").mkdir()
    (tmp_path / "a/x1").write_text("")

    assert walk_pattern(tmp_path, ["a", "x*", "leaf"]) == []
    assert walk_pattern(tmp_path, ["a", "x*", "*"]) == []


def test_non_ascii_digits_sort_as_text(tmp_path: Path) -> None:
    """Identities made of Unicode digits order as text instead of failing."""
    pattern = InstancePattern("dev*", r".*/dev(\w+)")
    for name in ("dev²", "dev10", "dev2"):
        (tmp_path / name).mkdir()

    assert [i.identity for i in pattern.discover(tmp_path)] == [("2",), ("10",), ("²",)]
