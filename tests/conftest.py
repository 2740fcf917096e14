"""
Pytest configuration and fixtures.
"""

from collections.abc import Callable
from pathlib import Path

import pytest

from penguin_exporter.logging import get_logger
from penguin_exporter.utils.paths import PathResolver

EDAC_MC = Path("devices/system/edac/mc")


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging so they never outlive a test."""
    yield
    get_logger("penguin_exporter").handlers.clear()


@pytest.fixture
def sysfs(tmp_path: Path) -> Path:
    """Empty sysfs root."""
    root = tmp_path / "sys"
    root.mkdir()
    return root


@pytest.fixture
def resolver(sysfs: Path, tmp_path: Path) -> PathResolver:
    """Resolver pointing at the fake sysfs root."""
    return PathResolver(sysfs, tmp_path / "proc")


@pytest.fixture
def edac_tree(sysfs: Path) -> Callable[..., Path]:
    """
    Builder for a fake EDAC tree.

    Usage:
        edac_tree("mc0", ce_count=5, ue_count=0)
        edac_tree("mc1", csrows={"csrow0": {"ce_count": 1, "ue_count": 0}})

    Counters not given default to 0; pass None to leave a file out.
    """

    def build(name: str, csrows: dict[str, dict[str, int | str]] | None = None, **counters) -> Path:
        controller = sysfs / EDAC_MC / name
        controller.mkdir(parents=True, exist_ok=True)

        values = {"ce_count": 0, "ce_noinfo_count": 0, "ue_count": 0, "ue_noinfo_count": 0}
        values.update(counters)
        for counter, value in values.items():
            if value is not None:
                (controller / counter).write_text(f"{value}\n")

        for row, row_counters in (csrows or {}).items():
            row_dir = controller / row
            row_dir.mkdir()
            for counter, value in row_counters.items():
                (row_dir / counter).write_text(f"{value}\n")

        return controller

    return build


@pytest.fixture
def example_config_path() -> Path:
    """Path to the example config shipped with the repository."""
    return Path(__file__).parent.parent / "config.example.conf"
