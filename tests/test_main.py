"""
Tests for the command-line entry point.
"""

from collections.abc import Callable
from pathlib import Path

import psutil
import pytest

from penguin_exporter import __main__ as cli
from penguin_exporter.utils import paths


@pytest.fixture
def config_file(tmp_path: Path, sysfs: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Config pointing at the fake sysfs, with process-wide state restored afterwards."""
    monkeypatch.setattr(psutil, "PROCFS_PATH", psutil.PROCFS_PATH)
    monkeypatch.setattr(paths, "_default_resolver", paths.get_resolver())
    monkeypatch.setattr(psutil, "boot_time", lambda: 1700000000.0)

    path = tmp_path / "config.conf"
    path.write_text(
        f"""
        paths {{ sysfs "{sysfs}"; procfs "{tmp_path / 'proc'}"; }}
        stat {{ source psutil; }}
        """
    )
    return path


def test_once(
    config_file: Path, edac_tree: Callable[..., Path], capsys: pytest.CaptureFixture[str]
) -> None:
    """--once prints one scrape in the text format and nothing else on stdout."""
    edac_tree("mc0", ce_count=5)

    assert cli.main(["--once", str(config_file)]) == 0

    out = capsys.readouterr().out
    assert 'node_edac_correctable_errors_total{controller="0"} 5.0' in out
    assert "node_boot_time 1.7e+09" in out
    assert 'node_scrape_collector_success{collector="stat"} 1.0' in out
    assert "Enabled collector" not in out


def test_once_reports_failed_collector(
    config_file: Path, edac_tree: Callable[..., Path], capsys: pytest.CaptureFixture[str]
) -> None:
    edac_tree("mc0", ue_count=None)

    assert cli.main(["--once", str(config_file)]) == 0

    out = capsys.readouterr().out
    assert 'node_scrape_collector_success{collector="edac"} 0.0' in out
    assert "node_edac_correctable_errors_total{" not in out


def test_validate(config_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--validate", str(config_file)]) == 0

    out = capsys.readouterr().out
    assert "Configuration is valid!" in out
    assert "Collectors: edac, stat" in out


def test_validate_reports_warnings(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "config.conf"
    path.write_text("collectors { zfs on; }\n")

    assert cli.main(["--validate", str(path)]) == 0

    assert "Unknown collector 'zfs'" in capsys.readouterr().out


def test_invalid_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "config.conf"
    path.write_text("web { port 9100\n")

    assert cli.main(["--validate", str(path)]) == 1
    assert "Configuration error" in capsys.readouterr().err


def test_missing_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main([str(tmp_path / "nope.conf")]) == 1
    assert "not found" in capsys.readouterr().err


def test_cli_log_config() -> None:
    parser = cli.build_parser()

    assert cli.cli_log_config(parser.parse_args([])) is None

    log_config = cli.cli_log_config(parser.parse_args(["-d", "--no-color", "--log-file", "x.log"]))
    assert log_config.console_level == "debug"
    assert log_config.console_colors is False
    assert log_config.file_enabled is True
    assert log_config.file_path == "x.log"

    assert cli.cli_log_config(parser.parse_args(["-q"])).console_level == "error"


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--version"])

    assert exc_info.value.code == 0
    assert capsys.readouterr().out.strip() == "Penguin Exporter 0.1.0"
