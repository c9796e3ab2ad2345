"""Unit tests for CLI command handling."""

from __future__ import annotations

from pathlib import Path

import pytest

from cli.main import main
from tests.fixture_paths import fixture_path


@pytest.fixture(autouse=True)
def _isolated_env(config) -> None:
    """Reuse the shared config fixture to clear ENPA_* variables."""


def test_cli_run_prints_batches_and_counters(tmp_path: Path, capsys) -> None:
    """CLI run should print one line per metric followed by counters."""
    args = [
        "run",
        "--metric",
        "X",
        "--metric",
        "Y",
        "--start-time",
        "15",
        "--duration",
        "10",
        "--source",
        str(fixture_path("documents/export.jsonl")),
        "--pha-output",
        str(tmp_path / "pha"),
        "--facilitator-output",
        str(tmp_path / "facilitator"),
        "--header-output",
        str(tmp_path / "header"),
    ]

    exit_code = main(args)
    lines = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0
    assert lines[0].split("\t")[:2] == ["X", "1"]
    assert lines[1].split("\t")[:2] == ["Y", "1"]
    assert "invalidDocuments=3" in lines


def test_cli_run_reports_errors_with_exit_code(tmp_path: Path, capsys) -> None:
    """Fatal ingestion errors should produce exit code 1 and a message."""
    args = [
        "run",
        "--metric",
        "X",
        "--start-time",
        "15",
        "--duration",
        "10",
        "--source",
        str(tmp_path / "missing.jsonl"),
        "--pha-output",
        str(tmp_path / "pha"),
        "--facilitator-output",
        str(tmp_path / "facilitator"),
    ]

    exit_code = main(args)

    assert exit_code == 1
    assert "does not exist" in capsys.readouterr().err


def test_cli_run_requires_window_without_config() -> None:
    """Run flags are mandatory unless a run config is given."""
    with pytest.raises(SystemExit):
        main(["run", "--metric", "X"])
