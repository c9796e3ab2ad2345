"""Unit tests for run-config parsing and option validation."""

from __future__ import annotations

from dataclasses import replace

import pytest

from core.errors import EnpaConfigError
from core.run_config import load_run_config, validate_ingestion_options
from core.types import IngestionOptions
from tests.fixture_paths import fixture_path


def _options(**overrides: object) -> IngestionOptions:
    options = IngestionOptions(
        metrics=("X",),
        start_time=15,
        duration=10,
        pha_output="out/pha",
        facilitator_output="out/facilitator",
        source_uri="export.jsonl",
    )
    return replace(options, **overrides)


def test_load_run_config_valid_file_parses_options() -> None:
    """Valid run config should produce the declared options."""
    options = load_run_config(str(fixture_path("run_config/valid_run.yaml")))

    assert options.metrics == ("X", "Y")
    assert options.window.end_time == 25
    assert options.header_output == "out/ingestionHeader"
    assert options.source_kind == "jsonl"


def test_load_run_config_unknown_key_raises_error() -> None:
    """Unknown window fields should be rejected."""
    with pytest.raises(EnpaConfigError, match="end_time"):
        load_run_config(str(fixture_path("run_config/unknown_key.yaml")))


def test_load_run_config_zero_duration_raises_error() -> None:
    """A window must have a positive duration."""
    with pytest.raises(EnpaConfigError, match="duration"):
        load_run_config(str(fixture_path("run_config/bad_duration.yaml")))


def test_load_run_config_missing_file_raises_error(tmp_path) -> None:
    """Missing run config is a fatal configuration error."""
    with pytest.raises(EnpaConfigError):
        load_run_config(str(tmp_path / "missing.yaml"))


def test_load_run_config_invalid_yaml_raises_error(tmp_path) -> None:
    """Unparseable YAML is a fatal configuration error."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("metrics: [X\n", encoding="utf-8")

    with pytest.raises(EnpaConfigError):
        load_run_config(str(config_file))


@pytest.mark.parametrize(
    "overrides",
    [
        {"metrics": ()},
        {"metrics": ("X", "X")},
        {"start_time": -1},
        {"duration": 0},
        {"min_batch_size": -2},
        {"source_kind": "bigtable"},
        {"source_uri": None},
        {"pha_output": ""},
    ],
)
def test_validate_ingestion_options_rejects_invalid_values(overrides: dict[str, object]) -> None:
    """Invalid run options should fail before any read."""
    with pytest.raises(EnpaConfigError):
        validate_ingestion_options(_options(**overrides))


def test_validate_ingestion_options_firestore_needs_no_source_uri() -> None:
    """Firestore sources read collection groups, not a URI."""
    validate_ingestion_options(_options(source_kind="firestore", source_uri=None))


@pytest.mark.parametrize(
    "overrides",
    [
        {"facilitator_output": "out/pha"},
        {"header_output": "out/pha"},
        {"header_output": "out/facilitator"},
    ],
)
def test_validate_ingestion_options_rejects_shared_output_prefixes(
    overrides: dict[str, object],
) -> None:
    """Each server and the header need their own output prefix."""
    with pytest.raises(EnpaConfigError, match="distinct"):
        validate_ingestion_options(_options(**overrides))
