"""Integration tests for a full ingestion run over a document export."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from core.config import EnpaConfig
from core.run_config import load_run_config
from ingest.ingestion_sdk import IngestionClient
from store.packet_schema import decode_headers, decode_packets
from tests.fixture_paths import fixture_path


def test_export_run_writes_linked_batches(config: EnpaConfig, tmp_path: Path) -> None:
    """End-to-end run should split in-window shares across both servers."""
    options = replace(
        load_run_config(str(fixture_path("run_config/valid_run.yaml"))),
        source_uri=str(fixture_path("documents/export.jsonl")),
        pha_output=str(tmp_path / "pha"),
        facilitator_output=str(tmp_path / "facilitator"),
        header_output=str(tmp_path / "ingestionHeader"),
    )

    summary = IngestionClient(config).run(options)

    batches = {batch.metric: batch for batch in summary.batches}
    pha_packets = decode_packets(Path(batches["X"].pha_path).read_bytes())
    facilitator_packets = decode_packets(Path(batches["X"].facilitator_path).read_bytes())
    assert [(packet.uuid, packet.r_pit) for packet in pha_packets] == [("u-2", 102)]
    assert [(packet.uuid, packet.r_pit) for packet in facilitator_packets] == [("u-2", 102)]
    assert pha_packets[0].encrypted_payload == b"pha-2"
    assert facilitator_packets[0].encrypted_payload == b"fac-2"
    assert pha_packets[0].encryption_key_id == "pha-key"
    assert facilitator_packets[0].encryption_key_id == "facilitator-key"

    header_path = batches["Y"].header_path
    assert header_path is not None
    (header,) = decode_headers(Path(header_path).read_bytes())
    assert (header.batch_start_time, header.batch_end_time) == (15, 25)
    assert (header.bins, header.hamming_weight, header.epsilon) == (4, 2, 4.5)
    assert summary.counters["invalidDocuments"] == 3
    assert summary.counters["dataShareIncluded"] == 2


def test_run_config_file_reports_empty_metric_without_header(
    config: EnpaConfig, tmp_path: Path
) -> None:
    """A metric with no shares should still write empty packet files."""
    config_path = tmp_path / "run.yaml"
    config_path.write_text(
        "\n".join(
            [
                "version: 1",
                "metrics: [Z]",
                "window: {start_time: 15, duration: 10}",
                f"source: {{kind: jsonl, uri: {fixture_path('documents/export.jsonl')}}}",
                "output:",
                f"  pha: {tmp_path / 'pha'}",
                f"  facilitator: {tmp_path / 'facilitator'}",
                f"  header: {tmp_path / 'header'}",
            ]
        ),
        encoding="utf-8",
    )

    summary = IngestionClient(config).run_config_file(str(config_path))

    (batch,) = summary.batches
    assert batch.share_count == 0
    assert batch.header_path is None
    assert decode_packets(Path(batch.pha_path).read_bytes()) == []
    assert summary.counters["metricUnmatched"] == 4
