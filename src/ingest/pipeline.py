"""Ingestion orchestration.

One run reads the document snapshot once, adapts it into data shares,
then runs an independent sub-pipeline per metric: metric filter, date
filter, packet serialization, and the PHA, Facilitator, and header writes.
Sub-pipelines run concurrently and share only the run counters.
"""

from __future__ import annotations

import concurrent.futures
import hashlib
import threading
import uuid
from dataclasses import dataclass
from typing import Any

from core.config import EnpaConfig
from core.constants import FACILITATOR_INDEX, HASH_ALGORITHM, PHA_INDEX, SOURCE_KIND_FIRESTORE
from core.counters import PipelineCounters
from core.logging_config import get_logger
from core.run_config import validate_ingestion_options
from core.types import BatchResult, DataShare, IngestionOptions, IngestionSummary
from ingest.document_adapter import read_data_shares
from ingest.document_source import DocumentSource, JsonlDocumentSource
from ingest.firestore_source import FirestoreDocumentSource
from store.batch_writer import BatchWriter, batch_location
from store.packet_schema import encode_header, encode_packets
from transforms.date_filter import filter_by_date
from transforms.header_serialization import (
    distinct_parameters,
    sample_one,
    serialize_ingestion_header,
)
from transforms.metric_filter import filter_by_metric
from transforms.share_serialization import fork_by_index, serialize_data_shares

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class EncodedBatch:
    """Encoded packet files of one metric batch."""

    pha_payload: bytes
    facilitator_payload: bytes

    def digest(self) -> bytes:
        """Digest over the PHA file followed by the Facilitator file."""
        hasher = hashlib.new(HASH_ALGORITHM)
        hasher.update(self.pha_payload)
        hasher.update(self.facilitator_payload)
        return hasher.digest()


class IngestionPipelineRunner:
    """Runs one ingestion over a fixed options and config pair."""

    def __init__(
        self,
        options: IngestionOptions,
        config: EnpaConfig,
        source: DocumentSource | None = None,
        writer: BatchWriter | None = None,
        counters: PipelineCounters | None = None,
    ) -> None:
        validate_ingestion_options(options)
        self._options = options
        self._config = config
        self._counters = counters or PipelineCounters()
        self._source = source or build_document_source(options, config, self._counters)
        self._writer = writer or BatchWriter(config)

    def run(self) -> IngestionSummary:
        """Execute every metric batch and return the run summary.

        Raises:
            EnpaIngestError: If the document source cannot be read.
            EnpaStoreError: If any batch file cannot be written.
        """
        shares = read_data_shares(
            self._source.read_documents(), self._counters.invalid_documents
        )
        _LOGGER.info(
            "data_shares_loaded",
            share_count=len(shares),
            invalid_documents=self._counters.invalid_documents.value,
        )
        batches = self._run_metric_batches(shares)
        counters = self._counters.snapshot()
        _LOGGER.info(
            "ingestion_completed",
            metrics=list(self._options.metrics),
            batch_start_time=self._options.start_time,
            batch_end_time=self._options.window.end_time,
            **counters,
        )
        return IngestionSummary(batches=batches, counters=counters)

    def _run_metric_batches(self, shares: list[DataShare]) -> tuple[BatchResult, ...]:
        metrics = self._options.metrics
        aborted = threading.Event()
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=min(self._config.max_workers, len(metrics))
        ) as executor:
            futures = [
                executor.submit(self._run_metric_batch_unless_aborted, shares, metric, aborted)
                for metric in metrics
            ]
            _, pending = concurrent.futures.wait(
                futures, return_when=concurrent.futures.FIRST_EXCEPTION
            )
            for future in pending:
                future.cancel()
        failures = [
            future.exception()
            for future in futures
            if not future.cancelled() and future.exception() is not None
        ]
        if failures:
            raise failures[0]
        return tuple(future.result() for future in futures)

    def _run_metric_batch_unless_aborted(
        self,
        shares: list[DataShare],
        metric: str,
        aborted: threading.Event,
    ) -> BatchResult | None:
        # set before the failing future completes, so queued metrics see it
        if aborted.is_set():
            _LOGGER.warning("batch_skipped_after_failure", metric=metric)
            return None
        try:
            return self._run_metric_batch(shares, metric)
        except Exception:
            aborted.set()
            raise

    def _run_metric_batch(self, shares: list[DataShare], metric: str) -> BatchResult:
        batch_shares = self._select_batch_shares(shares, metric)
        self._check_homogeneity(batch_shares, metric)
        ordered_shares = sorted(batch_shares, key=lambda share: (share.uuid, share.id))
        serialized = serialize_data_shares(ordered_shares, self._counters.data_share_included)
        encoded = EncodedBatch(
            pha_payload=encode_packets(fork_by_index(serialized, PHA_INDEX)),
            facilitator_payload=encode_packets(fork_by_index(serialized, FACILITATOR_INDEX)),
        )
        pha_path = self._writer.write(
            batch_location(self._options.pha_output, metric), encoded.pha_payload
        )
        facilitator_path = self._writer.write(
            batch_location(self._options.facilitator_output, metric),
            encoded.facilitator_payload,
        )
        header_path = self._write_header(ordered_shares, metric, encoded)
        _LOGGER.info(
            "batch_written",
            metric=metric,
            share_count=len(ordered_shares),
            pha_path=pha_path,
            facilitator_path=facilitator_path,
            header_path=header_path,
        )
        return BatchResult(
            metric=metric,
            share_count=len(ordered_shares),
            pha_path=pha_path,
            facilitator_path=facilitator_path,
            header_path=header_path,
        )

    def _select_batch_shares(self, shares: list[DataShare], metric: str) -> list[DataShare]:
        metric_shares = filter_by_metric(
            shares,
            metric,
            matched=self._counters.metric_matched,
            unmatched=self._counters.metric_unmatched,
        )
        window_shares = filter_by_date(
            metric_shares, self._options.window, self._counters.outside_window
        )
        minimum = self._options.min_batch_size
        if 0 < len(window_shares) < minimum:
            _LOGGER.warning(
                "batch_withheld",
                metric=metric,
                share_count=len(window_shares),
                min_batch_size=minimum,
            )
            self._counters.batches_withheld.inc()
            return []
        return window_shares

    def _check_homogeneity(self, shares: list[DataShare], metric: str) -> None:
        parameters = distinct_parameters(shares)
        if len(parameters) <= 1:
            return
        _LOGGER.warning(
            "heterogeneous_batch_parameters",
            metric=metric,
            parameter_sets=sorted(str(item) for item in parameters),
        )
        self._counters.heterogeneous_batches.inc()

    def _write_header(
        self,
        shares: list[DataShare],
        metric: str,
        encoded: EncodedBatch,
    ) -> str | None:
        sampled = sample_one(shares, self._config.random_seed)
        if sampled is None:
            return None
        header = serialize_ingestion_header(
            sampled,
            self._options.window,
            batch_uuid=str(uuid.uuid4()),
            packet_file_digest=encoded.digest(),
        )
        return self._writer.write(
            batch_location(self._options.header_output, metric), encode_header(header)
        )


def build_document_source(
    options: IngestionOptions,
    config: EnpaConfig,
    counters: PipelineCounters,
    client: Any | None = None,
) -> DocumentSource:
    """Build the document source named by the run options.

    Args:
        options: Validated run options.
        config: Runtime configuration.
        counters: Run counters; malformed export lines count as invalid documents.
        client: Optional pre-built S3 or Firestore client.

    Returns:
        Document source for the run.
    """
    if options.source_kind == SOURCE_KIND_FIRESTORE:
        return FirestoreDocumentSource(options.metrics, config, client=client)
    return JsonlDocumentSource(
        str(options.source_uri),
        config,
        counters.invalid_documents,
        s3_client=client,
    )


def run_ingestion(options: IngestionOptions, config: EnpaConfig) -> IngestionSummary:
    """Run one ingestion and return its summary.

    Args:
        options: Run options.
        config: Runtime configuration.

    Returns:
        Per-metric batch results and final counters.

    Raises:
        EnpaConfigError: If options or store bootstrap are invalid.
        EnpaIngestError: If the document source cannot be read.
        EnpaStoreError: If output persistence fails.
    """
    return IngestionPipelineRunner(options, config).run()
