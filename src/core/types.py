"""Shared typed models.

This module defines the immutable data share, packet, and header
models passed between the adapter, transforms, and batch writer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from core.constants import (
    DEFAULT_HEADER_OUTPUT,
    DEFAULT_MIN_BATCH_SIZE,
    SOURCE_KIND_JSONL,
)


@dataclass(frozen=True)
class EncryptedShare:
    """One encrypted half of a data share.

    Attributes:
        encryption_key_id: Identifier of the key that encrypted this half.
        encrypted_payload: Ciphertext bytes.
    """

    encryption_key_id: str
    encrypted_payload: bytes


@dataclass(frozen=True)
class DataShareMetadata:
    """Aggregation parameters shared by every share of one metric.

    Attributes:
        metric_name: Statistic this share contributes to.
        number_of_servers: Number of aggregation servers.
        bins: Dimensionality of the statistic vector.
        hamming_weight: Expected weight constraint on the vector.
        prime: Finite-field modulus of the secret-sharing scheme.
        epsilon: Differential-privacy parameter.
    """

    metric_name: str
    number_of_servers: int
    bins: int
    hamming_weight: int
    prime: int
    epsilon: float

    def aggregation_parameters(self) -> tuple[int, int, int, int, float]:
        """Return the fields copied into a batch header."""
        return (
            self.number_of_servers,
            self.bins,
            self.hamming_weight,
            self.prime,
            self.epsilon,
        )


@dataclass(frozen=True)
class DataShare:
    """Validated client submission.

    Attributes:
        id: Storage-assigned document identifier.
        created: Creation time in epoch seconds, when recorded.
        r_pit: Randomness value binding both halves together.
        uuid: Per-share identifier shared by both halves.
        encrypted_data_shares: PHA half then Facilitator half.
        metadata: Aggregation parameters for the share's metric.
    """

    id: str
    created: int | None
    r_pit: int
    uuid: str
    encrypted_data_shares: tuple[EncryptedShare, EncryptedShare]
    metadata: DataShareMetadata


@dataclass(frozen=True)
class DataSharePacket:
    """Wire form of one half of one share, bound for one server."""

    encryption_key_id: str
    encrypted_payload: bytes
    r_pit: int
    uuid: str


@dataclass(frozen=True)
class SerializedDataShare:
    """Both packets of one share keyed by its metadata.

    Attributes:
        metadata: Metadata of the originating share.
        packets: Packets in server index order.
    """

    metadata: DataShareMetadata
    packets: tuple[DataSharePacket, DataSharePacket]


@dataclass(frozen=True)
class BatchWindow:
    """Half-open time window ``[start_time, start_time + duration)``."""

    start_time: int
    duration: int

    @property
    def end_time(self) -> int:
        return self.start_time + self.duration


@dataclass(frozen=True)
class IngestionHeader:
    """Batch-level header describing aggregation parameters.

    Attributes:
        batch_uuid: Batch identifier.
        name: Human readable batch name.
        batch_start_time: Inclusive window start, epoch seconds.
        batch_end_time: Exclusive window end, epoch seconds.
        number_of_servers: Copied from the sampled share.
        bins: Copied from the sampled share.
        hamming_weight: Copied from the sampled share.
        prime: Copied from the sampled share.
        epsilon: Copied from the sampled share.
        packet_file_digest: Digest of the batch packet files.
    """

    batch_uuid: str
    name: str
    batch_start_time: int
    batch_end_time: int
    number_of_servers: int
    bins: int
    hamming_weight: int
    prime: int
    epsilon: float
    packet_file_digest: bytes


@dataclass(frozen=True)
class StoreDocument:
    """Raw schema-less document read from the document store.

    Attributes:
        document_id: Storage-assigned document id.
        fields: Document field mapping, untrusted.
    """

    document_id: str
    fields: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class IngestionOptions:
    """Immutable per-run options.

    Attributes:
        metrics: Metric names processed as independent batches.
        start_time: Window start in epoch seconds.
        duration: Window length in seconds.
        pha_output: Path or ``s3://`` prefix for PHA packet files.
        facilitator_output: Path or ``s3://`` prefix for Facilitator packet files.
        header_output: Path or ``s3://`` prefix for header files.
        source_uri: Export path or URI, unused for Firestore sources.
        source_kind: Document source implementation name.
        min_batch_size: Smallest batch written; 0 disables the check.
    """

    metrics: tuple[str, ...]
    start_time: int
    duration: int
    pha_output: str
    facilitator_output: str
    header_output: str = DEFAULT_HEADER_OUTPUT
    source_uri: str | None = None
    source_kind: str = SOURCE_KIND_JSONL
    min_batch_size: int = DEFAULT_MIN_BATCH_SIZE

    @property
    def window(self) -> BatchWindow:
        return BatchWindow(start_time=self.start_time, duration=self.duration)


@dataclass(frozen=True)
class BatchResult:
    """Output locations for one metric batch.

    Attributes:
        metric: Metric name of the batch.
        share_count: Number of shares written to each packet file.
        pha_path: PHA packet file location.
        facilitator_path: Facilitator packet file location.
        header_path: Header file location, ``None`` when no header was written.
    """

    metric: str
    share_count: int
    pha_path: str
    facilitator_path: str
    header_path: str | None


@dataclass(frozen=True)
class IngestionSummary:
    """Result of one ingestion run.

    Attributes:
        batches: Per-metric results in configured metric order.
        counters: Final counter values.
    """

    batches: tuple[BatchResult, ...]
    counters: Mapping[str, int]
