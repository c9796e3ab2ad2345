"""Batch header synthesis.

A batch header is built from one representative share of the filtered
set. All shares of a metric are expected to carry the same aggregation
parameters; ``distinct_parameters`` lets the pipeline report batches
where that does not hold.
"""

from __future__ import annotations

import random
from typing import Sequence

from core.constants import BATCH_NAME_PREFIX
from core.types import BatchWindow, DataShare, IngestionHeader


def sample_one(shares: Sequence[DataShare], seed: int) -> DataShare | None:
    """Pick any one share, or ``None`` when there is nothing to sample.

    Args:
        shares: Fully filtered shares for one metric.
        seed: Seed for the sampling generator.

    Returns:
        A representative share, if any.
    """
    if not shares:
        return None
    return random.Random(seed).choice(list(shares))


def distinct_parameters(
    shares: Sequence[DataShare],
) -> set[tuple[int, int, int, int, float]]:
    """Return the distinct aggregation parameter tuples among shares."""
    return {share.metadata.aggregation_parameters() for share in shares}


def serialize_ingestion_header(
    share: DataShare,
    window: BatchWindow,
    batch_uuid: str,
    packet_file_digest: bytes,
) -> IngestionHeader:
    """Build the batch header from a sampled share.

    Args:
        share: Representative share for the batch.
        window: Window that produced the batch.
        batch_uuid: Identifier of the batch.
        packet_file_digest: Digest over the batch packet files.

    Returns:
        Header with window bounds and the share's aggregation parameters.
    """
    metadata = share.metadata
    return IngestionHeader(
        batch_uuid=batch_uuid,
        name=f"{BATCH_NAME_PREFIX}{batch_uuid}",
        batch_start_time=window.start_time,
        batch_end_time=window.end_time,
        number_of_servers=metadata.number_of_servers,
        bins=metadata.bins,
        hamming_weight=metadata.hamming_weight,
        prime=metadata.prime,
        epsilon=metadata.epsilon,
        packet_file_digest=packet_file_digest,
    )
