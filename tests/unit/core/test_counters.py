"""Unit tests for run counters."""

from __future__ import annotations

import threading

import pytest

from core.counters import Counter, PipelineCounters


def test_counter_concurrent_increments_are_not_lost() -> None:
    """Increments from several threads should all be recorded."""
    counter = Counter("included")

    def _increment() -> None:
        for _ in range(1000):
            counter.inc()

    threads = [threading.Thread(target=_increment) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert counter.value == 8000


def test_counter_rejects_negative_amount() -> None:
    """Counters are monotonic."""
    with pytest.raises(ValueError):
        Counter("included").inc(-1)


def test_pipeline_counters_snapshot_uses_counter_names() -> None:
    """Snapshot should report every counter by its public name."""
    counters = PipelineCounters()
    counters.invalid_documents.inc()
    counters.data_share_included.inc(2)

    snapshot = counters.snapshot()

    assert snapshot["invalidDocuments"] == 1
    assert snapshot["dataShareIncluded"] == 2
    assert snapshot["batchesWithheld"] == 0
