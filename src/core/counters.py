"""Thread-safe run counters.

Counters are created once per run, handed to each stage explicitly,
and reported together when the run completes.
"""

from __future__ import annotations

import threading

from core.constants import (
    COUNTER_BATCHES_WITHHELD,
    COUNTER_DATA_SHARE_INCLUDED,
    COUNTER_HETEROGENEOUS_BATCHES,
    COUNTER_INVALID_DOCUMENTS,
    COUNTER_METRIC_MATCHED,
    COUNTER_METRIC_UNMATCHED,
    COUNTER_OUTSIDE_WINDOW,
)


class Counter:
    """Monotonic integer counter safe for concurrent increments."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._value = 0
        self._lock = threading.Lock()

    def inc(self, amount: int = 1) -> None:
        """Increase the counter by a non-negative amount."""
        if amount < 0:
            raise ValueError(f"Counter {self.name} cannot decrease (got {amount}).")
        with self._lock:
            self._value += amount

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


class PipelineCounters:
    """Named counters shared by every stage of one run."""

    def __init__(self) -> None:
        self.invalid_documents = Counter(COUNTER_INVALID_DOCUMENTS)
        self.metric_matched = Counter(COUNTER_METRIC_MATCHED)
        self.metric_unmatched = Counter(COUNTER_METRIC_UNMATCHED)
        self.outside_window = Counter(COUNTER_OUTSIDE_WINDOW)
        self.data_share_included = Counter(COUNTER_DATA_SHARE_INCLUDED)
        self.heterogeneous_batches = Counter(COUNTER_HETEROGENEOUS_BATCHES)
        self.batches_withheld = Counter(COUNTER_BATCHES_WITHHELD)

    def snapshot(self) -> dict[str, int]:
        """Return current counter values keyed by counter name."""
        counters = (
            self.invalid_documents,
            self.metric_matched,
            self.metric_unmatched,
            self.outside_window,
            self.data_share_included,
            self.heterogeneous_batches,
            self.batches_withheld,
        )
        return {counter.name: counter.value for counter in counters}
