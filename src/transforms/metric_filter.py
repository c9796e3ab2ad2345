"""Metric selection transform.

Each configured metric is batched independently, so the same share list
is filtered once per metric name.
"""

from __future__ import annotations

from typing import Iterable

from core.counters import Counter
from core.types import DataShare


def matches_metric(share: DataShare, metric: str) -> bool:
    """Return whether a share is tagged for the target metric."""
    return share.metadata.metric_name == metric


def filter_by_metric(
    shares: Iterable[DataShare],
    metric: str,
    matched: Counter | None = None,
    unmatched: Counter | None = None,
) -> list[DataShare]:
    """Keep shares whose metadata names the target metric.

    Args:
        shares: Validated shares from the document adapter.
        metric: Target metric name.
        matched: Optional counter for kept shares.
        unmatched: Optional counter for dropped shares.

    Returns:
        Matching shares in input order.
    """
    kept: list[DataShare] = []
    for share in shares:
        if matches_metric(share, metric):
            kept.append(share)
            if matched is not None:
                matched.inc()
        elif unmatched is not None:
            unmatched.inc()
    return kept
