"""Creation-time window transform."""

from __future__ import annotations

from typing import Iterable

from core.counters import Counter
from core.types import BatchWindow, DataShare


def in_window(share: DataShare, window: BatchWindow) -> bool:
    """Return whether a share was created inside the half-open window.

    Shares without a creation time are never in any window.
    """
    if share.created is None:
        return False
    return window.start_time <= share.created < window.end_time


def filter_by_date(
    shares: Iterable[DataShare],
    window: BatchWindow,
    outside_window: Counter | None = None,
) -> list[DataShare]:
    """Keep shares created in ``[start_time, start_time + duration)``.

    Args:
        shares: Shares already filtered by metric.
        window: Run-scoped batch window.
        outside_window: Optional counter for dropped shares.

    Returns:
        In-window shares in input order.
    """
    kept: list[DataShare] = []
    for share in shares:
        if in_window(share, window):
            kept.append(share)
        elif outside_window is not None:
            outside_window.inc()
    return kept
