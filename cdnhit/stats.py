"""Statistical aggregation for cache-hit latency samples.

Percentiles use nearest-rank-below indexing over the sorted hit
latencies: the value at ``floor(n * p) - 1``.  For small samples that
index can fall below zero (n=1, p=0.50 gives -1); it is clamped to 0,
so the smallest sample is reported.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Optional, Sequence, Union

from cdnhit.config import PERCENTILES
from cdnhit.models import DestinationResult, DestinationSummary, PercentileLadder, ResultSet


def hit_ratio_percent(hit_count: int, total: int) -> Optional[int]:
    """Hit share of *total* in whole percent, truncated.  None when total is 0."""
    if total <= 0:
        return None
    return (hit_count * 100) // total


def percentile_index(n: int, p: Union[str, Decimal, float]) -> int:
    """Raw rank ``floor(n * p) - 1``; may be negative for small *n*.

    *p* is converted through ``Decimal(str(p))`` so that fractions such as
    0.95 are not distorted by binary floating point.
    """
    return math.floor(n * Decimal(str(p))) - 1


def _pick(sorted_vals: Sequence[float], p: Union[str, Decimal, float]) -> float:
    index = max(percentile_index(len(sorted_vals), p), 0)
    return sorted_vals[index]


def compute_ladder(hit_latencies: Sequence[float]) -> Optional[PercentileLadder]:
    """Compute the percentile ladder, or None for an empty sequence."""
    if not hit_latencies:
        return None
    sorted_vals = sorted(hit_latencies)
    values = {label: _pick(sorted_vals, p) for label, p in PERCENTILES}
    return PercentileLadder(max=sorted_vals[-1], **values)


def summarize_result(result: DestinationResult) -> DestinationSummary:
    """Summarize one destination.  Only hit latencies feed the ladder."""
    summary = DestinationSummary(
        name=result.name,
        url=result.destination.url,
        hit_count=result.hit_count,
        miss_count=result.miss_count,
        total=result.total,
        failed_status=result.failed_status,
        error=result.error,
    )
    if result.total == 0:
        summary.status = "no_data"
        return summary

    summary.hit_ratio_percent = hit_ratio_percent(result.hit_count, result.total)
    if result.hit_count == 0:
        summary.status = "no_result"
        return summary

    summary.ladder = compute_ladder(result.hit_latencies)
    summary.status = "ok"
    return summary


def summarize(result_set: ResultSet, sort: Optional[str] = None) -> list[DestinationSummary]:
    """Summarize every destination in *result_set*.

    Summaries come back in probe order unless *sort* is ``"name"`` or
    ``"p50"`` (median hit latency, destinations without hits last).
    """
    summaries = [summarize_result(r) for r in result_set]

    if sort == "name":
        summaries.sort(key=lambda s: s.name)
    elif sort == "p50":
        summaries.sort(key=lambda s: s.ladder.p50 if s.ladder else math.inf)
    elif sort not in (None, "input"):
        raise ValueError(f"Unknown sort order: {sort!r}")

    return summaries
