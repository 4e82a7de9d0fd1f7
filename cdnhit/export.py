"""JSON and CSV export for probe summaries."""

from __future__ import annotations

import csv
import io
import json

from cdnhit.models import DestinationSummary, FullResult

LADDER_FIELDS = ["p50", "p75", "p90", "p95", "p98", "max"]


def export_json(result: FullResult, indent: int = 2) -> str:
    """Export full results as JSON string."""
    data = _build_export_dict(result)
    return json.dumps(data, indent=indent, default=str)


def export_csv(result: FullResult) -> str:
    """Export results as CSV string (one row per destination)."""
    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow([
        "timestamp",
        "name",
        "url",
        "status",
        "hits",
        "misses",
        "total",
        "hit_ratio_percent",
        *[f"{f}_ms" for f in LADDER_FIELDS],
        "failed_status",
        "error",
    ])

    for s in result.summaries:
        row = [
            result.timestamp or "",
            s.name,
            s.url,
            s.status,
            s.hit_count,
            s.miss_count,
            s.total,
            "" if s.hit_ratio_percent is None else s.hit_ratio_percent,
        ]
        if s.ladder:
            ladder = s.ladder.as_dict()
            row.extend(ladder[f] for f in LADDER_FIELDS)
        else:
            row.extend([""] * len(LADDER_FIELDS))
        row.extend([
            "" if s.failed_status is None else s.failed_status,
            s.error or "",
        ])
        writer.writerow(row)

    return output.getvalue()


def _build_export_dict(result: FullResult) -> dict:
    """Build a serializable dictionary from FullResult."""
    data: dict = {}

    if result.timestamp:
        data["timestamp"] = result.timestamp

    if result.config:
        data["config"] = {
            "requests": result.config.requests,
            "delay_ms": result.config.delay_ms,
            "timeout": result.config.timeout,
            "http2": result.config.http2,
            "headers": result.config.headers,
            "isolate_transport_errors": result.config.isolate_transport_errors,
        }

    data["destinations"] = [_summary_to_dict(s) for s in result.summaries]
    return data


def _summary_to_dict(s: DestinationSummary) -> dict:
    """Convert a DestinationSummary to a serializable dict."""
    return {
        "name": s.name,
        "url": s.url,
        "status": s.status,
        "hits": s.hit_count,
        "misses": s.miss_count,
        "total": s.total,
        "hit_ratio_percent": s.hit_ratio_percent,
        "latency_ms": s.ladder.as_dict() if s.ladder else None,
        "failed_status": s.failed_status,
        "error": s.error,
    }
