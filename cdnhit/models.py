"""Data models for cdnhit."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

from cdnhit.config import (
    DEFAULT_DELAY_MS,
    DEFAULT_REQUEST_HEADERS,
    DEFAULT_REQUESTS,
    DEFAULT_SETTINGS_PATH,
    DEFAULT_TIMEOUT,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Destination:
    """One probe target with its cache-detection rule."""

    name: str
    url: str
    cache_header_key: str
    cache_expected_hit_value: str


@dataclass
class ProbeOutcome:
    """Result of a single timed request."""

    index: int
    status_code: int
    cache_hit: bool
    elapsed_ms: float
    cache_header_value: Optional[str] = None  # None if absent or undecodable


@dataclass
class DestinationResult:
    """Latency samples collected for one destination, split by cache outcome."""

    destination: Destination
    hit_latencies: list[float] = field(default_factory=list)
    miss_latencies: list[float] = field(default_factory=list)
    requests_attempted: int = 0
    failed_status: Optional[int] = None  # Status that stopped sampling
    error: Optional[str] = None  # Isolated transport error

    @property
    def name(self) -> str:
        return self.destination.name

    @property
    def hit_count(self) -> int:
        return len(self.hit_latencies)

    @property
    def miss_count(self) -> int:
        return len(self.miss_latencies)

    @property
    def total(self) -> int:
        return self.hit_count + self.miss_count

    def record(self, outcome: ProbeOutcome) -> None:
        if outcome.cache_hit:
            self.hit_latencies.append(outcome.elapsed_ms)
        else:
            self.miss_latencies.append(outcome.elapsed_ms)


class ResultSet:
    """Insertion-ordered mapping of destination name to its result.

    Adding a result under a name that is already present replaces the
    earlier result but keeps its position.
    """

    def __init__(self) -> None:
        self._results: dict[str, DestinationResult] = {}

    def add(self, result: DestinationResult) -> None:
        if result.name in self._results:
            logger.warning(
                "Duplicate destination name %r: earlier results replaced", result.name,
            )
        self._results[result.name] = result

    def __getitem__(self, name: str) -> DestinationResult:
        return self._results[name]

    def __contains__(self, name: object) -> bool:
        return name in self._results

    def __iter__(self) -> Iterator[DestinationResult]:
        return iter(self._results.values())

    def __len__(self) -> int:
        return len(self._results)

    def names(self) -> list[str]:
        return list(self._results)


@dataclass
class PercentileLadder:
    """Hit latency percentiles in milliseconds."""

    p50: float
    p75: float
    p90: float
    p95: float
    p98: float
    max: float

    def as_dict(self) -> dict[str, float]:
        return {
            "p50": self.p50,
            "p75": self.p75,
            "p90": self.p90,
            "p95": self.p95,
            "p98": self.p98,
            "max": self.max,
        }


@dataclass
class DestinationSummary:
    """Aggregated statistics for one destination."""

    name: str
    url: str
    hit_count: int = 0
    miss_count: int = 0
    total: int = 0
    hit_ratio_percent: Optional[int] = None  # None when there is no data
    ladder: Optional[PercentileLadder] = None  # None unless there are hits
    status: str = "no_data"  # ok | no_result | no_data
    failed_status: Optional[int] = None
    error: Optional[str] = None


@dataclass
class ProbeConfig:
    """Configuration for a probe run."""

    settings_path: str = DEFAULT_SETTINGS_PATH
    requests: int = DEFAULT_REQUESTS  # Requests per destination
    delay_ms: int = DEFAULT_DELAY_MS  # Pause between requests
    timeout: float = DEFAULT_TIMEOUT  # Per-request timeout in seconds
    headers: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_REQUEST_HEADERS))
    http2: bool = False
    isolate_transport_errors: bool = False  # Continue with next destination
    sort: str = "input"  # input | name | p50
    verbose: bool = False
    quiet: bool = False
    show_headers: bool = False
    json_output: bool = False
    csv_output: bool = False


@dataclass
class FullResult:
    """Complete probe run results."""

    summaries: list[DestinationSummary] = field(default_factory=list)
    config: Optional[ProbeConfig] = None
    timestamp: Optional[str] = None
