"""Tests for hit ratio and percentile computation."""

import logging

import pytest

from cdnhit.models import Destination, DestinationResult, ResultSet
from cdnhit.stats import (
    compute_ladder,
    hit_ratio_percent,
    percentile_index,
    summarize,
    summarize_result,
)


def _result(name="d", hits=(), misses=(), **kwargs) -> DestinationResult:
    return DestinationResult(
        destination=Destination(name, f"https://{name}.example.com/", "x-cache", "HIT"),
        hit_latencies=list(hits),
        miss_latencies=list(misses),
        **kwargs,
    )


class TestHitRatio:
    """Test truncating hit ratio."""

    @pytest.mark.parametrize(
        "hits,total,expected",
        [(5, 5, 100), (0, 7, 0), (2, 3, 66), (1, 3, 33), (199, 200, 99), (49, 50, 98)],
    )
    def test_truncates(self, hits, total, expected):
        """Test the ratio is floor(hits * 100 / total)."""
        assert hit_ratio_percent(hits, total) == expected

    def test_no_data(self):
        """Test zero total gives None."""
        assert hit_ratio_percent(0, 0) is None


class TestPercentileIndex:
    """Test nearest-rank-below indexing."""

    def test_median_of_four(self):
        """Test n=4, p=0.50 picks index 1."""
        assert percentile_index(4, "0.50") == 1

    def test_underflow(self):
        """Test n=1, p=0.50 yields -1 before clamping."""
        assert percentile_index(1, "0.50") == -1

    def test_exact_decimal(self):
        """Test 100 * 0.95 is not distorted by float rounding."""
        assert percentile_index(100, "0.95") == 94
        assert percentile_index(100, 0.95) == 94
        assert percentile_index(50, "0.98") == 48


class TestComputeLadder:
    """Test the percentile ladder."""

    def test_sorted_before_indexing(self):
        """Test unsorted input is sorted ascending first."""
        ladder = compute_ladder([40.0, 10.0, 30.0, 20.0])
        assert ladder.p50 == 20.0
        assert ladder.p75 == 30.0
        assert ladder.p90 == 30.0
        assert ladder.max == 40.0

    def test_hundred_samples(self):
        """Test each rung on 1..100 ms."""
        ladder = compute_ladder([float(v) for v in range(100, 0, -1)])
        assert (ladder.p50, ladder.p75, ladder.p90, ladder.p95, ladder.p98, ladder.max) == (
            50.0, 75.0, 90.0, 95.0, 98.0, 100.0,
        )

    def test_single_sample_clamped(self):
        """Test a negative index is clamped to the smallest sample."""
        ladder = compute_ladder([7.5])
        assert ladder.as_dict() == {
            "p50": 7.5, "p75": 7.5, "p90": 7.5, "p95": 7.5, "p98": 7.5, "max": 7.5,
        }

    def test_two_samples(self):
        """Test n=2: p50 index 0, p98 index 0, max index 1."""
        ladder = compute_ladder([5.0, 9.0])
        assert ladder.p50 == 5.0
        assert ladder.p98 == 5.0
        assert ladder.max == 9.0

    def test_empty(self):
        """Test no samples gives no ladder."""
        assert compute_ladder([]) is None


class TestSummarize:
    """Test per-destination summaries."""

    def test_no_data(self):
        """Test a destination without samples reports no data."""
        summary = summarize_result(_result(failed_status=503))
        assert summary.status == "no_data"
        assert summary.hit_ratio_percent is None
        assert summary.ladder is None
        assert summary.failed_status == 503

    def test_no_result(self):
        """Test misses only: ratio 0 and no ladder."""
        summary = summarize_result(_result(misses=[1.0, 2.0]))
        assert summary.status == "no_result"
        assert summary.hit_ratio_percent == 0
        assert summary.ladder is None

    def test_misses_excluded_from_ladder(self):
        """Test percentiles use hit latencies only."""
        summary = summarize_result(_result(hits=[100.0, 200.0], misses=[1.0, 2.0, 3.0]))
        assert summary.status == "ok"
        assert summary.total == 5
        assert summary.hit_ratio_percent == 40
        assert summary.ladder.p50 == 100.0
        assert summary.ladder.max == 200.0

    def test_input_order(self):
        """Test summaries follow result set insertion order by default."""
        results = ResultSet()
        for name in ("zeta", "alpha", "mid"):
            results.add(_result(name, hits=[1.0]))
        assert [s.name for s in summarize(results)] == ["zeta", "alpha", "mid"]

    def test_sort_by_name(self):
        """Test sorting by destination name."""
        results = ResultSet()
        for name in ("zeta", "alpha", "mid"):
            results.add(_result(name, hits=[1.0]))
        assert [s.name for s in summarize(results, sort="name")] == ["alpha", "mid", "zeta"]

    def test_sort_by_p50(self):
        """Test sorting by median hit latency with no-hit destinations last."""
        results = ResultSet()
        results.add(_result("slow", hits=[90.0, 95.0]))
        results.add(_result("none", misses=[1.0]))
        results.add(_result("fast", hits=[10.0, 12.0]))
        assert [s.name for s in summarize(results, sort="p50")] == ["fast", "slow", "none"]

    def test_unknown_sort(self):
        """Test an unknown sort order is rejected."""
        with pytest.raises(ValueError):
            summarize(ResultSet(), sort="latency")


class TestResultSet:
    """Test result set bookkeeping."""

    def test_duplicate_replaces_in_place(self, caplog):
        """Test a duplicate name overwrites but keeps the first position."""
        results = ResultSet()
        with caplog.at_level(logging.WARNING, logger="cdnhit.models"):
            results.add(_result("a", hits=[1.0]))
            results.add(_result("b", hits=[2.0]))
            results.add(_result("a", hits=[3.0]))
        assert results.names() == ["a", "b"]
        assert results["a"].hit_latencies == [3.0]
        assert "Duplicate destination name" in caplog.text

    def test_lookup_by_name(self):
        """Test names are looked up with [] and `in`; unknown names raise KeyError."""
        results = ResultSet()
        results.add(_result("a", hits=[1.0]))
        assert "a" in results
        assert "b" not in results
        assert results["a"].hit_count == 1
        with pytest.raises(KeyError):
            results["b"]
