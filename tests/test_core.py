"""
Unit tests for core modules.

Tests for time formatting and the ranking aggregator.
"""

import pytest
import sys
import os
import datetime as dt

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from plank_tracker.backend import SessionRecord
from plank_tracker.core import (
    aggregate_by_best,
    aggregate_by_total,
    format_day_month,
    format_long_date,
    format_percentile,
    format_time,
    rank_and_percentile,
    window_cutoff,
    within_window,
)

TODAY = dt.date(2026, 10, 19)


def _records(*pairs):
    return [SessionRecord(id=i, user_id=u, duration=d) for i, (u, d) in enumerate(pairs, start=1)]


class TestFormatting:
    """Test suite for display formatting."""

    @pytest.mark.parametrize("seconds, expected", [
        (0, "0:00"),
        (5, "0:05"),
        (65, "1:05"),
        (599, "9:59"),
        (3600, "60:00"),
    ])
    def test_format_time(self, seconds, expected):
        """Test minutes:seconds formatting with zero-padded seconds."""
        assert format_time(seconds) == expected

    def test_format_time_rejects_negative(self):
        """Test that a negative duration is rejected."""
        with pytest.raises(ValueError):
            format_time(-1)

    def test_dates(self):
        """Test day-month and long date formatting."""
        assert format_day_month(TODAY) == "October 19"
        assert format_long_date(TODAY) == "October 19, 2026"
        assert format_day_month(None) == "–"

    def test_percentile_text(self):
        """Test percentile rounding for display."""
        assert format_percentile(25.0) == "Within top 25%"
        assert format_percentile(100 / 3) == "Within top 33%"
        assert format_percentile(12.5) == "Within top 13%"
        assert format_percentile(62.5) == "Within top 63%"
        assert format_percentile(None) == "–"


class TestRanking:
    """Test suite for the ranking aggregator."""

    def test_total_sums_durations(self):
        """Test that per-identity totals add up to all input durations."""
        records = _records(("a", 30), ("b", 90), ("a", 45), ("c", 10), ("b", 5))
        entries = aggregate_by_total(records)
        assert sum(e.value for e in entries) == sum(r.duration for r in records)
        assert [(e.user_id, e.value) for e in entries] == [("b", 95), ("a", 75), ("c", 10)]

    def test_best_uses_longest_session(self):
        """Test that best ranking uses the maximum single duration."""
        records = _records(("a", 30), ("b", 60), ("a", 70), ("b", 65))
        entries = aggregate_by_best(records)
        assert [(e.user_id, e.value, e.rank) for e in entries] == [("a", 70, 1), ("b", 65, 2)]

    def test_ranks_are_permutation(self):
        """Test that ranks are exactly 1..N and follow descending value."""
        records = _records(*[(f"user{i}", i * 7 % 50) for i in range(20)])
        entries = aggregate_by_total(records)
        assert [e.rank for e in entries] == list(range(1, len(entries) + 1))
        values = [e.value for e in entries]
        assert values == sorted(values, reverse=True)

    def test_ties_break_by_identity(self):
        """Test that equal aggregates are ordered by identity ascending."""
        records = _records(("zoe", 60), ("adam", 60), ("mia", 60))
        entries = aggregate_by_total(records)
        assert [e.user_id for e in entries] == ["adam", "mia", "zoe"]
        assert [e.rank for e in entries] == [1, 2, 3]

    def test_empty_input(self):
        """Test that no records produce no entries."""
        assert aggregate_by_total([]) == []
        summary = rank_and_percentile([], "a")
        assert summary.rank is None and summary.percentile is None
        assert summary.total == 0

    def test_negative_duration_rejected(self):
        """Test that a negative duration is rejected."""
        with pytest.raises(ValueError):
            aggregate_by_total(_records(("a", -1)))

    def test_top_percentile(self):
        """Test that the top identity gets 100/N percent."""
        records = _records(("a", 100), ("b", 50), ("c", 20), ("d", 10))
        summary = rank_and_percentile(records, "a")
        assert summary.rank == 1
        assert summary.percentile == pytest.approx(25.0)

    def test_percentile_of_last(self):
        """Test that the last identity gets 100 percent."""
        records = _records(("a", 100), ("b", 50))
        summary = rank_and_percentile(records, "b")
        assert summary.rank == 2
        assert summary.percentile == pytest.approx(100.0)

    def test_unranked_identity(self):
        """Test that an identity without sessions is unranked."""
        summary = rank_and_percentile(_records(("a", 100)), "ghost")
        assert not summary.ranked
        assert summary.percentile is None
        assert summary.total == 1

    def test_window_cutoff_is_inclusive(self):
        """Test the trailing 30-day window boundaries."""
        assert window_cutoff(TODAY) == dt.date(2026, 9, 19)
        records = [
            SessionRecord(id=1, user_id="a", duration=10, day=dt.date(2026, 9, 19)),
            SessionRecord(id=2, user_id="a", duration=20, day=dt.date(2026, 9, 18)),
            SessionRecord(id=3, user_id="b", duration=30, day=TODAY),
        ]
        kept = within_window(records, TODAY)
        assert [r.id for r in kept] == [1, 3]


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
