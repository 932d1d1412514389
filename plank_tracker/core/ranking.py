"""
Ranking Aggregator
==================

Groups session records by identity and ranks the identities.

Functions here are pure: they work on any iterable of objects exposing
``user_id`` and ``duration`` (and optionally ``day``), whatever produced them.

Usage:
    entries = aggregate_by_total(records)
    summary = rank_and_percentile(records, user_id)
"""

import datetime as dt
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

DEFAULT_WINDOW_DAYS = 30


@dataclass(frozen=True)
class RankingEntry:
    """One ranked identity. Derived, never persisted."""
    user_id: str
    value: int
    rank: int


@dataclass(frozen=True)
class RankSummary:
    """Rank of one identity among all ranked identities."""
    rank: Optional[int]
    percentile: Optional[float]
    total: int

    @property
    def ranked(self) -> bool:
        return self.rank is not None


def window_cutoff(today: dt.date, days: int = DEFAULT_WINDOW_DAYS) -> dt.date:
    """Return the first day (inclusive) of the trailing window."""
    return today - dt.timedelta(days=days)


def within_window(records: Iterable, today: dt.date,
                  days: int = DEFAULT_WINDOW_DAYS) -> list:
    """Keep records dated on or after the window cutoff."""
    cutoff = window_cutoff(today, days)
    return [r for r in records if getattr(r, "day", None) is None or r.day >= cutoff]


def _group(records: Iterable) -> Dict[str, List[int]]:
    groups: Dict[str, List[int]] = {}
    for record in records:
        duration = int(record.duration)
        if duration < 0:
            raise ValueError(f"negative duration for {record.user_id}: {duration}")
        groups.setdefault(record.user_id, []).append(duration)
    return groups


def _rank(records: Iterable, reducer: Callable[[List[int]], int]) -> List[RankingEntry]:
    groups = _group(records)
    # ties fall back to identity ascending
    ordered = sorted(
        ((user_id, reducer(durations)) for user_id, durations in groups.items()),
        key=lambda item: (-item[1], item[0]),
    )
    return [
        RankingEntry(user_id=user_id, value=value, rank=position)
        for position, (user_id, value) in enumerate(ordered, start=1)
    ]


def aggregate_by_total(records: Iterable) -> List[RankingEntry]:
    """
    Rank identities by the sum of their durations.

    Args:
        records: Session records already limited to the ranking window

    Returns:
        Entries sorted by descending total, ranks 1..N
    """
    return _rank(records, sum)


def aggregate_by_best(records: Iterable) -> List[RankingEntry]:
    """Rank identities by their longest single session."""
    return _rank(records, max)


def rank_and_percentile(records: Iterable, user_id: str) -> RankSummary:
    """
    Locate one identity in the by-total ranking.

    Args:
        records: Session records already limited to the ranking window
        user_id: Identity to look up

    Returns:
        RankSummary; rank and percentile are None when the identity
        has no session in the window
    """
    entries = aggregate_by_total(records)
    total = len(entries)
    for entry in entries:
        if entry.user_id == user_id:
            return RankSummary(
                rank=entry.rank,
                percentile=entry.rank / total * 100,
                total=total,
            )
    return RankSummary(rank=None, percentile=None, total=total)
