"""
Core Module
===========

Session timer, snapshot capture, ranking and formatting.
"""

from .errors import (
    PlankTrackerError,
    TimerError,
    AcknowledgementRequiredError,
    InvalidTargetError,
    InvalidTransitionError,
    CameraError,
)
from .formatting import format_time, format_day_month, format_long_date, format_percentile
from .ranking import (
    RankingEntry,
    RankSummary,
    aggregate_by_best,
    aggregate_by_total,
    rank_and_percentile,
    window_cutoff,
    within_window,
)
from .snapshots import SnapshotCapturer, encode_image
from .timer import SessionTimer, TimerMode, TimerState

__all__ = [
    "PlankTrackerError",
    "TimerError",
    "AcknowledgementRequiredError",
    "InvalidTargetError",
    "InvalidTransitionError",
    "CameraError",
    "format_time",
    "format_day_month",
    "format_long_date",
    "format_percentile",
    "RankingEntry",
    "RankSummary",
    "aggregate_by_best",
    "aggregate_by_total",
    "rank_and_percentile",
    "window_cutoff",
    "within_window",
    "SnapshotCapturer",
    "encode_image",
    "SessionTimer",
    "TimerMode",
    "TimerState",
]
