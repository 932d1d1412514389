"""
Time Formatting
===============

Display helpers shared by every view.
"""

import datetime as dt
import math
from typing import Optional


def format_time(seconds: int) -> str:
    """
    Format a duration as ``M:SS``.

    Minutes are never wrapped into hours, so one hour renders as ``60:00``.

    Args:
        seconds: Duration in whole seconds

    Returns:
        Display string with zero-padded seconds
    """
    seconds = int(seconds)
    if seconds < 0:
        raise ValueError(f"duration must be non-negative, got {seconds}")
    minutes, rest = divmod(seconds, 60)
    return f"{minutes}:{rest:02d}"


def format_day_month(day: Optional[dt.date]) -> str:
    """Format a date as ``October 19``; ``–`` when absent."""
    if day is None:
        return "–"
    return f"{day.strftime('%B')} {day.day}"


def format_long_date(day: Optional[dt.date]) -> str:
    """Format a date as ``October 19, 2026``; ``–`` when absent."""
    if day is None:
        return "–"
    return f"{day.strftime('%B')} {day.day}, {day.year}"


def format_percentile(percentile: Optional[float]) -> str:
    """Format a leaderboard percentile for display, rounding halves up."""
    if percentile is None:
        return "–"
    return f"Within top {math.floor(percentile + 0.5)}%"
