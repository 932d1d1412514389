"""
Services Module
===============

Session lifecycle, recording and read-side views.
"""

from .notifications import Notification, Notifier
from .recorder import RecordResult, SessionRecorder
from .session import SessionController, SessionRegistry, SessionTicker
from .views import (
    AchievementView,
    LeaderboardView,
    SessionDetailView,
    UserStatsView,
)

__all__ = [
    "Notification",
    "Notifier",
    "RecordResult",
    "SessionRecorder",
    "SessionController",
    "SessionRegistry",
    "SessionTicker",
    "AchievementView",
    "LeaderboardView",
    "SessionDetailView",
    "UserStatsView",
]
