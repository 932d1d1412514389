"""
Views Module
============

Read-side views over the hosted backend: leaderboard, personal statistics,
achievements and plank details.

A failed read adds a notification and leaves the view's previous state in
place. Reads are never retried automatically.
"""

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..backend import Backend, BackendError, Badge, IdentitySummary, Profile, SessionRecord
from ..core import (
    RankingEntry,
    RankSummary,
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
from .notifications import Notifier

logger = logging.getLogger(__name__)


@dataclass
class LeaderboardRow:
    user_id: str
    full_name: str
    profile_image: str
    value: int
    rank: int

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "full_name": self.full_name,
            "profile_image": self.profile_image,
            "value": self.value,
            "time": format_time(self.value),
            "rank": self.rank,
        }


def _with_profiles(entries: List[RankingEntry], profiles: dict) -> List[LeaderboardRow]:
    rows = []
    for entry in entries:
        profile = profiles.get(entry.user_id) or Profile(user_id=entry.user_id)
        rows.append(LeaderboardRow(
            user_id=entry.user_id,
            full_name=profile.full_name or "Unknown",
            profile_image=profile.profile_image or "",
            value=entry.value,
            rank=entry.rank,
        ))
    return rows


class LeaderboardView:
    """
    Rolling-window leaderboard, best single plank and total time.

    Attributes:
        best (list): Rows ranked by longest single plank
        total (list): Rows ranked by summed plank time
        loading (bool): Whether a refresh is in flight
    """

    def __init__(self, backend: Backend, window_days: int = 30,
                 today: Callable[[], dt.date] = dt.date.today):
        self.backend = backend
        self.window_days = window_days
        self.today = today
        self.best: List[LeaderboardRow] = []
        self.total: List[LeaderboardRow] = []
        self.loading = False

    def refresh(self, notifier: Notifier) -> bool:
        """
        Reload both rankings.

        Returns:
            True on success; on failure the previous rows are kept
        """
        self.loading = True
        try:
            today = self.today()
            records = within_window(
                self.backend.fetch_sessions_since(window_cutoff(today, self.window_days)),
                today,
                self.window_days,
            )
            best = aggregate_by_best(records)
            total = aggregate_by_total(records)
            profiles = self.backend.fetch_profiles(e.user_id for e in total)
        except BackendError as e:
            logger.error("Could not load leaderboard: %s", e)
            notifier.error("Could not load leaderboard.")
            return False
        finally:
            self.loading = False

        self.best = _with_profiles(best, profiles)
        self.total = _with_profiles(total, profiles)
        return True

    def to_dict(self) -> dict:
        return {
            "window_days": self.window_days,
            "best": [row.to_dict() for row in self.best],
            "total": [row.to_dict() for row in self.total],
        }


class UserStatsView:
    """
    Personal statistics of one identity.

    Attributes:
        stats (IdentitySummary): Backend-maintained summary
        rank (RankSummary): Position in the rolling by-total ranking
    """

    def __init__(self, backend: Backend, window_days: int = 30,
                 today: Callable[[], dt.date] = dt.date.today):
        self.backend = backend
        self.window_days = window_days
        self.today = today
        self.stats = IdentitySummary()
        self.rank = RankSummary(rank=None, percentile=None, total=0)
        self.loading = False

    def refresh(self, user_id: str, notifier: Notifier) -> bool:
        self.loading = True
        ok = True
        try:
            stats = self.backend.fetch_user_stats(user_id)
            self.stats = stats if stats is not None else IdentitySummary()
        except BackendError as e:
            logger.error("Could not load statistics for %s: %s", user_id, e)
            notifier.error("Could not load statistics.")
            ok = False

        try:
            today = self.today()
            records = within_window(
                self.backend.fetch_sessions_since(window_cutoff(today, self.window_days)),
                today,
                self.window_days,
            )
            self.rank = rank_and_percentile(records, user_id)
        except BackendError as e:
            logger.error("Could not load 30-day ranking for %s: %s", user_id, e)
            notifier.error("Could not load 30-day ranking.")
            ok = False
        finally:
            self.loading = False
        return ok

    @property
    def streak_message(self) -> str:
        return "Impressive streak!" if self.stats.current_streak > 5 else "Keep it up!"

    def to_dict(self) -> dict:
        return {
            "current_streak": self.stats.current_streak,
            "streak_message": self.streak_message,
            "best_time_seconds": self.stats.best_time_seconds,
            "best_time": format_time(self.stats.best_time_seconds),
            "best_time_date": format_day_month(self.stats.best_time_date),
            "total_planks": self.stats.total_planks,
            "monthly_rank": self.rank.rank,
            "monthly_rank_text": f"#{self.rank.rank}" if self.rank.ranked else "–",
            "monthly_percentile": self.rank.percentile,
            "monthly_percentile_text": format_percentile(self.rank.percentile),
        }


class AchievementView:
    """Badges of one identity with earned state and progress."""

    def __init__(self, backend: Backend):
        self.backend = backend
        self.badges: List[Badge] = []
        self.loading = False

    def refresh(self, user_id: str, notifier: Notifier) -> bool:
        self.loading = True
        try:
            self.badges = self.backend.fetch_badges(user_id)
        except BackendError as e:
            logger.error("Could not load badges for %s: %s", user_id, e)
            notifier.error("Could not load badges")
            return False
        finally:
            self.loading = False
        return True

    def to_dict(self) -> dict:
        badges = []
        for badge in self.badges:
            item = {
                "id": badge.id,
                "name": badge.name,
                "icon": badge.icon,
                "description": badge.description,
                "earned": badge.earned,
                "progress": badge.progress,
                "max_progress": badge.max_progress,
                "progress_percent": badge.progress_percent,
                "earned_on": None,
                "progress_text": None,
            }
            if badge.earned:
                item["earned_on"] = format_long_date(badge.earned_at.date())
            elif badge.max_progress > 0:
                item["progress_text"] = f"Progress: {badge.progress}/{badge.max_progress}"
            badges.append(item)
        return {"badges": badges}


@dataclass
class SessionDetail:
    session: SessionRecord
    author: Profile
    photo_urls: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.session.id,
            "user_id": self.session.user_id,
            "duration_s": self.session.duration,
            "time": format_time(self.session.duration),
            "author": {
                "full_name": self.author.full_name,
                "profile_image": self.author.profile_image,
            },
            "photos": list(self.photo_urls),
        }


class SessionDetailView:
    """One saved plank with its author and evidence photos."""

    def __init__(self, backend: Backend):
        self.backend = backend

    def load(self, session_id: int, notifier: Notifier) -> Optional[SessionDetail]:
        try:
            session = self.backend.fetch_session(session_id)
        except BackendError as e:
            logger.error("Error loading plank %s: %s", session_id, e)
            session = None
        if session is None:
            notifier.error("Could not load plank details.")
            return None

        try:
            author = self.backend.fetch_profile(session.user_id)
        except BackendError as e:
            logger.error("Error loading author %s: %s", session.user_id, e)
            author = None
        if author is None:
            notifier.error("Could not load author details.")
            return None

        urls = []
        for path in session.photos:
            try:
                urls.append(self.backend.public_url(path))
            except BackendError as e:
                logger.error("Could not get public URL for %s: %s", path, e)
        return SessionDetail(session=session, author=author, photo_urls=urls)
