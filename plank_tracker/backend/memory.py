"""
In-Memory Backend
=================

Process-local backend for development and tests. Data lives in dicts and is
lost on restart. Failures can be injected per operation.

Usage:
    backend = InMemoryBackend()
    backend.add_user("token-1", "alice")
    backend.fail("upload_photo", times=2)
"""

import datetime as dt
import itertools
import threading
from typing import Callable, Dict, Iterable, List, Optional

from .base import (
    Backend,
    BackendError,
    Badge,
    IdentitySummary,
    Profile,
    SessionRecord,
    User,
)


class InMemoryBackend(Backend):
    """Dict-backed backend with failure injection."""

    def __init__(self, today: Callable[[], dt.date] = dt.date.today,
                 public_base_url: str = "memory://plank-photos/"):
        self.today = today
        self.public_base_url = public_base_url
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self.users: Dict[str, User] = {}
        self.sessions: Dict[int, SessionRecord] = {}
        self.profiles: Dict[str, Profile] = {}
        self.stats: Dict[str, IdentitySummary] = {}
        self.badges: List[Badge] = []
        self.photos: Dict[str, bytes] = {}
        self._failures: Dict[str, Optional[int]] = {}

    # -- seeding -----------------------------------------------------------

    def add_user(self, access_token: str, user_id: str, email: Optional[str] = None) -> User:
        user = User(id=user_id, email=email)
        self.users[access_token] = user
        return user

    def add_session(self, user_id: str, duration: int,
                    day: Optional[dt.date] = None) -> SessionRecord:
        with self._lock:
            record = SessionRecord(
                id=next(self._ids),
                user_id=user_id,
                duration=duration,
                day=day or self.today(),
            )
            self.sessions[record.id] = record
        return record

    def add_profile(self, user_id: str, full_name: str, profile_image: str = "") -> Profile:
        profile = Profile(user_id=user_id, full_name=full_name, profile_image=profile_image)
        self.profiles[user_id] = profile
        return profile

    def set_stats(self, user_id: str, summary: IdentitySummary) -> None:
        self.stats[user_id] = summary

    def add_badge(self, badge: Badge) -> None:
        self.badges.append(badge)

    def fail(self, operation: str, times: Optional[int] = None) -> None:
        """
        Make an operation raise BackendError.

        Args:
            operation: Method name, e.g. ``"upload_photo"``
            times: Number of calls that fail, None for every call
        """
        self._failures[operation] = times

    def _check(self, operation: str) -> None:
        if operation not in self._failures:
            return
        remaining = self._failures[operation]
        if remaining is not None:
            if remaining <= 1:
                del self._failures[operation]
            else:
                self._failures[operation] = remaining - 1
        raise BackendError(f"{operation} failed")

    # -- Backend -----------------------------------------------------------

    def get_user(self, access_token: Optional[str]) -> Optional[User]:
        self._check("get_user")
        if not access_token:
            return None
        return self.users.get(access_token)

    def insert_session(self, user_id: str, duration: int) -> SessionRecord:
        self._check("insert_session")
        return self.add_session(user_id, duration)

    def update_session_photos(self, session_id: int, paths: List[str]) -> None:
        self._check("update_session_photos")
        with self._lock:
            record = self.sessions.get(session_id)
            if record is None:
                raise BackendError(f"session {session_id} not found")
            record.photos = list(paths)

    def upload_photo(self, name: str, data: bytes, content_type: str = "image/png") -> str:
        self._check("upload_photo")
        with self._lock:
            if name in self.photos:
                raise BackendError(f"{name} already exists")
            self.photos[name] = data
        return name

    def public_url(self, path: str) -> str:
        self._check("public_url")
        return self.public_base_url + path

    def fetch_sessions_since(self, cutoff: dt.date) -> List[SessionRecord]:
        self._check("fetch_sessions_since")
        with self._lock:
            return [r for r in self.sessions.values() if r.day is None or r.day >= cutoff]

    def fetch_session(self, session_id: int) -> Optional[SessionRecord]:
        self._check("fetch_session")
        return self.sessions.get(session_id)

    def fetch_profiles(self, user_ids: Iterable[str]) -> Dict[str, Profile]:
        self._check("fetch_profiles")
        return {uid: self.profiles[uid] for uid in user_ids if uid in self.profiles}

    def fetch_user_stats(self, user_id: str) -> Optional[IdentitySummary]:
        self._check("fetch_user_stats")
        return self.stats.get(user_id)

    def fetch_badges(self, user_id: str) -> List[Badge]:
        self._check("fetch_badges")
        return [b for b in self.badges if b.user_id == user_id]
