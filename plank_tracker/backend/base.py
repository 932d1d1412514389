"""
Backend Interface
=================

Records exchanged with the hosted backend and the interface every
backend adapter implements.
"""

import datetime as dt
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..core.errors import PlankTrackerError


class BackendError(PlankTrackerError):
    """A call to the hosted backend failed."""


@dataclass
class User:
    """Authenticated identity."""
    id: str
    email: Optional[str] = None


@dataclass
class SessionRecord:
    """One saved plank session."""
    id: int
    user_id: str
    duration: int
    day: Optional[dt.date] = None
    photos: List[str] = field(default_factory=list)


@dataclass
class Profile:
    """Public profile of an identity."""
    user_id: str
    full_name: str = "Unknown"
    profile_image: str = ""


@dataclass
class IdentitySummary:
    """Per-identity statistics maintained by the backend."""
    current_streak: int = 0
    best_time_seconds: int = 0
    best_time_date: Optional[dt.date] = None
    total_planks: int = 0


@dataclass
class Badge:
    """Badge definition joined with one identity's progress."""
    id: int
    user_id: str
    name: str
    icon: str = ""
    description: str = ""
    progress: int = 0
    max_progress: int = 0
    earned_at: Optional[dt.datetime] = None

    @property
    def earned(self) -> bool:
        return self.earned_at is not None

    @property
    def progress_percent(self) -> float:
        if not self.max_progress:
            return 0.0
        return min(100.0, self.progress / self.max_progress * 100)


class Backend(ABC):
    """Request/response operations the plank tracker needs from its backend."""

    @abstractmethod
    def get_user(self, access_token: Optional[str]) -> Optional[User]:
        """Resolve an access token to a user, None when not logged in."""

    @abstractmethod
    def insert_session(self, user_id: str, duration: int) -> SessionRecord:
        """Create a session row and return it with its id."""

    @abstractmethod
    def update_session_photos(self, session_id: int, paths: List[str]) -> None:
        """Replace the evidence image list of a session."""

    @abstractmethod
    def upload_photo(self, name: str, data: bytes, content_type: str = "image/png") -> str:
        """Store an image blob and return its storage path."""

    @abstractmethod
    def public_url(self, path: str) -> str:
        """Public URL of a stored image."""

    @abstractmethod
    def fetch_sessions_since(self, cutoff: dt.date) -> List[SessionRecord]:
        """All sessions dated on or after ``cutoff``, every identity."""

    @abstractmethod
    def fetch_session(self, session_id: int) -> Optional[SessionRecord]:
        """One session, None if it does not exist."""

    @abstractmethod
    def fetch_profiles(self, user_ids: Iterable[str]) -> Dict[str, Profile]:
        """Profiles keyed by identity; unknown identities are left out."""

    def fetch_profile(self, user_id: str) -> Optional[Profile]:
        return self.fetch_profiles([user_id]).get(user_id)

    @abstractmethod
    def fetch_user_stats(self, user_id: str) -> Optional[IdentitySummary]:
        """Summary row of an identity, None if it has none yet."""

    @abstractmethod
    def fetch_badges(self, user_id: str) -> List[Badge]:
        """Badges an identity has progress on."""
