"""
Supabase Backend
================

Backend adapter for a Supabase project (PostgREST tables, storage bucket
and auth). Every client failure is re-raised as ``BackendError``.

The configured key must be allowed to write the sessions table on behalf of
users (service role key on the server).
"""

import datetime as dt
import logging
from contextlib import contextmanager
from typing import Dict, Iterable, List, Optional

from supabase import Client, create_client

from .base import (
    Backend,
    BackendError,
    Badge,
    IdentitySummary,
    Profile,
    SessionRecord,
    User,
)

logger = logging.getLogger(__name__)

_BADGE_COLUMNS = (
    "id, name, icon_url, description, criteria, "
    "user_badges!inner(progress, max_progress, earned_at, user_id)"
)


def _parse_date(value: Optional[str]) -> Optional[dt.date]:
    if not value:
        return None
    return dt.date.fromisoformat(value[:10])


def _parse_datetime(value: Optional[str]) -> Optional[dt.datetime]:
    if not value:
        return None
    return dt.datetime.fromisoformat(value.replace("Z", "+00:00"))


def _session_from_row(row: dict) -> SessionRecord:
    return SessionRecord(
        id=row["id"],
        user_id=row["user_id"],
        duration=int(row["duration_s"]),
        day=_parse_date(row.get("plank_date")),
        photos=list(row.get("photos") or []),
    )


@contextmanager
def _calling(action: str):
    try:
        yield
    except BackendError:
        raise
    except Exception as e:
        logger.error("Supabase call failed (%s): %s", action, e)
        raise BackendError(f"{action} failed: {e}") from e


class SupabaseBackend(Backend):
    """
    Backend talking to Supabase through the ``supabase`` client.

    Attributes:
        client: Supabase client
    """

    def __init__(self, url: str, key: str, sessions_table: str = "planks",
                 profiles_table: str = "profiles", stats_table: str = "user_stats",
                 badges_table: str = "badges", photo_bucket: str = "plank-photos",
                 client: Optional[Client] = None):
        if client is None:
            if not url or not key:
                raise BackendError("SUPABASE_URL and SUPABASE_KEY must be set")
            client = create_client(url, key)
        self.client = client
        self.sessions_table = sessions_table
        self.profiles_table = profiles_table
        self.stats_table = stats_table
        self.badges_table = badges_table
        self.photo_bucket = photo_bucket

    @classmethod
    def from_config(cls, config) -> "SupabaseBackend":
        return cls(
            url=config.url,
            key=config.key,
            sessions_table=config.sessions_table,
            profiles_table=config.profiles_table,
            stats_table=config.stats_table,
            badges_table=config.badges_table,
            photo_bucket=config.photo_bucket,
        )

    def get_user(self, access_token: Optional[str]) -> Optional[User]:
        if not access_token:
            return None
        with _calling("get user"):
            res = self.client.auth.get_user(access_token)
        if res is None or res.user is None:
            return None
        return User(id=res.user.id, email=res.user.email)

    def insert_session(self, user_id: str, duration: int) -> SessionRecord:
        with _calling("insert session"):
            res = (
                self.client.table(self.sessions_table)
                .insert({"user_id": user_id, "duration_s": duration})
                .execute()
            )
        if not res.data:
            raise BackendError("insert session returned no row")
        return _session_from_row(res.data[0])

    def update_session_photos(self, session_id: int, paths: List[str]) -> None:
        with _calling("update session photos"):
            (
                self.client.table(self.sessions_table)
                .update({"photos": paths})
                .eq("id", session_id)
                .execute()
            )

    def upload_photo(self, name: str, data: bytes, content_type: str = "image/png") -> str:
        with _calling("upload photo"):
            res = self.client.storage.from_(self.photo_bucket).upload(
                path=name,
                file=data,
                file_options={
                    "cache-control": "3600",
                    "upsert": "false",
                    "content-type": content_type,
                },
            )
        return res.path

    def public_url(self, path: str) -> str:
        with _calling("public url"):
            return self.client.storage.from_(self.photo_bucket).get_public_url(path)

    def fetch_sessions_since(self, cutoff: dt.date) -> List[SessionRecord]:
        with _calling("fetch sessions"):
            res = (
                self.client.table(self.sessions_table)
                .select("id, user_id, duration_s, plank_date")
                .gte("plank_date", cutoff.isoformat())
                .execute()
            )
        return [_session_from_row(row) for row in res.data or []]

    def fetch_session(self, session_id: int) -> Optional[SessionRecord]:
        with _calling("fetch session"):
            res = (
                self.client.table(self.sessions_table)
                .select("id, user_id, duration_s, plank_date, photos")
                .eq("id", session_id)
                .limit(1)
                .execute()
            )
        if not res.data:
            return None
        return _session_from_row(res.data[0])

    def fetch_profiles(self, user_ids: Iterable[str]) -> Dict[str, Profile]:
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return {}
        with _calling("fetch profiles"):
            res = (
                self.client.table(self.profiles_table)
                .select("id, full_name, profile_image")
                .in_("id", ids)
                .execute()
            )
        return {
            row["id"]: Profile(
                user_id=row["id"],
                full_name=row.get("full_name") or "Unknown",
                profile_image=row.get("profile_image") or "",
            )
            for row in res.data or []
        }

    def fetch_user_stats(self, user_id: str) -> Optional[IdentitySummary]:
        with _calling("fetch user stats"):
            res = (
                self.client.table(self.stats_table)
                .select("current_streak, best_time_seconds, best_time_date, total_planks")
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            )
        if not res.data:
            return None
        row = res.data[0]
        return IdentitySummary(
            current_streak=row.get("current_streak") or 0,
            best_time_seconds=row.get("best_time_seconds") or 0,
            best_time_date=_parse_date(row.get("best_time_date")),
            total_planks=row.get("total_planks") or 0,
        )

    def fetch_badges(self, user_id: str) -> List[Badge]:
        with _calling("fetch badges"):
            res = (
                self.client.table(self.badges_table)
                .select(_BADGE_COLUMNS)
                .eq("user_badges.user_id", user_id)
                .execute()
            )
        badges = []
        for row in res.data or []:
            progress_rows = row.get("user_badges") or []
            if not progress_rows:
                continue
            progress = progress_rows[0]
            badges.append(Badge(
                id=row["id"],
                user_id=progress.get("user_id", user_id),
                name=row.get("name", ""),
                icon=row.get("icon_url") or "",
                description=row.get("description") or "",
                progress=progress.get("progress") or 0,
                max_progress=progress.get("max_progress") or 0,
                earned_at=_parse_datetime(progress.get("earned_at")),
            ))
        return badges
