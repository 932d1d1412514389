"""
Session Recorder
================

Saves a completed plank session and its evidence photos.

Steps, in order:
    1. resolve the logged-in user (abort if none)
    2. insert the session row (abort on failure)
    3. upload each snapshot; failures are reported one by one
    4. attach the uploaded paths to the row in one write (log-only on failure)

Nothing is retried and nothing is rolled back.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..backend import Backend, BackendError, SessionRecord
from .notifications import Notifier

logger = logging.getLogger(__name__)

MAX_PHOTOS = 3


@dataclass
class RecordResult:
    """Outcome of one save."""
    saved: bool
    session: Optional[SessionRecord] = None
    photos: List[str] = field(default_factory=list)
    failed_uploads: int = 0


class SessionRecorder:
    """
    Persists sessions through a backend.

    Attributes:
        backend: Hosted backend adapter
        content_type (str): MIME type of uploaded snapshots
    """

    def __init__(self, backend: Backend, ext: str = ".png"):
        self.backend = backend
        self.ext = ext
        self.content_type = "image/" + ext.lstrip(".").replace("jpg", "jpeg")

    def photo_name(self, user_id: str, session_id: int, index: int) -> str:
        return f"{user_id}_{session_id}_{index}{self.ext}"

    def record(self, access_token: Optional[str], duration: int,
               snapshots: Sequence[bytes], notifier: Notifier) -> RecordResult:
        """
        Save one completed session.

        Args:
            access_token: Bearer token of the user who planked
            duration: Finalized duration in seconds
            snapshots: Encoded evidence images, at most three are used
            notifier: Collector for user-facing messages

        Returns:
            RecordResult describing what was stored
        """
        try:
            user = self.backend.get_user(access_token)
        except BackendError as e:
            logger.warning("Could not resolve user: %s", e)
            user = None
        if user is None:
            notifier.error("You must be logged in.")
            return RecordResult(saved=False)

        try:
            session = self.backend.insert_session(user.id, duration)
        except BackendError as e:
            logger.error("Could not save plank for %s: %s", user.id, e)
            notifier.error("Could not save plank.")
            return RecordResult(saved=False)

        photos: List[str] = []
        failed = 0
        for index, image in enumerate(list(snapshots)[-MAX_PHOTOS:]):
            name = self.photo_name(user.id, session.id, index)
            try:
                photos.append(self.backend.upload_photo(name, image, self.content_type))
            except BackendError as e:
                failed += 1
                logger.error("Storage upload error for %s: %s", name, e)
                notifier.error(f"Could not upload photo. {e}")

        if photos:
            try:
                self.backend.update_session_photos(session.id, photos)
                session.photos = list(photos)
            except BackendError as e:
                logger.error("Failed to attach photos to plank %s: %s", session.id, e)

        logger.info("Saved plank %s for %s (%ss, %d photos)",
                    session.id, user.id, duration, len(photos))
        notifier.success("Plank saved!")
        return RecordResult(saved=True, session=session, photos=photos, failed_uploads=failed)
