"""
Snapshot Capturer Module
========================

Takes still images from a camera source while a session is running.

One snapshot is taken as soon as the session becomes active, then one every
``interval`` seconds of active time. Only the newest ``retention`` images
are kept.
"""

import logging
from collections import deque
from typing import Any, List, Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def encode_image(frame: np.ndarray, ext: str = ".png") -> bytes:
    """Encode frame to image bytes (empty on failure)."""
    ret, buffer = cv2.imencode(ext, frame)
    return buffer.tobytes() if ret else b""


class SnapshotCapturer:
    """
    Bounded snapshot buffer fed by a frame source.

    The source is any object with a ``get_frame()`` method returning a BGR
    numpy array or None.

    Attributes:
        interval (int): Seconds of active time between captures
        capturing (bool): Whether the owning session is active
    """

    def __init__(self, interval: int = 10, retention: int = 3, ext: str = ".png"):
        self.interval = interval
        self.ext = ext
        self.source: Optional[Any] = None
        self.capturing = False
        self._since_capture = 0
        self._snapshots: "deque[bytes]" = deque(maxlen=retention)

    @property
    def camera_enabled(self) -> bool:
        return self.source is not None

    @property
    def snapshots(self) -> List[bytes]:
        """Retained images, oldest first."""
        return list(self._snapshots)

    def attach(self, source: Any) -> None:
        """Grant a camera source."""
        self.source = source

    def detach(self) -> Optional[Any]:
        """Revoke the camera source and return it."""
        source, self.source = self.source, None
        return source

    def begin(self) -> None:
        """Session became active: capture now and restart the interval."""
        self.capturing = True
        self._since_capture = 0
        self.capture()

    def tick(self, seconds: int = 1) -> None:
        """Advance the capture clock by whole seconds of active time."""
        if not self.capturing:
            return
        for _ in range(seconds):
            self._since_capture += 1
            if self._since_capture >= self.interval:
                self._since_capture = 0
                self.capture()

    def end(self) -> None:
        """Session left the active state."""
        self.capturing = False

    def capture(self) -> bool:
        """
        Take one snapshot from the source.

        Returns:
            True if an image was retained
        """
        if self.source is None:
            return False
        try:
            frame = self.source.get_frame()
        except Exception as e:
            logger.debug("Snapshot skipped, source error: %s", e)
            return False
        if frame is None or frame.size == 0:
            logger.debug("Snapshot skipped, no frame available")
            return False
        image = encode_image(frame, self.ext)
        if not image:
            logger.debug("Snapshot skipped, encoding failed")
            return False
        self._snapshots.append(image)
        return True

    def clear(self) -> None:
        """Drop all retained snapshots."""
        self._snapshots.clear()
        self._since_capture = 0
