"""
Camera Manager Module
=====================

Thread-safe frame sources feeding the snapshot capturer.

Classes:
    LatestFrameSource: Holds the newest frame pushed by a browser/mobile client
    VideoCaptureSource: Reads frames from a local OpenCV camera in a background thread
"""

import logging
import threading
import time
from typing import Optional

import cv2
import numpy as np

from ..core.errors import CameraError

logger = logging.getLogger(__name__)


class LatestFrameSource:
    """
    Frame source for cameras living on the client.

    The client posts frames; the capturer reads whichever frame
    arrived last.
    """

    def __init__(self):
        """Initialize with no frame."""
        self._lock = threading.Lock()
        self._frame: Optional[np.ndarray] = None

    def set_frame(self, frame: np.ndarray) -> None:
        """Store the newest frame."""
        with self._lock:
            self._frame = frame

    def get_frame(self) -> Optional[np.ndarray]:
        """
        Get the latest frame (thread-safe copy).

        Returns:
            Copy of latest frame as numpy array, or None if no frame available
        """
        with self._lock:
            if self._frame is not None:
                return self._frame.copy()
            return None

    def release(self) -> None:
        """Forget the stored frame."""
        with self._lock:
            self._frame = None


class VideoCaptureSource:
    """
    Frame source backed by a local camera.

    Attributes:
        running (bool): Whether the capture loop is running
        index (int): OpenCV camera index
    """

    def __init__(self, index: int, width: int = 640, height: int = 480):
        """
        Open the camera and start the capture loop.

        Args:
            index: OpenCV camera index
            width: Requested frame width
            height: Requested frame height

        Raises:
            CameraError: If the camera cannot be opened
        """
        self.index = index
        self.lock = threading.Lock()
        self.frame: Optional[np.ndarray] = None
        self.cap = cv2.VideoCapture(index)
        if not self.cap.isOpened():
            self.cap.release()
            raise CameraError(f"Camera {index} could not be opened")
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        self.running = True
        self.thread = threading.Thread(target=self._capture_loop, daemon=True)
        self.thread.start()

    def _capture_loop(self) -> None:
        """Background capture loop for continuous frame acquisition."""
        while self.running and self.cap.isOpened():
            try:
                ret, frame = self.cap.read()
            except cv2.error as e:
                logger.warning("Capture error on camera %s: %s", self.index, e)
                break
            if ret and frame is not None:
                with self.lock:
                    self.frame = frame
            else:
                time.sleep(0.01)

    def get_frame(self) -> Optional[np.ndarray]:
        """Get the latest captured frame (thread-safe copy)."""
        with self.lock:
            if self.frame is not None:
                return self.frame.copy()
            return None

    def release(self) -> None:
        """Stop the loop and release the camera."""
        self.running = False
        if self.thread:
            self.thread.join(timeout=2.0)
            self.thread = None
        self.cap.release()
        with self.lock:
            self.frame = None
