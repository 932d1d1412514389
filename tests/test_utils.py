"""
Unit tests for utility modules.

Tests for frame sources and frame decoding.
"""

import pytest
import numpy as np
import sys
import os
import base64

import cv2

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from plank_tracker.core import CameraError
from plank_tracker.utils import (
    FrameDecodeError,
    LatestFrameSource,
    VideoCaptureSource,
    decode_frame,
)


class TestFrameSources:
    """Test suite for camera frame sources."""

    def test_latest_frame_source(self):
        """Test that the newest frame is returned as a copy."""
        source = LatestFrameSource()
        assert source.get_frame() is None
        frame = np.zeros((10, 10, 3), dtype=np.uint8)
        source.set_frame(frame)
        copy = source.get_frame()
        assert np.array_equal(copy, frame)
        copy[0, 0, 0] = 255
        assert source.get_frame()[0, 0, 0] == 0
        source.release()
        assert source.get_frame() is None

    def test_missing_local_camera(self):
        """Test that an unavailable camera index raises CameraError."""
        with pytest.raises(CameraError):
            VideoCaptureSource(99)


class TestDecodeFrame:
    """Test suite for base64 frame decoding."""

    def _encoded(self, shape=(100, 100, 3)):
        _, buffer = cv2.imencode('.jpg', np.zeros(shape, dtype=np.uint8))
        return base64.b64encode(buffer).decode('utf-8')

    def test_decodes_jpeg(self):
        """Test decoding a valid JPEG."""
        frame = decode_frame(self._encoded())
        assert frame.shape == (100, 100, 3)

    def test_accepts_data_url(self):
        """Test that a data URL prefix is stripped."""
        frame = decode_frame("data:image/jpeg;base64," + self._encoded())
        assert frame.shape == (100, 100, 3)

    @pytest.mark.parametrize("payload", ["", "abc", "!" * 200, "x" * 200])
    def test_rejects_invalid(self, payload):
        """Test that short, non-base64 and non-image payloads are rejected."""
        with pytest.raises(FrameDecodeError):
            decode_frame(payload)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
