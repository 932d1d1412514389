"""
Utilities Module
================

Frame sources and frame decoding helpers.
"""

from .camera_manager import LatestFrameSource, VideoCaptureSource
from .frame_processor import FrameDecodeError, decode_frame

__all__ = ["LatestFrameSource", "VideoCaptureSource", "FrameDecodeError", "decode_frame"]
