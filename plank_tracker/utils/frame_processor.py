"""
Frame Decoding Module
=====================

Turns base64 frames posted by clients into numpy images.
"""

import base64
import binascii

import cv2
import numpy as np

MIN_PAYLOAD_LENGTH = 100
MIN_FRAME_SIDE = 10


class FrameDecodeError(ValueError):
    """Posted frame could not be decoded."""


def decode_frame(image_data: str) -> np.ndarray:
    """
    Decode a base64-encoded JPEG/PNG into a BGR frame.

    Args:
        image_data: Base64 string, optionally with a ``data:`` URL prefix

    Returns:
        Decoded BGR frame

    Raises:
        FrameDecodeError: If the payload is not a usable image
    """
    if not image_data or len(image_data) < MIN_PAYLOAD_LENGTH:
        raise FrameDecodeError("Invalid image data - too small")

    if image_data.startswith("data:") and "," in image_data:
        image_data = image_data.split(",", 1)[1]

    try:
        img_bytes = base64.b64decode(image_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise FrameDecodeError(f"Base64 decode error: {e}") from e

    nparr = np.frombuffer(img_bytes, np.uint8)
    frame = cv2.imdecode(nparr, cv2.IMREAD_COLOR)

    if frame is None or frame.size == 0:
        raise FrameDecodeError("Failed to decode image")

    if frame.shape[0] < MIN_FRAME_SIDE or frame.shape[1] < MIN_FRAME_SIDE:
        raise FrameDecodeError("Image too small")

    return frame
