"""
Image Decoder
=============

Dedicated module for decoding base64 screenshots into OpenCV matrices.

Design Rules:
    - This is the ONLY place in the codebase that decodes images
    - Validates shape and dtype
    - Fails fast on corrupt frames
    - Returns BGR (3 channels); alpha is discarded
"""

import base64
import binascii
import logging

import cv2
import numpy as np

from filmstrip.models.trace import ScreenshotFrame


logger = logging.getLogger(__name__)


class ImageDecodeError(Exception):
    """Raised when image decoding fails."""
    pass


def decode_frame_bgr(frame: ScreenshotFrame) -> np.ndarray:
    """
    Decode a base64 screenshot to a BGR numpy array.
    
    Args:
        frame: Screenshot with base64-encoded JPEG or PNG data
        
    Returns:
        BGR image as np.ndarray (H, W, 3), dtype=uint8
        
    Raises:
        ImageDecodeError: If decoding fails or image is invalid
    """
    try:
        image_bytes = base64.b64decode(frame.image_b64)
        nparr = np.frombuffer(image_bytes, np.uint8)
        if nparr.size == 0:
            raise ImageDecodeError(
                f"Empty image payload for screenshot at {frame.timestamp}"
            )
        
        bgr = cv2.imdecode(nparr, cv2.IMREAD_COLOR)
        
        if bgr is None:
            raise ImageDecodeError(
                f"Failed to decode {frame.format.value} screenshot at "
                f"{frame.timestamp}: cv2.imdecode returned None"
            )
        
        if len(bgr.shape) != 3 or bgr.shape[2] != 3:
            raise ImageDecodeError(
                f"Invalid image shape for screenshot at {frame.timestamp}: {bgr.shape}"
            )
        
        if bgr.dtype != np.uint8:
            raise ImageDecodeError(
                f"Invalid dtype for screenshot at {frame.timestamp}: {bgr.dtype}"
            )
        
        return bgr
        
    except binascii.Error as e:
        raise ImageDecodeError(
            f"Base64 decode failed for screenshot at {frame.timestamp}: {e}"
        ) from e
    except ImageDecodeError:
        raise
    except Exception as e:
        raise ImageDecodeError(
            f"Unexpected error decoding screenshot at {frame.timestamp}: {e}"
        ) from e
