"""
Format Detector
===============

Best-effort classification of base64 image payloads.

Detection order:
    1. data:image/<subtype>;base64, prefix  -> declared subtype
    2. Base64 magic prefixes                -> "/9j/" jpeg, "iVBOR" png
    3. Fallback                             -> jpeg

Design Rules:
    - Never fails: payloads are assumed to already be image-shaped
    - Does NOT decode image data
"""

from typing import Union

from filmstrip.models.trace import ImageFormat, ScreenshotFrame


DATA_URI_PREFIX = "data:image/"

# Base64 encodings of the JPEG SOI marker and PNG signature
_MAGIC_PREFIXES = (
    ("/9j/", ImageFormat.JPEG),
    ("iVBOR", ImageFormat.PNG),
)

_MIME_SUBTYPES = {
    "jpeg": ImageFormat.JPEG,
    "jpg": ImageFormat.JPEG,
    "png": ImageFormat.PNG,
}


def _as_text(payload: Union[str, bytes]) -> str:
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload).decode("ascii", errors="ignore")
    return payload


def strip_data_uri(payload: Union[str, bytes]) -> str:
    """
    Return the base64 segment of a data URI.
    
    Payloads that are not image data URIs (or have no comma) are
    returned unchanged.
    """
    text = _as_text(payload)
    if text.startswith(DATA_URI_PREFIX):
        comma = text.find(",")
        if comma != -1:
            return text[comma + 1:]
    return text


def detect_image_format(payload: Union[str, bytes]) -> ImageFormat:
    """
    Classify a base64 image payload.
    
    Args:
        payload: Raw base64 text or a full data URI
        
    Returns:
        Detected ImageFormat (jpeg when nothing matches)
    """
    text = _as_text(payload)
    
    if text.startswith(DATA_URI_PREFIX):
        header = text[len(DATA_URI_PREFIX):].split(",", 1)[0]
        subtype = header.split(";", 1)[0].strip().lower()
        if subtype in _MIME_SUBTYPES:
            return _MIME_SUBTYPES[subtype]
        # Unknown declared subtype: sniff the payload itself
        text = strip_data_uri(text)
    
    for prefix, image_format in _MAGIC_PREFIXES:
        if text.startswith(prefix):
            return image_format
    
    return ImageFormat.JPEG


def to_data_uri(frame: ScreenshotFrame) -> str:
    """Build a displayable data URI for a screenshot."""
    return f"data:{frame.format.mime_type};base64,{frame.image_b64}"
