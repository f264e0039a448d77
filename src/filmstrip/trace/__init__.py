"""
Trace Module
============

Trace ingestion and screenshot extraction.

Components:
    - detect_image_format: Best-effort jpeg/png sniffing of base64 payloads
    - extract_screenshots: Decoded trace -> ParsedTrace

Example:
    import json
    from filmstrip.trace import extract_screenshots
    
    trace = extract_screenshots(json.loads(raw_text))
    print(trace.frame_count, trace.duration)
"""

from filmstrip.trace.format_detector import (
    detect_image_format,
    strip_data_uri,
    to_data_uri,
)
from filmstrip.trace.extractor import (
    TraceParseError,
    InvalidFormat,
    InvalidEventList,
    extract_screenshots,
    match_event,
)


__all__ = [
    "detect_image_format",
    "strip_data_uri",
    "to_data_uri",
    "TraceParseError",
    "InvalidFormat",
    "InvalidEventList",
    "extract_screenshots",
    "match_event",
]
