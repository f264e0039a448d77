"""
Trace Extractor
===============

Extracts screenshots from a decoded Chrome DevTools performance trace.

Recognised event shapes (first match wins):
    - "Screenshot" in a devtools screenshot category -> args.snapshot
    - "ScreencastFrame" (any casing)                 -> args.dataUri | args.data
    - "CaptureFrame"                                 -> args.dataUri | args.data

Design Rules:
    - Rejects a bad trace SHAPE (InvalidFormat, InvalidEventList)
    - Tolerates bad individual EVENTS (skipped, counted, logged)
    - Pure: no I/O, no shared state
"""

import logging
from typing import Any, Callable, List, Optional, Sequence

from filmstrip.models.trace import ParsedTrace, ScreenshotFrame
from filmstrip.trace.format_detector import detect_image_format, strip_data_uri


logger = logging.getLogger(__name__)


SCREENSHOT_CATEGORY = "disabled-by-default-devtools.screenshot"
EVENTS_FIELD = "traceEvents"


class TraceParseError(ValueError):
    """Base class for trace shape errors."""
    pass


class InvalidFormat(TraceParseError):
    """Raised when the trace root is not a JSON object."""
    pass


class InvalidEventList(TraceParseError):
    """Raised when the events field is present but not an array."""
    pass


# =============================================================================
# Event Matchers
# =============================================================================

def _event_timestamp(event: dict) -> int:
    ts = event.get("ts")
    if isinstance(ts, bool) or not isinstance(ts, (int, float)):
        return 0
    return max(0, int(ts))


def _string_arg(event: dict, *keys: str) -> Optional[str]:
    """First non-empty string found under event["args"][key]."""
    args = event.get("args")
    if not isinstance(args, dict):
        return None
    for key in keys:
        value = args.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def _frame_from_payload(event: dict, payload: str) -> ScreenshotFrame:
    return ScreenshotFrame(
        timestamp=_event_timestamp(event),
        image_b64=strip_data_uri(payload),
        format=detect_image_format(payload),
    )


def _match_screenshot(event: dict) -> Optional[ScreenshotFrame]:
    category = event.get("cat")
    if event.get("name") != "Screenshot" or not isinstance(category, str):
        return None
    if SCREENSHOT_CATEGORY not in category:
        return None
    snapshot = _string_arg(event, "snapshot")
    if snapshot is None:
        return None
    return ScreenshotFrame(
        timestamp=_event_timestamp(event),
        image_b64=snapshot,
        format=detect_image_format(snapshot),
    )


def _match_screencast_frame(event: dict) -> Optional[ScreenshotFrame]:
    name = event.get("name")
    if not isinstance(name, str) or name.lower() != "screencastframe":
        return None
    payload = _string_arg(event, "dataUri", "data")
    if payload is None:
        return None
    return _frame_from_payload(event, payload)


def _match_capture_frame(event: dict) -> Optional[ScreenshotFrame]:
    if event.get("name") != "CaptureFrame":
        return None
    payload = _string_arg(event, "dataUri", "data")
    if payload is None:
        return None
    return _frame_from_payload(event, payload)


_MATCHERS: Sequence[Callable[[dict], Optional[ScreenshotFrame]]] = (
    _match_screenshot,
    _match_screencast_frame,
    _match_capture_frame,
)


def match_event(event: Any) -> Optional[ScreenshotFrame]:
    """
    Try each known screenshot event shape in turn.
    
    Returns:
        ScreenshotFrame for a screenshot-bearing event, None otherwise
        (including malformed events).
    """
    if not isinstance(event, dict):
        return None
    for matcher in _MATCHERS:
        frame = matcher(event)
        if frame is not None:
            return frame
    return None


# =============================================================================
# Extraction
# =============================================================================

def extract_screenshots(raw_trace: Any) -> ParsedTrace:
    """
    Extract and sort screenshots from a decoded trace.
    
    Args:
        raw_trace: Value produced by a JSON decoder from the trace file
        
    Returns:
        ParsedTrace with frames in ascending timestamp order
        (ties keep event order)
        
    Raises:
        InvalidFormat: If the root is not a JSON object
        InvalidEventList: If traceEvents is present but not an array
    """
    if not isinstance(raw_trace, dict):
        raise InvalidFormat("Invalid trace format: root must be a JSON object")
    
    events = raw_trace.get(EVENTS_FIELD)
    if events is None:
        events = []
    if not isinstance(events, list):
        raise InvalidEventList("Trace events must be an array")
    
    frames: List[ScreenshotFrame] = []
    malformed = 0
    
    for event in events:
        if not isinstance(event, dict):
            malformed += 1
            continue
        frame = match_event(event)
        if frame is not None:
            frames.append(frame)
    
    if malformed:
        logger.warning(f"Skipped {malformed} malformed trace events")
    
    # list.sort is stable, so equal timestamps keep event order
    frames.sort(key=lambda frame: frame.timestamp)
    
    if frames:
        start_time = frames[0].timestamp
        end_time = frames[-1].timestamp
    else:
        start_time = end_time = 0
    
    parsed = ParsedTrace(
        frames=tuple(frames),
        start_time=start_time,
        end_time=end_time,
    )
    
    logger.debug(
        f"Extracted {parsed.frame_count} screenshots from {len(events)} events "
        f"(duration={parsed.duration}us)"
    )
    
    return parsed
