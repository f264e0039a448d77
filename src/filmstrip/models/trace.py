"""
Trace Models
============

Immutable records produced by the trace extractor.

Design Rules:
    - ScreenshotFrame is the ONLY screenshot representation passed downstream
    - Image payloads stay base64 text (NOT decoded here)
    - Downstream stages reference frames, never copy or mutate them
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class ImageFormat(str, Enum):
    """Image encodings a screenshot payload can carry."""
    
    JPEG = "jpeg"
    PNG = "png"
    
    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"


@dataclass(frozen=True, slots=True)
class ScreenshotFrame:
    """
    Single screenshot extracted from a trace.
    
    Attributes:
        timestamp: Capture time in microseconds (trace clock)
        image_b64: Base64-encoded image data, data-URI prefix stripped
        format: Image encoding of the payload
    """
    
    timestamp: int
    image_b64: str
    format: ImageFormat
    
    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.timestamp < 0:
            raise ValueError("timestamp must be non-negative")
    
    def __repr__(self) -> str:
        """Compact repr that doesn't dump the full image."""
        return (
            f"ScreenshotFrame(timestamp={self.timestamp}, "
            f"format={self.format.value}, "
            f"size={len(self.image_b64)})"
        )


@dataclass(frozen=True, slots=True)
class ParsedTrace:
    """
    Screenshots extracted from one trace, sorted by timestamp.
    
    start_time/end_time are the first/last frame timestamps, or 0 when
    the trace carried no screenshots.
    
    Attributes:
        frames: Screenshots in ascending timestamp order
        start_time: Timestamp of the first frame (µs)
        end_time: Timestamp of the last frame (µs)
    """
    
    frames: Tuple[ScreenshotFrame, ...]
    start_time: int
    end_time: int
    
    @property
    def duration(self) -> int:
        """Span between first and last screenshot in microseconds."""
        return self.end_time - self.start_time
    
    @property
    def frame_count(self) -> int:
        return len(self.frames)
    
    def to_dict(self) -> dict:
        """Export summary (without image data) for logging/serialization."""
        return {
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration": self.duration,
            "frame_count": self.frame_count,
        }
