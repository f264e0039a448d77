"""
Test Configuration
==================

Pytest fixtures and test configuration for the filmstrip package.
"""

import base64

import cv2
import numpy as np
import pytest

from filmstrip.models.sampling import DisplayFrame
from filmstrip.models.trace import ImageFormat, ParsedTrace, ScreenshotFrame


def encode_image(
    color=(0, 0, 255),
    width: int = 40,
    height: int = 20,
    ext: str = ".jpg",
) -> str:
    """Base64 of a solid BGR image encoded with OpenCV."""
    image = np.full((height, width, 3), color, dtype=np.uint8)
    ok, buffer = cv2.imencode(ext, image)
    assert ok
    return base64.b64encode(buffer.tobytes()).decode("ascii")


def make_frame(timestamp: int, color=(0, 0, 255), width: int = 40, height: int = 20) -> ScreenshotFrame:
    return ScreenshotFrame(
        timestamp=timestamp,
        image_b64=encode_image(color, width, height),
        format=ImageFormat.JPEG,
    )


def make_trace(*timestamps: int) -> ParsedTrace:
    """ParsedTrace with tiny placeholder payloads at the given timestamps."""
    frames = tuple(
        ScreenshotFrame(timestamp=ts, image_b64=f"/9j/{i}", format=ImageFormat.JPEG)
        for i, ts in enumerate(sorted(timestamps))
    )
    if not frames:
        return ParsedTrace(frames=(), start_time=0, end_time=0)
    return ParsedTrace(frames=frames, start_time=frames[0].timestamp, end_time=frames[-1].timestamp)


def as_display_frames(frames) -> list:
    return [
        DisplayFrame(
            source=frame,
            index=index,
            display_timestamp=frame.timestamp,
            is_synthetic=False,
            relative_time=f"{index * 100}ms",
            delta_ms=0.0 if index == 0 else 100.0,
        )
        for index, frame in enumerate(frames)
    ]


@pytest.fixture
def jpeg_b64():
    """Base64 JPEG payload (red, 40x20)."""
    return encode_image((0, 0, 255), ext=".jpg")


@pytest.fixture
def png_b64():
    """Base64 PNG payload (green, 40x20)."""
    return encode_image((0, 255, 0), ext=".png")


@pytest.fixture
def sample_trace_dict(jpeg_b64, png_b64):
    """Raw trace with one of each screenshot event shape plus noise."""
    return {
        "metadata": {"source": "DevTools"},
        "traceEvents": [
            {"name": "RunTask", "cat": "toplevel", "ph": "X", "ts": 500},
            {
                "name": "CaptureFrame",
                "ts": 3_000_000,
                "args": {"data": f"data:image/png;base64,{png_b64}"},
            },
            {
                "name": "Screenshot",
                "cat": "disabled-by-default-devtools.screenshot",
                "ph": "O",
                "ts": 1_000_000,
                "args": {"snapshot": jpeg_b64},
            },
            "not-an-event",
            {
                "name": "ScreencastFrame",
                "ts": 2_000_000,
                "args": {"dataUri": f"data:image/jpeg;base64,{jpeg_b64}"},
            },
        ],
    }


@pytest.fixture
def display_frames():
    """Three decodable display frames with distinct colours (40x20)."""
    frames = [
        make_frame(1_000_000, (0, 0, 255)),
        make_frame(1_100_000, (0, 255, 0)),
        make_frame(1_200_000, (255, 0, 0)),
    ]
    return as_display_frames(frames)
