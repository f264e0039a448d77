"""
Temporal Sampler
================

Turns a sparse, irregularly-timed screenshot sequence into display frames.

Stages (applied in order):
    A. Time-range filter: keep the boundary frame at/before the range start
       plus every frame inside [start, end]
    B. Fixed-cadence resampling: step-function (last value held) over a
       synthetic clock ticking every interval_ms from the range start

Finalization assigns contiguous indices, display timestamps, relative
time labels and deltas.

Design Rules:
    - Pure functions over immutable inputs (safe to memoize or parallelize)
    - All arithmetic in integer microseconds; only labels round
    - Synthetic timestamps live on DisplayFrame, never on ScreenshotFrame
"""

import logging
from typing import List, NamedTuple, Optional, Sequence

from filmstrip.models.sampling import DisplayFrame, SamplingPolicy
from filmstrip.models.trace import ParsedTrace, ScreenshotFrame
from filmstrip.sampling.timestamps import format_timestamp


logger = logging.getLogger(__name__)


class PlacedFrame(NamedTuple):
    """A frame with an optional synthetic display timestamp."""
    
    frame: ScreenshotFrame
    synthetic_timestamp: Optional[int] = None
    
    @property
    def display_timestamp(self) -> int:
        if self.synthetic_timestamp is not None:
            return self.synthetic_timestamp
        return self.frame.timestamp


def _ms_to_us(milliseconds: float) -> int:
    return int(round(milliseconds * 1000))


# =============================================================================
# Helpers
# =============================================================================

def total_duration_ms(frames: Sequence[ScreenshotFrame]) -> float:
    """Span between first and last screenshot in milliseconds."""
    if not frames:
        return 0.0
    return (frames[-1].timestamp - frames[0].timestamp) / 1000


def time_delta_ms(current: ScreenshotFrame, previous: ScreenshotFrame) -> float:
    """Capture-time gap between two screenshots in milliseconds."""
    return (current.timestamp - previous.timestamp) / 1000


def range_start_timestamp(
    frames: Sequence[ScreenshotFrame],
    policy: SamplingPolicy,
) -> Optional[int]:
    """
    Intended start of the time-range window in microseconds.
    
    Returns:
        first timestamp + range_start_ms, or None when time-range
        filtering is off or there are no frames
    """
    if not policy.use_time_range_filter or not frames:
        return None
    return frames[0].timestamp + _ms_to_us(policy.range_start_ms)


# =============================================================================
# Stage A: Time-Range Filter
# =============================================================================

def filter_time_range(
    frames: Sequence[ScreenshotFrame],
    policy: SamplingPolicy,
) -> List[ScreenshotFrame]:
    """
    Restrict frames to the policy's time window.
    
    The last frame at or before the window start is always carried so the
    window has a "current" screenshot even when none falls inside it.
    
    Args:
        frames: Screenshots in ascending timestamp order
        policy: Sampling policy
        
    Returns:
        Retained frames, order preserved (identity when disabled)
    """
    if not policy.use_time_range_filter or not frames:
        return list(frames)
    
    absolute_start = frames[0].timestamp
    filter_start = absolute_start + _ms_to_us(policy.range_start_ms)
    filter_end = absolute_start + _ms_to_us(policy.range_end_ms)
    
    boundary_index = 0
    for index, frame in enumerate(frames):
        if frame.timestamp <= filter_start:
            boundary_index = index
        else:
            break
    
    return [
        frame
        for index, frame in enumerate(frames)
        if (index == boundary_index or frame.timestamp >= filter_start)
        and frame.timestamp <= filter_end
    ]


# =============================================================================
# Stage B: Fixed-Cadence Resampling
# =============================================================================

def resample_fixed_cadence(
    frames: Sequence[ScreenshotFrame],
    interval_ms: int,
    anchor: Optional[int] = None,
) -> List[PlacedFrame]:
    """
    Step-function resampling onto a regular grid.
    
    Ticks run at anchor + k * interval while within the span ending at
    the last frame. Each tick holds the most recent frame at or before it.
    If the last capture lies beyond the final tick, it is appended once
    more at the next tick so it is never dropped.
    
    Args:
        frames: Screenshots in ascending timestamp order (len >= 2)
        interval_ms: Grid cadence in milliseconds (>= 1)
        anchor: Grid origin in microseconds (default: first frame)
        
    Returns:
        Frames tagged with synthetic timestamps
    """
    if anchor is None:
        anchor = frames[0].timestamp
    
    last_frame = frames[-1]
    duration_us = last_frame.timestamp - anchor
    step_us = interval_ms * 1000
    
    placed: List[PlacedFrame] = []
    cursor = 0
    offset_us = 0
    
    while offset_us <= duration_us:
        tick = anchor + offset_us
        while cursor < len(frames) - 1 and frames[cursor + 1].timestamp <= tick:
            cursor += 1
        placed.append(PlacedFrame(frames[cursor], tick))
        offset_us += step_us
    
    if placed and last_frame.timestamp > placed[-1].synthetic_timestamp:
        placed.append(PlacedFrame(last_frame, anchor + offset_us))
    
    return placed


# =============================================================================
# Sampling
# =============================================================================

def _finalize(placed: Sequence[PlacedFrame], display_base: int) -> List[DisplayFrame]:
    display_frames: List[DisplayFrame] = []
    previous_timestamp: Optional[int] = None
    
    for index, item in enumerate(placed):
        display_timestamp = item.display_timestamp
        if previous_timestamp is None:
            delta_ms = 0.0
        else:
            delta_ms = (display_timestamp - previous_timestamp) / 1000
        
        display_frames.append(DisplayFrame(
            source=item.frame,
            index=index,
            display_timestamp=display_timestamp,
            is_synthetic=item.synthetic_timestamp is not None,
            relative_time=format_timestamp(display_timestamp, display_base),
            delta_ms=delta_ms,
        ))
        previous_timestamp = display_timestamp
    
    return display_frames


def sample_frames(
    trace: ParsedTrace,
    policy: SamplingPolicy,
    display_base: Optional[int] = None,
) -> List[DisplayFrame]:
    """
    Filter and resample a trace's screenshots into display frames.
    
    Args:
        trace: Parsed trace
        policy: Time-range and cadence settings
        display_base: Timestamp (µs) relative labels are measured from.
            Defaults to the range start when time-range filtering is
            active, otherwise the trace start time.
        
    Returns:
        Display frames with contiguous indices from 0
    """
    frames = trace.frames
    range_start = range_start_timestamp(frames, policy)
    
    if display_base is None:
        display_base = range_start if range_start is not None else trace.start_time
    
    if len(frames) <= 1:
        return _finalize([PlacedFrame(frame) for frame in frames], display_base)
    
    retained = filter_time_range(frames, policy)
    
    if policy.use_interval_filtering and len(retained) > 1:
        placed = resample_fixed_cadence(
            retained,
            policy.interval_ms,
            anchor=range_start,
        )
    else:
        placed = [PlacedFrame(frame) for frame in retained]
    
    logger.debug(
        f"Sampled {len(placed)} display frames from {len(frames)} screenshots "
        f"(range={policy.use_time_range_filter}, "
        f"interval={policy.interval_ms if policy.use_interval_filtering else None})"
    )
    
    return _finalize(placed, display_base)
