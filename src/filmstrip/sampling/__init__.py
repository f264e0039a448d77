"""
Sampling Module
===============

Temporal resampling of screenshot sequences.

Components:
    - sample_frames: ParsedTrace + SamplingPolicy -> DisplayFrame list
    - filter_time_range / resample_fixed_cadence: the two sampling stages
    - format_timestamp: "500ms" / "1.50s" labels
"""

from filmstrip.sampling.sampler import (
    PlacedFrame,
    filter_time_range,
    range_start_timestamp,
    resample_fixed_cadence,
    sample_frames,
    time_delta_ms,
    total_duration_ms,
)
from filmstrip.sampling.timestamps import format_interval_label, format_timestamp


__all__ = [
    "sample_frames",
    "PlacedFrame",
    "filter_time_range",
    "resample_fixed_cadence",
    "range_start_timestamp",
    "time_delta_ms",
    "total_duration_ms",
    "format_timestamp",
    "format_interval_label",
]
