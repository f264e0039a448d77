"""
Sampling Models
===============

Policy and output records for the temporal sampler.

SamplingPolicy is supplied fresh per sampling call (usually from a settings
UI). DisplayFrame is what the sampler emits: a reference to the original
screenshot plus the timestamp it should be DISPLAYED at, which differs from
the capture timestamp when fixed-cadence resampling is active.
"""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from filmstrip.models.trace import ScreenshotFrame


class SamplingPolicy(BaseModel):
    """
    How a screenshot sequence is filtered before display/export.
    
    Range bounds are milliseconds relative to the first screenshot.
    A range_end_ms of 0 means "not set" (see fit_to_duration).
    """
    
    model_config = ConfigDict(frozen=True)
    
    use_time_range_filter: bool = Field(
        default=False,
        description="Restrict frames to [range_start_ms, range_end_ms]",
    )
    range_start_ms: float = Field(
        default=0.0,
        ge=0,
        description="Range start, ms after the first screenshot",
    )
    range_end_ms: float = Field(
        default=0.0,
        ge=0,
        description="Range end, ms after the first screenshot",
    )
    use_interval_filtering: bool = Field(
        default=False,
        description="Resample onto a fixed cadence",
    )
    interval_ms: int = Field(
        default=100,
        ge=1,
        description="Cadence of the resampling grid in milliseconds",
    )
    
    def fit_to_duration(self, max_ms: float) -> "SamplingPolicy":
        """
        Return a copy whose range end is initialised to the trace length.
        
        The end is replaced when it is unset (0) or exceeds max_ms.
        """
        if self.range_end_ms == 0 or self.range_end_ms > max_ms:
            return self.model_copy(update={"range_end_ms": max_ms})
        return self


@dataclass(frozen=True, slots=True)
class DisplayFrame:
    """
    A screenshot positioned on the display timeline.
    
    Attributes:
        source: The original (shared, immutable) screenshot
        index: Position in the sampled sequence, contiguous from 0
        display_timestamp: Timestamp to display (µs), synthetic if resampled
        is_synthetic: True when display_timestamp comes from the cadence grid
        relative_time: Human label for display_timestamp relative to the base
        delta_ms: Display-time gap to the previous frame (0 at index 0)
    """
    
    source: ScreenshotFrame
    index: int
    display_timestamp: int
    is_synthetic: bool
    relative_time: str
    delta_ms: float
    
    def to_dict(self) -> dict:
        """Export metadata (without image data) for serialization."""
        return {
            "index": self.index,
            "timestamp": self.source.timestamp,
            "display_timestamp": self.display_timestamp,
            "is_synthetic": self.is_synthetic,
            "relative_time": self.relative_time,
            "delta_ms": self.delta_ms,
            "format": self.source.format.value,
        }
