"""
Timestamp Formatting
====================

Human-readable labels for trace timestamps (microseconds).
"""

import math


def format_timestamp(timestamp: int, base_timestamp: int = 0) -> str:
    """
    Format a timestamp relative to a base.
    
    Values under one second render as whole milliseconds ("500ms"),
    everything else as seconds with two decimals ("1.50s").
    
    Args:
        timestamp: Timestamp in microseconds
        base_timestamp: Reference timestamp in microseconds
        
    Returns:
        Formatted label
    """
    milliseconds = (timestamp - base_timestamp) / 1000
    
    if milliseconds < 1000:
        # Round half up, matching what a UI timeline shows
        return f"{math.floor(milliseconds + 0.5)}ms"
    
    seconds = milliseconds / 1000
    return f"{seconds:.2f}s"


def format_interval_label(interval_ms: float) -> str:
    """Label for a cadence setting: "250ms" or "1.5s"."""
    if interval_ms >= 1000:
        return f"{interval_ms / 1000:.1f}s"
    return f"{interval_ms:g}ms"
