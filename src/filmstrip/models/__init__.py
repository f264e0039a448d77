"""
Data Models
===========

Value records shared by the filmstrip pipeline.

This module re-exports all data models for convenient access.

Models:
    Trace:
        - ImageFormat: Encoding of a screenshot payload (jpeg, png)
        - ScreenshotFrame: One screenshot with its capture timestamp
        - ParsedTrace: Sorted screenshots plus time bounds
    
    Sampling:
        - SamplingPolicy: Time-range and cadence settings
        - DisplayFrame: A screenshot positioned on the display timeline
    
    Export:
        - ExportFormat: Artifact kind (png montage, gif animation)
        - ExportSettings: Frame height, padding, timestamp labels
        - ExportRequest: Format + policy + settings
        - ExportResult: Encoded artifact with MIME type and filename
"""

from filmstrip.models.trace import ImageFormat, ParsedTrace, ScreenshotFrame
from filmstrip.models.sampling import DisplayFrame, SamplingPolicy
from filmstrip.models.export import (
    ExportFormat,
    ExportRequest,
    ExportResult,
    ExportSettings,
)

__all__ = [
    # Trace
    "ImageFormat",
    "ScreenshotFrame",
    "ParsedTrace",
    # Sampling
    "SamplingPolicy",
    "DisplayFrame",
    # Export
    "ExportFormat",
    "ExportSettings",
    "ExportRequest",
    "ExportResult",
]
