"""
Export Module
=============

Rasterizes sampled display frames into PNG montages and GIF animations.

This module provides:
    - ExportCompositor: Montage/animation rendering and encoding
    - ExportFailed: Raised when an artifact cannot be produced
    - decode_frame_bgr: The single image decode entry point
    - build_global_palette / apply_palette: Shared-palette quantization

Example:
    from filmstrip.export import ExportCompositor
    from filmstrip.models import ExportFormat, ExportSettings
    
    compositor = ExportCompositor()
    result = compositor.export(display_frames, ExportSettings(), ExportFormat.GIF)
    Path(result.filename).write_bytes(result.data)
"""

from filmstrip.export.image_decoder import (
    ImageDecodeError,
    decode_frame_bgr,
)
from filmstrip.export.palette import apply_palette, build_global_palette
from filmstrip.export.compositor import (
    ANIMATION_LABEL,
    MONTAGE_LABEL,
    ExportCompositor,
    ExportFailed,
    LabelStyle,
)


__all__ = [
    "ImageDecodeError",
    "decode_frame_bgr",
    "build_global_palette",
    "apply_palette",
    "ExportCompositor",
    "ExportFailed",
    "LabelStyle",
    "MONTAGE_LABEL",
    "ANIMATION_LABEL",
]
