"""
Global Palette Quantization
===========================

Reduces a sequence of RGB frames to one shared 256-colour palette.

Every frame is mapped onto the same palette, built from the pixels
of all frames combined.
"""

import logging
from typing import List, Sequence

import numpy as np
from PIL import Image


logger = logging.getLogger(__name__)


MAX_PALETTE_COLORS = 256


def build_global_palette(
    frames: Sequence[np.ndarray],
    colors: int = MAX_PALETTE_COLORS,
) -> Image.Image:
    """
    Compute one palette from the pixels of all frames combined.
    
    Args:
        frames: RGB uint8 arrays, all with the same width
        colors: Palette size (2..256)
        
    Returns:
        Palette ("P" mode) image usable as Image.quantize(palette=...)
    """
    if not frames:
        raise ValueError("At least one frame is required to build a palette")
    if not 2 <= colors <= MAX_PALETTE_COLORS:
        raise ValueError(f"colors must be within 2..{MAX_PALETTE_COLORS}")
    
    # Stack vertically so the quantizer sees every pixel of every frame
    combined = Image.fromarray(np.concatenate(frames, axis=0))
    palette_image = combined.quantize(
        colors=colors,
        method=Image.Quantize.MEDIANCUT,
        dither=Image.Dither.NONE,
    )
    
    logger.debug(
        f"Built global palette: {colors} colors from {len(frames)} frames "
        f"({combined.width}x{combined.height} combined)"
    )
    return palette_image


def apply_palette(
    frames: Sequence[np.ndarray],
    palette_image: Image.Image,
) -> List[Image.Image]:
    """Map each RGB frame onto the shared palette."""
    return [
        Image.fromarray(frame).quantize(
            palette=palette_image,
            dither=Image.Dither.NONE,
        )
        for frame in frames
    ]
