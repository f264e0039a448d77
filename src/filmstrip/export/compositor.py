"""
Export Compositor
=================

Rasterizes a sampled frame sequence into a shareable artifact.

Artifacts:
    - Montage (PNG): frames left-to-right at a fixed height, white
      background, optional timestamp labels beneath each frame
    - Animation (GIF): one canvas per frame at double height, optional
      label band, every frame mapped through ONE global palette

Design Rules:
    - All-or-nothing: any undecodable frame raises ExportFailed and no
      bytes are produced
    - Frame decoding runs in a thread pool; palette and encode steps run
      on the joined result
    - Each export owns its own buffers and encoder (no shared state)
"""

import io
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import cv2
import numpy as np
from PIL import GifImagePlugin

from filmstrip.export.image_decoder import ImageDecodeError, decode_frame_bgr
from filmstrip.export.palette import MAX_PALETTE_COLORS, apply_palette, build_global_palette
from filmstrip.models.export import ExportFormat, ExportResult, ExportSettings
from filmstrip.models.sampling import DisplayFrame


logger = logging.getLogger(__name__)


class ExportFailed(RuntimeError):
    """Raised when an artifact cannot be produced."""
    pass


# #1f2937 in BGR
LABEL_COLOR_BGR: Tuple[int, int, int] = (55, 41, 31)
BACKGROUND_VALUE = 255


@dataclass(frozen=True, slots=True)
class LabelStyle:
    """Geometry of the timestamp label band under each frame."""
    
    band_height: int  # Extra canvas height reserved for labels
    baseline_offset: int  # Text baseline, pixels below the image
    font_scale: float
    thickness: int


MONTAGE_LABEL = LabelStyle(band_height=30, baseline_offset=20, font_scale=0.5, thickness=1)
ANIMATION_LABEL = LabelStyle(band_height=60, baseline_offset=40, font_scale=0.8, thickness=2)


def scaled_width(image: np.ndarray, target_height: int) -> int:
    """Width of an image scaled to target_height, aspect preserved."""
    height, width = image.shape[:2]
    return max(1, int(round(target_height * width / height)))


def _resize(image: np.ndarray, width: int, height: int) -> np.ndarray:
    src_height, src_width = image.shape[:2]
    shrinking = width < src_width or height < src_height
    interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR
    return cv2.resize(image, (width, height), interpolation=interpolation)


def _draw_centered_label(
    canvas: np.ndarray,
    text: str,
    center_x: float,
    baseline_y: int,
    style: LabelStyle,
) -> None:
    font = cv2.FONT_HERSHEY_SIMPLEX
    (text_w, _), _ = cv2.getTextSize(text, font, style.font_scale, style.thickness)
    x = int(round(center_x - text_w / 2))
    cv2.putText(
        canvas,
        text,
        (x, baseline_y),
        font,
        style.font_scale,
        LABEL_COLOR_BGR,
        style.thickness,
        cv2.LINE_AA,
    )


class ExportCompositor:
    """
    Builds PNG montages and GIF animations from display frames.
    
    Attributes:
        frame_delay_ms: Uniform display time of each animation frame
        animation_scale: Animation frame height multiplier over the montage height
        palette_colors: Size of the shared animation palette
        max_workers: Decode thread pool size
        filename_prefix: Prefix of suggested download filenames
    """
    
    def __init__(
        self,
        frame_delay_ms: int = 500,
        animation_scale: int = 2,
        palette_colors: int = MAX_PALETTE_COLORS,
        max_workers: int = 4,
        filename_prefix: str = "film-strip",
    ) -> None:
        """
        Initialize export compositor.
        
        Args:
            frame_delay_ms: Per-frame delay in the animation
            animation_scale: Height multiplier for animation frames
            palette_colors: Global palette size (2..256)
            max_workers: Threads used to decode frames
            filename_prefix: Download filename prefix
        """
        if frame_delay_ms < 0:
            raise ValueError("frame_delay_ms must be >= 0")
        if animation_scale < 1:
            raise ValueError("animation_scale must be >= 1")
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        
        self.frame_delay_ms = frame_delay_ms
        self.animation_scale = animation_scale
        self.palette_colors = palette_colors
        self.max_workers = max_workers
        self.filename_prefix = filename_prefix
    
    # =========================================================================
    # Public Interface
    # =========================================================================
    
    def compose_montage(
        self,
        frames: Sequence[DisplayFrame],
        settings: ExportSettings,
    ) -> bytes:
        """
        Render frames side by side into a PNG.
        
        Raises:
            ExportFailed: If there are no frames or any frame fails to decode
        """
        canvas = self.render_montage(frames, settings)
        return self._encode_png(canvas)
    
    def compose_animation(
        self,
        frames: Sequence[DisplayFrame],
        settings: ExportSettings,
    ) -> bytes:
        """
        Render frames into an animated GIF with a shared palette.
        
        Raises:
            ExportFailed: If there are no frames or any frame fails to decode
        """
        canvases = self.render_animation_frames(frames, settings)
        return self._encode_gif(canvases)
    
    def export(
        self,
        frames: Sequence[DisplayFrame],
        settings: ExportSettings,
        export_format: ExportFormat,
    ) -> ExportResult:
        """
        Produce an artifact with MIME type and suggested filename.
        
        Args:
            frames: Sampled display frames
            settings: Rendering settings
            export_format: PNG montage or GIF animation
            
        Returns:
            ExportResult
            
        Raises:
            ExportFailed: On any decode or encode failure
        """
        start_time = time.time()
        
        if export_format == ExportFormat.GIF:
            canvases = self.render_animation_frames(frames, settings)
            data = self._encode_gif(canvases)
            height, width = canvases[0].shape[:2]
        else:
            canvas = self.render_montage(frames, settings)
            data = self._encode_png(canvas)
            height, width = canvas.shape[:2]
        
        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Exported {export_format.value}: {len(frames)} frames, "
            f"{width}x{height}, {len(data)} bytes in {elapsed_ms:.1f}ms"
        )
        
        return ExportResult(
            data=data,
            mime_type=export_format.mime_type,
            filename=self.suggest_filename(export_format),
            frame_count=len(frames),
            width=width,
            height=height,
        )
    
    def suggest_filename(self, export_format: ExportFormat) -> str:
        """Download filename, e.g. film-strip-1700000000000.png."""
        return f"{self.filename_prefix}-{int(time.time() * 1000)}{export_format.extension}"
    
    # =========================================================================
    # Rendering
    # =========================================================================
    
    def decode_frames(self, frames: Sequence[DisplayFrame]) -> List[np.ndarray]:
        """
        Decode every frame's screenshot in parallel.
        
        Raises:
            ExportFailed: If the sequence is empty or any frame fails to decode
        """
        if not frames:
            raise ExportFailed("No frames to export")
        
        with ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(frames)),
            thread_name_prefix="filmstrip-decode",
        ) as pool:
            futures = [pool.submit(decode_frame_bgr, frame.source) for frame in frames]
            
            images: List[np.ndarray] = []
            for frame, future in zip(frames, futures):
                try:
                    images.append(future.result())
                except ImageDecodeError as e:
                    logger.error(f"Export aborted, frame {frame.index} unreadable: {e}")
                    raise ExportFailed(
                        f"Frame {frame.index} could not be decoded: {e}"
                    ) from e
        
        return images
    
    def render_montage(
        self,
        frames: Sequence[DisplayFrame],
        settings: ExportSettings,
    ) -> np.ndarray:
        """
        Lay frames out left-to-right on a white BGR canvas.
        
        Width is the sum of scaled frame widths plus padding before, between
        and after the frames. Height is frame height + label band + 2 * padding.
        """
        images = self.decode_frames(frames)
        
        frame_height = settings.frame_height_px
        padding = settings.padding_px
        label_height = MONTAGE_LABEL.band_height if settings.show_timestamps else 0
        
        widths = [scaled_width(image, frame_height) for image in images]
        canvas_width = sum(widths) + padding * (len(images) + 1)
        canvas_height = frame_height + label_height + padding * 2
        
        canvas = np.full((canvas_height, canvas_width, 3), BACKGROUND_VALUE, dtype=np.uint8)
        
        x_offset = padding
        for image, width, frame in zip(images, widths, frames):
            canvas[padding:padding + frame_height, x_offset:x_offset + width] = _resize(
                image, width, frame_height
            )
            if settings.show_timestamps:
                _draw_centered_label(
                    canvas,
                    frame.relative_time,
                    x_offset + width / 2,
                    frame_height + padding + MONTAGE_LABEL.baseline_offset,
                    MONTAGE_LABEL,
                )
            x_offset += width + padding
        
        return canvas
    
    def render_animation_frames(
        self,
        frames: Sequence[DisplayFrame],
        settings: ExportSettings,
    ) -> List[np.ndarray]:
        """
        Render one equally-sized RGB canvas per frame.
        
        Canvas size comes from the first frame's aspect ratio at
        animation_scale times the export height; other frames are
        scaled into it.
        """
        images = self.decode_frames(frames)
        
        frame_height = settings.frame_height_px * self.animation_scale
        width = scaled_width(images[0], frame_height)
        label_height = ANIMATION_LABEL.band_height if settings.show_timestamps else 0
        
        canvases: List[np.ndarray] = []
        for image, frame in zip(images, frames):
            canvas = np.full(
                (frame_height + label_height, width, 3),
                BACKGROUND_VALUE,
                dtype=np.uint8,
            )
            canvas[:frame_height, :] = _resize(image, width, frame_height)
            if settings.show_timestamps:
                _draw_centered_label(
                    canvas,
                    frame.relative_time,
                    width / 2,
                    frame_height + ANIMATION_LABEL.baseline_offset,
                    ANIMATION_LABEL,
                )
            canvases.append(cv2.cvtColor(canvas, cv2.COLOR_BGR2RGB))
        
        return canvases
    
    # =========================================================================
    # Encoding
    # =========================================================================
    
    def _encode_png(self, canvas: np.ndarray) -> bytes:
        ok, buffer = cv2.imencode(".png", canvas)
        if not ok:
            raise ExportFailed("PNG encoding failed")
        return buffer.tobytes()
    
    def _encode_gif(self, canvases: Sequence[np.ndarray]) -> bytes:
        palette_image = build_global_palette(canvases, colors=self.palette_colors)
        indexed = apply_palette(canvases, palette_image)
        
        output = io.BytesIO()
        try:
            # Written frame by frame: save_all merges identical consecutive
            # frames, and resampled sequences repeat images
            header, _ = GifImagePlugin.getheader(indexed[0], info={"loop": 0})
            for chunk in header:
                output.write(chunk)
            for image in indexed:
                for chunk in GifImagePlugin.getdata(image, duration=self.frame_delay_ms):
                    output.write(chunk)
            output.write(b";")
        except (OSError, ValueError) as e:
            raise ExportFailed(f"GIF encoding failed: {e}") from e
        finally:
            for image in indexed:
                image.close()
        
        return output.getvalue()
