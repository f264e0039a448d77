"""
Export Models
=============

Settings and result records for the export compositor.
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from filmstrip.models.sampling import SamplingPolicy


class ExportFormat(str, Enum):
    """Artifact kinds the compositor can produce."""
    
    PNG = "png"
    GIF = "gif"
    
    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"
    
    @property
    def extension(self) -> str:
        return f".{self.value}"


class ExportSettings(BaseModel):
    """Rendering settings for an export."""
    
    model_config = ConfigDict(frozen=True)
    
    frame_height_px: int = Field(
        default=200,
        gt=0,
        description="Height every frame is scaled to (montage)",
    )
    padding_px: int = Field(
        default=10,
        ge=0,
        description="Gap between frames and outer border",
    )
    show_timestamps: bool = Field(
        default=True,
        description="Render each frame's relative time beneath it",
    )


class ExportRequest(BaseModel):
    """Body of an export call: what to sample and how to render it."""
    
    format: ExportFormat = Field(default=ExportFormat.PNG)
    policy: SamplingPolicy = Field(default_factory=SamplingPolicy)
    settings: ExportSettings = Field(default_factory=ExportSettings)


@dataclass(frozen=True, slots=True)
class ExportResult:
    """
    A finished artifact ready to hand to a save/download action.
    
    Attributes:
        data: Encoded image bytes
        mime_type: MIME type of data
        filename: Suggested download filename
        frame_count: Number of frames composed
        width: Canvas width in pixels
        height: Canvas height in pixels
    """
    
    data: bytes
    mime_type: str
    filename: str
    frame_count: int
    width: int
    height: int
    
    def __repr__(self) -> str:
        return (
            f"ExportResult(filename={self.filename}, "
            f"mime_type={self.mime_type}, "
            f"size={len(self.data)}, "
            f"canvas={self.width}x{self.height})"
        )
