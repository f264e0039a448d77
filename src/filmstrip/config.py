"""
Filmstrip Configuration
=======================

This module handles configuration loading for the filmstrip service.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    FILMSTRIP_CONFIG          -> path of the YAML file
    FILMSTRIP_EXPORT_HEIGHT   -> export.frame_height_px
    FILMSTRIP_EXPORT_PADDING  -> export.padding_px
    FILMSTRIP_FRAME_DELAY_MS  -> export.animation_frame_delay_ms
    FILMSTRIP_DECODE_WORKERS  -> export.decode_workers
    FILMSTRIP_LOG_LEVEL       -> logging.level
    FILMSTRIP_PORT            -> server.port
    PORT                      -> server.port (Cloud Run)

Example:
    from filmstrip.config import settings
    
    print(settings.export.frame_height_px)
    print(settings.sampling.interval_ms)
"""

import os
import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field

from filmstrip.models.export import ExportSettings
from filmstrip.models.sampling import SamplingPolicy


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class AppConfig(BaseModel):
    """Service identification configuration."""
    
    name: str = Field(default="trace-filmstrip", description="Service name")
    version: str = Field(default="v0.1.0", description="Service version")


class SamplingConfig(BaseModel):
    """Default sampling policy values."""
    
    use_interval_filtering: bool = Field(
        default=False,
        description="Resample onto a fixed cadence by default",
    )
    interval_ms: int = Field(
        default=100,
        ge=1,
        description="Default cadence in milliseconds",
    )
    
    def default_policy(self) -> SamplingPolicy:
        return SamplingPolicy(
            use_interval_filtering=self.use_interval_filtering,
            interval_ms=self.interval_ms,
        )


class ExportConfig(BaseModel):
    """Export rendering configuration."""
    
    frame_height_px: int = Field(
        default=200,
        gt=0,
        description="Default montage frame height",
    )
    padding_px: int = Field(
        default=10,
        ge=0,
        description="Default gap between frames",
    )
    show_timestamps: bool = Field(
        default=True,
        description="Render relative-time labels by default",
    )
    animation_frame_delay_ms: int = Field(
        default=500,
        ge=0,
        description="Display time of each animation frame",
    )
    animation_scale: int = Field(
        default=2,
        ge=1,
        description="Animation frame height multiplier over the montage height",
    )
    palette_colors: int = Field(
        default=256,
        ge=2,
        le=256,
        description="Size of the shared animation palette",
    )
    decode_workers: int = Field(
        default=4,
        ge=1,
        description="Threads used to decode frames per export",
    )
    filename_prefix: str = Field(
        default="film-strip",
        description="Prefix of suggested download filenames",
    )
    
    def default_settings(self) -> ExportSettings:
        return ExportSettings(
            frame_height_px=self.frame_height_px,
            padding_px=self.padding_px,
            show_timestamps=self.show_timestamps,
        )


class UploadConfig(BaseModel):
    """Trace upload configuration."""
    
    accepted_extensions: List[str] = Field(
        default_factory=lambda: [".json"],
        description="File extensions accepted on upload",
    )


class ServerConfig(BaseModel):
    """Server configuration."""
    
    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8002, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    
    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the filmstrip service.
    
    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """
    
    app: AppConfig = Field(default_factory=AppConfig)
    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    upload: UploadConfig = Field(default_factory=UploadConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.
    
    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values
        
    Args:
        config_path: Path to config.yaml. If None, uses FILMSTRIP_CONFIG
            or searches common locations.
        
    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        config_path = os.environ.get("FILMSTRIP_CONFIG")
    
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break
    
    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.debug("No config file found, using defaults and environment variables")
    
    _apply_env_overrides(config_data)
    
    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""
    
    # Export settings
    if env_height := os.environ.get("FILMSTRIP_EXPORT_HEIGHT"):
        config_data.setdefault("export", {})["frame_height_px"] = int(env_height)
    if env_padding := os.environ.get("FILMSTRIP_EXPORT_PADDING"):
        config_data.setdefault("export", {})["padding_px"] = int(env_padding)
    if env_delay := os.environ.get("FILMSTRIP_FRAME_DELAY_MS"):
        config_data.setdefault("export", {})["animation_frame_delay_ms"] = int(env_delay)
    if env_workers := os.environ.get("FILMSTRIP_DECODE_WORKERS"):
        config_data.setdefault("export", {})["decode_workers"] = int(env_workers)
    
    # Server settings (Cloud Run uses PORT env var)
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("FILMSTRIP_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    
    # Logging settings
    if env_log := os.environ.get("FILMSTRIP_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)
    
    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    
    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
