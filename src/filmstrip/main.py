"""
Filmstrip Main Application
==========================

FastAPI entry point for the trace filmstrip service.

Pipeline:
    upload (raw JSON bytes) -> TraceStore (extract once)
    -> sample_frames (per request policy)
    -> ExportCompositor (PNG montage / GIF animation)

Endpoints:
    GET    /                     - Service information
    GET    /health               - Liveness probe
    POST   /traces?name=...      - Upload a trace (raw JSON body)
    GET    /traces               - List uploaded traces
    GET    /traces/{id}          - Trace summary
    DELETE /traces/{id}          - Remove a trace
    DELETE /traces               - Remove all traces
    POST   /traces/{id}/frames   - Sampled display frames for a policy
    POST   /traces/{id}/export   - Rendered artifact download
"""

import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response

from filmstrip.config import settings
from filmstrip.export import ExportCompositor, ExportFailed
from filmstrip.models.export import ExportFormat, ExportRequest, ExportSettings
from filmstrip.models.sampling import SamplingPolicy
from filmstrip.sampling import (
    format_interval_label,
    sample_frames,
    total_duration_ms,
)
from filmstrip.store import TraceFile, TraceStore, TraceUploadError
from filmstrip.trace import TraceParseError, to_data_uri


logger = logging.getLogger(__name__)


# =============================================================================
# Global State
# =============================================================================

_store: Optional[TraceStore] = None
_compositor: Optional[ExportCompositor] = None
_startup_time: float = 0.0

# Error counters
_upload_error_count: int = 0
_export_error_count: int = 0


# =============================================================================
# Getters
# =============================================================================

def get_store() -> TraceStore:
    if _store is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return _store

def get_compositor() -> ExportCompositor:
    if _compositor is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return _compositor

def get_trace_file(file_id: str) -> TraceFile:
    trace_file = get_store().get_file(file_id)
    if trace_file is None:
        raise HTTPException(status_code=404, detail=f"Trace not found: {file_id}")
    return trace_file


def _effective_policy(trace_file: TraceFile, policy: SamplingPolicy) -> SamplingPolicy:
    """Initialise an unset or oversized range end to the trace length."""
    return policy.fit_to_duration(total_duration_ms(trace_file.trace.frames))


def _policy_with_defaults(requested: SamplingPolicy) -> SamplingPolicy:
    """Fill fields the client left out from the configured sampling defaults."""
    return settings.sampling.default_policy().model_copy(
        update=requested.model_dump(include=requested.model_fields_set)
    )


def _settings_with_defaults(requested: ExportSettings) -> ExportSettings:
    """Fill fields the client left out from the configured export defaults."""
    return settings.export.default_settings().model_copy(
        update=requested.model_dump(include=requested.model_fields_set)
    )


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    global _store, _compositor, _startup_time
    
    _startup_time = time.time()
    logger.info(f"Starting {settings.app.name} {settings.app.version}")
    
    _store = TraceStore(accepted_extensions=settings.upload.accepted_extensions)
    _compositor = ExportCompositor(
        frame_delay_ms=settings.export.animation_frame_delay_ms,
        animation_scale=settings.export.animation_scale,
        palette_colors=settings.export.palette_colors,
        max_workers=settings.export.decode_workers,
        filename_prefix=settings.export.filename_prefix,
    )
    
    yield
    
    cleared = _store.clear()
    logger.info(f"Shutdown complete, released {cleared} traces")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Trace Filmstrip",
    description="Screenshot film strips from browser performance traces",
    version=settings.app.version,
    lifespan=lifespan,
)


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": settings.app.name,
        "version": settings.app.version,
        "status": "running",
        "export_formats": [fmt.value for fmt in ExportFormat],
    })


@app.get("/health")
async def health() -> JSONResponse:
    """Liveness probe - always 200 while the process is running."""
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
        "traces": _store.count if _store else 0,
        "upload_errors": _upload_error_count,
        "export_errors": _export_error_count,
    })


@app.post("/traces", status_code=201)
async def upload_trace(
    request: Request,
    name: str = Query(..., min_length=1, description="Original file name"),
) -> JSONResponse:
    """
    Upload a trace file as the raw request body.
    
    Returns 400 with {error, file_name} when the file is rejected.
    """
    global _upload_error_count
    
    content = await request.body()
    
    try:
        trace_file = await asyncio.to_thread(get_store().add_file, name, content)
    except (TraceUploadError, TraceParseError) as e:
        _upload_error_count += 1
        logger.warning(f"Upload rejected (name={name}): {e}")
        return JSONResponse(
            {"error": str(e), "file_name": name},
            status_code=400,
        )
    
    return JSONResponse(trace_file.to_dict(), status_code=201)


@app.get("/traces")
async def list_traces() -> JSONResponse:
    store = get_store()
    return JSONResponse({
        "count": store.count,
        "traces": [trace_file.to_dict() for trace_file in store.all_files()],
    })


@app.get("/traces/{file_id}")
async def get_trace(file_id: str) -> JSONResponse:
    return JSONResponse(get_trace_file(file_id).to_dict())


@app.delete("/traces/{file_id}")
async def delete_trace(file_id: str) -> JSONResponse:
    if not get_store().remove_file(file_id):
        raise HTTPException(status_code=404, detail=f"Trace not found: {file_id}")
    return JSONResponse({"removed": file_id})


@app.delete("/traces")
async def clear_traces() -> JSONResponse:
    return JSONResponse({"removed": get_store().clear()})


@app.post("/traces/{file_id}/frames")
async def trace_frames(
    file_id: str,
    policy: SamplingPolicy,
    include_images: bool = Query(False, description="Embed data URIs"),
) -> JSONResponse:
    """Sampled display frames for a policy."""
    trace_file = get_trace_file(file_id)
    effective = _effective_policy(trace_file, _policy_with_defaults(policy))
    frames = sample_frames(trace_file.trace, effective)
    
    payload = []
    for frame in frames:
        item = frame.to_dict()
        if include_images:
            item["data_uri"] = to_data_uri(frame.source)
        payload.append(item)
    
    return JSONResponse({
        "total_count": trace_file.trace.frame_count,
        "displayed_count": len(frames),
        "interval_label": format_interval_label(effective.interval_ms),
        "frames": payload,
    })


@app.post("/traces/{file_id}/export")
async def export_trace(file_id: str, export_request: ExportRequest) -> Response:
    """
    Render the sampled frames and return the artifact as a download.
    
    Returns 422 with {error, hint} when the export fails.
    """
    global _export_error_count
    
    trace_file = get_trace_file(file_id)
    policy = _effective_policy(trace_file, _policy_with_defaults(export_request.policy))
    export_settings = _settings_with_defaults(export_request.settings)
    frames = sample_frames(trace_file.trace, policy)
    
    try:
        result = await asyncio.to_thread(
            get_compositor().export,
            frames,
            export_settings,
            export_request.format,
        )
    except ExportFailed as e:
        _export_error_count += 1
        other = ExportFormat.PNG if export_request.format == ExportFormat.GIF else ExportFormat.GIF
        return JSONResponse(
            {
                "error": str(e),
                "hint": f"Try exporting as {other.value.upper()} instead",
            },
            status_code=422,
        )
    
    return Response(
        content=result.data,
        media_type=result.mime_type,
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename}"',
            "X-Frame-Count": str(result.frame_count),
        },
    )


# =============================================================================
# Main Entry Point
# =============================================================================

def run() -> None:
    """Console entry point."""
    import uvicorn
    
    port = int(os.environ.get("PORT", settings.server.port))
    
    uvicorn.run(
        "filmstrip.main:app",
        host=settings.server.host,
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    run()
