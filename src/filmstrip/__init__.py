"""
Trace Filmstrip
===============

Screenshot film strips from browser performance traces.

This package ingests a Chrome DevTools trace (JSON), extracts the embedded
screenshots, resamples them onto a caller-controlled timeline and renders
the result as a PNG montage or an animated GIF.

Components:
    - trace: Format sniffing and screenshot extraction
    - sampling: Time-range filtering and fixed-cadence resampling
    - export: Montage/animation compositing with a global palette
    - store: In-memory registry of uploaded traces
    - main: FastAPI application

Example:
    import json
    from filmstrip.trace import extract_screenshots
    from filmstrip.sampling import sample_frames
    from filmstrip.export import ExportCompositor
    from filmstrip.models import ExportFormat, ExportSettings, SamplingPolicy
    
    trace = extract_screenshots(json.loads(text))
    frames = sample_frames(trace, SamplingPolicy(use_interval_filtering=True))
    result = ExportCompositor().export(frames, ExportSettings(), ExportFormat.PNG)
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
