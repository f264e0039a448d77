"""
Trace Store
===========

In-memory registry of uploaded trace files.

Each entry records the file metadata (name, size, upload time) next to the
ParsedTrace extracted from it. The trace is extracted once on upload and
is read-only afterwards.

Design Rules:
    - In-memory only, nothing survives a restart
    - Thread-safe (the HTTP layer runs exports in worker threads)
    - Metadata is recorded, never interpreted
"""

import json
import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from filmstrip.models.trace import ParsedTrace
from filmstrip.sampling.sampler import time_delta_ms
from filmstrip.trace.extractor import extract_screenshots


logger = logging.getLogger(__name__)


class TraceUploadError(ValueError):
    """Base class for rejected uploads."""
    pass


class UnsupportedFileType(TraceUploadError):
    """Raised when the file name has a non-accepted extension."""
    pass


class InvalidJson(TraceUploadError):
    """Raised when the file content is not valid JSON."""
    pass


def format_file_size(size: int) -> str:
    """
    Human-readable byte count.
    
    Examples:
        0    -> "0 Bytes"
        1536 -> "1.5 KB"
    """
    if size <= 0:
        return "0 Bytes"
    
    units = ["Bytes", "KB", "MB", "GB"]
    value = float(size)
    exponent = 0
    while value >= 1024 and exponent < len(units) - 1:
        value /= 1024
        exponent += 1
    return f"{round(value, 2):g} {units[exponent]}"


@dataclass(frozen=True, slots=True)
class TraceFile:
    """
    An uploaded trace file and its extracted screenshots.
    
    Attributes:
        id: Unique identifier (uuid4)
        name: Original file name
        size: Content size in bytes
        uploaded_at: Upload time (UTC)
        trace: Screenshots extracted from the file
    """
    
    id: str
    name: str
    size: int
    uploaded_at: datetime
    trace: ParsedTrace
    
    @property
    def max_gap_ms(self) -> float:
        """Longest gap between consecutive screenshots (0 below two frames)."""
        frames = self.trace.frames
        return max(
            (time_delta_ms(current, previous) for previous, current in zip(frames, frames[1:])),
            default=0.0,
        )
    
    def to_dict(self) -> dict:
        """Export summary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "size": self.size,
            "size_label": format_file_size(self.size),
            "uploaded_at": self.uploaded_at.isoformat(),
            "max_gap_ms": self.max_gap_ms,
            **self.trace.to_dict(),
        }


class TraceStore:
    """
    Thread-safe in-memory collection of trace files.
    
    Example:
        store = TraceStore()
        trace_file = store.add_file("profile.json", raw_bytes)
        store.get_file(trace_file.id)
    """
    
    def __init__(self, accepted_extensions: Sequence[str] = (".json",)) -> None:
        """
        Initialize trace store.
        
        Args:
            accepted_extensions: Lower-case file extensions accepted on upload
        """
        self._accepted_extensions = tuple(ext.lower() for ext in accepted_extensions)
        self._files: Dict[str, TraceFile] = {}
        self._lock = threading.Lock()
    
    @property
    def count(self) -> int:
        with self._lock:
            return len(self._files)
    
    @property
    def is_empty(self) -> bool:
        return self.count == 0
    
    def add_file(self, name: str, content: bytes) -> TraceFile:
        """
        Parse and register an uploaded trace file.
        
        Args:
            name: Original file name
            content: Raw file bytes
            
        Returns:
            The registered TraceFile
            
        Raises:
            UnsupportedFileType: If the extension is not accepted
            InvalidJson: If the content is not valid JSON
            TraceParseError: If the trace shape is invalid
        """
        if not name.lower().endswith(self._accepted_extensions):
            raise UnsupportedFileType("Only JSON files are accepted")
        
        try:
            raw_trace = json.loads(content)
        except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
            raise InvalidJson(f"Invalid JSON format: {e}") from e
        
        trace = extract_screenshots(raw_trace)
        
        trace_file = TraceFile(
            id=str(uuid.uuid4()),
            name=name,
            size=len(content),
            uploaded_at=datetime.now(timezone.utc),
            trace=trace,
        )
        
        with self._lock:
            self._files[trace_file.id] = trace_file
        
        logger.info(
            f"Trace added: name={name}, size={format_file_size(len(content))}, "
            f"screenshots={trace.frame_count}"
        )
        return trace_file
    
    def get_file(self, file_id: str) -> Optional[TraceFile]:
        with self._lock:
            return self._files.get(file_id)
    
    def all_files(self) -> List[TraceFile]:
        """All files in upload order."""
        with self._lock:
            return list(self._files.values())
    
    def remove_file(self, file_id: str) -> bool:
        """
        Remove a file by id.
        
        Returns:
            True if a file was removed, False if the id was unknown.
        """
        with self._lock:
            removed = self._files.pop(file_id, None)
        if removed is not None:
            logger.info(f"Trace removed: name={removed.name}")
        return removed is not None
    
    def clear(self) -> int:
        """
        Remove all files.
        
        Returns:
            Number of files removed.
        """
        with self._lock:
            cleared = len(self._files)
            self._files.clear()
        return cleared
