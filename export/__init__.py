"""Clip export: filenames and WAV assembly for isolated calls.

Example:
    >>> from export import export_clips
    >>> paths = export_clips("per_call", result.segments, result.buffer, "clips/", recorded_at)
"""

from .assemble import (
    EXPORT_MODES,
    ExportMode,
    cleanup_files,
    export_clips,
    export_per_call,
    export_per_label,
)
from .errors import ExportError
from .filenames import INVALID_FILENAME_CHARS, generate_filename, sanitize_filename

__all__ = [
    "export_per_label",
    "export_per_call",
    "export_clips",
    "cleanup_files",
    "ExportMode",
    "EXPORT_MODES",
    "generate_filename",
    "sanitize_filename",
    "INVALID_FILENAME_CHARS",
    "ExportError",
]
