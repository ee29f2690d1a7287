"""Call detection module: scanning, segmentation and extraction.

This module provides:
- Sliding-window inference over a recording (scan)
- Merging noisy detections into per-label segments (segment)
- Cutting and splicing segments out of the source buffer (extract)
- End-to-end orchestration (pipeline)

Example:
    >>> from classifier import get_classifier
    >>> from detection import isolate_calls, splice_segments
    >>> result = isolate_calls("dawn_chorus.wav", get_classifier("stub"))
    >>> label = result.summaries[0].label
    >>> clip = splice_segments(result.segments[label], result.buffer)
"""

from .cancel import CancellationToken
from .errors import (
    DetectionError,
    ExtractionError,
    ScanConfigError,
    ScanSetupError,
    ScanWindowError,
)
from .extract import concatenate, extract_segment, splice_segments
from .pipeline import isolate_calls, isolate_calls_from_buffer, resegment
from .scan import ScanConfig, SlidingWindowDetector, count_windows, hop_samples_for
from .schema import (
    Detection,
    IsolationResult,
    LabelSummary,
    ScanResult,
    Segment,
    TrimMap,
    TrimSpec,
)
from .segment import SegmentationConfig, merge_label_detections, segment_detections, summarize_segments

__all__ = [
    # Pipeline
    "isolate_calls",
    "isolate_calls_from_buffer",
    "resegment",
    # Scan
    "ScanConfig",
    "SlidingWindowDetector",
    "CancellationToken",
    "count_windows",
    "hop_samples_for",
    # Segmentation
    "SegmentationConfig",
    "segment_detections",
    "merge_label_detections",
    "summarize_segments",
    # Extraction
    "extract_segment",
    "concatenate",
    "splice_segments",
    # Schema
    "Detection",
    "Segment",
    "TrimSpec",
    "TrimMap",
    "ScanResult",
    "LabelSummary",
    "IsolationResult",
    # Errors
    "DetectionError",
    "ScanConfigError",
    "ScanSetupError",
    "ScanWindowError",
    "ExtractionError",
]
