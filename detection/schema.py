"""Schema definitions for detections, segments and pipeline results.

Example:
    >>> from detection.schema import Detection, Segment
    >>> det = Detection(label="Turdus migratorius_American Robin", start_sec=1.0, end_sec=4.0, confidence=0.8)
    >>> seg = Segment(start_sample=48000, end_sample=96000, confidence=0.8)
    >>> seg.duration_sec(48000)
    1.0
"""

from dataclasses import dataclass, field
from typing import Any, Literal

from audioio import PcmBuffer


ScanStatus = Literal["completed", "cancelled"]


@dataclass(frozen=True)
class Detection:
    """One classifier verdict over a time window.

    Detections from overlapping windows overlap in time and may share a
    label; the segmentation engine resolves that.

    Attributes:
        label: Opaque label token.
        start_sec: Window start in seconds.
        end_sec: Window end in seconds (exclusive of zero padding).
        confidence: Classifier confidence (0.0 to 1.0).
    """

    label: str
    start_sec: float
    end_sec: float
    confidence: float

    def __post_init__(self) -> None:
        if not self.end_sec > self.start_sec:
            raise ValueError(
                f"Detection end_sec ({self.end_sec}) must be > start_sec ({self.start_sec})"
            )
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Detection confidence must be in [0, 1], got {self.confidence}")

    @property
    def duration_sec(self) -> float:
        return self.end_sec - self.start_sec

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "label": self.label,
            "start_sec": round(self.start_sec, 6),
            "end_sec": round(self.end_sec, 6),
            "confidence": round(self.confidence, 6),
        }


@dataclass(frozen=True)
class Segment:
    """A finalized half-open sample range ``[start_sample, end_sample)``.

    Segments of one label never overlap. They are only produced by
    ``segment_detections``; trimming happens at extraction time and never
    alters a stored segment.

    Attributes:
        start_sample: First sample index (inclusive).
        end_sample: Last sample index (exclusive).
        confidence: Highest confidence among contributing detections.
    """

    start_sample: int
    end_sample: int
    confidence: float

    def __post_init__(self) -> None:
        if not self.end_sample > self.start_sample:
            raise ValueError(
                f"Segment end_sample ({self.end_sample}) must be > start_sample ({self.start_sample})"
            )

    @property
    def frame_count(self) -> int:
        return self.end_sample - self.start_sample

    def start_sec(self, sample_rate: int) -> float:
        return self.start_sample / sample_rate

    def end_sec(self, sample_rate: int) -> float:
        return self.end_sample / sample_rate

    def duration_sec(self, sample_rate: int) -> float:
        """Return segment duration in seconds at ``sample_rate``."""
        return self.frame_count / sample_rate

    def overlaps(self, other: "Segment") -> bool:
        """Whether two half-open ranges share at least one sample."""
        return self.start_sample < other.end_sample and other.start_sample < self.end_sample

    def to_dict(self, sample_rate: int | None = None) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Args:
            sample_rate: When given, seconds are included next to samples.
        """
        result: dict[str, Any] = {
            "start_sample": self.start_sample,
            "end_sample": self.end_sample,
            "confidence": round(self.confidence, 6),
        }
        if sample_rate:
            result["start_sec"] = round(self.start_sec(sample_rate), 6)
            result["end_sec"] = round(self.end_sec(sample_rate), 6)
        return result


@dataclass(frozen=True)
class TrimSpec:
    """User trim applied to one segment at extraction time.

    ``trim_start_sec + trim_end_sec`` may exceed the segment duration; the
    extractor clamps rather than rejects.

    Attributes:
        trim_start_sec: Seconds removed from the segment start.
        trim_end_sec: Seconds removed from the segment end.
    """

    trim_start_sec: float = 0.0
    trim_end_sec: float = 0.0

    def __post_init__(self) -> None:
        if self.trim_start_sec < 0 or self.trim_end_sec < 0:
            raise ValueError(
                f"Trim amounts must be >= 0, got start={self.trim_start_sec} end={self.trim_end_sec}"
            )

    @property
    def is_identity(self) -> bool:
        return self.trim_start_sec == 0 and self.trim_end_sec == 0


# label -> segment index -> trim
TrimMap = dict[str, dict[int, TrimSpec]]


@dataclass(frozen=True)
class ScanResult:
    """Outcome of a sliding-window scan.

    A cancelled scan is not an error: ``status`` is "cancelled" and
    ``detections`` is empty.

    Attributes:
        status: "completed" or "cancelled".
        detections: Accepted detections in window order.
        windows_completed: Windows processed before the scan ended.
        total_windows: Windows planned for the buffer.
        failed_windows: Windows whose classification failed and were skipped.
        window_samples: Window length used.
        hop_samples: Hop length used.
    """

    status: ScanStatus
    detections: tuple[Detection, ...] = ()
    windows_completed: int = 0
    total_windows: int = 0
    failed_windows: int = 0
    window_samples: int = 0
    hop_samples: int = 0

    @property
    def cancelled(self) -> bool:
        return self.status == "cancelled"

    @property
    def completed(self) -> bool:
        return self.status == "completed"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "status": self.status,
            "windows_completed": self.windows_completed,
            "total_windows": self.total_windows,
            "failed_windows": self.failed_windows,
            "window_samples": self.window_samples,
            "hop_samples": self.hop_samples,
            "detections": [d.to_dict() for d in self.detections],
        }


@dataclass(frozen=True)
class LabelSummary:
    """Per-label overview of the produced segments.

    Attributes:
        label: Label token.
        max_confidence: Highest segment confidence.
        average_confidence: Mean segment confidence.
        clip_count: Number of segments.
        total_duration_sec: Summed segment duration.
    """

    label: str
    max_confidence: float
    average_confidence: float
    clip_count: int
    total_duration_sec: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "max_confidence": round(self.max_confidence, 6),
            "average_confidence": round(self.average_confidence, 6),
            "clip_count": self.clip_count,
            "total_duration_sec": round(self.total_duration_sec, 6),
        }


@dataclass
class IsolationResult:
    """Complete result of isolating calls from one recording.

    Attributes:
        status: "completed" or "cancelled".
        buffer: The analysed source buffer; clips are extracted from it.
        detections: Raw accepted detections from the scan.
        segments: Label -> segments map (empty when cancelled).
        summaries: Per-label summaries, highest confidence first.
        scan: The underlying ScanResult.
    """

    status: ScanStatus
    buffer: PcmBuffer
    detections: list[Detection]
    segments: dict[str, list[Segment]]
    summaries: list[LabelSummary] = field(default_factory=list)
    scan: ScanResult | None = None

    @property
    def cancelled(self) -> bool:
        return self.status == "cancelled"

    @property
    def failed_windows(self) -> int:
        return self.scan.failed_windows if self.scan else 0

    @property
    def segment_count(self) -> int:
        """Return number of segments over all labels."""
        return sum(len(segs) for segs in self.segments.values())

    def to_dict(self, include_detections: bool = False) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Args:
            include_detections: Whether to include raw detections.
        """
        sample_rate = self.buffer.sample_rate
        result: dict[str, Any] = {
            "status": self.status,
            "sample_rate": sample_rate,
            "duration_sec": round(self.buffer.duration_sec, 6),
            "failed_windows": self.failed_windows,
            "summaries": [s.to_dict() for s in self.summaries],
            "segments": {
                label: [seg.to_dict(sample_rate) for seg in segs]
                for label, segs in sorted(self.segments.items())
            },
        }
        if include_detections:
            result["detections"] = [d.to_dict() for d in self.detections]
        return result
