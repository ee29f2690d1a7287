"""Turn noisy per-window detections into clean, non-overlapping segments.

Order of operations (each step feeds the next):
1. Drop detections below the confidence threshold.
2. Group by label.
3. Per label, fold detections separated by at most ``merge_gap_sec`` into
   one event (end and confidence take the maximum).
4. Re-sort every merged event across all labels by start time.
5. Pull both boundaries inward by ``boundary_correction_sec``; events
   that vanish are discarded.
6. Add trailing padding, shrunk so it stops ``safety_margin_sec`` short of
   the next event of any label. An optional lead-in is bounded by what the
   previous events already occupy.
7. Clamp to the recording.
8. Drop events shorter than ``min_clip_sec``.
9. Quantize to samples with floor, dropping events the floor pushed under
   ``min_clip_sec``.
10. Regroup by label.

Padding is decided on the global ordering in step 6 because one label's
padded tail must not run into audio another label's event starts in.

Example:
    >>> from detection.segment import SegmentationConfig, segment_detections
    >>> config = SegmentationConfig(confidence_threshold=0.5, padding_sec=0.1)
    >>> segments = segment_detections(detections, audio_duration_sec=60.0, sample_rate=48000, config=config)
    >>> sorted(segments)
    ['Turdus migratorius_American Robin']
"""

from dataclasses import dataclass
from typing import Iterable

from .schema import Detection, LabelSummary, Segment
from .utils import seconds_to_sample_index


@dataclass(frozen=True)
class SegmentationConfig:
    """Configuration for merging detections into segments.

    Attributes:
        confidence_threshold: Detections with confidence below this are
            ignored. Default 0.25.
        padding_sec: Maximum trailing padding after each event, so call
            decay is not clipped. Default 0.05.
        merge_gap_sec: Largest silence between two same-label detections
            that still counts as one event. Default 0.25.
        min_clip_sec: Shortest segment kept after padding and clamping.
            Default 0.30.
        boundary_correction_sec: Inward correction applied to both ends
            of every merged event. Compensates a classifier that reports
            calls on every window merely touching them. Default 0.75,
            tuned for 3 s windows; set to 0 for a classifier without that
            bias.
        lead_in_sec: Padding before each event. Default 0.0 so clips
            start on the call.
        safety_margin_sec: Gap kept between a truncated trailing pad and
            the next event. Default 0.01.
    """

    confidence_threshold: float = 0.25
    padding_sec: float = 0.05
    merge_gap_sec: float = 0.25
    min_clip_sec: float = 0.30
    boundary_correction_sec: float = 0.75
    lead_in_sec: float = 0.0
    safety_margin_sec: float = 0.01

    def __post_init__(self) -> None:
        """Validate configuration on initialization."""
        self.validate()

    def validate(self) -> None:
        """Validate configuration parameters.

        Raises:
            ValueError: If any parameter is invalid.
        """
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValueError(
                f"confidence_threshold must be in [0, 1], got {self.confidence_threshold}"
            )

        for name in (
            "padding_sec",
            "merge_gap_sec",
            "min_clip_sec",
            "boundary_correction_sec",
            "lead_in_sec",
            "safety_margin_sec",
        ):
            value = getattr(self, name)
            if not value >= 0:
                raise ValueError(f"{name} must be >= 0, got {value}")

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "confidence_threshold": self.confidence_threshold,
            "padding_sec": self.padding_sec,
            "merge_gap_sec": self.merge_gap_sec,
            "min_clip_sec": self.min_clip_sec,
            "boundary_correction_sec": self.boundary_correction_sec,
            "lead_in_sec": self.lead_in_sec,
            "safety_margin_sec": self.safety_margin_sec,
        }


@dataclass(frozen=True)
class MergedEvent:
    """One acoustic event of one label, in seconds."""

    label: str
    start_sec: float
    end_sec: float
    confidence: float


def merge_label_detections(
    detections: Iterable[Detection],
    merge_gap_sec: float,
) -> list[MergedEvent]:
    """Fold temporally close detections of a single label into events.

    Detections are sorted by start; a detection whose start is at most
    ``merge_gap_sec`` after the running event's end extends it. Overlapping
    detections have a negative gap and always merge.

    Args:
        detections: Detections that all carry the same label.
        merge_gap_sec: Maximum gap bridged.

    Returns:
        Events ordered by start.
    """
    ordered = sorted(detections, key=lambda d: (d.start_sec, d.end_sec))
    events: list[MergedEvent] = []

    for det in ordered:
        if events and det.start_sec - events[-1].end_sec <= merge_gap_sec:
            last = events[-1]
            events[-1] = MergedEvent(
                label=last.label,
                start_sec=last.start_sec,
                end_sec=max(last.end_sec, det.end_sec),
                confidence=max(last.confidence, det.confidence),
            )
        else:
            events.append(
                MergedEvent(
                    label=det.label,
                    start_sec=det.start_sec,
                    end_sec=det.end_sec,
                    confidence=det.confidence,
                )
            )

    return events


def segment_detections(
    detections: Iterable[Detection],
    audio_duration_sec: float,
    sample_rate: int | float,
    config: SegmentationConfig | None = None,
) -> dict[str, list[Segment]]:
    """Build the label -> segments map for a recording.

    Pure function of its arguments. Never raises for empty or out-of-range
    input; it degrades to an empty map.

    Args:
        detections: Raw detections from the scan, in any order.
        audio_duration_sec: Recording duration; segments are clamped to it.
        sample_rate: Sample rate used to quantize to sample indices.
        config: Segmentation configuration. If None, uses defaults.

    Returns:
        One entry per label with at least one surviving segment; each list
        is ordered by start sample and free of overlaps.
    """
    if config is None:
        config = SegmentationConfig()

    detections = list(detections)
    if not detections or not audio_duration_sec > 0 or not sample_rate > 0:
        return {}

    # Steps 1-2: threshold and group
    by_label: dict[str, list[Detection]] = {}
    for det in detections:
        if det.confidence >= config.confidence_threshold:
            by_label.setdefault(det.label, []).append(det)

    # Step 3: per-label merge
    merged: list[MergedEvent] = []
    for label in sorted(by_label):
        merged.extend(merge_label_detections(by_label[label], config.merge_gap_sec))

    # Step 4: global order, ties broken for determinism
    merged.sort(key=lambda e: (e.start_sec, e.label, e.end_sec))

    # Step 5: boundary correction
    correction = config.boundary_correction_sec
    corrected = [
        MergedEvent(
            label=e.label,
            start_sec=e.start_sec + correction,
            end_sec=e.end_sec - correction,
            confidence=e.confidence,
        )
        for e in merged
        if e.end_sec - correction > e.start_sec + correction
    ]

    result: dict[str, list[Segment]] = {}
    occupied_until: float | None = None

    for index, event in enumerate(corrected):
        # Step 6: trailing pad bounded by the next event of any label
        if index + 1 < len(corrected):
            gap = corrected[index + 1].start_sec - event.end_sec
            trailing = min(config.padding_sec, max(0.0, gap - config.safety_margin_sec))
        else:
            trailing = config.padding_sec

        if occupied_until is None:
            leading = config.lead_in_sec
        else:
            leading = min(config.lead_in_sec, max(0.0, event.start_sec - occupied_until))

        start = event.start_sec - leading
        end = event.end_sec + trailing
        occupied_until = end if occupied_until is None else max(occupied_until, end)

        # Step 7: clamp
        start = max(0.0, start)
        end = min(audio_duration_sec, end)

        # Step 8: minimum duration
        if end <= start or end - start < config.min_clip_sec:
            continue

        # Step 9: quantize
        start_sample = seconds_to_sample_index(start, sample_rate)
        end_sample = seconds_to_sample_index(end, sample_rate)
        # Flooring can shave a sample off; the length must still hold in samples
        if end_sample <= start_sample or (end_sample - start_sample) / sample_rate < config.min_clip_sec:
            continue

        # Step 10: regroup
        result.setdefault(event.label, []).append(
            Segment(start_sample=start_sample, end_sample=end_sample, confidence=event.confidence)
        )

    return result


def summarize_segments(
    segments_by_label: dict[str, list[Segment]],
    sample_rate: int,
) -> list[LabelSummary]:
    """Summarize each label's segments, highest confidence first.

    Labels with an empty segment list are skipped.
    """
    summaries: list[LabelSummary] = []
    for label, segments in segments_by_label.items():
        if not segments:
            continue
        confidences = [s.confidence for s in segments]
        summaries.append(
            LabelSummary(
                label=label,
                max_confidence=max(confidences),
                average_confidence=sum(confidences) / len(confidences),
                clip_count=len(segments),
                total_duration_sec=sum(s.frame_count for s in segments) / sample_rate,
            )
        )

    return sorted(summaries, key=lambda s: (-s.max_confidence, s.label))
