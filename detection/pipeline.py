"""Call isolation orchestration.

This module provides the entry points that run a recording through the
whole analysis:
1. Audio loading/preprocessing to the classifier's sample rate
2. Sliding-window scan (per-window detections)
3. Merge and segmentation (label -> segments map)
4. Per-label summaries

Example:
    >>> from classifier import get_classifier
    >>> from detection.pipeline import isolate_calls
    >>> clf = get_classifier("stub")
    >>> result = isolate_calls("dawn_chorus.wav", clf)
    >>> [s.label for s in result.summaries]
    ['Poecile atricapillus_Black-capped Chickadee', ...]

    # Raise the threshold after the fact without rescanning
    >>> from detection.segment import SegmentationConfig
    >>> stricter = resegment(result, SegmentationConfig(confidence_threshold=0.6))
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Union

from audioio import AudioConfig, PcmBuffer, load_pcm_source
from classifier.types import WindowClassifier

from .cancel import CancellationToken
from .scan import ProgressCallback, ScanConfig, SlidingWindowDetector
from .schema import IsolationResult
from .segment import SegmentationConfig, segment_detections, summarize_segments


logger = logging.getLogger(__name__)


def isolate_calls_from_buffer(
    buffer: PcmBuffer,
    classifier: WindowClassifier,
    scan_config: ScanConfig | None = None,
    segmentation_config: SegmentationConfig | None = None,
    on_progress: ProgressCallback | None = None,
    cancel_token: CancellationToken | None = None,
) -> IsolationResult:
    """Isolate calls from an already-loaded buffer.

    The buffer must already be mono at the classifier's sample rate (see
    ``isolate_calls`` for loading from a file).

    Args:
        buffer: Source buffer.
        classifier: Window classifier to scan with.
        scan_config: Scan configuration. If None, uses defaults.
        segmentation_config: Segmentation configuration. If None, uses defaults.
        on_progress: Optional ``(completed, total, message)`` callback.
        cancel_token: Optional cancellation token.

    Returns:
        IsolationResult. When the scan was cancelled, ``status`` is
        "cancelled" and the segment map is empty.

    Raises:
        ScanSetupError: If the classifier or buffer cannot be scanned.
        ScanWindowError: If a window fails under a strict scan config.
    """
    if segmentation_config is None:
        segmentation_config = SegmentationConfig()

    detector = SlidingWindowDetector(classifier, scan_config)
    scan = detector.detect(buffer, on_progress=on_progress, cancel_token=cancel_token)

    if scan.cancelled:
        return IsolationResult(
            status="cancelled",
            buffer=buffer,
            detections=[],
            segments={},
            scan=scan,
        )

    segments = segment_detections(
        scan.detections,
        audio_duration_sec=buffer.duration_sec,
        sample_rate=buffer.sample_rate,
        config=segmentation_config,
    )
    summaries = summarize_segments(segments, buffer.sample_rate)

    logger.info(
        "Isolation complete: detections=%d labels=%d segments=%d",
        len(scan.detections),
        len(segments),
        sum(len(s) for s in segments.values()),
    )

    return IsolationResult(
        status="completed",
        buffer=buffer,
        detections=list(scan.detections),
        segments=segments,
        summaries=summaries,
        scan=scan,
    )


def isolate_calls(
    path_or_bytes: Union[str, Path, bytes],
    classifier: WindowClassifier,
    audio_config: AudioConfig | None = None,
    scan_config: ScanConfig | None = None,
    segmentation_config: SegmentationConfig | None = None,
    on_progress: ProgressCallback | None = None,
    cancel_token: CancellationToken | None = None,
) -> IsolationResult:
    """Load a recording and isolate its calls.

    The recording is always resampled to the classifier's sample rate,
    whatever ``audio_config.target_sample_rate`` says.

    Args:
        path_or_bytes: Path to an audio file, or raw container bytes.
        classifier: Window classifier to scan with.
        audio_config: Loading/validation configuration. If None, uses defaults.
        scan_config: Scan configuration. If None, uses defaults.
        segmentation_config: Segmentation configuration. If None, uses defaults.
        on_progress: Optional ``(completed, total, message)`` callback.
        cancel_token: Optional cancellation token.

    Returns:
        IsolationResult for the recording.

    Raises:
        AudioDecodeError: If the recording cannot be decoded.
        AudioValidationError: If the recording fails validation.
        AudioPreprocessError: If resampling fails.
        ScanSetupError: If the classifier cannot be used.
    """
    if audio_config is None:
        audio_config = AudioConfig()

    if audio_config.target_sample_rate != classifier.sample_rate:
        audio_config = replace(audio_config, target_sample_rate=classifier.sample_rate)

    buffer = load_pcm_source(path_or_bytes, audio_config)
    logger.info(
        "Loaded recording: duration=%.2fs sample_rate=%d",
        buffer.duration_sec,
        buffer.sample_rate,
    )

    return isolate_calls_from_buffer(
        buffer,
        classifier,
        scan_config=scan_config,
        segmentation_config=segmentation_config,
        on_progress=on_progress,
        cancel_token=cancel_token,
    )


def resegment(
    result: IsolationResult,
    segmentation_config: SegmentationConfig,
) -> IsolationResult:
    """Rebuild segments and summaries from a result's detections.

    Used when the user changes the threshold or padding after a scan; no
    window is classified again. Running it twice with the same config
    yields the same segments. A cancelled result is returned unchanged.
    """
    if result.cancelled:
        return result

    buffer = result.buffer
    segments = segment_detections(
        result.detections,
        audio_duration_sec=buffer.duration_sec,
        sample_rate=buffer.sample_rate,
        config=segmentation_config,
    )

    return IsolationResult(
        status=result.status,
        buffer=buffer,
        detections=list(result.detections),
        segments=segments,
        summaries=summarize_segments(segments, buffer.sample_rate),
        scan=result.scan,
    )
