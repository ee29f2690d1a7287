"""Sliding-window inference over a whole recording.

The scanner walks the buffer in overlapping windows whose length is the
classifier's input size, classifies each window and keeps the top-1 verdict
when it clears a low acceptance floor. The user-facing confidence threshold
is applied later, by the segmentation engine.

Example:
    >>> from classifier import StubClassifier
    >>> from detection.scan import ScanConfig, SlidingWindowDetector
    >>> detector = SlidingWindowDetector(StubClassifier(), ScanConfig(hop_fraction=0.1))
    >>> result = detector.detect(buffer, on_progress=lambda done, total, msg: None)
    >>> result.status, len(result.detections)
    ('completed', 41)
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

import torch

from audioio import PcmBuffer
from classifier.types import WindowClassifier

from .cancel import CancellationToken
from .errors import ScanConfigError, ScanSetupError, ScanWindowError
from .schema import Detection, ScanResult
from .utils import samples_to_seconds


logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


@dataclass(frozen=True)
class ScanConfig:
    """Configuration for the sliding-window scan.

    Attributes:
        hop_fraction: Hop length as a fraction of the window length.
            Smaller is finer temporal resolution at higher cost. Default 0.1.
        acceptance_floor: Verdicts with confidence <= this are dropped
            during the scan. Default 0.1.
        fail_on_window_error: If True, a failing window aborts the scan
            with ScanWindowError instead of being skipped. Default False.
        progress_message: Message passed to the progress callback.
    """

    hop_fraction: float = 0.1
    acceptance_floor: float = 0.1
    fail_on_window_error: bool = False
    progress_message: str = "Analyzing recording"

    def __post_init__(self) -> None:
        """Validate configuration on initialization."""
        self.validate()

    def validate(self) -> None:
        """Validate configuration parameters.

        Raises:
            ScanConfigError: If any parameter is invalid.
        """
        if not 0 < self.hop_fraction <= 1:
            raise ScanConfigError(
                message=f"hop_fraction must be in (0, 1], got {self.hop_fraction}",
                details={"parameter": "hop_fraction", "value": self.hop_fraction},
            )

        if not 0 <= self.acceptance_floor < 1:
            raise ScanConfigError(
                message=f"acceptance_floor must be in [0, 1), got {self.acceptance_floor}",
                details={"parameter": "acceptance_floor", "value": self.acceptance_floor},
            )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "hop_fraction": self.hop_fraction,
            "acceptance_floor": self.acceptance_floor,
            "fail_on_window_error": self.fail_on_window_error,
        }


def hop_samples_for(window_samples: int, hop_fraction: float) -> int:
    """Hop length in samples for a window length, at least one sample."""
    return max(1, round(window_samples * hop_fraction))


def count_windows(total_samples: int, window_samples: int, hop_samples: int) -> int:
    """Number of windows planned for a buffer.

    ``max(1, floor((total - window) / hop) + 1)``: a buffer shorter than one
    window still gets one (zero-padded) window.

    Examples:
        >>> count_windows(480000, 144000, 14400)
        24
        >>> count_windows(1000, 144000, 14400)
        1
    """
    return max(1, (total_samples - window_samples) // hop_samples + 1)


def window_bounds(index: int, total_samples: int, window_samples: int, hop_samples: int) -> tuple[int, int]:
    """Return the (start, end) sample range of window ``index``, end clamped."""
    start = index * hop_samples
    end = min(start + window_samples, total_samples)
    return start, end


class SlidingWindowDetector:
    """Drives a WindowClassifier across a recording.

    Construction checks the classifier; a classifier that cannot describe a
    usable window is a setup failure and no scan ever starts.

    Attributes:
        classifier: The window classifier.
        config: Scan configuration.
    """

    def __init__(
        self,
        classifier: WindowClassifier,
        config: ScanConfig | None = None,
    ) -> None:
        """Initialize the detector.

        Raises:
            ScanSetupError: INVALID_CLASSIFIER if the classifier reports a
                non-positive window length or sample rate.
        """
        window_samples = getattr(classifier, "window_samples", 0)
        sample_rate = getattr(classifier, "sample_rate", 0)
        if not isinstance(window_samples, int) or window_samples <= 0 or not sample_rate or sample_rate <= 0:
            raise ScanSetupError(
                message="Classifier does not report a usable window length and sample rate",
                code="INVALID_CLASSIFIER",
                details={"window_samples": window_samples, "sample_rate": sample_rate},
            )

        self.classifier = classifier
        self.config = config or ScanConfig()

    @property
    def window_samples(self) -> int:
        return self.classifier.window_samples

    @property
    def hop_samples(self) -> int:
        return hop_samples_for(self.classifier.window_samples, self.config.hop_fraction)

    def detect(
        self,
        buffer: PcmBuffer,
        on_progress: ProgressCallback | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> ScanResult:
        """Scan a buffer and return the accepted per-window detections.

        Args:
            buffer: Mono source buffer at the classifier's sample rate.
                Only read, never modified.
            on_progress: Optional ``(completed, total, message)`` callback,
                invoked on the calling thread after every window.
            cancel_token: Optional token, checked before every window.

        Returns:
            ScanResult with status "completed", or "cancelled" when the
            token fired (detections are then discarded).

        Raises:
            ScanSetupError: If the buffer's sample rate differs from the
                classifier's.
            ScanWindowError: If a window fails and fail_on_window_error is set.
        """
        sample_rate = buffer.sample_rate
        if sample_rate != self.classifier.sample_rate:
            raise ScanSetupError(
                message=(
                    f"Buffer sample rate {sample_rate} Hz does not match classifier "
                    f"sample rate {self.classifier.sample_rate} Hz"
                ),
                code="SAMPLE_RATE_MISMATCH",
                details={"buffer_rate": sample_rate, "classifier_rate": self.classifier.sample_rate},
            )

        samples = buffer.mono()
        total_samples = buffer.frame_count
        window_samples = self.window_samples
        hop_samples = self.hop_samples
        total_windows = count_windows(total_samples, window_samples, hop_samples)

        logger.info(
            "Starting scan: classifier=%s frames=%d window_samples=%d hop_samples=%d windows=%d",
            self.classifier.name,
            total_samples,
            window_samples,
            hop_samples,
            total_windows,
        )

        detections: list[Detection] = []
        failed_windows = 0

        for index in range(total_windows):
            if cancel_token is not None and cancel_token.is_cancelled:
                logger.info("Scan cancelled after %d/%d windows", index, total_windows)
                return ScanResult(
                    status="cancelled",
                    windows_completed=index,
                    total_windows=total_windows,
                    failed_windows=failed_windows,
                    window_samples=window_samples,
                    hop_samples=hop_samples,
                )

            start, end = window_bounds(index, total_samples, window_samples, hop_samples)

            if end > start:
                window = _pad_window(samples[start:end], window_samples)
                try:
                    detection = self._classify(window, start, end, sample_rate)
                except Exception as e:
                    failed_windows += 1
                    logger.warning(
                        "Window %d failed (%d-%d): %s",
                        index,
                        start,
                        end,
                        e,
                    )
                    if self.config.fail_on_window_error:
                        raise ScanWindowError(
                            message=f"Classification failed for window {index}: {e}",
                            code="WINDOW_FAILED",
                            details={"index": index, "start_sample": start, "end_sample": end},
                        ) from e
                else:
                    if detection is not None:
                        detections.append(detection)

            if on_progress is not None:
                on_progress(index + 1, total_windows, self.config.progress_message)

        logger.info(
            "Scan complete: detections=%d failed_windows=%d",
            len(detections),
            failed_windows,
        )

        return ScanResult(
            status="completed",
            detections=tuple(detections),
            windows_completed=total_windows,
            total_windows=total_windows,
            failed_windows=failed_windows,
            window_samples=window_samples,
            hop_samples=hop_samples,
        )

    async def detect_async(
        self,
        buffer: PcmBuffer,
        on_progress: ProgressCallback | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> ScanResult:
        """Run ``detect`` on a worker thread.

        Cancelling the awaiting task fires the token, so the worker stops at
        the next window boundary instead of running to completion.
        ``on_progress`` is called from the worker thread; marshal it as needed.
        """
        token = cancel_token or CancellationToken()
        try:
            return await asyncio.to_thread(self.detect, buffer, on_progress, token)
        except asyncio.CancelledError:
            token.cancel()
            raise

    def _classify(
        self,
        window: torch.Tensor,
        start: int,
        end: int,
        sample_rate: int,
    ) -> Detection | None:
        verdict = self.classifier.classify(window)
        confidence = min(1.0, max(0.0, float(verdict.confidence)))

        if confidence <= self.config.acceptance_floor:
            return None

        return Detection(
            label=verdict.label,
            start_sec=samples_to_seconds(start, sample_rate),
            end_sec=samples_to_seconds(end, sample_rate),
            confidence=confidence,
        )


def _pad_window(chunk: torch.Tensor, window_samples: int) -> torch.Tensor:
    """Copy a 1D chunk into a [1, window_samples] tensor, zero-padded on the right."""
    chunk = chunk.to(dtype=torch.float32)
    if chunk.numel() >= window_samples:
        return chunk[:window_samples].clone().unsqueeze(0)

    window = torch.zeros(1, window_samples, dtype=torch.float32)
    window[0, : chunk.numel()] = chunk
    return window
