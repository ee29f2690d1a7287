"""Wiring from settings to the core pipeline objects.

This module provides:
- Classifier management (lazy loading, optional stub fallback)
- Scan, segmentation and audio configuration built from settings

Example:
    >>> from app.deps import ClassifierManager, get_segmentation_config
    >>> manager = ClassifierManager.from_settings(get_settings())
    >>> result = isolate_calls("dawn_chorus.wav", manager.classifier,
    ...                        segmentation_config=get_segmentation_config())
"""

import logging
import threading
from pathlib import Path

from audioio import AudioConfig
from classifier import ClassifierLoadError, WindowClassifier, get_classifier
from detection import ScanConfig, SegmentationConfig

from .config import Settings, get_settings


logger = logging.getLogger(__name__)


class ClassifierManager:
    """Loads the configured classifier once, on first use.

    When the model-backed classifier cannot be loaded, the manager either
    re-raises (the default) or, with ``allow_stub_fallback``, logs a warning
    and serves the deterministic stub instead. ``using_fallback`` tells
    callers which one they got.

    Attributes:
        classifier_id: Requested classifier identifier.
        model_path: TorchScript model path.
        labels_path: Labels file path.
        device: Device for inference.
        window_sec: Classifier window in seconds.
        sample_rate: Classifier sample rate.
        allow_stub_fallback: Whether load failures fall back to the stub.
    """

    def __init__(
        self,
        classifier_id: str = "torchscript",
        model_path: str | Path | None = None,
        labels_path: str | Path | None = None,
        device: str = "cpu",
        window_sec: float = 3.0,
        sample_rate: int = 48000,
        allow_stub_fallback: bool = False,
    ) -> None:
        self.classifier_id = classifier_id
        self.model_path = model_path
        self.labels_path = labels_path
        self.device = device
        self.window_sec = window_sec
        self.sample_rate = sample_rate
        self.allow_stub_fallback = allow_stub_fallback
        self._classifier: WindowClassifier | None = None
        self._using_fallback = False
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ClassifierManager":
        """Build a manager from application settings."""
        if settings is None:
            settings = get_settings()
        return cls(
            classifier_id=settings.classifier_id,
            model_path=settings.model_path,
            labels_path=settings.labels_path,
            device=settings.device,
            window_sec=settings.window_sec,
            sample_rate=settings.target_sample_rate,
            allow_stub_fallback=settings.allow_stub_fallback,
        )

    def load(self) -> WindowClassifier:
        """Load the classifier if needed and return it.

        Raises:
            ClassifierLoadError: If loading fails and fallback is disabled.
        """
        with self._lock:
            if self._classifier is None:
                self._classifier = self._load()
            return self._classifier

    @property
    def classifier(self) -> WindowClassifier:
        """The loaded classifier, loading it on first access."""
        return self.load()

    @property
    def is_loaded(self) -> bool:
        return self._classifier is not None

    @property
    def using_fallback(self) -> bool:
        """Whether the stub was substituted for a failing classifier."""
        return self._using_fallback

    def _load(self) -> WindowClassifier:
        logger.info(
            "Loading classifier: classifier_id=%s device=%s",
            self.classifier_id,
            self.device,
        )
        try:
            if self.classifier_id == "torchscript":
                _require_paths(self.model_path, self.labels_path)
                return get_classifier(
                    "torchscript",
                    model_path=str(self.model_path),
                    labels_path=str(self.labels_path),
                    window_sec=self.window_sec,
                    sample_rate=self.sample_rate,
                    device=self.device,
                )
            return get_classifier(self.classifier_id, window_sec=self.window_sec, sample_rate=self.sample_rate)
        except ClassifierLoadError as e:
            if not self.allow_stub_fallback:
                raise
            logger.warning("Classifier load failed, falling back to stub: %s", e)
            self._using_fallback = True
            return get_classifier("stub", window_sec=self.window_sec, sample_rate=self.sample_rate)


def _require_paths(model_path, labels_path) -> None:
    missing = [name for name, value in (("model_path", model_path), ("labels_path", labels_path)) if not value]
    if missing:
        raise ClassifierLoadError(
            message=f"TorchScript classifier requires {', '.join(missing)}",
            code="INVALID_CONFIG",
            details={"missing": missing},
        )


def get_scan_config(settings: Settings | None = None) -> ScanConfig:
    """Get scan configuration from settings."""
    if settings is None:
        settings = get_settings()

    return ScanConfig(
        hop_fraction=settings.hop_fraction,
        acceptance_floor=settings.acceptance_floor,
    )


def get_segmentation_config(settings: Settings | None = None) -> SegmentationConfig:
    """Get segmentation configuration from settings."""
    if settings is None:
        settings = get_settings()

    return SegmentationConfig(
        confidence_threshold=settings.confidence_threshold,
        padding_sec=settings.padding_sec,
        merge_gap_sec=settings.merge_gap_sec,
        min_clip_sec=settings.min_clip_sec,
        boundary_correction_sec=settings.boundary_correction_sec,
        lead_in_sec=settings.lead_in_sec,
        safety_margin_sec=settings.safety_margin_sec,
    )


def get_audio_config(settings: Settings | None = None) -> AudioConfig:
    """Get audio configuration from settings.

    Args:
        settings: Application settings. If None, uses get_settings().

    Returns:
        AudioConfig with settings applied.
    """
    if settings is None:
        settings = get_settings()

    return AudioConfig(
        target_sample_rate=settings.target_sample_rate,
        max_duration_sec=settings.max_duration_sec,
    )
