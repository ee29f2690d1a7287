"""Deterministic stand-in classifier for tests and model-less runs."""

import threading

import torch

from .errors import ClassificationError, ClassifierLoadError
from .types import Classification


DEFAULT_STUB_LABELS = (
    "Cardinalis cardinalis_Northern Cardinal",
    "Turdus migratorius_American Robin",
    "Poecile atricapillus_Black-capped Chickadee",
)


class StubClassifier:
    """Classifier that cycles through a fixed label pool.

    The i-th call to ``classify`` (counting from zero) returns
    ``labels[i % len(labels)]`` with confidence ``0.3 + 0.1 * (i % 5)``,
    regardless of the window content. ``reset()`` restarts the sequence so
    repeated scans of the same recording produce the same detections.
    """

    def __init__(
        self,
        labels: list[str] | tuple[str, ...] = DEFAULT_STUB_LABELS,
        window_sec: float = 3.0,
        sample_rate: int = 48000,
    ) -> None:
        if not labels:
            raise ClassifierLoadError(
                message="StubClassifier needs at least one label",
                code="EMPTY_LABELS",
            )
        if window_sec <= 0 or sample_rate <= 0:
            raise ClassifierLoadError(
                message="window_sec and sample_rate must be positive",
                code="INVALID_CONFIG",
                details={"window_sec": window_sec, "sample_rate": sample_rate},
            )

        self._labels = list(labels)
        self._sample_rate = int(sample_rate)
        self._window_samples = int(round(window_sec * sample_rate))
        self._calls = 0
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "stub"

    @property
    def labels(self) -> list[str]:
        return self._labels.copy()

    @property
    def window_samples(self) -> int:
        return self._window_samples

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    def reset(self) -> None:
        """Restart the label/confidence sequence."""
        with self._lock:
            self._calls = 0

    def classify(self, window: torch.Tensor) -> Classification:
        if window.ndim != 2 or window.shape[1] != self._window_samples:
            raise ClassificationError(
                message=f"Invalid window shape: {list(window.shape)}. Expected [1, {self._window_samples}]",
                code="INVALID_INPUT",
                details={"shape": list(window.shape)},
            )

        with self._lock:
            i = self._calls
            self._calls += 1

        return Classification(
            label=self._labels[i % len(self._labels)],
            confidence=round(0.3 + 0.1 * (i % 5), 6),
        )
