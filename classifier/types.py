"""Type definitions for window classifiers."""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import torch


@dataclass(frozen=True)
class Classification:
    """Top-1 verdict of a classifier over one window.

    Attributes:
        label: Opaque label token (e.g. "Cardinalis cardinalis_Northern Cardinal").
        confidence: Probability of ``label`` (0.0 to 1.0).
        scores: Optional probability for every label the classifier knows.
    """

    label: str
    confidence: float
    scores: dict[str, float] | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {"label": self.label, "confidence": float(self.confidence)}
        if self.scores is not None:
            result["scores"] = {k: float(v) for k, v in self.scores.items()}
        return result


@runtime_checkable
class WindowClassifier(Protocol):
    """Protocol every window classifier conforms to.

    The scanner derives the window length from ``window_samples``; callers
    never pick it. Implementations are swapped by composition (see
    ``classifier.registry``), not by subclassing.
    """

    @property
    def name(self) -> str:
        """Return the classifier name/identifier."""
        ...

    @property
    def labels(self) -> list[str]:
        """Return the labels the classifier can emit."""
        ...

    @property
    def window_samples(self) -> int:
        """Return the required input length in samples."""
        ...

    @property
    def sample_rate(self) -> int:
        """Return the sample rate the classifier expects."""
        ...

    def classify(self, window: torch.Tensor) -> Classification:
        """Classify one window.

        Args:
            window: Float32 tensor with shape [1, window_samples].

        Returns:
            The top-1 Classification.

        Raises:
            ClassificationError: If this window cannot be classified.
        """
        ...
