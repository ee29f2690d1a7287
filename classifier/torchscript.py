"""Model-backed window classifier using a TorchScript export.

Any acoustic model exported with ``torch.jit.save`` that maps a
``[1, window_samples]`` float tensor to per-label logits can be plugged in,
together with its labels file.

Example:
    >>> clf = TorchScriptClassifier("birdnet.pt", "labels_en.txt", window_sec=3.0)
    >>> clf.classify(torch.zeros(1, clf.window_samples))
    Classification(label='...', confidence=0.01, scores=None)
"""

import logging
from pathlib import Path

import torch

from .errors import ClassificationError, ClassifierLoadError
from .labels import load_labels
from .tensor import softmax, top1
from .types import Classification


logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 48000
DEFAULT_WINDOW_SEC = 3.0


class TorchScriptClassifier:
    """Window classifier wrapping a TorchScript model and a labels file.

    Attributes:
        name: Classifier identifier (model file stem).
        labels: Labels, index-aligned with the model output.
        window_samples: Required input length in samples.
        sample_rate: Sample rate the model was trained on.
    """

    def __init__(
        self,
        model_path: str | Path,
        labels_path: str | Path,
        window_sec: float = DEFAULT_WINDOW_SEC,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        device: str = "cpu",
        outputs_logits: bool = True,
        include_scores: bool = False,
    ) -> None:
        """Load the model and labels.

        Args:
            model_path: Path to the TorchScript model file.
            labels_path: Path to the labels file.
            window_sec: Model input duration in seconds.
            sample_rate: Model input sample rate in Hz.
            device: Device to run inference on ("cpu" or "cuda").
            outputs_logits: Whether the model emits logits (softmax is
                applied) or probabilities (used as-is).
            include_scores: Whether Classification.scores is filled.

        Raises:
            ClassifierLoadError: If the model or labels cannot be loaded.
        """
        self._model_path = Path(model_path)
        self._device = device
        self._outputs_logits = outputs_logits
        self._include_scores = include_scores

        if window_sec <= 0 or sample_rate <= 0:
            raise ClassifierLoadError(
                message="window_sec and sample_rate must be positive",
                code="INVALID_CONFIG",
                details={"window_sec": window_sec, "sample_rate": sample_rate},
            )

        self._sample_rate = int(sample_rate)
        self._window_samples = int(round(window_sec * sample_rate))
        self._labels = load_labels(labels_path)
        self._model = self._load_model()

        logger.info(
            "Loaded TorchScript classifier: model=%s labels=%d window_samples=%d sample_rate=%d",
            self._model_path.name,
            len(self._labels),
            self._window_samples,
            self._sample_rate,
        )

    def _load_model(self) -> torch.jit.ScriptModule:
        if not self._model_path.is_file():
            raise ClassifierLoadError(
                message=f"Model file not found: {self._model_path}",
                code="FILE_NOT_FOUND",
                details={"path": str(self._model_path)},
            )

        try:
            model = torch.jit.load(str(self._model_path), map_location=self._device)
            model.eval()
        except Exception as e:
            raise ClassifierLoadError(
                message=f"Failed to load TorchScript model: {e}",
                code="LOAD_FAILED",
                details={"path": str(self._model_path), "error": str(e)},
            ) from e

        return model

    @property
    def name(self) -> str:
        """Return the classifier name/identifier."""
        return self._model_path.stem

    @property
    def labels(self) -> list[str]:
        """Return a copy of the labels list."""
        return self._labels.copy()

    @property
    def window_samples(self) -> int:
        return self._window_samples

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    def classify(self, window: torch.Tensor) -> Classification:
        """Run the model on one window and keep the top-1 label.

        Args:
            window: Float32 tensor with shape [1, window_samples].

        Returns:
            Top-1 Classification.

        Raises:
            ClassificationError: If the window shape is wrong or the model fails.
        """
        if window.ndim != 2 or window.shape[0] != 1 or window.shape[1] != self._window_samples:
            raise ClassificationError(
                message=f"Invalid window shape: {list(window.shape)}. Expected [1, {self._window_samples}]",
                code="INVALID_INPUT",
                details={"shape": list(window.shape), "window_samples": self._window_samples},
            )

        try:
            with torch.inference_mode():
                output = self._model(window.to(self._device, dtype=torch.float32))
        except Exception as e:
            raise ClassificationError(
                message=f"Inference failed: {e}",
                code="INFERENCE_FAILED",
                details={"error": str(e)},
            ) from e

        raw = output.detach().cpu().flatten()
        # Some exports append extra heads after the label logits
        if raw.numel() > len(self._labels):
            raw = raw[: len(self._labels)]

        probs = softmax(raw) if self._outputs_logits else raw.float()
        best = top1(probs)
        if best is None:
            raise ClassificationError(
                message="Model produced no scores",
                code="EMPTY_OUTPUT",
                details={"output_shape": list(output.shape)},
            )

        index, confidence = best
        scores = None
        if self._include_scores:
            scores = {label: float(p) for label, p in zip(self._labels, probs.tolist())}

        return Classification(label=self._labels[index], confidence=confidence, scores=scores)
