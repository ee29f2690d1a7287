"""Classifier registry for constructing and caching window classifiers.

Classifiers are cached per (id, construction arguments) so that a model is
loaded once per process.

Example:
    >>> from classifier.registry import get_classifier
    >>> clf = get_classifier("torchscript", model_path="birdnet.pt", labels_path="labels_en.txt")
    >>> clf.window_samples
    144000
"""

import threading
from typing import Any, Final

from .errors import ClassifierLoadError
from .stub import StubClassifier
from .torchscript import TorchScriptClassifier
from .types import WindowClassifier


# Thread-safe classifier cache
_classifier_cache: dict[str, WindowClassifier] = {}
_cache_lock = threading.Lock()

# Available classifier IDs and their implementations
AVAILABLE_CLASSIFIERS: Final[dict[str, type]] = {
    "torchscript": TorchScriptClassifier,
    "stub": StubClassifier,
}


def get_classifier(classifier_id: str = "torchscript", **kwargs: Any) -> WindowClassifier:
    """Get or create a cached classifier instance.

    Args:
        classifier_id: Identifier of the classifier. Available:
            - "torchscript": TorchScript model + labels file
            - "stub": Deterministic label cycler
        **kwargs: Constructor arguments of the implementation.

    Returns:
        A classifier implementing the WindowClassifier protocol.

    Raises:
        ClassifierLoadError: If the ID is unknown or construction fails.
    """
    cache_key = _cache_key(classifier_id, kwargs)

    with _cache_lock:
        if cache_key in _classifier_cache:
            return _classifier_cache[cache_key]

        if classifier_id not in AVAILABLE_CLASSIFIERS:
            raise ClassifierLoadError(
                message=f"Unknown classifier ID: {classifier_id}",
                code="CLASSIFIER_NOT_FOUND",
                details={"classifier_id": classifier_id, "available": list(AVAILABLE_CLASSIFIERS.keys())},
            )

        classifier_class = AVAILABLE_CLASSIFIERS[classifier_id]
        try:
            classifier = classifier_class(**kwargs)
        except TypeError as e:
            raise ClassifierLoadError(
                message=f"Invalid arguments for classifier '{classifier_id}': {e}",
                code="INVALID_CONFIG",
                details={"classifier_id": classifier_id, "arguments": sorted(kwargs)},
            ) from e

        _classifier_cache[cache_key] = classifier
        return classifier


def clear_cache() -> None:
    """Drop every cached classifier instance."""
    with _cache_lock:
        _classifier_cache.clear()


def list_available_classifiers() -> list[str]:
    """List classifier IDs that can be passed to get_classifier()."""
    return list(AVAILABLE_CLASSIFIERS.keys())


def _cache_key(classifier_id: str, kwargs: dict[str, Any]) -> str:
    args = ",".join(f"{k}={kwargs[k]!r}" for k in sorted(kwargs))
    return f"{classifier_id}:{args}"
