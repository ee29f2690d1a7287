"""Window classifier module.

This module provides:
- The WindowClassifier protocol the scanner drives
- A TorchScript model-backed implementation and a deterministic stub
- A registry for constructing and caching classifiers
- Label file helpers

Example:
    >>> from classifier import get_classifier
    >>> clf = get_classifier("stub", window_sec=3.0, sample_rate=48000)
    >>> clf.classify(torch.zeros(1, clf.window_samples)).label
    'Cardinalis cardinalis_Northern Cardinal'
"""

from .errors import ClassificationError, ClassifierError, ClassifierLoadError
from .labels import load_labels, parse_labels, split_label
from .registry import clear_cache, get_classifier, list_available_classifiers
from .stub import StubClassifier
from .torchscript import TorchScriptClassifier
from .types import Classification, WindowClassifier

__all__ = [
    # Protocol and result
    "WindowClassifier",
    "Classification",
    # Implementations
    "TorchScriptClassifier",
    "StubClassifier",
    # Registry
    "get_classifier",
    "clear_cache",
    "list_available_classifiers",
    # Labels
    "load_labels",
    "parse_labels",
    "split_label",
    # Errors
    "ClassifierError",
    "ClassifierLoadError",
    "ClassificationError",
]
