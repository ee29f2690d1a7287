"""Custom exceptions for window classifiers."""

from typing import Any


class ClassifierError(Exception):
    """Base exception for all classifier errors.

    Attributes:
        message: Human-readable error description.
        code: Short error code string (e.g., "LOAD_FAILED").
        details: Optional dictionary with additional context.
    """

    def __init__(
        self,
        message: str,
        code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ClassifierError.

        Args:
            message: Human-readable error description.
            code: Short error code string.
            details: Optional dictionary with additional context.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        """Return formatted error string."""
        if self.details:
            return f"[{self.code}] {self.message} (details: {self.details})"
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        """Return repr string."""
        return f"{self.__class__.__name__}(message={self.message!r}, code={self.code!r}, details={self.details!r})"

    def to_dict(self) -> dict[str, Any]:
        """Render as the JSON error payload printed by the CLI."""
        payload: dict[str, Any] = {"error": str(self), "code": self.code, "type": type(self).__name__}
        if self.details:
            payload["details"] = self.details
        return payload


class ClassifierLoadError(ClassifierError):
    """Raised when a classifier cannot be constructed.

    This is a setup failure: no scan may start without a classifier.

    Common codes:
        - CLASSIFIER_NOT_FOUND: Classifier ID not found in registry.
        - FILE_NOT_FOUND: Model file does not exist.
        - LOAD_FAILED: Model file exists but failed to load.
        - LABELS_NOT_FOUND: Labels file does not exist.
        - EMPTY_LABELS: Labels file holds no usable label.
        - INVALID_CONFIG: Window length or sample rate is not usable.
    """
    pass


class ClassificationError(ClassifierError):
    """Raised when classifying a single window fails.

    The scanner treats this as recoverable: the window is skipped.

    Common codes:
        - INVALID_INPUT: Window has the wrong shape.
        - INFERENCE_FAILED: Model forward pass failed.
        - EMPTY_OUTPUT: Model produced no scores.
    """
    pass
