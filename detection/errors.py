"""Custom exceptions for scanning, segmentation and extraction."""

from typing import Any


class DetectionError(Exception):
    """Base exception for all detection-pipeline errors.

    Attributes:
        message: Human-readable error description.
        code: Short error code string (e.g., "INVALID_CONFIG").
        details: Optional dictionary with additional context.
    """

    def __init__(
        self,
        message: str,
        code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize DetectionError.

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


class ScanConfigError(DetectionError):
    """Raised when scan configuration is invalid.

    Common codes:
        - INVALID_CONFIG: Configuration parameters are invalid.
    """

    def __init__(
        self,
        message: str,
        code: str = "INVALID_CONFIG",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class ScanSetupError(DetectionError):
    """Raised before any window is classified; no partial result exists.

    Common codes:
        - CLASSIFIER_UNAVAILABLE: Classifier failed to load.
        - INVALID_CLASSIFIER: Classifier reports an unusable window length.
        - SAMPLE_RATE_MISMATCH: Buffer rate differs from the classifier's.
    """
    pass


class ScanWindowError(DetectionError):
    """Raised for a failing window when the scan is configured to be strict.

    Common codes:
        - WINDOW_FAILED: The classifier raised for one window.
    """
    pass


class ExtractionError(DetectionError):
    """Raised when an extraction or concatenation request is unsatisfiable.

    Callers should treat it as "nothing to produce", not as a crash.

    Common codes:
        - EMPTY_RESULT: Segment and trim leave zero frames.
        - EMPTY_INPUT: No buffers or segments to assemble.
        - FORMAT_MISMATCH: Buffers differ in sample rate or channel count.
    """
    pass
