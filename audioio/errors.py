"""Custom exceptions for audio I/O operations."""

from typing import Any


class AudioIOError(Exception):
    """Base exception for all audio I/O errors.

    Attributes:
        message: Human-readable error description.
        code: Short error code string (e.g., "INVALID_AUDIO").
        details: Optional dictionary with additional context.
    """

    def __init__(
        self,
        message: str,
        code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
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
        return f"{self.__class__.__name__}(message={self.message!r}, code={self.code!r}, details={self.details!r})"

    def to_dict(self) -> dict[str, Any]:
        """Render as the JSON error payload printed by the CLI."""
        payload: dict[str, Any] = {"error": str(self), "code": self.code, "type": type(self).__name__}
        if self.details:
            payload["details"] = self.details
        return payload


class AudioDecodeError(AudioIOError):
    """Raised when a recording cannot be decoded.

    Common codes:
        - INVALID_AUDIO: File is not a readable audio container.
        - FILE_NOT_FOUND: Audio file does not exist.
        - EMPTY_FILE: File has zero bytes.
        - EMPTY_AUDIO: Container decoded but holds no frames.
    """
    pass


class AudioValidationError(AudioIOError):
    """Raised when a decoded recording fails validation.

    Common codes:
        - EMPTY_AUDIO: Waveform has no samples.
        - TOO_SHORT / TOO_LONG: Duration outside the configured bounds.
        - INVALID_SAMPLE_RATE: Sample rate outside valid range.
        - TOO_MANY_CHANNELS: More channels than allowed.
        - SILENCE: Recording is near-silent (RMS below threshold).
        - NON_FINITE: Waveform contains NaN or Inf values.
        - INVALID_DTYPE: Waveform is not a float tensor.
    """
    pass


class AudioPreprocessError(AudioIOError):
    """Raised when downmixing or resampling fails.

    Common codes:
        - INVALID_SHAPE: Input is not [channels, samples].
        - UNSUPPORTED_CHANNELS: Cannot downmix this channel count.
        - RESAMPLE_FAILED: Resampling operation failed.
    """
    pass


class AudioWriteError(AudioIOError):
    """Raised when a buffer cannot be serialized to a WAV container.

    Common codes:
        - EMPTY_BUFFER: Nothing to write.
        - WRITE_FAILED: soundfile refused the write.
    """
    pass
