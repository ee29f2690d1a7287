"""Custom exceptions for clip export."""

from typing import Any


class ExportError(Exception):
    """Raised when exported clips cannot be produced.

    Common codes:
        - WRITE_FAILED: A clip could not be written to disk.
        - INVALID_MODE: Unknown export mode requested.
        - OUTPUT_DIR_INVALID: Output path exists and is not a directory.

    Attributes:
        message: Human-readable error description.
        code: Short error code string.
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
