"""Structured logging for pipeline runs.

Every record is rendered as key=value pairs and carries the id of the run
it belongs to, so interleaved output from several recordings can be told
apart.

Example:
    >>> from app.logging import run_context, setup_logging
    >>> setup_logging("INFO")
    >>> with run_context() as run_id:
    ...     isolate_calls("dawn_chorus.wav", classifier)
"""

import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator


# Context variable for run ID (thread-safe)
run_id_var: ContextVar[str] = ContextVar("run_id", default="")


class StructuredFormatter(logging.Formatter):
    """Structured log formatter producing key=value output.

    Formats log messages as:
        timestamp=ISO8601 level=LEVEL logger=NAME run_id=ID message="MSG"
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as structured key=value pairs."""
        timestamp = self.formatTime(record, self.datefmt)
        run_id = run_id_var.get() or "-"

        parts = [
            f"timestamp={timestamp}",
            f"level={record.levelname}",
            f"logger={record.name}",
            f"run_id={run_id}",
        ]

        message = record.getMessage().replace('"', '\\"')
        parts.append(f'message="{message}"')

        if record.exc_info:
            exc_text = self.formatException(record.exc_info)
            exc_text = exc_text.replace("\n", " | ").replace('"', '\\"')
            parts.append(f'exception="{exc_text}"')

        return " ".join(parts)


def setup_logging(log_level: str = "INFO", stream=None) -> None:
    """Configure structured logging on the root logger.

    Existing root handlers are replaced, so calling this twice does not
    duplicate output.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR).
        stream: Output stream. Defaults to stdout.
    """
    formatter = StructuredFormatter(datefmt="%Y-%m-%dT%H:%M:%S%z")

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level.upper())

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)
    handler.setLevel(log_level.upper())
    root_logger.addHandler(handler)

    # Reduce noise from third-party loggers
    logging.getLogger("torch").setLevel(logging.WARNING)


@contextmanager
def run_context(run_id: str | None = None) -> Iterator[str]:
    """Tag every log record emitted inside the block with a run id.

    Args:
        run_id: Id to use. A short random id is generated if None.

    Yields:
        The active run id.
    """
    run_id = run_id or uuid.uuid4().hex[:12]
    token = run_id_var.set(run_id)
    try:
        yield run_id
    finally:
        run_id_var.reset(token)
