"""Minimal WAV serialization for extracted clips."""

import io
from pathlib import Path

import soundfile as sf

from .buffer import PcmBuffer
from .errors import AudioWriteError


# 32-bit float keeps extracted samples bit-identical to the analysed buffer
WAV_SUBTYPE = "FLOAT"


def write_wav(buffer: PcmBuffer, path: str | Path) -> Path:
    """Write a buffer to disk as a float32 WAV file.

    Args:
        buffer: Buffer to serialize.
        path: Destination path. Parent directories are created.

    Returns:
        The path written to.

    Raises:
        AudioWriteError: If the buffer is empty or the write fails.
    """
    path = Path(path)
    _ensure_not_empty(buffer, str(path))
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        sf.write(str(path), _to_numpy(buffer), buffer.sample_rate, format="WAV", subtype=WAV_SUBTYPE)
    except Exception as e:
        raise AudioWriteError(
            message=f"Failed to write WAV file: {e}",
            code="WRITE_FAILED",
            details={"path": str(path), "error": str(e)},
        ) from e

    return path


def wav_bytes(buffer: PcmBuffer) -> bytes:
    """Serialize a buffer to in-memory WAV bytes."""
    _ensure_not_empty(buffer, "bytes")

    out = io.BytesIO()
    try:
        sf.write(out, _to_numpy(buffer), buffer.sample_rate, format="WAV", subtype=WAV_SUBTYPE)
    except Exception as e:
        raise AudioWriteError(
            message=f"Failed to encode WAV bytes: {e}",
            code="WRITE_FAILED",
            details={"error": str(e)},
        ) from e
    return out.getvalue()


def _ensure_not_empty(buffer: PcmBuffer, target: str) -> None:
    if buffer.frame_count == 0:
        raise AudioWriteError(
            message="Cannot write an empty buffer",
            code="EMPTY_BUFFER",
            details={"target": target},
        )


def _to_numpy(buffer: PcmBuffer):
    # soundfile wants (frames,) or (frames, channels)
    data = buffer.samples.detach().cpu().float()
    if buffer.channels == 1:
        return data[0].numpy()
    return data.T.contiguous().numpy()
