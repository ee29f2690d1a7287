"""Audio loading functions for field recordings."""

import io
from pathlib import Path

import numpy as np
import soundfile as sf
import torch

from .errors import AudioDecodeError


def load_wav(path: str | Path) -> tuple[torch.Tensor, int]:
    """Load an audio file from disk.

    Any container libsndfile understands (WAV, FLAC, OGG, AIFF, ...) is
    accepted; the name is kept for the common case.

    Args:
        path: Path to the audio file.

    Returns:
        Tuple of (waveform, sample_rate) where waveform is a float32 tensor
        with shape [channels, num_samples].

    Raises:
        AudioDecodeError: If file is missing, empty or cannot be decoded.

    Examples:
        >>> waveform, sr = load_wav("dawn_chorus.wav")
        >>> waveform.shape  # [channels, samples]
        torch.Size([1, 480000])
    """
    path = Path(path)

    if not path.exists():
        raise AudioDecodeError(
            message=f"Audio file not found: {path}",
            code="FILE_NOT_FOUND",
            details={"path": str(path)},
        )

    if path.stat().st_size == 0:
        raise AudioDecodeError(
            message=f"Audio file is empty: {path}",
            code="EMPTY_FILE",
            details={"path": str(path)},
        )

    try:
        # soundfile returns (samples,) for mono and (samples, channels) otherwise
        data, sample_rate = sf.read(str(path), dtype="float32", always_2d=False)
    except Exception as e:
        raise AudioDecodeError(
            message=f"Failed to decode audio file: {e}",
            code="INVALID_AUDIO",
            details={"path": str(path), "error": str(e)},
        ) from e

    return _numpy_to_tensor(data, sample_rate, source=str(path))


def load_wav_bytes(data: bytes) -> tuple[torch.Tensor, int]:
    """Load audio from the raw bytes of a container file.

    Args:
        data: Raw bytes of an audio file.

    Returns:
        Tuple of (waveform, sample_rate) where waveform is a float32 tensor
        with shape [channels, num_samples].

    Raises:
        AudioDecodeError: If bytes cannot be decoded.
    """
    if not data:
        raise AudioDecodeError(
            message="Audio data is empty",
            code="EMPTY_FILE",
            details={"bytes_length": 0},
        )

    try:
        audio_data, sample_rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=False)
    except Exception as e:
        raise AudioDecodeError(
            message=f"Failed to decode audio bytes: {e}",
            code="INVALID_AUDIO",
            details={"bytes_length": len(data), "error": str(e)},
        ) from e

    return _numpy_to_tensor(audio_data, sample_rate, source="bytes")


def _numpy_to_tensor(
    data: np.ndarray,
    sample_rate: int,
    source: str,
) -> tuple[torch.Tensor, int]:
    """Convert soundfile output to a [channels, samples] tensor."""
    if data.size == 0:
        raise AudioDecodeError(
            message="Audio contains no samples",
            code="EMPTY_AUDIO",
            details={"source": source},
        )

    waveform = torch.from_numpy(np.ascontiguousarray(data)).float()

    if waveform.ndim == 1:
        waveform = waveform.unsqueeze(0)
    else:
        waveform = waveform.T.contiguous()

    return waveform, int(sample_rate)
