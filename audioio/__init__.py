"""PCM source and sink of the call-isolation pipeline.

Recordings are decoded with soundfile, checked against an ``AudioConfig``
and brought to the classifier's input format (mono, classifier sample
rate). Extracted clips leave through ``write_wav``.

Example:
    >>> from audioio import load_pcm_source, AudioConfig
    >>> buffer = load_pcm_source("dawn_chorus.wav", AudioConfig(target_sample_rate=48000))
    >>> buffer.samples.shape
    torch.Size([1, 2880000])
"""

import logging
from pathlib import Path
from typing import Union

from .buffer import PcmBuffer
from .errors import (
    AudioDecodeError,
    AudioIOError,
    AudioPreprocessError,
    AudioValidationError,
    AudioWriteError,
)
from .loader import load_wav, load_wav_bytes
from .preprocess import preprocess_audio
from .utils import AudioConfig, clamp_finite, compute_duration_sec, rms, safe_peak_normalize
from .validate import RecordingInfo, validate_recording
from .writer import wav_bytes, write_wav


logger = logging.getLogger(__name__)

__all__ = [
    "load_pcm_source",
    "PcmBuffer",
    "AudioConfig",
    "RecordingInfo",
    # Errors
    "AudioIOError",
    "AudioDecodeError",
    "AudioValidationError",
    "AudioPreprocessError",
    "AudioWriteError",
    # Steps
    "load_wav",
    "load_wav_bytes",
    "validate_recording",
    "preprocess_audio",
    "write_wav",
    "wav_bytes",
    # Helpers
    "compute_duration_sec",
    "rms",
    "safe_peak_normalize",
    "clamp_finite",
]


def load_pcm_source(
    path_or_bytes: Union[str, Path, bytes],
    config: AudioConfig | None = None,
) -> PcmBuffer:
    """Decode, validate and preprocess a recording.

    Args:
        path_or_bytes: File path, or the raw bytes of an audio container.
        config: Audio configuration. If None, uses default AudioConfig().

    Returns:
        Mono PcmBuffer at ``config.target_sample_rate``.

    Raises:
        AudioDecodeError: If the recording cannot be decoded.
        AudioValidationError: If it violates the configured limits.
        AudioPreprocessError: If downmixing or resampling fails.
    """
    config = config or AudioConfig()

    if isinstance(path_or_bytes, bytes):
        waveform, sample_rate = load_wav_bytes(path_or_bytes)
    else:
        waveform, sample_rate = load_wav(path_or_bytes)

    info = validate_recording(waveform, sample_rate, config)
    logger.debug(
        "Decoded recording: channels=%d sample_rate=%d duration=%.2fs rms=%.5f",
        info.channels,
        info.sample_rate,
        info.duration_sec,
        info.rms,
    )

    samples, rate = preprocess_audio(
        waveform,
        sample_rate,
        target_sample_rate=config.target_sample_rate,
        to_mono=config.to_mono,
        normalize=config.normalize,
        peak_target=config.peak_target,
    )
    return PcmBuffer(samples=samples, sample_rate=rate)
