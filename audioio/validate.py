"""Checks a decoded recording must pass before it is analysed."""

from dataclasses import dataclass

import torch

from .errors import AudioValidationError
from .utils import AudioConfig, compute_duration_sec, rms


# Field recorders range from 8 kHz voice loggers to 192 kHz ultrasonic rigs
MIN_SAMPLE_RATE = 8000
MAX_SAMPLE_RATE = 192000


@dataclass(frozen=True)
class RecordingInfo:
    """Properties of a recording that passed validation."""

    channels: int
    frames: int
    sample_rate: int
    duration_sec: float
    rms: float


def validate_recording(
    waveform: torch.Tensor,
    sample_rate: int,
    config: AudioConfig | None = None,
) -> RecordingInfo:
    """Validate a decoded recording against an AudioConfig.

    Checks run cheapest first: tensor layout, finiteness, sample rate,
    duration bounds, channel count, then (optionally) silence.

    Args:
        waveform: Audio tensor with shape [channels, samples].
        sample_rate: Sample rate in Hz.
        config: Limits to enforce. If None, uses default AudioConfig().

    Returns:
        RecordingInfo describing the recording.

    Raises:
        AudioValidationError: With one of the codes INVALID_DTYPE,
            EMPTY_AUDIO, NON_FINITE, INVALID_SAMPLE_RATE, TOO_SHORT,
            TOO_LONG, TOO_MANY_CHANNELS or SILENCE.

    Examples:
        >>> info = validate_recording(torch.randn(2, 96000) * 0.1, 48000)
        >>> info.channels, info.duration_sec
        (2, 2.0)
    """
    if config is None:
        config = AudioConfig()

    _check_layout(waveform)
    num_channels, num_samples = waveform.shape
    _check_sample_rate(sample_rate)

    duration_sec = compute_duration_sec(num_samples, sample_rate)
    _check_duration(duration_sec, config, num_samples, sample_rate)

    if num_channels > 1 and not config.allow_multi_channel:
        raise AudioValidationError(
            message=f"Recording has {num_channels} channels, but only mono is allowed",
            code="TOO_MANY_CHANNELS",
            details={"channels": num_channels, "max_allowed": 1},
        )

    level = rms(waveform)
    if config.reject_silence and level < config.silence_rms_threshold:
        raise AudioValidationError(
            message=f"Recording is near-silent (RMS={level:.6f} < {config.silence_rms_threshold})",
            code="SILENCE",
            details={"rms": level, "threshold": config.silence_rms_threshold},
        )

    return RecordingInfo(
        channels=num_channels,
        frames=num_samples,
        sample_rate=sample_rate,
        duration_sec=duration_sec,
        rms=level,
    )


def _check_layout(waveform) -> None:
    if not isinstance(waveform, torch.Tensor) or not waveform.is_floating_point():
        kind = waveform.dtype if isinstance(waveform, torch.Tensor) else type(waveform).__name__
        raise AudioValidationError(
            message=f"Waveform must be a float torch.Tensor, got {kind}",
            code="INVALID_DTYPE",
            details={"actual": str(kind)},
        )

    if waveform.numel() == 0:
        raise AudioValidationError(
            message="Recording holds no samples",
            code="EMPTY_AUDIO",
            details={"shape": list(waveform.shape)},
        )

    if waveform.ndim != 2:
        raise AudioValidationError(
            message=f"Waveform must be 2D [channels, samples], got shape {list(waveform.shape)}",
            code="INVALID_DTYPE",
            details={"shape": list(waveform.shape)},
        )

    finite = torch.isfinite(waveform)
    if not finite.all():
        raise AudioValidationError(
            message="Recording contains NaN or Inf samples",
            code="NON_FINITE",
            details={
                "nan_count": int(torch.isnan(waveform).sum()),
                "inf_count": int(torch.isinf(waveform).sum()),
            },
        )


def _check_sample_rate(sample_rate) -> None:
    if not isinstance(sample_rate, int) or not MIN_SAMPLE_RATE <= sample_rate <= MAX_SAMPLE_RATE:
        raise AudioValidationError(
            message=f"Sample rate must be between {MIN_SAMPLE_RATE} and {MAX_SAMPLE_RATE} Hz, got {sample_rate}",
            code="INVALID_SAMPLE_RATE",
            details={"sample_rate": sample_rate, "min_allowed": MIN_SAMPLE_RATE, "max_allowed": MAX_SAMPLE_RATE},
        )


def _check_duration(duration_sec: float, config: AudioConfig, num_samples: int, sample_rate: int) -> None:
    if duration_sec < config.min_duration_sec:
        code, limit, word = "TOO_SHORT", config.min_duration_sec, "short"
    elif duration_sec > config.max_duration_sec:
        code, limit, word = "TOO_LONG", config.max_duration_sec, "long"
    else:
        return

    raise AudioValidationError(
        message=f"Recording too {word}: {duration_sec:.3f}s (limit {limit}s)",
        code=code,
        details={"duration_sec": duration_sec, "limit_sec": limit, "num_samples": num_samples, "sample_rate": sample_rate},
    )
