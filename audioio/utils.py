"""Utility functions and configuration for audio I/O."""

from dataclasses import dataclass

import torch


@dataclass(frozen=True)
class AudioConfig:
    """Configuration for loading, validating and preprocessing a recording.

    Attributes:
        min_duration_sec: Minimum allowed recording duration in seconds.
        max_duration_sec: Maximum allowed recording duration in seconds.
            Field recordings run long, so the bound is generous.
        target_sample_rate: Sample rate after preprocessing. Should match
            the classifier's expected input rate.
        allow_multi_channel: Whether recordings with more than one channel
            are accepted (they are downmixed).
        reject_silence: Whether to reject near-silent recordings.
        silence_rms_threshold: RMS below which a recording is silent.
        to_mono: Whether to downmix to mono during preprocessing.
        normalize: Whether to peak-normalize during preprocessing. Off by
            default so exported clips keep the recording's levels.
        peak_target: Target peak amplitude for normalization.
    """

    min_duration_sec: float = 0.1
    max_duration_sec: float = 4 * 3600.0
    target_sample_rate: int = 48000
    allow_multi_channel: bool = True
    reject_silence: bool = False
    silence_rms_threshold: float = 1e-5
    to_mono: bool = True
    normalize: bool = False
    peak_target: float = 0.95


def compute_duration_sec(num_samples: int, sample_rate: int) -> float:
    """Compute duration in seconds from sample count and rate.

    Examples:
        >>> compute_duration_sec(48000, 48000)
        1.0
    """
    if sample_rate <= 0:
        return 0.0
    return num_samples / sample_rate


def rms(waveform: torch.Tensor) -> float:
    """Compute root mean square of a waveform of any shape."""
    if waveform.numel() == 0:
        return 0.0
    return float(torch.sqrt(torch.mean(waveform.float() ** 2)))


def ensure_float32_torch(waveform) -> torch.Tensor:
    """Ensure waveform is a float32 torch tensor.

    Examples:
        >>> import torch
        >>> ensure_float32_torch(torch.zeros(1, 100, dtype=torch.int16)).dtype
        torch.float32
    """
    if not isinstance(waveform, torch.Tensor):
        waveform = torch.as_tensor(waveform)
    return waveform.to(dtype=torch.float32)


def safe_peak_normalize(
    waveform: torch.Tensor,
    peak_target: float = 0.95,
    eps: float = 1e-8,
) -> torch.Tensor:
    """Peak normalize waveform to target amplitude.

    A waveform whose peak is below ``eps`` is returned unchanged so that
    silence is never amplified into noise.
    """
    waveform = ensure_float32_torch(waveform)
    peak = waveform.abs().max()

    if peak < eps:
        return waveform

    return waveform * (peak_target / peak)


def clamp_finite(waveform: torch.Tensor, min_val: float = -1.0, max_val: float = 1.0) -> torch.Tensor:
    """Clamp waveform values and replace non-finite values with zero."""
    waveform = torch.where(torch.isfinite(waveform), waveform, torch.zeros_like(waveform))
    return torch.clamp(waveform, min_val, max_val)
