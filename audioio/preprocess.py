"""Audio preprocessing: downmix, resample, optional normalisation."""

import torch
import torchaudio.transforms as T

from .errors import AudioPreprocessError
from .utils import clamp_finite, ensure_float32_torch, safe_peak_normalize


def preprocess_audio(
    waveform: torch.Tensor,
    sample_rate: int,
    target_sample_rate: int = 48000,
    to_mono: bool = True,
    normalize: bool = False,
    peak_target: float = 0.95,
    eps: float = 1e-8,
) -> tuple[torch.Tensor, int]:
    """Bring a decoded recording into the analysis format.

    The output is what both the classifier scan and clip extraction read
    from, so it is the buffer exported clips are cut out of:
    - Mono channel (if to_mono=True); any channel count is averaged
    - Target sample rate (default 48kHz)
    - Float32 dtype, values clamped to [-1, 1] with NaN/Inf zeroed
    - Peak normalized only when normalize=True

    Args:
        waveform: Input audio tensor with shape [channels, samples].
        sample_rate: Input sample rate in Hz.
        target_sample_rate: Output sample rate in Hz.
        to_mono: Whether to downmix to mono.
        normalize: Whether to apply peak normalization.
        peak_target: Target peak amplitude for normalization (0.0 to 1.0).
        eps: Epsilon for numerical stability.

    Returns:
        Tuple of (processed_waveform, target_sample_rate).

    Raises:
        AudioPreprocessError: If the input shape is wrong or resampling fails.

    Examples:
        >>> import torch
        >>> waveform = torch.randn(2, 44100)  # Stereo, 44.1kHz
        >>> processed, sr = preprocess_audio(waveform, 44100)
        >>> processed.shape
        torch.Size([1, 48000])
    """
    waveform = ensure_float32_torch(waveform)

    if waveform.ndim != 2:
        raise AudioPreprocessError(
            message=f"Expected 2D tensor [channels, samples], got shape {list(waveform.shape)}",
            code="INVALID_SHAPE",
            details={"shape": list(waveform.shape)},
        )

    num_channels = waveform.shape[0]

    if num_channels == 0:
        raise AudioPreprocessError(
            message="Cannot preprocess audio with zero channels",
            code="UNSUPPORTED_CHANNELS",
            details={"channels": num_channels},
        )

    if to_mono and num_channels > 1:
        waveform = waveform.mean(dim=0, keepdim=True)

    if sample_rate != target_sample_rate:
        try:
            resampler = T.Resample(
                orig_freq=sample_rate,
                new_freq=target_sample_rate,
                dtype=waveform.dtype,
            )
            waveform = resampler(waveform)
        except Exception as e:
            raise AudioPreprocessError(
                message=f"Resampling failed: {e}",
                code="RESAMPLE_FAILED",
                details={
                    "original_sr": sample_rate,
                    "target_sr": target_sample_rate,
                    "error": str(e),
                },
            ) from e

    if normalize:
        waveform = safe_peak_normalize(waveform, peak_target=peak_target, eps=eps)

    waveform = clamp_finite(waveform, min_val=-1.0, max_val=1.0)

    return waveform.to(dtype=torch.float32).contiguous(), target_sample_rate
