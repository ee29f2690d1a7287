"""The PCM buffer value shared by the detection and export layers."""

from dataclasses import dataclass

import torch


@dataclass(frozen=True, eq=False)
class PcmBuffer:
    """Mono float PCM samples with their sample rate.

    The source buffer of a recording is read by the scanner, the extractor
    and the exporter at the same time; none of them writes into ``samples``.
    Derived buffers (windows, clips, concatenations) are always fresh copies.

    Attributes:
        samples: Float32 tensor with shape [channels, frames]. Channel
            count is 1 for everything produced by ``load_pcm_source``.
        sample_rate: Sample rate in Hz.
    """

    samples: torch.Tensor
    sample_rate: int

    def __post_init__(self) -> None:
        if self.samples.ndim != 2:
            raise ValueError(
                f"PcmBuffer samples must be 2D [channels, frames], got shape {list(self.samples.shape)}"
            )
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")

    @classmethod
    def from_mono(cls, samples, sample_rate: int) -> "PcmBuffer":
        """Build a mono buffer from any 1D sequence or tensor of samples."""
        tensor = torch.as_tensor(samples, dtype=torch.float32)
        if tensor.ndim == 1:
            tensor = tensor.unsqueeze(0)
        return cls(samples=tensor, sample_rate=sample_rate)

    @property
    def frame_count(self) -> int:
        """Number of frames (samples per channel)."""
        return int(self.samples.shape[1])

    @property
    def channels(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration_sec(self) -> float:
        """Return buffer duration in seconds."""
        return self.frame_count / self.sample_rate

    def mono(self) -> torch.Tensor:
        """Return the first channel as a 1D tensor view."""
        return self.samples[0]
