"""Tests for audioio.preprocess module."""

import pytest
import torch

from audioio import preprocess_audio
from audioio.errors import AudioPreprocessError


class TestPreprocessChannels:
    """Downmix behaviour."""

    def test_stereo_averaged_to_mono(self):
        """Channels are averaged."""
        waveform = torch.cat([torch.full((1, 4800), 0.5), torch.full((1, 4800), 0.3)], dim=0)

        processed, sr = preprocess_audio(waveform, sample_rate=48000)

        assert processed.shape == (1, 4800)
        assert torch.allclose(processed, torch.full((1, 4800), 0.4))
        assert sr == 48000

    def test_four_channel_recorder(self):
        """Ambisonic-style recorders with four channels are downmixed too."""
        waveform = torch.stack([torch.full((4800,), v) for v in (0.1, 0.2, 0.3, 0.4)])

        processed, _ = preprocess_audio(waveform, sample_rate=48000)

        assert processed.shape == (1, 4800)
        assert torch.allclose(processed, torch.full((1, 4800), 0.25))

    def test_1d_input_rejected(self):
        """Input must be [channels, samples]."""
        with pytest.raises(AudioPreprocessError) as exc_info:
            preprocess_audio(torch.zeros(4800), sample_rate=48000)

        assert exc_info.value.code == "INVALID_SHAPE"


class TestPreprocessResampling:
    """Resampling to the classifier rate."""

    def test_upsample_44100_to_48000(self):
        """CD-rate field recordings are brought to 48 kHz."""
        processed, sr = preprocess_audio(torch.randn(1, 44100) * 0.1, sample_rate=44100)

        assert sr == 48000
        assert abs(processed.shape[1] - 48000) <= 1

    def test_no_resample_when_rate_matches(self):
        """Matching rate leaves samples untouched."""
        waveform = torch.rand(1, 48000) * 0.5

        processed, _ = preprocess_audio(waveform, sample_rate=48000)

        assert torch.equal(processed, waveform)


class TestPreprocessLevels:
    """Clamping and optional normalisation."""

    def test_non_finite_zeroed_and_clamped(self):
        """NaN/Inf become 0 and values are clamped to [-1, 1]."""
        waveform = torch.tensor([[0.5, float("nan"), 2.0, float("-inf"), -3.0]])

        processed, _ = preprocess_audio(waveform, sample_rate=48000)

        assert processed.tolist() == [[0.5, 0.0, 1.0, 0.0, -1.0]]

    def test_normalize_opt_in(self):
        """Peak normalisation only when requested."""
        waveform = torch.full((1, 1000), 0.1)

        untouched, _ = preprocess_audio(waveform, sample_rate=48000)
        normalized, _ = preprocess_audio(waveform, sample_rate=48000, normalize=True, peak_target=0.9)

        assert untouched.abs().max().item() == pytest.approx(0.1)
        assert normalized.abs().max().item() == pytest.approx(0.9)

    def test_silence_not_amplified(self):
        """Normalising silence leaves it silent."""
        processed, _ = preprocess_audio(torch.zeros(1, 1000), sample_rate=48000, normalize=True)

        assert torch.count_nonzero(processed) == 0
