"""Tests for audioio.writer and PcmBuffer."""

import pytest
import soundfile as sf
import torch

from audioio import PcmBuffer, load_wav, load_wav_bytes, wav_bytes, write_wav
from audioio.errors import AudioWriteError


class TestPcmBuffer:
    """Tests for the PcmBuffer value."""

    def test_from_mono_list(self):
        """1D data becomes a [1, T] buffer."""
        buffer = PcmBuffer.from_mono([0.0, 0.5, -0.5, 0.25], 8000)

        assert buffer.samples.shape == (1, 4)
        assert buffer.frame_count == 4
        assert buffer.channels == 1
        assert buffer.duration_sec == pytest.approx(4 / 8000)

    def test_rejects_1d_samples(self):
        """The constructor requires [channels, frames]."""
        with pytest.raises(ValueError, match="must be 2D"):
            PcmBuffer(samples=torch.zeros(10), sample_rate=8000)

    def test_rejects_non_positive_rate(self):
        """Sample rate must be positive."""
        with pytest.raises(ValueError, match="sample_rate must be positive"):
            PcmBuffer.from_mono([0.0], 0)


class TestWriteWav:
    """Tests for writing WAV files."""

    def test_round_trip_is_bit_exact(self, tmp_path):
        """Float32 WAV preserves the exact samples."""
        samples = torch.linspace(-0.9, 0.9, 4800)
        buffer = PcmBuffer.from_mono(samples, 48000)

        path = write_wav(buffer, tmp_path / "clips" / "robin.wav")
        waveform, sr = load_wav(path)

        assert path.exists()
        assert sr == 48000
        assert torch.equal(waveform, buffer.samples)

    def test_float_subtype(self, tmp_path):
        """Clips are written as 32-bit float."""
        path = write_wav(PcmBuffer.from_mono(torch.zeros(100), 48000), tmp_path / "x.wav")

        assert sf.info(str(path)).subtype == "FLOAT"

    def test_wav_bytes_decodes(self):
        """In-memory serialization matches the buffer."""
        buffer = PcmBuffer.from_mono(torch.full((800,), 0.25), 8000)

        waveform, sr = load_wav_bytes(wav_bytes(buffer))

        assert sr == 8000
        assert torch.equal(waveform, buffer.samples)

    def test_empty_buffer_rejected(self, tmp_path):
        """Writing zero frames is an error, not an empty file."""
        buffer = PcmBuffer(samples=torch.zeros(1, 0), sample_rate=8000)

        with pytest.raises(AudioWriteError) as exc_info:
            write_wav(buffer, tmp_path / "empty.wav")

        assert exc_info.value.code == "EMPTY_BUFFER"
        assert not (tmp_path / "empty.wav").exists()
