"""Tests for audioio.loader and load_pcm_source."""

import os
from pathlib import Path

import pytest
import torch

from audioio import AudioConfig, load_pcm_source, load_wav, load_wav_bytes
from audioio.errors import AudioDecodeError, AudioValidationError

from tests.fixtures import generate_silence_wav_bytes, generate_tone_wav_bytes


class TestLoadWavBytes:
    """Tests for load_wav_bytes function."""

    def test_load_mono_tone(self):
        """A mono recording decodes to [1, T] float32."""
        data = generate_tone_wav_bytes(duration_sec=1.0, sample_rate=48000)

        waveform, sr = load_wav_bytes(data)

        assert waveform.dtype == torch.float32
        assert waveform.shape == (1, 48000)
        assert sr == 48000

    def test_load_stereo_keeps_channels(self):
        """Channels are kept at load time; downmix happens in preprocessing."""
        data = generate_tone_wav_bytes(duration_sec=0.5, sample_rate=44100, channels=2)

        waveform, sr = load_wav_bytes(data)

        assert waveform.shape[0] == 2
        assert sr == 44100

    def test_empty_bytes_raises_error(self):
        """Empty bytes should raise AudioDecodeError."""
        with pytest.raises(AudioDecodeError) as exc_info:
            load_wav_bytes(b"")

        assert exc_info.value.code == "EMPTY_FILE"

    def test_garbage_raises_error(self):
        """Undecodable bytes should raise AudioDecodeError."""
        with pytest.raises(AudioDecodeError) as exc_info:
            load_wav_bytes(os.urandom(1024))

        assert exc_info.value.code == "INVALID_AUDIO"
        assert exc_info.value.details["bytes_length"] == 1024


class TestLoadWav:
    """Tests for load_wav function."""

    def test_load_from_file(self, tmp_path: Path):
        """File and bytes loading agree."""
        data = generate_tone_wav_bytes(duration_sec=0.5, sample_rate=32000)
        wav_path = tmp_path / "dawn.wav"
        wav_path.write_bytes(data)

        from_file, sr_file = load_wav(str(wav_path))
        from_bytes, sr_bytes = load_wav_bytes(data)

        assert sr_file == sr_bytes == 32000
        assert torch.allclose(from_file, from_bytes)

    def test_file_not_found(self):
        """Missing file should raise FILE_NOT_FOUND."""
        with pytest.raises(AudioDecodeError) as exc_info:
            load_wav("/nonexistent/path/dawn.wav")

        assert exc_info.value.code == "FILE_NOT_FOUND"

    def test_empty_file(self, tmp_path: Path):
        """Zero-byte file should raise EMPTY_FILE."""
        wav_path = tmp_path / "empty.wav"
        wav_path.write_bytes(b"")

        with pytest.raises(AudioDecodeError) as exc_info:
            load_wav(wav_path)

        assert exc_info.value.code == "EMPTY_FILE"


class TestLoadPcmSource:
    """Tests for the load/validate/preprocess entry point."""

    def test_resamples_to_target_rate(self):
        """Output is mono at the configured rate."""
        data = generate_tone_wav_bytes(duration_sec=1.0, sample_rate=44100, channels=2)

        buffer = load_pcm_source(data, AudioConfig(target_sample_rate=48000))

        assert buffer.sample_rate == 48000
        assert buffer.channels == 1
        assert abs(buffer.frame_count - 48000) <= 1

    def test_keeps_levels_by_default(self):
        """No normalisation unless asked for."""
        data = generate_tone_wav_bytes(duration_sec=0.5, sample_rate=48000, amplitude=0.2)

        buffer = load_pcm_source(data)

        assert buffer.samples.abs().max().item() == pytest.approx(0.2, abs=1e-3)

    def test_silence_accepted_by_default(self):
        """Silent recordings load; they just produce no detections."""
        buffer = load_pcm_source(generate_silence_wav_bytes(duration_sec=0.5))

        assert buffer.frame_count == 24000

    def test_silence_rejected_when_configured(self):
        """reject_silence turns a silent file into a validation error."""
        with pytest.raises(AudioValidationError) as exc_info:
            load_pcm_source(generate_silence_wav_bytes(), AudioConfig(reject_silence=True))

        assert exc_info.value.code == "SILENCE"

    def test_too_short_rejected(self):
        """Recordings under min_duration_sec are rejected."""
        data = generate_tone_wav_bytes(duration_sec=0.05)

        with pytest.raises(AudioValidationError) as exc_info:
            load_pcm_source(data)

        assert exc_info.value.code == "TOO_SHORT"
