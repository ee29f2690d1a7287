"""Test fixtures for audio tests.

Recordings are generated in memory; no binary files are committed.
"""

import io

import numpy as np
import soundfile as sf


def _encode(signal: np.ndarray, sample_rate: int, channels: int) -> bytes:
    if channels > 1:
        signal = np.column_stack([signal] * channels)
    buffer = io.BytesIO()
    sf.write(buffer, signal, sample_rate, format="WAV", subtype="FLOAT")
    return buffer.getvalue()


def generate_tone_wav_bytes(
    frequency: float = 3000.0,
    duration_sec: float = 1.0,
    sample_rate: int = 48000,
    amplitude: float = 0.5,
    channels: int = 1,
) -> bytes:
    """Generate a steady tone as WAV bytes (float32)."""
    num_samples = int(sample_rate * duration_sec)
    t = np.arange(num_samples, dtype=np.float32) / sample_rate
    signal = (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)
    return _encode(signal, sample_rate, channels)


def generate_silence_wav_bytes(
    duration_sec: float = 1.0,
    sample_rate: int = 48000,
    channels: int = 1,
) -> bytes:
    """Generate a silent (all zeros) recording as WAV bytes."""
    signal = np.zeros(int(sample_rate * duration_sec), dtype=np.float32)
    return _encode(signal, sample_rate, channels)


def generate_call_train_wav_bytes(
    calls: list[tuple[float, float]],
    duration_sec: float = 5.0,
    sample_rate: int = 48000,
    amplitude: float = 0.4,
    seed: int = 7,
) -> bytes:
    """Generate a recording of rising chirps over faint noise.

    Args:
        calls: (start_sec, end_sec) of each chirp.
        duration_sec: Recording duration.
        sample_rate: Sample rate in Hz.
        amplitude: Chirp amplitude.
        seed: Random seed for the background noise.

    Returns:
        Mono WAV file as bytes.
    """
    rng = np.random.default_rng(seed)
    num_samples = int(sample_rate * duration_sec)
    signal = (0.01 * rng.uniform(-1, 1, num_samples)).astype(np.float32)

    for start_sec, end_sec in calls:
        start = int(start_sec * sample_rate)
        end = min(int(end_sec * sample_rate), num_samples)
        t = np.arange(end - start, dtype=np.float32) / sample_rate
        # linear sweep 2 kHz -> 6 kHz
        sweep = 2000.0 * t + 2000.0 * t**2 / max(end_sec - start_sec, 1e-3)
        signal[start:end] += amplitude * np.sin(2 * np.pi * sweep)

    return _encode(signal.astype(np.float32), sample_rate, 1)
