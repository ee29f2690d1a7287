"""Pytest configuration and fixtures for the test suite."""

import sys
from pathlib import Path

import pytest
import torch

# Ensure project root is in path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from audioio import PcmBuffer
from classifier import StubClassifier, clear_cache


# Small rate and window so scans over several seconds stay fast
TEST_SAMPLE_RATE = 8000
TEST_WINDOW_SEC = 1.0


@pytest.fixture(autouse=True)
def _fresh_classifier_cache():
    """Keep cached classifiers (and stub call counters) from leaking between tests."""
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def stub_classifier() -> StubClassifier:
    """Deterministic classifier with a 1 s window at 8 kHz."""
    return StubClassifier(window_sec=TEST_WINDOW_SEC, sample_rate=TEST_SAMPLE_RATE)


@pytest.fixture
def ramp_buffer() -> PcmBuffer:
    """Five seconds of a ramp at 8 kHz; sample i holds i / 1e5."""
    frames = 5 * TEST_SAMPLE_RATE
    samples = torch.arange(frames, dtype=torch.float32) / 1e5
    return PcmBuffer.from_mono(samples, TEST_SAMPLE_RATE)


@pytest.fixture
def chirp_buffer() -> PcmBuffer:
    """Four seconds of a 3 kHz tone at 48 kHz."""
    sample_rate = 48000
    t = torch.arange(4 * sample_rate, dtype=torch.float32) / sample_rate
    return PcmBuffer.from_mono(0.5 * torch.sin(2 * torch.pi * 3000 * t), sample_rate)


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow"
    )
