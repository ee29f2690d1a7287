"""Utility functions for sample/second conversions."""

import math


def seconds_to_sample_index(sec: float, sample_rate: int) -> int:
    """Convert a time position to the sample index containing it (floor).

    Examples:
        >>> seconds_to_sample_index(1.00001, 48000)
        48000
    """
    return math.floor(sec * sample_rate)


def samples_to_seconds(samples: int, sample_rate: int) -> float:
    """Convert sample count to seconds.

    Examples:
        >>> samples_to_seconds(24000, 48000)
        0.5
    """
    return samples / sample_rate
