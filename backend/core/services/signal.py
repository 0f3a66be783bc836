"""
Signal helpers for per-frame scalar time series.

Pure numpy functions - no state, safe to call repeatedly on the same data.
"""

from typing import Sequence

import numpy as np


def smooth(values: Sequence[float], window: int = 3) -> list[float]:
    """
    Moving-average filter with a shrinking window at the edges.

    Each output sample is the mean of the input samples within
    +/- window // 2 that actually exist, so boundary samples average
    over fewer neighbours instead of padded values.

    Args:
        values: Scalar time series
        window: Odd window size

    Returns:
        Smoothed series with the same length as the input
    """
    arr = np.asarray(values, dtype=float)
    n = arr.size
    half = window // 2

    return [
        float(np.mean(arr[max(0, i - half):min(n, i + half + 1)]))
        for i in range(n)
    ]


def average(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def population_std(values: Sequence[float]) -> float:
    """Population standard deviation (divide by N); 0.0 for fewer than 2 samples."""
    if len(values) < 2:
        return 0.0
    return float(np.std(values))
