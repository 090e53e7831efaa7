"""Scalar complex arithmetic used by the gate kernels.

All functions work on Python ``complex`` values as well as NumPy complex
arrays, so the kernels can apply them to whole index groups at once.
"""

from __future__ import annotations

import numpy as np


def add(a, b):
    """Delegates to Python/NumPy complex addition."""
    return a + b


def multiply(a, b):
    """Delegates to Python/NumPy complex multiplication."""
    return a * b


def magnitude(a):
    """sqrt(re^2 + im^2)."""
    a = np.asarray(a)
    result = np.sqrt(a.real ** 2 + a.imag ** 2)
    if result.ndim == 0:
        return float(result)
    return result


def squared_magnitude(a):
    """|a|^2 without the square root; used for probabilities."""
    a = np.asarray(a)
    result = a.real ** 2 + a.imag ** 2
    if result.ndim == 0:
        return float(result)
    return result
