"""
Fitness Functions for Image Evolution
Sum-of-squared-differences distance between rasters
"""

import numpy as np

from .errors import ShapeMismatchError
from .raster import Raster


MAX_PIXEL_VALUE = 255


def check_same_shape(a: Raster, b: Raster):
    """Raise ShapeMismatchError unless both rasters have identical dimensions."""
    if not a.same_shape(b):
        raise ShapeMismatchError(
            f"raster shapes differ: {a.width}x{a.height} vs {b.width}x{b.height}"
        )


def score(candidate: Raster, target: Raster) -> int:
    """
    Squared pixel distance between a candidate and the target.

    Lower is better; 0 means an exact match. Accumulates in int64 so a
    full image of maximal differences cannot overflow.

    Args:
        candidate: Raster being evaluated
        target: Raster being approximated

    Returns:
        Sum over all pixels of (candidate - target)^2
    """
    check_same_shape(candidate, target)

    diff = candidate.grid.astype(np.int64) - target.grid.astype(np.int64)
    return int(np.sum(diff * diff))


def max_score(width: int, height: int) -> int:
    """Worst possible score for a raster of the given size."""
    return width * height * MAX_PIXEL_VALUE * MAX_PIXEL_VALUE


def rmse(candidate: Raster, target: Raster) -> float:
    """Root mean squared pixel error, in gray levels."""
    return float(np.sqrt(score(candidate, target) / candidate.pixel_count))


def similarity(candidate: Raster, target: Raster) -> float:
    """
    Normalized closeness in [0, 1].

    1.0 is an exact match, 0.0 the worst possible score.
    """
    return 1.0 - score(candidate, target) / max_score(candidate.width, candidate.height)
