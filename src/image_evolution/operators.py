"""
Mutation and Crossover Operators
Rectangular alpha-blend edits and per-pixel averaging of rasters
"""

import numpy as np
from typing import NamedTuple, Optional, Tuple

from .fitness import check_same_shape
from .raster import Raster, WIDTH_ADJUST_DIVIDER, HEIGHT_ADJUST_DIVIDER


COLOR_RANGE = (0, 255)


class Edit(NamedTuple):
    """Rectangle and color sampled by one mutation."""
    x: int
    y: int
    width: int
    height: int
    color: int


def size_ranges(
    width: int,
    height: int,
    width_divider: int = WIDTH_ADJUST_DIVIDER,
    height_divider: int = HEIGHT_ADJUST_DIVIDER
) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    """
    Default edit size ranges for a raster.

    Returns:
        ((1, width // width_divider), (1, height // height_divider))
    """
    return (1, width // width_divider), (1, height // height_divider)


def _check_range(name: str, value_range: Tuple[int, int], upper: int):
    low, high = value_range
    if low < 1 or high < low or high > upper:
        raise ValueError(f"{name} {value_range} must lie within [1, {upper}]")


def check_color_range(color_range: Tuple[int, int]):
    """Raise ValueError unless color_range is an inclusive range within 0..255."""
    if len(color_range) != 2:
        raise ValueError(f"color_range {color_range} must be a (low, high) pair")
    low, high = color_range
    if not COLOR_RANGE[0] <= low <= high <= COLOR_RANGE[1]:
        raise ValueError(
            f"color_range {tuple(color_range)} must lie within [{COLOR_RANGE[0]}, {COLOR_RANGE[1]}]"
        )


def mutate(
    raster: Raster,
    rng: np.random.Generator,
    color_range: Tuple[int, int] = COLOR_RANGE,
    width_range: Optional[Tuple[int, int]] = None,
    height_range: Optional[Tuple[int, int]] = None
) -> Edit:
    """
    Blend a random rectangle of the raster toward a random gray level.

    Each pixel inside the rectangle becomes (old + color) >> 1, a 50/50
    blend rounding down. The rectangle always lies inside the raster.

    Args:
        raster: Raster to edit in place
        rng: Random generator
        color_range: Inclusive range of blend colors
        width_range: Inclusive range of edit widths (default 1..width/2)
        height_range: Inclusive range of edit heights (default 1..height/2)

    Returns:
        The sampled edit
    """
    if width_range is None or height_range is None:
        default_width_range, default_height_range = size_ranges(raster.width, raster.height)
        width_range = width_range or default_width_range
        height_range = height_range or default_height_range

    _check_range("width_range", width_range, raster.width)
    _check_range("height_range", height_range, raster.height)
    check_color_range(color_range)

    # Draw order: size, position, color
    width = int(rng.integers(width_range[0], width_range[1], endpoint=True))
    height = int(rng.integers(height_range[0], height_range[1], endpoint=True))
    x = int(rng.integers(0, raster.width - width, endpoint=True))
    y = int(rng.integers(0, raster.height - height, endpoint=True))
    color = int(rng.integers(color_range[0], color_range[1], endpoint=True))

    region = raster.grid[y:y + height, x:x + width]
    region[...] = (region.astype(np.uint16) + color) >> 1

    return Edit(x, y, width, height, color)


def mate(parent_a: Raster, parent_b: Raster) -> Raster:
    """
    Create a child whose pixels are the floor average of both parents.

    Args:
        parent_a: First parent
        parent_b: Second parent

    Returns:
        New raster; parents are not modified
    """
    check_same_shape(parent_a, parent_b)

    child = (parent_a.grid.astype(np.uint16) + parent_b.grid) >> 1
    return Raster(parent_a.width, parent_a.height, child)
