"""
Grayscale Raster Representation
Fixed-size single-channel pixel buffers backed by numpy
"""

import numpy as np
from pathlib import Path
from typing import Tuple, Union

from .errors import ConfigurationError, ShapeMismatchError


WIDTH_ADJUST_DIVIDER = 2
HEIGHT_ADJUST_DIVIDER = 2


def minimum_size(
    width_divider: int = WIDTH_ADJUST_DIVIDER,
    height_divider: int = HEIGHT_ADJUST_DIVIDER
) -> Tuple[int, int]:
    """Smallest (width, height) for which mutation size ranges are non-empty."""
    return 2 * width_divider, 2 * height_divider


def check_dimensions(
    width: int,
    height: int,
    width_divider: int = WIDTH_ADJUST_DIVIDER,
    height_divider: int = HEIGHT_ADJUST_DIVIDER
):
    """
    Validate raster dimensions against the adjust dividers.

    Args:
        width: Raster width in pixels
        height: Raster height in pixels
        width_divider: Divider applied to width for mutation sizes
        height_divider: Divider applied to height for mutation sizes

    Raises:
        ConfigurationError: If either dimension is below its minimum
    """
    min_width, min_height = minimum_size(width_divider, height_divider)

    if width < min_width:
        raise ConfigurationError(
            f"width must be an integer greater or equal {min_width}, got {width}"
        )
    if height < min_height:
        raise ConfigurationError(
            f"height must be an integer greater or equal {min_height}, got {height}"
        )


class Raster:
    """
    Single-channel 8-bit image of fixed size.

    Pixels are stored row-major in a (height, width) uint8 array.
    """

    def __init__(self, width: int, height: int, pixels: np.ndarray = None):
        """
        Initialize raster.

        Args:
            width: Number of columns
            height: Number of rows
            pixels: Optional pixel data, flat or (height, width); copied.
                Defaults to all black.
        """
        self.width = int(width)
        self.height = int(height)

        if pixels is None:
            self.grid = np.zeros((self.height, self.width), dtype=np.uint8)
        else:
            pixels = np.asarray(pixels)
            if pixels.size != self.width * self.height:
                raise ShapeMismatchError(
                    f"expected {self.width * self.height} pixels, got {pixels.size}"
                )
            self.grid = pixels.astype(np.uint8).reshape(self.height, self.width).copy()

    @classmethod
    def blank(cls, width: int, height: int, color: int = 0) -> "Raster":
        """Create a raster filled with a single gray level."""
        raster = cls(width, height)
        raster.fill(color)
        return raster

    @classmethod
    def from_bytes(cls, data: bytes, width: int, height: int) -> "Raster":
        """
        Build a raster from a raw buffer of one byte per pixel.

        Args:
            data: Row-major grayscale bytes
            width: Raster width
            height: Raster height

        Returns:
            New raster

        Raises:
            ConfigurationError: If the buffer length is not width*height
        """
        expected = width * height
        if len(data) != expected:
            raise ConfigurationError(
                f"Incorrect image size. Expected {expected} bytes, got {len(data)}"
            )
        return cls(width, height, np.frombuffer(data, dtype=np.uint8))

    @classmethod
    def from_file(cls, path: Union[str, Path], width: int, height: int) -> "Raster":
        """
        Load a raw grayscale file (no header, one byte per pixel).

        Raises:
            ConfigurationError: If the file cannot be read or has the wrong size
        """
        file_path = Path(path)
        try:
            file_size = file_path.stat().st_size
        except OSError as e:
            raise ConfigurationError(f"Error: {e}") from e

        if file_size != width * height:
            raise ConfigurationError(
                f"Incorrect image file size. Expected {width * height} got {file_size}"
            )

        try:
            data = file_path.read_bytes()
        except OSError as e:
            raise ConfigurationError(f"Unable to open file {file_path}: {e}") from e

        return cls.from_bytes(data, width, height)

    @property
    def shape(self) -> Tuple[int, int]:
        """(height, width) of the raster."""
        return self.grid.shape

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def pixels(self) -> np.ndarray:
        """Flat row-major view of the pixel data."""
        return self.grid.reshape(-1)

    def px(self, row: int, col: int) -> int:
        return int(self.grid[row, col])

    def fill(self, color: int):
        self.grid.fill(color)

    def copy(self) -> "Raster":
        return Raster(self.width, self.height, self.grid)

    def same_shape(self, other: "Raster") -> bool:
        return self.shape == other.shape

    def to_bytes(self) -> bytes:
        return self.grid.tobytes()

    def to_rgba(self) -> np.ndarray:
        """
        Expand to 32 bits per pixel for texture upload.

        Returns:
            (height, width, 4) uint8 array with gray copied into RGB and
            alpha set to 255
        """
        rgba = np.empty((self.height, self.width, 4), dtype=np.uint8)
        rgba[..., :3] = self.grid[..., None]
        rgba[..., 3] = 255
        return rgba

    def get_statistics(self) -> dict:
        """
        Compute statistics about the pixel values.

        Returns:
            Dictionary with statistics
        """
        return {
            'mean': float(np.mean(self.grid)),
            'std': float(np.std(self.grid)),
            'min': int(np.min(self.grid)),
            'max': int(np.max(self.grid)),
            'num_levels_used': int(len(np.unique(self.grid)))
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, Raster):
            return NotImplemented
        return self.same_shape(other) and bool(np.array_equal(self.grid, other.grid))

    def __repr__(self) -> str:
        return f"Raster(width={self.width}, height={self.height})"
