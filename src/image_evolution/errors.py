"""
Error types raised by the image evolution engine
"""


class ImageEvolutionError(Exception):
    """Base class for engine errors."""


class ConfigurationError(ImageEvolutionError):
    """Invalid startup configuration (dimensions, input buffer, rates)."""


class ShapeMismatchError(ImageEvolutionError):
    """Two rasters that must share a shape do not."""
