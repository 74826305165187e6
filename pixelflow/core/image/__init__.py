"""
Image conversion between PixelBuffer and codec libraries.
"""

from .converters import ImageConverters

__all__ = ["ImageConverters"]
