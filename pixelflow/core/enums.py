"""
Enumerations shared across pixelflow modules.
"""

from enum import Enum


class BorderMode(str, Enum):
    """Strategy for synthesizing samples outside the buffer."""

    EXTEND = "extend"
    MIRROR = "mirror"
    WRAP = "wrap"
    CONSTANT = "constant"


class ThresholdType(str, Enum):
    """Thresholding variants."""

    BINARY = "binary"  # high if v >= t else low
    TRUNCATE = "truncate"  # t if v > t else v
    TO_ZERO = "to_zero"  # v if v > t else low


class StructuringElementShape(str, Enum):
    """Predefined structuring element shapes."""

    RECTANGLE = "rectangle"
    DISK = "disk"
    CROSS = "cross"


class SobelDirection(str, Enum):
    """Gradient direction for the Sobel operator."""

    X = "x"
    Y = "y"
