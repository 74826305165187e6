"""
Border handling shared by every windowed operation.

A BorderPolicy decides what a kernel window sees past the buffer edge. The
same policy object is passed to convolution, rank filters and morphology so
edge semantics never differ between them.

Modes (for a row ``a b c d``):
- EXTEND:   ``a a | a b c d | d d``
- MIRROR:   ``c b | a b c d | c b``  (edge sample not repeated)
- WRAP:     ``c d | a b c d | a b``
- CONSTANT: ``k k | a b c d | k k``
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from pixelflow.core.constants import ErrorMessages
from pixelflow.core.enums import BorderMode
from pixelflow.core.exceptions import InvalidParameter
from pixelflow.core.utils.enum_converter import parse_enum

logger = logging.getLogger(__name__)

_NUMPY_PAD_MODES = {
    BorderMode.EXTEND: "edge",
    BorderMode.MIRROR: "reflect",
    BorderMode.WRAP: "wrap",
    BorderMode.CONSTANT: "constant",
}


@dataclass(frozen=True)
class BorderPolicy:
    """Out-of-bounds sample strategy."""

    mode: BorderMode = BorderMode.EXTEND
    constant_value: float = 0.0

    def __post_init__(self):
        mode = parse_enum(self.mode, BorderMode, None, normalize=True)
        if mode is None:
            raise InvalidParameter("border", self.mode, ErrorMessages.UNKNOWN_BORDER)
        try:
            constant_value = float(self.constant_value)
        except (TypeError, ValueError):
            raise InvalidParameter("constant_value", self.constant_value, "expected a number")
        # frozen dataclass
        object.__setattr__(self, "mode", mode)
        object.__setattr__(self, "constant_value", constant_value)

    @classmethod
    def extend(cls) -> "BorderPolicy":
        return cls(BorderMode.EXTEND)

    @classmethod
    def mirror(cls) -> "BorderPolicy":
        return cls(BorderMode.MIRROR)

    @classmethod
    def wrap(cls) -> "BorderPolicy":
        return cls(BorderMode.WRAP)

    @classmethod
    def constant(cls, value: float = 0.0) -> "BorderPolicy":
        return cls(BorderMode.CONSTANT, value)

    @classmethod
    def parse(cls, value: Any = None, constant_value: Optional[float] = None) -> "BorderPolicy":
        """
        Build a policy from a policy, a mode or a mode name.

        Args:
            value: BorderPolicy, BorderMode, mode string, or None for the
                configured default
            constant_value: Fill value when the mode is CONSTANT

        Returns:
            BorderPolicy instance

        Raises:
            InvalidParameter: If the mode name is unknown
        """
        if isinstance(value, cls):
            return value

        if value is None:
            from pixelflow.config import get_settings

            filters = get_settings().filters
            value = filters.border_mode
            if constant_value is None:
                constant_value = filters.constant_value

        return cls(value, constant_value or 0.0)

    def resolve(self, coordinate: int, size: int) -> Optional[int]:
        """
        Map a possibly out-of-range coordinate onto ``[0, size)``.

        Args:
            coordinate: Row or column index, may be negative or >= size
            size: Extent of the axis

        Returns:
            In-range index, or None when the sample comes from the constant fill
        """
        if 0 <= coordinate < size:
            return coordinate

        if self.mode is BorderMode.CONSTANT:
            return None
        if self.mode is BorderMode.EXTEND:
            return min(max(coordinate, 0), size - 1)
        if self.mode is BorderMode.WRAP:
            return coordinate % size

        # MIRROR
        if size == 1:
            return 0
        period = 2 * (size - 1)
        folded = coordinate % period
        return folded if folded < size else period - folded

    def pad(self, array: np.ndarray, top: int, bottom: int, left: int, right: int) -> np.ndarray:
        """
        Pad the two spatial axes of an (H, W, C) array.

        Args:
            array: Array with rows on axis 0 and columns on axis 1
            top, bottom, left, right: Number of synthesized rows/columns

        Returns:
            New array of shape (H + top + bottom, W + left + right, C)
        """
        if min(top, bottom, left, right) < 0:
            raise InvalidParameter("padding", (top, bottom, left, right), "must be non-negative")

        if not (top or bottom or left or right):
            return array

        pad_width = [(top, bottom), (left, right)] + [(0, 0)] * (array.ndim - 2)

        mode = _NUMPY_PAD_MODES[self.mode]
        if self.mode is BorderMode.CONSTANT:
            return np.pad(array, pad_width, mode=mode, constant_values=self.constant_value)
        return np.pad(array, pad_width, mode=mode)

    def __str__(self) -> str:
        if self.mode is BorderMode.CONSTANT:
            return f"constant({self.constant_value:g})"
        return self.mode.value
