"""
Kernels and structuring elements.

A Kernel is an immutable matrix of signed weights used by the convolution
engine; a StructuringElement is an immutable boolean mask used by rank filters
and morphology. Both carry an anchor, the cell aligned with the output pixel.
The default anchor is ``(width // 2, height // 2)``: the centre for odd sizes,
the cell just right of / below the centre for even sizes.
"""

import logging
from typing import List, Optional, Tuple, Union

import numpy as np

from pixelflow.core.constants import FilterConstants
from pixelflow.core.enums import StructuringElementShape
from pixelflow.core.exceptions import InvalidParameter
from pixelflow.core.utils.enum_converter import parse_enum

logger = logging.getLogger(__name__)

Anchor = Tuple[int, int]
Size = Union[int, Tuple[int, int]]


def _resolve_anchor(name: str, anchor: Optional[Anchor], width: int, height: int) -> Anchor:
    if anchor is None:
        return width // 2, height // 2
    ax, ay = (int(v) for v in anchor)
    if not (0 <= ax < width and 0 <= ay < height):
        raise InvalidParameter(f"{name} anchor", anchor, f"must lie inside {width}x{height}")
    return ax, ay


def _readonly(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


def window_size(size: Size, name: str = "size") -> Tuple[int, int]:
    """
    Normalize an int or ``(width, height)`` pair into a validated window size.

    Raises:
        InvalidParameter: If either side is smaller than 1
    """
    if isinstance(size, (int, np.integer)) and not isinstance(size, bool):
        width = height = int(size)
    else:
        try:
            width, height = (int(v) for v in size)
        except (TypeError, ValueError):
            raise InvalidParameter(name, size, "expected an int or a (width, height) pair")
    if width < 1 or height < 1:
        raise InvalidParameter(name, size, "sides must be at least 1")
    return width, height


class Kernel:
    """Immutable 2D weight matrix with an anchor."""

    def __init__(self, weights, anchor: Optional[Anchor] = None):
        """
        Args:
            weights: 2D array-like of finite weights, indexed [row][column]
            anchor: (x, y) cell aligned with the output pixel

        Raises:
            InvalidParameter: If weights are not a non-empty finite 2D array,
                or the anchor lies outside the kernel
        """
        weights = np.array(weights, dtype=np.float64)
        if weights.ndim != 2 or weights.size == 0:
            raise InvalidParameter("kernel", weights.shape, "expected a non-empty 2D array")
        if not np.all(np.isfinite(weights)):
            raise InvalidParameter("kernel", "non-finite weight", "weights must be finite")

        self._weights = _readonly(weights)
        self._anchor = _resolve_anchor("kernel", anchor, self.width, self.height)
        self._factors: Optional[Tuple[np.ndarray, np.ndarray]] = None

    @classmethod
    def from_separable(cls, column, row, anchor: Optional[Anchor] = None) -> "Kernel":
        """
        Build ``outer(column, row)`` and remember its 1D factors.

        Args:
            column: Vertical factor (length = kernel height)
            row: Horizontal factor (length = kernel width)
            anchor: Optional anchor
        """
        column = np.array(column, dtype=np.float64).reshape(-1)
        row = np.array(row, dtype=np.float64).reshape(-1)
        kernel = cls(np.outer(column, row), anchor)
        kernel._factors = (_readonly(column), _readonly(row))
        return kernel

    @property
    def weights(self) -> np.ndarray:
        return self._weights

    @property
    def width(self) -> int:
        return self._weights.shape[1]

    @property
    def height(self) -> int:
        return self._weights.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height)"""
        return self.width, self.height

    @property
    def anchor(self) -> Anchor:
        return self._anchor

    def padding(self) -> Tuple[int, int, int, int]:
        """Rows/columns needed around the input: (top, bottom, left, right)."""
        ax, ay = self._anchor
        return ay, self.height - 1 - ay, ax, self.width - 1 - ax

    def factors(self) -> Optional[Tuple[np.ndarray, np.ndarray]]:
        """
        Return ``(column, row)`` with ``outer(column, row) == weights``.

        Uses the factors given at construction when available, otherwise tries
        a rank-1 factorization around the largest weight.

        Returns:
            The 1D factors, or None when the kernel is not separable
        """
        if self._factors is not None:
            return self._factors

        weights = self._weights
        pivot_row, pivot_col = np.unravel_index(np.argmax(np.abs(weights)), weights.shape)
        pivot = weights[pivot_row, pivot_col]
        if pivot == 0:
            return np.zeros(self.height), np.zeros(self.width)

        row = weights[pivot_row, :].copy()
        column = weights[:, pivot_col] / pivot
        if np.allclose(
            np.outer(column, row),
            weights,
            rtol=FilterConstants.SEPARABLE_RTOL,
            atol=FilterConstants.SEPARABLE_ATOL,
        ):
            return column, row
        return None

    @property
    def is_separable(self) -> bool:
        return self.factors() is not None

    def __eq__(self, other) -> bool:
        if not isinstance(other, Kernel):
            return NotImplemented
        return self._anchor == other._anchor and np.array_equal(self._weights, other._weights)

    __hash__ = None

    def __repr__(self) -> str:
        return f"Kernel({self.width}x{self.height}, anchor={self._anchor})"


class StructuringElement:
    """Immutable boolean neighbourhood mask with an anchor."""

    def __init__(self, mask, anchor: Optional[Anchor] = None):
        """
        Args:
            mask: 2D array-like, truthy cells belong to the neighbourhood
            anchor: (x, y) cell aligned with the output pixel

        Raises:
            InvalidParameter: If the mask is empty, not 2D, or has no set cell
        """
        mask = np.array(mask, dtype=bool)
        if mask.ndim != 2 or mask.size == 0:
            raise InvalidParameter("structuring element", mask.shape, "expected a non-empty 2D mask")
        if not mask.any():
            raise InvalidParameter("structuring element", "empty", "at least one cell must be set")

        self._mask = _readonly(mask)
        self._anchor = _resolve_anchor("structuring element", anchor, self.width, self.height)

    @classmethod
    def rectangle(cls, width: int, height: Optional[int] = None) -> "StructuringElement":
        return structuring_element(StructuringElementShape.RECTANGLE, (width, height or width))

    @property
    def mask(self) -> np.ndarray:
        return self._mask

    @property
    def width(self) -> int:
        return self._mask.shape[1]

    @property
    def height(self) -> int:
        return self._mask.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height)"""
        return self.width, self.height

    @property
    def anchor(self) -> Anchor:
        return self._anchor

    def offsets(self) -> List[Tuple[int, int]]:
        """``(dy, dx)`` of every set cell relative to the anchor, row-major."""
        ax, ay = self._anchor
        ys, xs = np.nonzero(self._mask)
        return [(int(y) - ay, int(x) - ax) for y, x in zip(ys, xs)]

    def reflected(self) -> "StructuringElement":
        """Element mirrored through its anchor (offsets negated)."""
        ax, ay = self._anchor
        return StructuringElement(
            self._mask[::-1, ::-1], anchor=(self.width - 1 - ax, self.height - 1 - ay)
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, StructuringElement):
            return NotImplemented
        return self._anchor == other._anchor and np.array_equal(self._mask, other._mask)

    __hash__ = None

    def __repr__(self) -> str:
        return f"StructuringElement({self.width}x{self.height}, anchor={self._anchor})"


def structuring_element(
    shape: Union[StructuringElementShape, str] = StructuringElementShape.RECTANGLE,
    size: Size = FilterConstants.MORPH_KERNEL_SIZE_DEFAULT,
) -> StructuringElement:
    """
    Create a predefined structuring element.

    Args:
        shape: RECTANGLE (all set), DISK (ellipse inscribed in the box), or
            CROSS (middle row and middle column)
        size: Edge length or (width, height)

    Returns:
        StructuringElement anchored at its centre
    """
    kind = parse_enum(shape, StructuringElementShape, None, normalize=True)
    if kind is None:
        raise InvalidParameter("shape", shape, "expected rectangle, disk or cross")
    width, height = window_size(size)

    if kind is StructuringElementShape.RECTANGLE:
        mask = np.ones((height, width), dtype=bool)
    elif kind is StructuringElementShape.DISK:
        cx, cy = (width - 1) / 2.0, (height - 1) / 2.0
        rx, ry = max(cx, 0.5), max(cy, 0.5)
        ys, xs = np.mgrid[0:height, 0:width]
        mask = ((xs - cx) / rx) ** 2 + ((ys - cy) / ry) ** 2 <= 1.0
    else:
        mask = np.zeros((height, width), dtype=bool)
        mask[height // 2, :] = True
        mask[:, width // 2] = True

    return StructuringElement(mask)
