"""
Non-linear neighbourhood filters.

Median filtering and grayscale morphology order the samples under a
structuring element instead of weighting them:
- median: per channel, the lower-middle sample of the window
- erode:  minimum of ``in[p + o]`` over the element's offsets ``o``
- dilate: maximum of ``in[p - o]`` (the element reflected through its anchor)

Without an explicit border policy, morphology treats out-of-range samples as
the neutral element (sample maximum for erosion, minimum for dilation), so they
never win. With that default, ``open(X) <= X <= close(X)`` holds pointwise for
any structuring element.

All reads go to a padded copy of the original input; row-band workers write
disjoint output rows.
"""

import logging
from typing import Any, Callable, List, Optional, Tuple

import numpy as np

from pixelflow.core.border import BorderPolicy
from pixelflow.core.buffer import PixelBuffer
from pixelflow.core.constants import FilterConstants
from pixelflow.core.exceptions import KernelTooLarge
from pixelflow.core.executor import ParallelExecutor, RowBand
from pixelflow.core.kernel import StructuringElement, structuring_element
from pixelflow.core.utils.decorators import timer

logger = logging.getLogger(__name__)

Offsets = List[Tuple[int, int]]


def as_element(value: Any, default_size: int = FilterConstants.MORPH_KERNEL_SIZE_DEFAULT) -> StructuringElement:
    """
    Coerce a window description into a StructuringElement.

    Accepts an element, None (square of ``default_size``), an edge length,
    a ``(width, height)`` pair, or a 2D boolean mask.
    """
    if isinstance(value, StructuringElement):
        return value
    if value is None:
        return structuring_element("rectangle", default_size)
    if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
        return structuring_element("rectangle", int(value))
    if isinstance(value, tuple) and len(value) == 2 and all(isinstance(v, (int, np.integer)) for v in value):
        return structuring_element("rectangle", value)
    return StructuringElement(value)


def _padding(offsets: Offsets) -> Tuple[int, int, int, int]:
    dys = [dy for dy, _ in offsets]
    dxs = [dx for _, dx in offsets]
    return max(0, -min(dys)), max(0, max(dys)), max(0, -min(dxs)), max(0, max(dxs))


def _shifted(padded: np.ndarray, pads, band: RowBand, width: int, dy: int, dx: int) -> np.ndarray:
    top, _, left, _ = pads
    row = band.start + dy + top
    col = dx + left
    return padded[row : row + band.rows, col : col + width]


class RankFilterEngine:
    """Median filter and morphological operations."""

    def __init__(self, thread_count: Optional[int] = None, border: Any = None):
        """
        Args:
            thread_count: Default worker count (None -> settings)
            border: Default BorderPolicy, mode, or mode name. None means the
                configured default for the median and the neutral fill for
                morphology.
        """
        self.executor = ParallelExecutor(thread_count)
        self.border = border

    def _prepare(
        self, buffer: PixelBuffer, element: StructuringElement, offsets: Offsets, policy: BorderPolicy
    ):
        if element.width > buffer.width or element.height > buffer.height:
            raise KernelTooLarge(element.size, buffer.dimensions)
        pads = _padding(offsets)
        padded = policy.pad(buffer.pixels().astype(np.float64), *pads)
        padded.setflags(write=False)
        return padded, pads

    # ------------------------------------------------------------------
    # Median
    # ------------------------------------------------------------------

    def median_filter(
        self,
        buffer: PixelBuffer,
        window: Any = None,
        border: Any = None,
        thread_count: Optional[int] = None,
    ) -> PixelBuffer:
        """
        Replace each sample by the median of its window.

        Args:
            buffer: Input buffer (not modified)
            window: StructuringElement, edge length, (width, height) or mask;
                defaults to the configured square window
            border: Border policy (None -> configured default)
            thread_count: Worker count for this call

        Returns:
            Filtered buffer; for even sample counts the lower middle is taken
        """
        if window is None:
            from pixelflow.config import get_settings

            window = get_settings().filters.median_window
        element = as_element(window)
        policy = BorderPolicy.parse(border if border is not None else self.border)

        offsets = element.offsets()
        padded, pads = self._prepare(buffer, element, offsets, policy)
        middle = (len(offsets) - 1) // 2

        def band_op(band: RowBand) -> np.ndarray:
            stack = np.stack([_shifted(padded, pads, band, buffer.width, dy, dx) for dy, dx in offsets])
            return np.partition(stack, middle, axis=0)[middle]

        logger.debug(f"Median filter {element} on {buffer!r} (border={policy})")
        with timer("median_filter", logger):
            return self.executor.run(buffer, band_op, thread_count)

    # ------------------------------------------------------------------
    # Morphology
    # ------------------------------------------------------------------

    def _morphology(
        self,
        name: str,
        buffer: PixelBuffer,
        element: Any,
        border: Any,
        thread_count: Optional[int],
        reduce: Callable[[np.ndarray, np.ndarray], np.ndarray],
        neutral: float,
        reflect: bool,
    ) -> PixelBuffer:
        element = as_element(element)
        border = border if border is not None else self.border
        policy = BorderPolicy.constant(neutral) if border is None else BorderPolicy.parse(border)

        offsets = element.offsets()
        if reflect:
            offsets = [(-dy, -dx) for dy, dx in offsets]
        padded, pads = self._prepare(buffer, element, offsets, policy)

        def band_op(band: RowBand) -> np.ndarray:
            first, *rest = offsets
            acc = _shifted(padded, pads, band, buffer.width, *first).copy()
            for dy, dx in rest:
                reduce(acc, _shifted(padded, pads, band, buffer.width, dy, dx), out=acc)
            return acc

        logger.debug(f"{name} {element} on {buffer!r} (border={policy})")
        with timer(name, logger):
            return self.executor.run(buffer, band_op, thread_count)

    def erode(
        self,
        buffer: PixelBuffer,
        element: Any = None,
        border: Any = None,
        thread_count: Optional[int] = None,
    ) -> PixelBuffer:
        """Minimum under the structuring element."""
        return self._morphology(
            "erode", buffer, element, border, thread_count,
            np.minimum, buffer.sample_type.max_value, reflect=False,
        )

    def dilate(
        self,
        buffer: PixelBuffer,
        element: Any = None,
        border: Any = None,
        thread_count: Optional[int] = None,
    ) -> PixelBuffer:
        """Maximum under the reflected structuring element."""
        return self._morphology(
            "dilate", buffer, element, border, thread_count,
            np.maximum, buffer.sample_type.min_value, reflect=True,
        )

    def open(
        self,
        buffer: PixelBuffer,
        element: Any = None,
        border: Any = None,
        thread_count: Optional[int] = None,
    ) -> PixelBuffer:
        """Erosion followed by dilation; removes bright details smaller than the element."""
        element = as_element(element)
        eroded = self.erode(buffer, element, border, thread_count)
        return self.dilate(eroded, element, border, thread_count)

    def close(
        self,
        buffer: PixelBuffer,
        element: Any = None,
        border: Any = None,
        thread_count: Optional[int] = None,
    ) -> PixelBuffer:
        """Dilation followed by erosion; fills dark details smaller than the element."""
        element = as_element(element)
        dilated = self.dilate(buffer, element, border, thread_count)
        return self.erode(dilated, element, border, thread_count)

    def gradient(
        self,
        buffer: PixelBuffer,
        element: Any = None,
        border: Any = None,
        thread_count: Optional[int] = None,
    ) -> PixelBuffer:
        """Morphological gradient: dilation minus erosion."""
        element = as_element(element)
        dilated = self.dilate(buffer, element, border, thread_count)
        eroded = self.erode(buffer, element, border, thread_count)

        def band_op(band: RowBand) -> np.ndarray:
            upper = dilated.rows(band.start, band.stop).astype(np.float64)
            return upper - eroded.rows(band.start, band.stop)

        return self.executor.run(buffer, band_op, thread_count)


def median_filter(
    buffer: PixelBuffer, window: Any = None, border: Any = None, thread_count: Optional[int] = None
) -> PixelBuffer:
    """Module-level shortcut for :meth:`RankFilterEngine.median_filter`."""
    return RankFilterEngine(thread_count).median_filter(buffer, window, border)


def erode(
    buffer: PixelBuffer, element: Any = None, border: Any = None, thread_count: Optional[int] = None
) -> PixelBuffer:
    """Module-level shortcut for :meth:`RankFilterEngine.erode`."""
    return RankFilterEngine(thread_count).erode(buffer, element, border)


def dilate(
    buffer: PixelBuffer, element: Any = None, border: Any = None, thread_count: Optional[int] = None
) -> PixelBuffer:
    """Module-level shortcut for :meth:`RankFilterEngine.dilate`."""
    return RankFilterEngine(thread_count).dilate(buffer, element, border)
