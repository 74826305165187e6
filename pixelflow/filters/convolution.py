"""
Linear spatial filtering.

The ConvolutionEngine slides a Kernel over a PixelBuffer:

    out[y, x] = sum K[ky, kx] * in[y + ky - ay, x + kx - ax]

(correlation, the kernel is not flipped), with out-of-range samples supplied
by the BorderPolicy. Sums are accumulated in float64 and clamped into the
input's sample type. Separable kernels run as a horizontal then a vertical 1D
pass; everything else runs as a direct 2D pass.

The input is padded once and shared read-only between the row-band workers.
"""

import logging
from functools import partial
from typing import Any, Optional, Union

import numpy as np

from pixelflow.core.border import BorderPolicy
from pixelflow.core.buffer import PixelBuffer
from pixelflow.core.constants import ErrorMessages, FilterConstants
from pixelflow.core.enums import SobelDirection
from pixelflow.core.exceptions import InvalidParameter, KernelTooLarge
from pixelflow.core.executor import ParallelExecutor, RowBand
from pixelflow.core.kernel import Kernel, Size
from pixelflow.core.utils.decorators import timer
from pixelflow.core.utils.enum_converter import parse_enum
from pixelflow.filters import kernels

logger = logging.getLogger(__name__)


def _direct_band(padded: np.ndarray, weights: np.ndarray, width: int, band: RowBand) -> np.ndarray:
    acc = np.zeros((band.rows, width, padded.shape[2]))
    kernel_height, kernel_width = weights.shape
    for ky in range(kernel_height):
        rows = padded[band.start + ky : band.stop + ky]
        for kx in range(kernel_width):
            weight = weights[ky, kx]
            if weight:
                acc += weight * rows[:, kx : kx + width]
    return acc


def _separable_band(
    padded: np.ndarray, column: np.ndarray, row: np.ndarray, width: int, band: RowBand
) -> np.ndarray:
    # Horizontal pass over the band plus its vertical halo, then vertical pass.
    source = padded[band.start : band.stop + column.size - 1]
    horizontal = np.zeros((source.shape[0], width, padded.shape[2]))
    for kx, weight in enumerate(row):
        if weight:
            horizontal += weight * source[:, kx : kx + width]

    acc = np.zeros((band.rows, width, padded.shape[2]))
    for ky, weight in enumerate(column):
        if weight:
            acc += weight * horizontal[ky : ky + band.rows]
    return acc


def _check_kernel_fits(buffer: PixelBuffer, size) -> None:
    if size[0] > buffer.width or size[1] > buffer.height:
        raise KernelTooLarge(size, buffer.dimensions)


class ConvolutionEngine:
    """Generic spatial filter executor."""

    def __init__(self, thread_count: Optional[int] = None, border: Any = None):
        """
        Args:
            thread_count: Default worker count (None -> settings)
            border: Default BorderPolicy, mode, or mode name (None -> settings)
        """
        self.executor = ParallelExecutor(thread_count)
        self.border = border

    def _policy(self, border: Any) -> BorderPolicy:
        return BorderPolicy.parse(border if border is not None else self.border)

    def _padded_input(self, buffer: PixelBuffer, kernel: Kernel, policy: BorderPolicy) -> np.ndarray:
        padded = policy.pad(buffer.pixels().astype(np.float64), *kernel.padding())
        padded.setflags(write=False)
        return padded

    def convolve(
        self,
        buffer: PixelBuffer,
        kernel: Union[Kernel, Any],
        border: Any = None,
        thread_count: Optional[int] = None,
        separable: Optional[bool] = None,
    ) -> PixelBuffer:
        """
        Convolve every channel of ``buffer`` with ``kernel``.

        Args:
            buffer: Input buffer (not modified)
            kernel: Kernel or 2D array-like of weights
            border: BorderPolicy / mode for out-of-range samples
            thread_count: Worker count for this call
            separable: None picks the 1D two-pass path when the kernel
                factors; True requires it; False forces the direct 2D path

        Returns:
            New buffer with the input's dimensions and sample type

        Raises:
            KernelTooLarge: If the kernel is wider or taller than the buffer
            InvalidParameter: If separable=True and the kernel does not factor
        """
        if not isinstance(kernel, Kernel):
            kernel = Kernel(kernel)
        _check_kernel_fits(buffer, kernel.size)
        policy = self._policy(border)

        factors = None
        if separable is not False:
            factors = kernel.factors()
            if separable and factors is None:
                raise InvalidParameter("separable", separable, ErrorMessages.KERNEL_NOT_SEPARABLE)

        padded = self._padded_input(buffer, kernel, policy)
        if factors is None:
            band_op = partial(_direct_band, padded, kernel.weights, buffer.width)
            path = "direct"
        else:
            band_op = partial(_separable_band, padded, factors[0], factors[1], buffer.width)
            path = "separable"

        logger.debug(
            f"Convolving {buffer.width}x{buffer.height}x{buffer.channels} with {kernel} "
            f"({path}, border={policy})"
        )
        with timer("convolve", logger):
            return self.executor.run(buffer, band_op, thread_count)

    def box_blur(
        self, buffer: PixelBuffer, size: Size = FilterConstants.BOX_SIZE_DEFAULT, border: Any = None
    ) -> PixelBuffer:
        """Mean filter over a ``size`` window."""
        return self.convolve(buffer, kernels.box(size), border)

    def gaussian_blur(
        self,
        buffer: PixelBuffer,
        size: Size = FilterConstants.GAUSSIAN_SIZE_DEFAULT,
        sigma: Optional[float] = None,
        border: Any = None,
    ) -> PixelBuffer:
        """Gaussian smoothing (separable)."""
        return self.convolve(buffer, kernels.gaussian(size, sigma), border)

    def laplacian(self, buffer: PixelBuffer, border: Any = None) -> PixelBuffer:
        """4-neighbour Laplacian; negative responses clamp to the sample minimum."""
        return self.convolve(buffer, kernels.laplacian(), border)

    def sobel(
        self,
        buffer: PixelBuffer,
        direction: Union[SobelDirection, str] = SobelDirection.X,
        border: Any = None,
    ) -> PixelBuffer:
        """Signed Sobel derivative clamped into the sample range."""
        parsed = parse_enum(direction, SobelDirection, None, normalize=True)
        if parsed is None:
            raise InvalidParameter("direction", direction, "expected 'x' or 'y'")
        kernel = kernels.sobel_x() if parsed is SobelDirection.X else kernels.sobel_y()
        return self.convolve(buffer, kernel, border)

    def sobel_magnitude(
        self, buffer: PixelBuffer, border: Any = None, thread_count: Optional[int] = None
    ) -> PixelBuffer:
        """
        Gradient magnitude ``sqrt(gx^2 + gy^2)``.

        Both derivatives are kept in float64 until the magnitude is formed, so
        negative gradients contribute instead of being clamped away.
        """
        kx, ky = kernels.sobel_x(), kernels.sobel_y()
        _check_kernel_fits(buffer, kx.size)
        padded = self._padded_input(buffer, kx, self._policy(border))

        def band_op(band: RowBand) -> np.ndarray:
            gx = _direct_band(padded, kx.weights, buffer.width, band)
            gy = _direct_band(padded, ky.weights, buffer.width, band)
            return np.hypot(gx, gy)

        with timer("sobel_magnitude", logger):
            return self.executor.run(buffer, band_op, thread_count)


def convolve(
    buffer: PixelBuffer,
    kernel: Union[Kernel, Any],
    border: Any = None,
    thread_count: Optional[int] = None,
    separable: Optional[bool] = None,
) -> PixelBuffer:
    """Module-level shortcut for :meth:`ConvolutionEngine.convolve`."""
    return ConvolutionEngine(thread_count).convolve(buffer, kernel, border, separable=separable)
