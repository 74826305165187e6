"""
Kernel factories for the convolution engine.
"""

import math
from typing import Optional, Sequence, Union

import numpy as np

from pixelflow.core.constants import FilterConstants
from pixelflow.core.exceptions import InvalidParameter
from pixelflow.core.kernel import Kernel, Size, window_size


def identity(size: Size = 1) -> Kernel:
    """Kernel with a single 1 at its anchor; convolving with it is a no-op."""
    width, height = window_size(size)
    weights = np.zeros((height, width))
    weights[height // 2, width // 2] = 1.0
    return Kernel(weights)


def box(size: Size = FilterConstants.BOX_SIZE_DEFAULT) -> Kernel:
    """Normalized box (mean) filter."""
    width, height = window_size(size)
    return Kernel.from_separable(np.ones(height), np.full(width, 1.0 / (width * height)))


def default_sigma(size: int) -> float:
    """Sigma derived from the kernel size (same rule as OpenCV's getGaussianKernel)."""
    return 0.3 * ((size - 1) * 0.5 - 1) + 0.8


def gaussian_1d(size: int, sigma: Optional[float] = None) -> np.ndarray:
    """Normalized, centred 1D Gaussian of ``size`` taps."""
    if size < 1:
        raise InvalidParameter("size", size, "must be at least 1")
    sigma = default_sigma(size) if sigma is None else float(sigma)
    if not math.isfinite(sigma) or sigma <= 0:
        raise InvalidParameter("sigma", sigma, "must be positive")

    centre = (size - 1) / 2.0
    taps = np.exp(-((np.arange(size) - centre) ** 2) / (2.0 * sigma * sigma))
    return taps / taps.sum()


def gaussian(
    size: Size = FilterConstants.GAUSSIAN_SIZE_DEFAULT,
    sigma: Union[None, float, Sequence[float]] = None,
) -> Kernel:
    """
    Separable, normalized Gaussian kernel.

    Args:
        size: Edge length or (width, height)
        sigma: Standard deviation, or (sigma_x, sigma_y); derived from the
            size when omitted

    Returns:
        Kernel whose weights sum to 1
    """
    width, height = window_size(size)
    if sigma is None or np.isscalar(sigma):
        sigma_x = sigma_y = sigma
    else:
        sigma_x, sigma_y = sigma
    return Kernel.from_separable(gaussian_1d(height, sigma_y), gaussian_1d(width, sigma_x))


def sobel_x() -> Kernel:
    """Horizontal derivative (responds to vertical edges)."""
    return Kernel.from_separable([1.0, 2.0, 1.0], [-1.0, 0.0, 1.0])


def sobel_y() -> Kernel:
    """Vertical derivative (responds to horizontal edges)."""
    return Kernel.from_separable([-1.0, 0.0, 1.0], [1.0, 2.0, 1.0])


def laplacian() -> Kernel:
    """4-neighbour Laplacian (not separable)."""
    return Kernel([[0.0, 1.0, 0.0], [1.0, -4.0, 1.0], [0.0, 1.0, 0.0]])
