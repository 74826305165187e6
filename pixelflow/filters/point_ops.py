"""
Point operations.

Every operation here is a pure per-pixel function: output pixel (x, y)
depends only on input pixel (x, y). Work is spread over row-bands and results
are clamped into the sample type, so over- and underflow saturate instead of
wrapping (240 + 50 -> 255 for 8-bit samples).
"""

import logging
import math
from typing import Optional, Union

import numpy as np

from pixelflow.core.buffer import PixelBuffer
from pixelflow.core.constants import ErrorMessages, LuminanceWeights, PixelConstants
from pixelflow.core.enums import ThresholdType
from pixelflow.core.exceptions import InvalidParameter
from pixelflow.core.executor import ParallelExecutor, RowBand
from pixelflow.core.utils.enum_converter import parse_enum

logger = logging.getLogger(__name__)

Number = Union[int, float]


def _finite(name: str, value) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidParameter(name, value, "expected a number")
    if not math.isfinite(value):
        raise InvalidParameter(name, value, "must be finite")
    return value


def _apply(buffer: PixelBuffer, func, thread_count: Optional[int], channels: Optional[int] = None) -> PixelBuffer:
    def band_op(band: RowBand) -> np.ndarray:
        return func(buffer.rows(band.start, band.stop).astype(np.float64))

    return ParallelExecutor(thread_count).run(buffer, band_op, channels=channels)


def brightness(buffer: PixelBuffer, delta: Number, thread_count: Optional[int] = None) -> PixelBuffer:
    """
    Add ``delta`` (in sample units) to every sample.

    Returns:
        New buffer, ``clamp(input + delta)``
    """
    delta = _finite("delta", delta)
    return _apply(buffer, lambda block: block + delta, thread_count)


def contrast(buffer: PixelBuffer, factor: Number, thread_count: Optional[int] = None) -> PixelBuffer:
    """
    Scale distances from the mid-range value.

    Returns:
        New buffer, ``clamp((input - midpoint) * factor + midpoint)``
    """
    factor = _finite("factor", factor)
    midpoint = buffer.sample_type.midpoint
    return _apply(buffer, lambda block: (block - midpoint) * factor + midpoint, thread_count)


def gamma(buffer: PixelBuffer, gamma: Number, thread_count: Optional[int] = None) -> PixelBuffer:
    """
    Power-law transform ``clamp(normalize(input) ** gamma * max)``.

    Raises:
        InvalidParameter: If gamma is not a positive finite number
    """
    gamma = _finite("gamma", gamma)
    if gamma <= 0:
        raise InvalidParameter("gamma", gamma, "must be greater than 0")

    sample_type = buffer.sample_type

    def power(block: np.ndarray) -> np.ndarray:
        return np.power(sample_type.normalize(block), gamma) * sample_type.value_range + sample_type.min_value

    return _apply(buffer, power, thread_count)


def grayscale(buffer: PixelBuffer, thread_count: Optional[int] = None) -> PixelBuffer:
    """
    Luminance of RGB(A) pixels using ITU-R BT.601 weights; alpha is ignored.

    Returns:
        Single-channel buffer (a copy when the input is already single-channel)

    Raises:
        InvalidParameter: For 2-channel (gray + alpha) input
    """
    if buffer.channels == PixelConstants.GRAY_CHANNELS:
        return PixelBuffer.from_array(buffer.pixels(), buffer.sample_type)
    if buffer.channels < PixelConstants.RGB_CHANNELS:
        raise InvalidParameter(
            "channels",
            buffer.channels,
            ErrorMessages.CHANNEL_MISMATCH.format(actual=buffer.channels, expected="3 or 4"),
        )

    weights = np.array(LuminanceWeights.as_tuple())

    def luminance(block: np.ndarray) -> np.ndarray:
        return (block[..., :3] @ weights)[..., np.newaxis]

    return _apply(buffer, luminance, thread_count, channels=1)


def threshold(
    buffer: PixelBuffer,
    threshold: Number,
    high: Optional[Number] = None,
    low: Optional[Number] = None,
    kind: Union[ThresholdType, str] = ThresholdType.BINARY,
    thread_count: Optional[int] = None,
) -> PixelBuffer:
    """
    Threshold every sample.

    Args:
        buffer: Input buffer
        threshold: Threshold ``t`` in sample units
        high: Value for samples ``>= t`` (BINARY); defaults to the sample max
        low: Value for rejected samples; defaults to the sample min
        kind: BINARY (``high if v >= t else low``), TRUNCATE
            (``t if v > t else v``) or TO_ZERO (``v if v > t else low``)
        thread_count: Worker count

    Returns:
        Thresholded buffer
    """
    t = _finite("threshold", threshold)
    sample_type = buffer.sample_type
    high = sample_type.max_value if high is None else _finite("high", high)
    low = sample_type.min_value if low is None else _finite("low", low)

    parsed = parse_enum(kind, ThresholdType, None, normalize=True)
    if parsed is None:
        raise InvalidParameter("kind", kind, "expected binary, truncate or to_zero")

    def apply_threshold(block: np.ndarray) -> np.ndarray:
        if parsed is ThresholdType.BINARY:
            return np.where(block >= t, high, low)
        if parsed is ThresholdType.TRUNCATE:
            return np.minimum(block, t)
        return np.where(block > t, block, low)

    return _apply(buffer, apply_threshold, thread_count)


def invert(buffer: PixelBuffer, thread_count: Optional[int] = None) -> PixelBuffer:
    """
    Negative image ``max - input + min``; an alpha channel is kept as is.
    """
    sample_type = buffer.sample_type
    colour = buffer.colour_channels

    def negate(block: np.ndarray) -> np.ndarray:
        block[..., :colour] = sample_type.max_value + sample_type.min_value - block[..., :colour]
        return block

    return _apply(buffer, negate, thread_count)


def blend(
    first: PixelBuffer, second: PixelBuffer, alpha: Number, thread_count: Optional[int] = None
) -> PixelBuffer:
    """
    Linear interpolation ``first * (1 - alpha) + second * alpha``.

    Raises:
        InvalidParameter: If the buffers differ in geometry, channel count or
            sample type, or alpha lies outside [0, 1]
    """
    alpha = _finite("alpha", alpha)
    if not 0.0 <= alpha <= 1.0:
        raise InvalidParameter("alpha", alpha, "must be within [0, 1]")
    if not first.same_shape(second):
        raise InvalidParameter(
            "second",
            second.shape,
            ErrorMessages.SHAPE_MISMATCH.format(actual=second.shape, expected=first.shape),
        )
    if first.sample_type != second.sample_type:
        raise InvalidParameter("second", second.sample_type, f"expected {first.sample_type} samples")

    def lerp(band: RowBand) -> np.ndarray:
        a = first.rows(band.start, band.stop).astype(np.float64)
        b = second.rows(band.start, band.stop).astype(np.float64)
        return a * (1.0 - alpha) + b * alpha

    return ParallelExecutor(thread_count).run(first, lerp)
