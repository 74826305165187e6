"""
PixelBuffer - strided 2D pixel storage.

Samples live in one flat numpy array in row-major order. Each row occupies
``stride`` samples (``stride >= width * channels``, the remainder being
alignment padding), so pixel (x, y) starts at ``y * stride + x * channels``.

Buffers handed to an operation are never modified by it; operations return
new buffers. Codec collaborators can wrap their decoded storage directly with
the constructor as long as it follows this layout.
"""

import logging
from typing import Callable, Iterator, Optional, Sequence, Tuple, Union

import numpy as np

from pixelflow.core.constants import ErrorMessages, PixelConstants
from pixelflow.core.exceptions import InvalidDimensions, InvalidParameter, OutOfBounds
from pixelflow.core.samples import UINT8, SampleType, sample_type_for

logger = logging.getLogger(__name__)

Pixel = Tuple[Union[int, float], ...]
PixelLike = Union[int, float, Sequence[Union[int, float]]]


def _check_positive(width, height, channels) -> None:
    for value in (width, height, channels):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 1:
            raise InvalidDimensions(width, height, channels)


class PixelBuffer:
    """
    Contiguous, strided 2D array of pixels with a fixed channel layout.

    Attributes:
        width: Pixels per row
        height: Number of rows
        channels: Samples per pixel (1 gray, 2 gray+alpha, 3 RGB, 4 RGBA)
        stride: Samples per row including padding
        sample_type: Numeric sample type (see pixelflow.core.samples)
        data: Flat backing store
    """

    __hash__ = None

    def __init__(
        self,
        width: int,
        height: int,
        channels: int,
        data: np.ndarray,
        stride: Optional[int] = None,
        sample_type: Optional[SampleType] = None,
    ):
        """
        Wrap existing storage.

        Args:
            width: Buffer width in pixels
            height: Buffer height in pixels
            channels: Channels per pixel
            data: 1-D backing store in row-major order
            stride: Samples per row (defaults to width * channels)
            sample_type: Sample type (defaults to the one matching data.dtype)

        Raises:
            InvalidDimensions: If sizes are not positive, the stride is too
                small, or the backing store is too short
        """
        _check_positive(width, height, channels)

        data = np.asarray(data)
        if data.ndim != 1:
            data = data.reshape(-1)

        sample_type = sample_type_for(sample_type if sample_type is not None else data.dtype)
        if data.dtype != sample_type.dtype:
            data = sample_type.clamp(data)

        row = width * channels
        stride = row if stride is None else int(stride)
        if stride < row:
            raise InvalidDimensions(
                width, height, channels, ErrorMessages.STRIDE_TOO_SMALL.format(stride=stride, row=row)
            )
        if data.size < stride * height:
            raise InvalidDimensions(
                width,
                height,
                channels,
                ErrorMessages.DATA_TOO_SHORT.format(length=data.size, required=stride * height),
            )

        self.width = int(width)
        self.height = int(height)
        self.channels = int(channels)
        self.stride = stride
        self.sample_type = sample_type
        self.data = data

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        width: int,
        height: int,
        channels: int = 1,
        fill: PixelLike = 0,
        sample_type: SampleType = UINT8,
        row_alignment: int = PixelConstants.DEFAULT_ROW_ALIGNMENT,
    ) -> "PixelBuffer":
        """
        Allocate a new buffer filled with one pixel value.

        Args:
            width: Buffer width in pixels
            height: Buffer height in pixels
            channels: Channels per pixel
            fill: Scalar applied to every sample, or one value per channel
            sample_type: Sample type of the new buffer
            row_alignment: Rows are padded to a multiple of this many samples

        Returns:
            New PixelBuffer

        Raises:
            InvalidDimensions: If width, height, channels or alignment is < 1
            InvalidParameter: If fill has the wrong number of values
        """
        _check_positive(width, height, channels)
        if row_alignment < 1:
            raise InvalidDimensions(width, height, channels, f"row alignment {row_alignment} < 1")

        sample_type = sample_type_for(sample_type)
        row = width * channels
        stride = -(-row // row_alignment) * row_alignment

        buffer = cls(
            width,
            height,
            channels,
            np.zeros(stride * height, dtype=sample_type.dtype),
            stride=stride,
            sample_type=sample_type,
        )
        buffer.pixels()[...] = buffer._coerce_pixel(fill)
        return buffer

    @classmethod
    def from_array(cls, array, sample_type: Optional[SampleType] = None) -> "PixelBuffer":
        """
        Build a compact buffer from an (H, W) or (H, W, C) array.

        Args:
            array: Pixel array; values are taken in the units of the sample type
            sample_type: Target sample type (defaults to the array dtype's;
                other integer dtypes are clamped into uint8)

        Returns:
            New PixelBuffer owning a copy of the data
        """
        array = np.asarray(array)
        if array.ndim == 2:
            array = array[:, :, np.newaxis]
        if array.ndim != 3:
            raise InvalidParameter("array", array.shape, "expected (H, W) or (H, W, C)")

        height, width, channels = array.shape
        if height == 0 or width == 0 or channels == 0:
            raise InvalidDimensions(width, height, channels)

        if sample_type is None:
            sample_type = array.dtype
            if array.dtype.kind in "iu" and array.dtype not in (np.uint8, np.uint16):
                # other integer arrays, e.g. int64 from nested lists, hold 8-bit samples
                sample_type = UINT8
        sample_type = sample_type_for(sample_type)
        if array.dtype == sample_type.dtype:
            data = np.ascontiguousarray(array).reshape(-1).copy()
        else:
            data = sample_type.clamp(array).reshape(-1)
        return cls(width, height, channels, data, sample_type=sample_type)

    def like(self, channels: Optional[int] = None, sample_type: Optional[SampleType] = None) -> "PixelBuffer":
        """Blank buffer with this buffer's width and height."""
        return PixelBuffer.create(
            self.width,
            self.height,
            channels or self.channels,
            fill=0,
            sample_type=sample_type or self.sample_type,
        )

    def copy(self) -> "PixelBuffer":
        """Deep copy (keeps the stride)."""
        return PixelBuffer(
            self.width, self.height, self.channels, self.data.copy(), self.stride, self.sample_type
        )

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    @property
    def dimensions(self) -> Tuple[int, int]:
        """(width, height)"""
        return self.width, self.height

    @property
    def shape(self) -> Tuple[int, int, int]:
        """(height, width, channels), matching pixels()"""
        return self.height, self.width, self.channels

    @property
    def colour_channels(self) -> int:
        """Channels before a trailing alpha channel (gray+alpha and RGBA layouts)."""
        if self.channels in (PixelConstants.GRAY_ALPHA_CHANNELS, PixelConstants.RGBA_CHANNELS):
            return self.channels - 1
        return self.channels

    def same_shape(self, other: "PixelBuffer") -> bool:
        return self.shape == other.shape

    def offset(self, x: int, y: int) -> int:
        """Index of the first sample of pixel (x, y) in ``data``."""
        return y * self.stride + x * self.channels

    def _check_bounds(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise OutOfBounds(x, y, self.width, self.height)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def pixels(self) -> np.ndarray:
        """Writable (H, W, C) view of the live samples, padding excluded."""
        rows = self.data[: self.stride * self.height].reshape(self.height, self.stride)
        return rows[:, : self.width * self.channels].reshape(self.height, self.width, self.channels)

    def rows(self, start: int, stop: int) -> np.ndarray:
        """Writable view of rows ``[start, stop)``."""
        return self.pixels()[start:stop]

    def to_array(self) -> np.ndarray:
        """Compact (H, W, C) copy of the pixels."""
        return self.pixels().copy()

    def iter_pixels(self) -> Iterator[Tuple[int, int, Pixel]]:
        """Yield ``(x, y, pixel)`` in row-major order."""
        view = self.pixels()
        for y in range(self.height):
            for x in range(self.width):
                yield x, y, tuple(view[y, x].tolist())

    # ------------------------------------------------------------------
    # Pixel access
    # ------------------------------------------------------------------

    def _coerce_pixel(self, pixel: PixelLike) -> np.ndarray:
        values = np.atleast_1d(np.asarray(pixel, dtype=np.float64))
        if values.ndim != 1:
            raise InvalidParameter("pixel", pixel, "expected a scalar or a flat sequence")
        if values.size == 1 and self.channels > 1:
            values = np.repeat(values, self.channels)
        if values.size != self.channels:
            raise InvalidParameter(
                "pixel",
                pixel,
                ErrorMessages.CHANNEL_MISMATCH.format(actual=values.size, expected=self.channels),
            )
        return self.sample_type.clamp(values)

    def get(self, x: int, y: int) -> Pixel:
        """
        Read one pixel.

        Raises:
            OutOfBounds: If (x, y) lies outside the buffer
        """
        self._check_bounds(x, y)
        start = self.offset(x, y)
        return tuple(self.data[start : start + self.channels].tolist())

    def set(self, x: int, y: int, pixel: PixelLike) -> None:
        """
        Write one pixel (values are clamped to the sample range).

        A scalar is written to every channel.

        Raises:
            OutOfBounds: If (x, y) lies outside the buffer
            InvalidParameter: If the pixel has the wrong number of channels
        """
        self._check_bounds(x, y)
        start = self.offset(x, y)
        self.data[start : start + self.channels] = self._coerce_pixel(pixel)

    # ------------------------------------------------------------------
    # Transforms
    # ------------------------------------------------------------------

    def map(
        self,
        func: Callable,
        thread_count: Optional[int] = None,
        per_pixel: bool = False,
    ) -> "PixelBuffer":
        """
        Apply ``func`` to every pixel independently.

        By default ``func`` is vectorized: it receives a float64 array of shape
        (rows, width, channels) holding one row-band and returns an array of
        the same shape. It must not mix values of different pixels. With
        ``per_pixel=True`` it receives one pixel tuple and returns a pixel.
        Results are clamped to the sample type.

        Args:
            func: Pixel transform
            thread_count: Worker threads (defaults to settings)
            per_pixel: Call ``func`` once per pixel instead of once per band

        Returns:
            New PixelBuffer with identical dimensions
        """
        from pixelflow.core.executor import ParallelExecutor

        def band_op(band):
            native = self.rows(band.start, band.stop)
            if not per_pixel:
                return func(native.astype(np.float64))

            result = np.empty(native.shape, dtype=np.float64)
            for y in range(native.shape[0]):
                for x in range(native.shape[1]):
                    result[y, x] = np.asarray(func(tuple(native[y, x].tolist())), dtype=np.float64)
            return result

        return ParallelExecutor(thread_count).run(self, band_op)

    def convert(self, sample_type: SampleType) -> "PixelBuffer":
        """Rescale samples into another sample type (through normalized values)."""
        sample_type = sample_type_for(sample_type)
        if sample_type == self.sample_type:
            return PixelBuffer.from_array(self.pixels())
        converted = sample_type.denormalize(self.sample_type.normalize(self.pixels()))
        return PixelBuffer.from_array(converted, sample_type)

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __eq__(self, other) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (
            self.shape == other.shape
            and self.sample_type == other.sample_type
            and np.array_equal(self.pixels(), other.pixels())
        )

    def __repr__(self) -> str:
        return (
            f"PixelBuffer(width={self.width}, height={self.height}, channels={self.channels}, "
            f"stride={self.stride}, sample_type={self.sample_type})"
        )
