"""
Histograms and histogram equalization.

Histograms are rebuilt on every call (a buffer can change between calls) with
one pass over the pixels; row-bands count independently and their counts are
summed, which gives the same result for any thread count.

Equalization maps each colour channel through a lookup table built from its
cumulative distribution (an alpha channel is left alone):

    lut[i] = round((cdf[i] - cdf_min) / (N - cdf_min) * (bins - 1))

where ``cdf_min`` is the first non-zero cumulative count. A channel holding a
single distinct value has ``N == cdf_min`` and is left untouched.
"""

import logging
from typing import Optional

import numpy as np

from pixelflow.core.buffer import PixelBuffer
from pixelflow.core.exceptions import InvalidParameter
from pixelflow.core.executor import ParallelExecutor, RowBand
from pixelflow.core.samples import SampleType
from pixelflow.core.utils.decorators import timer

logger = logging.getLogger(__name__)


class Histogram:
    """Per-channel bucket counts of one buffer."""

    def __init__(self, counts: np.ndarray, sample_type: SampleType):
        """
        Args:
            counts: int64 array of shape (channels, bins)
            sample_type: Sample type the buckets refer to
        """
        counts = np.array(counts, dtype=np.int64)
        if counts.ndim != 2:
            raise InvalidParameter("counts", counts.shape, "expected (channels, bins)")
        counts.setflags(write=False)
        self._counts = counts
        self.sample_type = sample_type

    @property
    def channels(self) -> int:
        return self._counts.shape[0]

    @property
    def bins(self) -> int:
        return self._counts.shape[1]

    @property
    def total(self) -> int:
        """Number of pixels counted (same for every channel)."""
        return int(self._counts[0].sum())

    def _check_channel(self, channel: int) -> None:
        if not 0 <= channel < self.channels:
            raise InvalidParameter("channel", channel, f"buffer has {self.channels} channel(s)")

    def counts(self, channel: int = 0) -> np.ndarray:
        """Bucket counts of one channel."""
        self._check_channel(channel)
        return self._counts[channel].copy()

    def cumulative(self, channel: int = 0) -> np.ndarray:
        """Cumulative distribution (running sum of counts) of one channel."""
        self._check_channel(channel)
        return np.cumsum(self._counts[channel])

    def __eq__(self, other) -> bool:
        if not isinstance(other, Histogram):
            return NotImplemented
        return self.sample_type == other.sample_type and np.array_equal(self._counts, other._counts)

    __hash__ = None

    def __repr__(self) -> str:
        return f"Histogram(channels={self.channels}, bins={self.bins}, total={self.total})"


def compute(buffer: PixelBuffer, thread_count: Optional[int] = None) -> Histogram:
    """
    Count samples per bucket, per channel.

    Args:
        buffer: Input buffer
        thread_count: Worker count (None -> settings)

    Returns:
        Histogram with ``sample_type.histogram_bins`` buckets per channel
    """
    sample_type = buffer.sample_type
    bins = sample_type.histogram_bins

    def band_counts(band: RowBand) -> np.ndarray:
        indices = sample_type.to_bins(buffer.rows(band.start, band.stop))
        return np.stack(
            [np.bincount(indices[..., c].ravel(), minlength=bins) for c in range(buffer.channels)]
        )

    with timer("histogram", logger):
        partials = ParallelExecutor(thread_count).reduce(buffer, band_counts)
    return Histogram(np.sum(partials, axis=0), sample_type)


def equalization_lut(cumulative: np.ndarray) -> np.ndarray:
    """
    Build a monotonic lookup table from a cumulative distribution.

    Args:
        cumulative: Running bucket counts (last entry = pixel count)

    Returns:
        int64 bucket -> bucket table; the identity when only one bucket is used
    """
    cumulative = np.asarray(cumulative, dtype=np.int64)
    max_bin = cumulative.size - 1
    total = int(cumulative[-1])
    nonzero = cumulative[cumulative > 0]
    cdf_min = int(nonzero[0]) if nonzero.size else 0

    if total == cdf_min:
        return np.arange(cumulative.size, dtype=np.int64)

    scaled = (cumulative - cdf_min) / float(total - cdf_min) * max_bin
    return np.clip(np.floor(scaled + 0.5), 0, max_bin).astype(np.int64)


def equalize(buffer: PixelBuffer, thread_count: Optional[int] = None) -> PixelBuffer:
    """
    Flatten the histogram of each colour channel; alpha passes through.

    Args:
        buffer: Input buffer (not modified)
        thread_count: Worker count (None -> settings)

    Returns:
        Equalized buffer; running it again changes nothing beyond rounding
    """
    histogram = compute(buffer, thread_count)
    sample_type = buffer.sample_type

    remaps = []
    for channel in range(buffer.colour_channels):
        cumulative = histogram.cumulative(channel)
        lut = equalization_lut(cumulative)
        if np.array_equal(lut, np.arange(lut.size)):
            remaps.append(None)
        else:
            remaps.append(sample_type.from_bins(lut).astype(np.float64))

    logger.debug(
        f"Equalizing {buffer!r}: {sum(r is not None for r in remaps)} channel(s) remapped"
    )

    def band_op(band: RowBand) -> np.ndarray:
        source = buffer.rows(band.start, band.stop)
        result = source.astype(np.float64)
        indices = sample_type.to_bins(source)
        for channel, remap in enumerate(remaps):
            if remap is not None:
                result[..., channel] = remap[indices[..., channel]]
        return result

    with timer("equalize", logger):
        return ParallelExecutor(thread_count).run(buffer, band_op)
