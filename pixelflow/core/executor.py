"""
Row-band parallel execution.

A buffer is cut into contiguous horizontal bands, one per worker. Workers read
the (shared, read-only) input freely but write only the rows of their own band
in the output, so no locking is needed and the assembled result does not
depend on the number of threads or on scheduling order. numpy releases the GIL
inside its vectorized loops, so band work runs concurrently on threads.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

import numpy as np

from pixelflow.core.buffer import PixelBuffer
from pixelflow.core.constants import ErrorMessages, ExecutorConstants
from pixelflow.core.exceptions import InvalidParameter
from pixelflow.core.samples import SampleType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RowBand:
    """Rows ``[start, stop)`` assigned to one worker."""

    index: int
    start: int
    stop: int

    @property
    def rows(self) -> int:
        return self.stop - self.start


def resolve_thread_count(thread_count: Optional[int] = None) -> int:
    """
    Validate an explicit thread count or fall back to the configured one.

    Raises:
        InvalidParameter: If the count is not a positive integer
    """
    if thread_count is None:
        from pixelflow.config import get_settings

        return get_settings().executor.thread_count

    if isinstance(thread_count, bool) or not isinstance(thread_count, (int, np.integer)):
        raise InvalidParameter("thread_count", thread_count, "expected an integer")
    if thread_count < ExecutorConstants.MIN_THREADS:
        raise InvalidParameter("thread_count", thread_count, "must be at least 1")
    return int(thread_count)


def partition_rows(height: int, count: int) -> List[RowBand]:
    """
    Split ``height`` rows into ``count`` contiguous bands.

    Band sizes differ by at most one row (larger bands first). When there are
    more workers than rows, only ``height`` single-row bands are produced.

    Args:
        height: Number of rows to cover
        count: Requested number of bands

    Returns:
        Bands in top-to-bottom order
    """
    if count < 1:
        raise InvalidParameter("count", count, "must be at least 1")
    if height < 1:
        raise InvalidParameter("height", height, "must be at least 1")

    count = min(count, height)
    base, extra = divmod(height, count)

    bands = []
    start = 0
    for index in range(count):
        size = base + (1 if index < extra else 0)
        bands.append(RowBand(index, start, start + size))
        start += size
    return bands


class ParallelExecutor:
    """Drives row-band work on a fixed-size thread pool."""

    def __init__(self, thread_count: Optional[int] = None):
        """
        Args:
            thread_count: Default number of workers (None -> settings)
        """
        self.thread_count = thread_count

    def _threads(self, thread_count: Optional[int]) -> int:
        return resolve_thread_count(thread_count if thread_count is not None else self.thread_count)

    def run(
        self,
        buffer: PixelBuffer,
        operation: Callable[[RowBand], Any],
        thread_count: Optional[int] = None,
        channels: Optional[int] = None,
        sample_type: Optional[SampleType] = None,
    ) -> PixelBuffer:
        """
        Compute a new buffer band by band.

        ``operation(band)`` must return the output rows of that band as an array
        of shape (band.rows, width, channels) in sample units; the executor
        clamps it into the output's sample type and stores it in the band's
        rows only.

        Args:
            buffer: Input buffer (only its geometry is used here)
            operation: Band function, must not write to shared state
            thread_count: Worker count for this call
            channels: Output channel count (defaults to the input's)
            sample_type: Output sample type (defaults to the input's)

        Returns:
            Assembled output buffer
        """
        output = buffer.like(channels=channels, sample_type=sample_type)
        bands = partition_rows(buffer.height, self._threads(thread_count))

        def work(band: RowBand) -> None:
            block = np.asarray(operation(band))
            expected = (band.rows, output.width, output.channels)
            if block.shape != expected:
                raise InvalidParameter(
                    "band result",
                    block.shape,
                    ErrorMessages.SHAPE_MISMATCH.format(actual=block.shape, expected=expected),
                )
            output.rows(band.start, band.stop)[...] = output.sample_type.clamp(block)

        self._dispatch(bands, work)
        return output

    def reduce(
        self,
        buffer: PixelBuffer,
        operation: Callable[[RowBand], Any],
        thread_count: Optional[int] = None,
    ) -> List[Any]:
        """
        Run ``operation`` on every band and collect the results in band order.
        """
        bands = partition_rows(buffer.height, self._threads(thread_count))
        results: List[Any] = [None] * len(bands)

        def work(band: RowBand) -> None:
            results[band.index] = operation(band)

        self._dispatch(bands, work)
        return results

    def _dispatch(self, bands: List[RowBand], work: Callable[[RowBand], None]) -> None:
        if len(bands) == 1:
            work(bands[0])
            return

        logger.debug(f"Dispatching {len(bands)} row-bands")
        with ThreadPoolExecutor(
            max_workers=len(bands), thread_name_prefix=ExecutorConstants.THREAD_NAME_PREFIX
        ) as pool:
            futures = [pool.submit(work, band) for band in bands]
            for band, future in zip(bands, futures):
                try:
                    future.result()
                except Exception as e:
                    logger.error(f"Row-band {band.index} [{band.start}, {band.stop}) failed: {e}")
                    raise
