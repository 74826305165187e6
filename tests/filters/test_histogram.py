"""
Tests for histograms and equalization
"""

import numpy as np
import pytest

from pixelflow.core.buffer import PixelBuffer
from pixelflow.core.exceptions import InvalidParameter
from pixelflow.core.samples import FLOAT32
from pixelflow.filters import histogram


class TestCompute:
    """Test histogram computation"""

    def test_counts(self, binary_buffer):
        """Test bucket counts of a binary image"""
        result = histogram.compute(binary_buffer)
        counts = result.counts(0)
        assert result.bins == 256
        assert result.total == 16
        assert counts[0] == 12
        assert counts[255] == 4
        assert counts.sum() == 16

    def test_cumulative(self, random_buffer):
        """Test the cumulative distribution ends at the pixel count"""
        cumulative = histogram.compute(random_buffer).cumulative(0)
        assert cumulative[-1] == 100 * 100
        assert np.all(np.diff(cumulative) >= 0)

    def test_per_channel(self, rgb_buffer):
        """Test each channel is counted separately"""
        result = histogram.compute(rgb_buffer)
        assert result.channels == 3
        assert result.counts(1)[0] == 32 * 24
        assert result.counts(2)[200] == 80

    def test_bad_channel(self, binary_buffer):
        """Test channel indices are validated"""
        with pytest.raises(InvalidParameter):
            histogram.compute(binary_buffer).counts(1)

    def test_thread_count_invariant(self, random_buffer):
        """Test band counts merge to the same histogram"""
        assert histogram.compute(random_buffer, thread_count=1) == histogram.compute(
            random_buffer, thread_count=9
        )

    def test_counts_are_read_only(self, binary_buffer):
        """Test callers get copies of the counts"""
        result = histogram.compute(binary_buffer)
        result.counts(0)[0] = 99
        assert result.counts(0)[0] == 12


class TestEqualizationLut:
    """Test lookup table construction"""

    def test_monotonic_and_full_range(self, random_buffer):
        """Test the table is non-decreasing and reaches the top bucket"""
        lut = histogram.equalization_lut(histogram.compute(random_buffer).cumulative(0))
        assert np.all(np.diff(lut) >= 0)
        assert lut[-1] == 255

    def test_single_value_is_identity(self):
        """Test a one-bucket histogram maps every bucket to itself"""
        cumulative = np.concatenate([np.zeros(10), np.full(246, 50)]).astype(np.int64)
        assert histogram.equalization_lut(cumulative).tolist() == list(range(256))


class TestEqualize:
    """Test histogram equalization"""

    def test_single_value_unchanged(self):
        """Test a flat image is returned as is"""
        buffer = PixelBuffer.create(6, 6, fill=77)
        assert histogram.equalize(buffer) == buffer

    def test_uniform_histogram_is_fixed_point(self):
        """Test an already uniform histogram is left alone"""
        buffer = PixelBuffer.from_array(np.arange(256, dtype=np.uint8).reshape(16, 16))
        assert histogram.equalize(buffer) == buffer

    def test_stretches_narrow_range(self):
        """Test a low-contrast image spans the full range afterwards"""
        values = np.repeat(np.arange(100, 110, dtype=np.uint8), 10).reshape(10, 10)
        result = histogram.equalize(PixelBuffer.from_array(values))
        assert result.pixels().min() == 0
        assert result.pixels().max() == 255

    def test_idempotent_within_rounding(self, random_buffer):
        """Test equalizing twice changes nothing beyond rounding"""
        once = histogram.equalize(random_buffer)
        twice = histogram.equalize(once)
        difference = np.abs(once.to_array().astype(np.int16) - twice.to_array().astype(np.int16))
        assert difference.max() <= 1

    def test_thread_count_invariant(self, random_buffer):
        """Test the result does not depend on the worker count"""
        assert histogram.equalize(random_buffer, thread_count=1) == histogram.equalize(
            random_buffer, thread_count=8
        )

    def test_rgb_channels_independent(self, rgb_buffer):
        """Test flat channels survive while others are remapped"""
        result = histogram.equalize(rgb_buffer)
        assert np.all(result.to_array()[:, :, 1] == 0)
        assert result.channels == 3

    def test_alpha_passes_through(self):
        """Test the alpha channel of RGBA and gray+alpha buffers is not stretched"""
        rng = np.random.default_rng(5)
        for channels in (2, 4):
            image = rng.integers(100, 141, size=(12, 12, channels), dtype=np.uint8)
            source = PixelBuffer.from_array(image)
            result = histogram.equalize(source)
            assert np.array_equal(result.to_array()[:, :, -1], image[:, :, -1])
            assert result.pixels()[:, :, 0].min() == 0
            assert result.pixels()[:, :, 0].max() == 255

    def test_float_buffer(self, float_buffer):
        """Test float buffers are equalized in 256 buckets"""
        result = histogram.equalize(float_buffer)
        assert result.sample_type == FLOAT32
        assert result.pixels().max() == 1.0

    def test_input_untouched(self, random_buffer):
        """Test equalize returns a new buffer"""
        before = random_buffer.copy()
        histogram.equalize(random_buffer)
        assert random_buffer == before
