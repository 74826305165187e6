"""
Tests for codec conversions (Pillow / OpenCV)
"""

import cv2
import numpy as np
import pytest
from PIL import Image

from pixelflow.core.buffer import PixelBuffer
from pixelflow.core.exceptions import InvalidParameter
from pixelflow.core.image.converters import ImageConverters
from pixelflow.core.samples import FLOAT32, UINT8


class TestPillow:
    """Test PIL Image conversion"""

    def test_from_rgb_image(self):
        """Test RGB images become 3-channel buffers"""
        image = Image.new("RGB", (4, 3), (10, 20, 30))
        buffer = ImageConverters.buffer_from_pil(image)
        assert buffer.dimensions == (4, 3)
        assert buffer.channels == 3
        assert buffer.get(3, 2) == (10, 20, 30)

    def test_palette_becomes_rgba(self):
        """Test palette images are expanded"""
        image = Image.new("P", (2, 2), 0)
        assert ImageConverters.buffer_from_pil(image).channels == 4

    def test_explicit_mode(self):
        """Test conversion to a requested mode"""
        image = Image.new("RGB", (2, 2), (255, 255, 255))
        buffer = ImageConverters.buffer_from_pil(image, mode="L")
        assert buffer.channels == 1
        assert buffer.get(0, 0) == (255,)

    def test_unsupported_mode(self):
        """Test modes outside L/LA/RGB/RGBA"""
        with pytest.raises(InvalidParameter):
            ImageConverters.buffer_from_pil(Image.new("RGB", (2, 2)), mode="CMYK")

    @pytest.mark.parametrize("channels,mode", [(1, "L"), (2, "LA"), (3, "RGB"), (4, "RGBA")])
    def test_to_pil_modes(self, channels, mode):
        """Test channel counts map onto PIL modes"""
        buffer = PixelBuffer.create(5, 2, channels=channels, fill=100)
        image = ImageConverters.buffer_to_pil(buffer)
        assert image.mode == mode
        assert image.size == (5, 2)

    def test_float_buffer_to_pil(self):
        """Test non-8-bit buffers are rescaled"""
        buffer = PixelBuffer.create(2, 2, fill=1.0, sample_type=FLOAT32)
        image = ImageConverters.buffer_to_pil(buffer)
        assert image.getpixel((0, 0)) == 255

    def test_roundtrip(self, rgb_buffer):
        """Test buffer -> PIL -> buffer preserves pixels"""
        restored = ImageConverters.buffer_from_pil(ImageConverters.buffer_to_pil(rgb_buffer))
        assert restored == rgb_buffer


class TestOpenCV:
    """Test BGR array conversion"""

    def test_from_bgr_swaps_channels(self):
        """Test BGR arrays become RGB buffers"""
        image = np.zeros((2, 3, 3), dtype=np.uint8)
        image[:, :] = (1, 2, 3)
        buffer = ImageConverters.buffer_from_bgr(image)
        assert buffer.get(0, 0) == (3, 2, 1)

    def test_bgra(self):
        """Test alpha stays last"""
        image = np.zeros((2, 2, 4), dtype=np.uint8)
        image[:, :] = (1, 2, 3, 4)
        assert ImageConverters.buffer_from_bgr(image).get(1, 1) == (3, 2, 1, 4)

    def test_grayscale(self):
        """Test 2-D arrays become single-channel buffers"""
        image = np.full((4, 4), 9, dtype=np.uint8)
        assert ImageConverters.buffer_from_bgr(image).channels == 1

    def test_roundtrip(self, rgb_buffer):
        """Test buffer -> BGR -> buffer preserves pixels"""
        bgr = ImageConverters.buffer_to_bgr(rgb_buffer)
        assert bgr.shape == (24, 32, 3)
        assert np.array_equal(cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB), rgb_buffer.to_array())
        assert ImageConverters.buffer_from_bgr(bgr) == rgb_buffer

    def test_single_channel_shape(self, binary_buffer):
        """Test single-channel buffers export as 2-D arrays"""
        assert ImageConverters.buffer_to_bgr(binary_buffer).shape == (4, 4)

    def test_two_channels_rejected(self):
        """Test gray + alpha has no OpenCV layout"""
        with pytest.raises(InvalidParameter):
            ImageConverters.buffer_to_bgr(PixelBuffer.create(2, 2, channels=2))


class TestFiles:
    """Test load/save through Pillow"""

    def test_png_roundtrip(self, tmp_path, rgba_buffer):
        """Test lossless files restore the buffer"""
        path = tmp_path / "image.png"
        ImageConverters.save(rgba_buffer, path)
        loaded = ImageConverters.load(path)
        assert loaded.sample_type == UINT8
        assert loaded == rgba_buffer

    def test_load_with_mode(self, tmp_path, rgb_buffer):
        """Test decoding into a requested mode"""
        path = tmp_path / "image.png"
        ImageConverters.save(rgb_buffer, path)
        assert ImageConverters.load(path, mode="L").channels == 1

    def test_missing_file(self, tmp_path):
        """Test decoder errors propagate"""
        with pytest.raises(FileNotFoundError):
            ImageConverters.load(tmp_path / "missing.png")
