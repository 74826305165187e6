"""
Pytest configuration and fixtures for pixelflow tests
"""

import os

import numpy as np
import pytest

from pixelflow.config import get_settings
from pixelflow.core.buffer import PixelBuffer
from pixelflow.core.samples import FLOAT32, UINT8


@pytest.fixture
def binary_buffer():
    """4x4 single-channel buffer holding a 2x2 white square"""
    values = np.array(
        [
            [0, 0, 0, 0],
            [0, 255, 255, 0],
            [0, 255, 255, 0],
            [0, 0, 0, 0],
        ],
        dtype=np.uint8,
    )
    return PixelBuffer.from_array(values)


@pytest.fixture
def random_buffer():
    """100x100 single-channel buffer of reproducible noise"""
    rng = np.random.default_rng(1234)
    return PixelBuffer.from_array(rng.integers(0, 256, size=(100, 100), dtype=np.uint8))


@pytest.fixture
def rgb_buffer():
    """32x24 RGB buffer with a horizontal red ramp and a blue square"""
    image = np.zeros((24, 32, 3), dtype=np.uint8)
    image[:, :, 0] = np.linspace(0, 255, 32, dtype=np.uint8)
    image[8:16, 10:20, 2] = 200
    return PixelBuffer.from_array(image)


@pytest.fixture
def rgba_buffer():
    """8x8 RGBA buffer with a half-transparent alpha channel"""
    rng = np.random.default_rng(42)
    image = rng.integers(0, 256, size=(8, 8, 4), dtype=np.uint8)
    image[:, :, 3] = 128
    return PixelBuffer.from_array(image)


@pytest.fixture
def float_buffer():
    """16x16 normalized float buffer with a diagonal gradient"""
    ys, xs = np.mgrid[0:16, 0:16]
    return PixelBuffer.from_array(((xs + ys) / 30.0).astype(np.float32), FLOAT32)


@pytest.fixture
def row_buffer():
    """Factory for single-row uint8 buffers"""

    def make(values):
        return PixelBuffer.from_array(np.array([values], dtype=np.uint8), UINT8)

    return make


@pytest.fixture
def clean_settings(monkeypatch):
    """Drop cached settings and PIXELFLOW_* variables around a test"""
    for key in list(os.environ):
        if key.startswith("PIXELFLOW_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()
