"""
Codec collaborator adapters.

Moves pixels between PixelBuffer and the libraries that decode and encode
files:
- PIL Images (L, LA, RGB, RGBA)
- NumPy arrays in OpenCV's BGR(A) order
- Files on disk (through Pillow)

Buffers with non-8-bit samples are rescaled to uint8 on the way out.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np
from PIL import Image

from pixelflow.core.buffer import PixelBuffer
from pixelflow.core.exceptions import InvalidParameter
from pixelflow.core.samples import UINT8

logger = logging.getLogger(__name__)

_MODE_BY_CHANNELS = {1: "L", 2: "LA", 3: "RGB", 4: "RGBA"}


class ImageConverters:
    """Utilities for converting between PixelBuffer and codec formats."""

    @staticmethod
    def buffer_from_pil(image: Image.Image, mode: Optional[str] = None) -> PixelBuffer:
        """
        Convert a PIL Image to a PixelBuffer.

        Args:
            image: PIL Image
            mode: Optional target mode (L, LA, RGB, RGBA); palette and other
                modes are converted to RGBA when omitted

        Returns:
            uint8 PixelBuffer
        """
        target = mode or (image.mode if image.mode in _MODE_BY_CHANNELS.values() else "RGBA")
        if target not in _MODE_BY_CHANNELS.values():
            raise InvalidParameter("mode", target, "expected L, LA, RGB or RGBA")
        if image.mode != target:
            image = image.convert(target)
        return PixelBuffer.from_array(np.asarray(image, dtype=np.uint8), UINT8)

    @staticmethod
    def buffer_to_pil(buffer: PixelBuffer) -> Image.Image:
        """
        Convert a PixelBuffer to a PIL Image.

        Args:
            buffer: 1-4 channel buffer

        Returns:
            PIL Image in L, LA, RGB or RGBA mode
        """
        if buffer.channels not in _MODE_BY_CHANNELS:
            raise InvalidParameter("channels", buffer.channels, "expected 1 to 4 channels")

        array = ImageConverters._to_uint8(buffer)
        if buffer.channels == 1:
            array = np.ascontiguousarray(array[:, :, 0])
        return Image.fromarray(array)

    @staticmethod
    def buffer_from_bgr(image: np.ndarray) -> PixelBuffer:
        """
        Convert an OpenCV image (grayscale, BGR or BGRA) to an RGB(A) buffer.

        Args:
            image: NumPy array as returned by cv2.imread / VideoCapture

        Returns:
            PixelBuffer with 1, 3 or 4 channels in RGB order
        """
        if image.ndim == 3 and image.shape[2] == 3:
            image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        elif image.ndim == 3 and image.shape[2] == 4:
            image = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
        return PixelBuffer.from_array(image)

    @staticmethod
    def buffer_to_bgr(buffer: PixelBuffer) -> np.ndarray:
        """
        Convert a buffer to an OpenCV uint8 image.

        Returns:
            (H, W) for single-channel buffers, otherwise (H, W, 3|4) in BGR(A)
        """
        array = ImageConverters._to_uint8(buffer)
        if buffer.channels == 1:
            return array[:, :, 0].copy()
        if buffer.channels == 3:
            return cv2.cvtColor(array, cv2.COLOR_RGB2BGR)
        if buffer.channels == 4:
            return cv2.cvtColor(array, cv2.COLOR_RGBA2BGRA)
        raise InvalidParameter("channels", buffer.channels, "expected 1, 3 or 4 channels")

    @staticmethod
    def load(path: Union[str, Path], mode: Optional[str] = None) -> PixelBuffer:
        """
        Decode an image file into a PixelBuffer.

        Args:
            path: Image file path (any format Pillow reads)
            mode: Optional target mode (L, LA, RGB, RGBA)

        Returns:
            uint8 PixelBuffer
        """
        try:
            with Image.open(path) as image:
                image.load()
                buffer = ImageConverters.buffer_from_pil(image, mode)
        except Exception as e:
            logger.error(f"Failed to load image {path}: {e}")
            raise

        logger.debug(f"Loaded {path} as {buffer!r}")
        return buffer

    @staticmethod
    def save(buffer: PixelBuffer, path: Union[str, Path], **save_kwargs) -> None:
        """
        Encode a buffer to a file; the format follows the file extension.

        Args:
            buffer: Buffer to encode
            path: Destination path
            **save_kwargs: Passed to PIL.Image.save (e.g. quality)
        """
        try:
            ImageConverters.buffer_to_pil(buffer).save(path, **save_kwargs)
        except Exception as e:
            logger.error(f"Failed to save image {path}: {e}")
            raise

    @staticmethod
    def _to_uint8(buffer: PixelBuffer) -> np.ndarray:
        if buffer.sample_type != UINT8:
            buffer = buffer.convert(UINT8)
        return np.ascontiguousarray(buffer.pixels())


buffer_from_pil = ImageConverters.buffer_from_pil
buffer_to_pil = ImageConverters.buffer_to_pil
buffer_from_bgr = ImageConverters.buffer_from_bgr
buffer_to_bgr = ImageConverters.buffer_to_bgr
load = ImageConverters.load
save = ImageConverters.save
