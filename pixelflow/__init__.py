"""
pixelflow: a modular pixel-processing engine.

Strided image buffers, point operations, histogram equalization, convolution
and rank filters, executed over row-bands on a thread pool.
"""

from .config import Settings, configure_logging, get_settings
from .core import (
    FLOAT32,
    UINT8,
    UINT16,
    BorderMode,
    BorderPolicy,
    InvalidDimensions,
    InvalidParameter,
    Kernel,
    KernelTooLarge,
    OutOfBounds,
    ParallelExecutor,
    PixelBuffer,
    PixelFlowError,
    SampleType,
    StructuringElement,
    structuring_element,
)
from .filters import ConvolutionEngine, FilterPipeline, Histogram, RankFilterEngine

__version__ = "1.0.0"

__all__ = [
    "PixelBuffer",
    "SampleType",
    "UINT8",
    "UINT16",
    "FLOAT32",
    "BorderMode",
    "BorderPolicy",
    "Kernel",
    "StructuringElement",
    "structuring_element",
    "ParallelExecutor",
    "ConvolutionEngine",
    "RankFilterEngine",
    "Histogram",
    "FilterPipeline",
    "Settings",
    "get_settings",
    "configure_logging",
    "PixelFlowError",
    "InvalidDimensions",
    "OutOfBounds",
    "InvalidParameter",
    "KernelTooLarge",
]
