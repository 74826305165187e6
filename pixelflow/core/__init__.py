"""
Core modules for pixelflow
"""

from .border import BorderPolicy
from .buffer import PixelBuffer
from .enums import BorderMode, SobelDirection, StructuringElementShape, ThresholdType
from .exceptions import InvalidDimensions, InvalidParameter, KernelTooLarge, OutOfBounds, PixelFlowError
from .executor import ParallelExecutor, RowBand, partition_rows
from .kernel import Kernel, StructuringElement, structuring_element
from .samples import FLOAT32, UINT8, UINT16, SampleType, sample_type_for

__all__ = [
    "PixelBuffer",
    "SampleType",
    "UINT8",
    "UINT16",
    "FLOAT32",
    "sample_type_for",
    "BorderMode",
    "BorderPolicy",
    "ThresholdType",
    "StructuringElementShape",
    "SobelDirection",
    "Kernel",
    "StructuringElement",
    "structuring_element",
    "ParallelExecutor",
    "RowBand",
    "partition_rows",
    "PixelFlowError",
    "InvalidDimensions",
    "OutOfBounds",
    "InvalidParameter",
    "KernelTooLarge",
]
