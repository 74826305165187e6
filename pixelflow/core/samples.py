"""
Numeric sample types.

A SampleType describes how one channel value is stored and how float results
are brought back into range. Filters compute in float64 and hand the result
to ``SampleType.clamp``, so the same filter code serves every sample type:
- integer types round half up and clip to [min_value, max_value]
- the float type is normalized to [0.0, 1.0] and only clips
"""

from dataclasses import dataclass
from typing import Dict, Union

import numpy as np

from pixelflow.core.constants import ErrorMessages, PixelConstants
from pixelflow.core.exceptions import InvalidParameter


@dataclass(frozen=True)
class SampleType:
    """Storage type and numeric rules for one channel sample."""

    name: str
    dtype: np.dtype
    min_value: float
    max_value: float
    is_integer: bool
    histogram_bins: int

    @property
    def midpoint(self) -> float:
        """Centre of the representable range (pivot for contrast)."""
        return (self.min_value + self.max_value) / 2.0

    @property
    def value_range(self) -> float:
        return self.max_value - self.min_value

    def clamp(self, values) -> np.ndarray:
        """
        Convert float values to this sample type without wraparound.

        Args:
            values: Scalar or array of (float) values

        Returns:
            Array of ``dtype`` with every value inside the representable range
        """
        values = np.asarray(values, dtype=np.float64)
        if self.is_integer:
            values = np.floor(values + 0.5)
        values = np.nan_to_num(values, nan=self.min_value, posinf=self.max_value, neginf=self.min_value)
        return np.clip(values, self.min_value, self.max_value).astype(self.dtype)

    def clamp_scalar(self, value) -> Union[int, float]:
        """Clamp a single value and return it as a Python scalar."""
        return self.clamp(value).item()

    def normalize(self, values) -> np.ndarray:
        """Map samples to float64 in [0, 1]."""
        values = np.asarray(values, dtype=np.float64)
        return (values - self.min_value) / self.value_range

    def denormalize(self, values) -> np.ndarray:
        """Map normalized floats back to clamped samples."""
        values = np.asarray(values, dtype=np.float64)
        return self.clamp(values * self.value_range + self.min_value)

    def to_bins(self, values) -> np.ndarray:
        """Histogram bucket index of each sample."""
        if self.is_integer:
            return np.asarray(values).astype(np.int64) - int(self.min_value)
        scaled = np.floor(self.normalize(values) * (self.histogram_bins - 1) + 0.5)
        return np.clip(scaled, 0, self.histogram_bins - 1).astype(np.int64)

    def from_bins(self, bins) -> np.ndarray:
        """Sample value represented by each histogram bucket."""
        bins = np.asarray(bins, dtype=np.float64)
        if self.is_integer:
            return self.clamp(bins + self.min_value)
        return self.denormalize(bins / (self.histogram_bins - 1))

    def __str__(self) -> str:
        return self.name


UINT8 = SampleType(
    name="uint8",
    dtype=np.dtype(np.uint8),
    min_value=0.0,
    max_value=255.0,
    is_integer=True,
    histogram_bins=256,
)

UINT16 = SampleType(
    name="uint16",
    dtype=np.dtype(np.uint16),
    min_value=0.0,
    max_value=65535.0,
    is_integer=True,
    histogram_bins=65536,
)

FLOAT32 = SampleType(
    name="float32",
    dtype=np.dtype(np.float32),
    min_value=0.0,
    max_value=1.0,
    is_integer=False,
    histogram_bins=PixelConstants.FLOAT_HISTOGRAM_BINS,
)

_BY_DTYPE: Dict[np.dtype, SampleType] = {
    np.dtype(np.uint8): UINT8,
    np.dtype(np.uint16): UINT16,
    np.dtype(np.float32): FLOAT32,
    np.dtype(np.float64): FLOAT32,
}

_BY_NAME: Dict[str, SampleType] = {st.name: st for st in (UINT8, UINT16, FLOAT32)}


def sample_type_for(dtype) -> SampleType:
    """
    Resolve the sample type for a numpy dtype, a name or a SampleType.

    Args:
        dtype: numpy dtype (or anything np.dtype accepts), sample type name,
            or an existing SampleType

    Returns:
        Matching SampleType

    Raises:
        InvalidParameter: If the dtype has no sample type
    """
    if isinstance(dtype, SampleType):
        return dtype
    if isinstance(dtype, str) and dtype in _BY_NAME:
        return _BY_NAME[dtype]
    try:
        resolved = np.dtype(dtype)
    except TypeError:
        raise InvalidParameter("dtype", dtype, ErrorMessages.UNSUPPORTED_DTYPE)
    if resolved not in _BY_DTYPE:
        raise InvalidParameter("dtype", dtype, ErrorMessages.UNSUPPORTED_DTYPE)
    return _BY_DTYPE[resolved]
