"""
Constants and configuration values for pixelflow.
Centralizes all magic numbers and message templates.
"""


# Sample / pixel constants
class PixelConstants:
    """Constants related to pixel layout and sample types."""

    # Channel layouts
    GRAY_CHANNELS = 1
    GRAY_ALPHA_CHANNELS = 2
    RGB_CHANNELS = 3
    RGBA_CHANNELS = 4
    MAX_CHANNELS = 4

    # Row padding (in samples)
    DEFAULT_ROW_ALIGNMENT = 1

    # Histogram buckets for float samples (quantized to 8 bits)
    FLOAT_HISTOGRAM_BINS = 256


# Luminance weights (ITU-R BT.601)
class LuminanceWeights:
    """Perceptual weights used for RGB(A) -> grayscale conversion."""

    RED = 0.299
    GREEN = 0.587
    BLUE = 0.114

    @classmethod
    def as_tuple(cls):
        return (cls.RED, cls.GREEN, cls.BLUE)


# Filter defaults
class FilterConstants:
    """Default parameters for linear and rank filters."""

    # Gaussian blur
    GAUSSIAN_SIZE_DEFAULT = 5
    GAUSSIAN_SIZE_MIN = 1
    GAUSSIAN_SIZE_MAX = 31

    # Box blur
    BOX_SIZE_DEFAULT = 3

    # Median filter
    MEDIAN_WINDOW_DEFAULT = 3
    MEDIAN_WINDOW_MAX = 31

    # Morphological operations
    MORPH_KERNEL_SIZE_DEFAULT = 3
    MORPH_KERNEL_SIZE_MIN = 1
    MORPH_KERNEL_SIZE_MAX = 21

    # Border handling
    BORDER_MODE_DEFAULT = "extend"
    BORDER_CONSTANT_DEFAULT = 0.0

    # Separable factorization tolerance
    SEPARABLE_RTOL = 1e-9
    SEPARABLE_ATOL = 1e-12


# Executor constants
class ExecutorConstants:
    """Constants for the row-band thread pool."""

    MIN_THREADS = 1
    MAX_THREADS = 256
    THREAD_NAME_PREFIX = "pixelflow-band"


# System constants
class SystemConstants:
    """Constants for system operations."""

    LOG_LEVEL_DEFAULT = "INFO"
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ENV_PREFIX = "PIXELFLOW_"


# Error Messages
class ErrorMessages:
    """Standard error messages."""

    # Buffer errors
    INVALID_DIMENSIONS = "Invalid buffer dimensions {width}x{height}x{channels}"
    OUT_OF_BOUNDS = "Pixel ({x}, {y}) is out of bounds for buffer of size {width}x{height}"
    DATA_TOO_SHORT = "backing store holds {length} samples, {required} required"
    STRIDE_TOO_SMALL = "stride {stride} is smaller than row width {row}"

    # Parameter errors
    INVALID_PARAMETER = "Invalid parameter {param}: {value}"
    CHANNEL_MISMATCH = "channel count {actual} does not match {expected}"
    SHAPE_MISMATCH = "shape {actual} does not match {expected}"
    UNSUPPORTED_DTYPE = "unsupported sample dtype (expected uint8, uint16, float32 or float64)"
    UNKNOWN_BORDER = "expected one of extend, mirror, wrap, constant"

    # Filter errors
    KERNEL_TOO_LARGE = (
        "Kernel {kernel_width}x{kernel_height} exceeds buffer size {width}x{height}"
    )
    KERNEL_NOT_SEPARABLE = "kernel is not separable"
