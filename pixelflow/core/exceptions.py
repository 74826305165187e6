"""
Exception hierarchy for pixelflow.

Every failure the engine can report is a subclass of PixelFlowError and is
raised straight to the caller:
- InvalidDimensions: zero/negative sizes or a stride that cannot hold a row
- OutOfBounds: pixel coordinates outside the buffer
- InvalidParameter: bad operation arguments (gamma <= 0, mismatched operands, ...)
- KernelTooLarge: kernel or window larger than the buffer

Sample clamping is a numeric policy and never raises.
"""

from typing import Any, Dict, Optional

from pixelflow.core.constants import ErrorMessages


class PixelFlowError(Exception):
    """Base class for all pixelflow errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidDimensions(PixelFlowError, ValueError):
    """Raised when a buffer is constructed with an impossible geometry."""

    def __init__(self, width: Any, height: Any, channels: Any = 1, reason: str = ""):
        message = ErrorMessages.INVALID_DIMENSIONS.format(
            width=width, height=height, channels=channels
        )
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, {"width": width, "height": height, "channels": channels})


class OutOfBounds(PixelFlowError, IndexError):
    """Raised when a coordinate lies outside the buffer extent."""

    def __init__(self, x: int, y: int, width: int, height: int):
        super().__init__(
            ErrorMessages.OUT_OF_BOUNDS.format(x=x, y=y, width=width, height=height),
            {"x": x, "y": y, "width": width, "height": height},
        )


class InvalidParameter(PixelFlowError, ValueError):
    """Raised when an operation receives an argument it cannot honour."""

    def __init__(self, param: str, value: Any, reason: str = ""):
        message = ErrorMessages.INVALID_PARAMETER.format(param=param, value=value)
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, {"param": param, "value": value})
        self.param = param
        self.value = value


class KernelTooLarge(PixelFlowError, ValueError):
    """Raised when a kernel or window exceeds the buffer dimensions."""

    def __init__(self, kernel_size, buffer_size):
        super().__init__(
            ErrorMessages.KERNEL_TOO_LARGE.format(
                kernel_width=kernel_size[0],
                kernel_height=kernel_size[1],
                width=buffer_size[0],
                height=buffer_size[1],
            ),
            {"kernel_size": tuple(kernel_size), "buffer_size": tuple(buffer_size)},
        )
