"""
Pydantic models describing filter pipeline steps.

Each step model carries an ``op`` discriminator plus the parameters of one
operation, with validation bounds and defaults.
"""

from typing import Annotated, Any, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pixelflow.core.border import BorderPolicy
from pixelflow.core.constants import ExecutorConstants, FilterConstants
from pixelflow.core.enums import BorderMode, SobelDirection, StructuringElementShape, ThresholdType


def _lower(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


class BaseOperationParams(BaseModel):
    """Common configuration for every step model."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class BorderParams(BaseOperationParams):
    """Border handling shared by windowed operations."""

    border: Optional[BorderMode] = Field(
        default=None, description="Border mode (extend, mirror, wrap, constant); None -> default"
    )
    constant_value: float = Field(
        default=FilterConstants.BORDER_CONSTANT_DEFAULT,
        description="Fill value for the constant border mode",
    )

    @field_validator("border", mode="before")
    @classmethod
    def _normalize_border(cls, value: Any) -> Any:
        return _lower(value)

    def policy(self) -> Optional[BorderPolicy]:
        """BorderPolicy for this step, or None to use the engine default."""
        if self.border is None:
            return None
        return BorderPolicy(self.border, self.constant_value)


# === Point operations ===


class BrightnessStep(BaseOperationParams):
    op: Literal["brightness"] = "brightness"
    delta: float = Field(..., description="Offset added to every sample (sample units)")


class ContrastStep(BaseOperationParams):
    op: Literal["contrast"] = "contrast"
    factor: float = Field(..., ge=0, description="Scale applied around the mid-range value")


class GammaStep(BaseOperationParams):
    op: Literal["gamma"] = "gamma"
    gamma: float = Field(..., gt=0, description="Exponent applied to normalized samples")


class GrayscaleStep(BaseOperationParams):
    op: Literal["grayscale"] = "grayscale"


class ThresholdStep(BaseOperationParams):
    op: Literal["threshold"] = "threshold"
    threshold: float = Field(..., description="Threshold in sample units")
    high: Optional[float] = Field(default=None, description="Value for accepted samples")
    low: Optional[float] = Field(default=None, description="Value for rejected samples")
    kind: ThresholdType = Field(default=ThresholdType.BINARY)

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value: Any) -> Any:
        return _lower(value)


class InvertStep(BaseOperationParams):
    op: Literal["invert"] = "invert"


class EqualizeStep(BaseOperationParams):
    op: Literal["equalize"] = "equalize"


# === Linear filters ===


class ConvolveStep(BorderParams):
    op: Literal["convolve"] = "convolve"
    weights: List[List[float]] = Field(..., min_length=1, description="Kernel rows")
    anchor: Optional[Tuple[int, int]] = Field(default=None, description="(x, y) anchor cell")
    separable: Optional[bool] = Field(default=None, description="Force or forbid the 1D two-pass path")


class BoxBlurStep(BorderParams):
    op: Literal["box_blur"] = "box_blur"
    size: int = Field(default=FilterConstants.BOX_SIZE_DEFAULT, ge=1)


class GaussianBlurStep(BorderParams):
    op: Literal["gaussian_blur"] = "gaussian_blur"
    size: int = Field(
        default=FilterConstants.GAUSSIAN_SIZE_DEFAULT,
        ge=FilterConstants.GAUSSIAN_SIZE_MIN,
        le=FilterConstants.GAUSSIAN_SIZE_MAX,
    )
    sigma: Optional[float] = Field(default=None, gt=0, description="None -> derived from size")


class SobelStep(BorderParams):
    op: Literal["sobel"] = "sobel"
    direction: SobelDirection = Field(default=SobelDirection.X)
    magnitude: bool = Field(default=False, description="Return sqrt(gx^2 + gy^2) instead")

    @field_validator("direction", mode="before")
    @classmethod
    def _normalize_direction(cls, value: Any) -> Any:
        return _lower(value)


class LaplacianStep(BorderParams):
    op: Literal["laplacian"] = "laplacian"


# === Rank filters ===


class MedianStep(BorderParams):
    op: Literal["median"] = "median"
    window: int = Field(
        default=FilterConstants.MEDIAN_WINDOW_DEFAULT, ge=1, le=FilterConstants.MEDIAN_WINDOW_MAX
    )


class MorphologyStep(BorderParams):
    op: Literal["erode", "dilate", "open", "close", "gradient"]
    shape: StructuringElementShape = Field(default=StructuringElementShape.RECTANGLE)
    size: int = Field(
        default=FilterConstants.MORPH_KERNEL_SIZE_DEFAULT,
        ge=FilterConstants.MORPH_KERNEL_SIZE_MIN,
        le=FilterConstants.MORPH_KERNEL_SIZE_MAX,
    )

    @field_validator("shape", mode="before")
    @classmethod
    def _normalize_shape(cls, value: Any) -> Any:
        return _lower(value)


OperationStep = Annotated[
    Union[
        BrightnessStep,
        ContrastStep,
        GammaStep,
        GrayscaleStep,
        ThresholdStep,
        InvertStep,
        EqualizeStep,
        ConvolveStep,
        BoxBlurStep,
        GaussianBlurStep,
        SobelStep,
        LaplacianStep,
        MedianStep,
        MorphologyStep,
    ],
    Field(discriminator="op"),
]


class PipelineSpec(BaseModel):
    """Ordered list of steps plus execution options."""

    model_config = ConfigDict(extra="forbid")

    steps: List[OperationStep] = Field(default_factory=list)
    thread_count: Optional[int] = Field(
        default=None, ge=ExecutorConstants.MIN_THREADS, le=ExecutorConstants.MAX_THREADS
    )
