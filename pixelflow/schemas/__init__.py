"""
Pydantic schemas for pixelflow.
"""

from .operations import (
    BaseOperationParams,
    BorderParams,
    BoxBlurStep,
    BrightnessStep,
    ContrastStep,
    ConvolveStep,
    EqualizeStep,
    GammaStep,
    GaussianBlurStep,
    GrayscaleStep,
    InvertStep,
    LaplacianStep,
    MedianStep,
    MorphologyStep,
    OperationStep,
    PipelineSpec,
    SobelStep,
    ThresholdStep,
)

__all__ = [
    "BaseOperationParams",
    "BorderParams",
    "BrightnessStep",
    "ContrastStep",
    "GammaStep",
    "GrayscaleStep",
    "ThresholdStep",
    "InvertStep",
    "EqualizeStep",
    "ConvolveStep",
    "BoxBlurStep",
    "GaussianBlurStep",
    "SobelStep",
    "LaplacianStep",
    "MedianStep",
    "MorphologyStep",
    "OperationStep",
    "PipelineSpec",
]
