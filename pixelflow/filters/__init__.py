"""
Filters operating on PixelBuffers.

Modules:
- point_ops: per-pixel operations (brightness, contrast, gamma, ...)
- histogram: histograms and equalization
- kernels: kernel factories
- convolution: ConvolutionEngine
- rank_filters: RankFilterEngine (median, morphology)
- pipeline: FilterPipeline
"""

from . import histogram, kernels, point_ops
from .convolution import ConvolutionEngine
from .histogram import Histogram
from .pipeline import FilterPipeline
from .rank_filters import RankFilterEngine

__all__ = [
    "point_ops",
    "histogram",
    "kernels",
    "Histogram",
    "ConvolutionEngine",
    "RankFilterEngine",
    "FilterPipeline",
]
