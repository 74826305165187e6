"""
Declarative filter chains.

A FilterPipeline is an ordered list of validated step models (see
``pixelflow.schemas.operations``). Steps are described as plain dicts, e.g.::

    pipeline = FilterPipeline.from_steps([
        {"op": "grayscale"},
        {"op": "gaussian_blur", "size": 5},
        {"op": "threshold", "threshold": 128},
    ])
    result = pipeline.run(buffer)

Each step consumes the previous step's output; the input buffer is never
modified.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from pixelflow.core.buffer import PixelBuffer
from pixelflow.core.kernel import Kernel, structuring_element
from pixelflow.core.utils.decorators import timer
from pixelflow.core.utils.params_processor import params_to_dict, validate_params
from pixelflow.filters import histogram, point_ops
from pixelflow.filters.convolution import ConvolutionEngine
from pixelflow.filters.rank_filters import RankFilterEngine
from pixelflow.schemas.operations import (
    BaseOperationParams,
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
    PipelineSpec,
    SobelStep,
    ThresholdStep,
)

logger = logging.getLogger(__name__)


class FilterPipeline:
    """Ordered chain of buffer -> buffer operations."""

    def __init__(self, steps: Sequence[BaseOperationParams] = (), thread_count: Optional[int] = None):
        """
        Args:
            steps: Validated step models
            thread_count: Worker count for every step (None -> settings)
        """
        spec = validate_params({"steps": list(steps), "thread_count": thread_count}, PipelineSpec, "steps")
        self.steps: List[BaseOperationParams] = list(spec.steps)
        self.thread_count = spec.thread_count
        self._convolution = ConvolutionEngine(self.thread_count)
        self._rank = RankFilterEngine(self.thread_count)
        self._handlers: Dict[type, Callable[[Any, PixelBuffer], PixelBuffer]] = {
            BrightnessStep: self._brightness,
            ContrastStep: self._contrast,
            GammaStep: self._gamma,
            GrayscaleStep: self._grayscale,
            ThresholdStep: self._threshold,
            InvertStep: self._invert,
            EqualizeStep: self._equalize,
            ConvolveStep: self._convolve,
            BoxBlurStep: self._box_blur,
            GaussianBlurStep: self._gaussian_blur,
            SobelStep: self._sobel,
            LaplacianStep: self._laplacian,
            MedianStep: self._median,
            MorphologyStep: self._morphology,
        }

    @classmethod
    def from_steps(cls, steps: Sequence[Any], thread_count: Optional[int] = None) -> "FilterPipeline":
        """
        Build a pipeline from step dicts (or step models).

        Raises:
            InvalidParameter: If any step fails validation
        """
        return cls(steps, thread_count)

    def append(self, step: Any) -> "FilterPipeline":
        """Add one step (dict or model) at the end; returns self for chaining."""
        spec = validate_params({"steps": [step]}, PipelineSpec, "step")
        self.steps.extend(spec.steps)
        return self

    def describe(self) -> List[Dict[str, Any]]:
        """Steps as plain dicts, suitable for ``from_steps``."""
        return [params_to_dict(step) for step in self.steps]

    def run(self, buffer: PixelBuffer) -> PixelBuffer:
        """
        Apply every step in order.

        Args:
            buffer: Input buffer (not modified)

        Returns:
            Output of the last step, or a copy of the input for an empty pipeline
        """
        if not self.steps:
            return buffer.copy()

        result = buffer
        with timer("pipeline", logger):
            for index, step in enumerate(self.steps):
                logger.debug(f"Step {index}: {step.op} on {result!r}")
                result = self._handlers[type(step)](step, result)
        return result

    def __len__(self) -> int:
        return len(self.steps)

    def __repr__(self) -> str:
        return f"FilterPipeline({[step.op for step in self.steps]})"

    # === Step handlers ===

    def _brightness(self, step: BrightnessStep, buffer: PixelBuffer) -> PixelBuffer:
        return point_ops.brightness(buffer, step.delta, self.thread_count)

    def _contrast(self, step: ContrastStep, buffer: PixelBuffer) -> PixelBuffer:
        return point_ops.contrast(buffer, step.factor, self.thread_count)

    def _gamma(self, step: GammaStep, buffer: PixelBuffer) -> PixelBuffer:
        return point_ops.gamma(buffer, step.gamma, self.thread_count)

    def _grayscale(self, step: GrayscaleStep, buffer: PixelBuffer) -> PixelBuffer:
        return point_ops.grayscale(buffer, self.thread_count)

    def _threshold(self, step: ThresholdStep, buffer: PixelBuffer) -> PixelBuffer:
        return point_ops.threshold(buffer, step.threshold, step.high, step.low, step.kind, self.thread_count)

    def _invert(self, step: InvertStep, buffer: PixelBuffer) -> PixelBuffer:
        return point_ops.invert(buffer, self.thread_count)

    def _equalize(self, step: EqualizeStep, buffer: PixelBuffer) -> PixelBuffer:
        return histogram.equalize(buffer, self.thread_count)

    def _convolve(self, step: ConvolveStep, buffer: PixelBuffer) -> PixelBuffer:
        kernel = Kernel(step.weights, step.anchor)
        return self._convolution.convolve(buffer, kernel, step.policy(), separable=step.separable)

    def _box_blur(self, step: BoxBlurStep, buffer: PixelBuffer) -> PixelBuffer:
        return self._convolution.box_blur(buffer, step.size, step.policy())

    def _gaussian_blur(self, step: GaussianBlurStep, buffer: PixelBuffer) -> PixelBuffer:
        return self._convolution.gaussian_blur(buffer, step.size, step.sigma, step.policy())

    def _sobel(self, step: SobelStep, buffer: PixelBuffer) -> PixelBuffer:
        if step.magnitude:
            return self._convolution.sobel_magnitude(buffer, step.policy())
        return self._convolution.sobel(buffer, step.direction, step.policy())

    def _laplacian(self, step: LaplacianStep, buffer: PixelBuffer) -> PixelBuffer:
        return self._convolution.laplacian(buffer, step.policy())

    def _median(self, step: MedianStep, buffer: PixelBuffer) -> PixelBuffer:
        return self._rank.median_filter(buffer, step.window, step.policy())

    def _morphology(self, step: MorphologyStep, buffer: PixelBuffer) -> PixelBuffer:
        element = structuring_element(step.shape, step.size)
        operation = getattr(self._rank, step.op)
        return operation(buffer, element, step.policy())
