# PixelScan Filters - Convolution
"""
Single-kernel convolution filters: blur, sharpen, motion blur and emboss.

Each channel of the destination pixel is the weighted sum of the clamped
neighborhood, truncated and clamped to [0, 255].
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import ClassVar

import numpy as np

from pixelscan.color import clamp_channels, luminance
from pixelscan.errors import InvalidKernelShapeError
from .base import Filter, FilterKind, register_filter, register_alias
from .kernels import Kernel, KernelFactory
from .sampler import PixelSampler


@dataclass
class ConvolutionFilter(Filter):
    """Base class of filters convolving the image with one kernel.

    The kernel is built and validated on construction, so an invalid kernel
    is rejected before any scan starts.
    """

    kind: ClassVar[FilterKind] = FilterKind.CONVOLUTION

    def __post_init__(self):
        self._kernel = self.build_kernel()
        self._taps = list(self._kernel.taps())

    @abstractmethod
    def build_kernel(self) -> Kernel:
        """Create the kernel from the filter's parameters."""

    @property
    def kernel(self) -> Kernel:
        return self._kernel

    def weighted_sum(self, sampler: PixelSampler, x: int, ys: np.ndarray) -> np.ndarray:
        """Per-channel weighted neighborhood sums as float array (n, 3)."""
        acc = np.zeros((len(ys), 3), dtype=np.float64)
        for dx, dy, weight in self._taps:
            acc += weight * sampler.neighbors(x, ys, dx, dy)
        return acc

    def evaluate_column(self, sampler: PixelSampler, x: int, ys: np.ndarray) -> np.ndarray:
        return clamp_channels(self.weighted_sum(sampler, x, ys))


@register_filter
@dataclass
class Convolve(ConvolutionFilter):
    """Convolve with a custom kernel.

    Parameters:
        weights: Odd-sized 2-D list of weights, rows are vertical offsets

    Example:
        Convolve(weights=[[0, 0, 0], [0, 1, 0], [0, 0, 0]])
    """
    weights: list = field(default_factory=lambda: [[1.0]])

    def build_kernel(self) -> Kernel:
        kernel = Kernel(self.weights)
        self.weights = kernel.to_list()
        return kernel


@register_filter
@dataclass
class BoxBlur(ConvolutionFilter):
    """Box blur, the unweighted mean of a size x size window.

    Parameters:
        size: Odd window edge length (default 3)
    """
    size: int = 3

    _primary_param: ClassVar[str] = 'size'

    def build_kernel(self) -> Kernel:
        self._check_numbers('size', integer=True, error=InvalidKernelShapeError)
        return KernelFactory.box_blur(self.size)


@register_filter
@dataclass
class GaussianBlur(ConvolutionFilter):
    """Gaussian blur.

    Parameters:
        radius: Kernel radius, the kernel spans 2 * radius + 1 pixels (default 3)
        sigma: Spread of the bell curve (default 2.0)
    """
    radius: int = 3
    sigma: float = 2.0

    _primary_param: ClassVar[str] = 'radius'

    def build_kernel(self) -> Kernel:
        self._check_numbers('radius', integer=True, error=InvalidKernelShapeError)
        self._check_numbers('sigma')
        return KernelFactory.gaussian(self.radius, self.sigma)


@register_filter
@dataclass
class Sharpen(ConvolutionFilter):
    """Sharpen with a 3x3 Laplacian based kernel.

    Parameters:
        mode: 'cross' uses the 4-neighborhood kernel (center 5),
            'box' the 8-neighborhood kernel (center 9)
    """
    mode: str = 'cross'

    _primary_param: ClassVar[str] = 'mode'

    def build_kernel(self) -> Kernel:
        if self.mode == 'cross':
            return KernelFactory.sharpen()
        if self.mode == 'box':
            return KernelFactory.sharpen_alt()
        raise ValueError(f"Sharpen mode has to be 'cross' or 'box', got {self.mode!r}")


@register_filter
@dataclass
class MotionBlur(ConvolutionFilter):
    """Motion blur along the main diagonal.

    Parameters:
        length: Number of pixels averaged along the streak (default 10)
    """
    length: int = 10

    _primary_param: ClassVar[str] = 'length'

    def build_kernel(self) -> Kernel:
        self._check_numbers('length', integer=True, error=InvalidKernelShapeError)
        return KernelFactory.motion_blur(self.length)


@register_filter
@dataclass
class Emboss(ConvolutionFilter):
    """Emboss relief on a mid-gray background.

    The kernel is applied to the luma of the neighborhood, the signed result
    r is mapped to the gray level (r + 255) / 2.
    """

    def build_kernel(self) -> Kernel:
        return KernelFactory.emboss()

    def evaluate_column(self, sampler: PixelSampler, x: int, ys: np.ndarray) -> np.ndarray:
        acc = np.zeros(len(ys), dtype=np.float64)
        for dx, dy, weight in self._taps:
            acc += weight * luminance(sampler.neighbors(x, ys, dx, dy))
        gray = clamp_channels((acc + 255.0) / 2.0)
        return np.repeat(gray[:, np.newaxis], 3, axis=1)


register_alias('blur', BoxBlur)
register_alias('box', BoxBlur)
register_alias('gaussian', GaussianBlur)
register_alias('sharpen2', Sharpen, mode='box')
register_alias('motion', MotionBlur)
register_alias('convolution', Convolve)

__all__ = [
    "ConvolutionFilter",
    "Convolve",
    "BoxBlur",
    "GaussianBlur",
    "Sharpen",
    "MotionBlur",
    "Emboss",
]
