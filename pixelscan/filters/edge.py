# PixelScan Filters - Edge Detection
"""
Gradient magnitude filters built from a pair of directional kernels.

For each channel the sums sx and sy against the horizontal and vertical
kernel are combined to sqrt(sx² + sy²), so edges of any orientation light up
and flat regions turn black.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import ClassVar

import numpy as np

from pixelscan.color import clamp_channels
from pixelscan.errors import InvalidKernelShapeError
from .base import Filter, FilterKind, register_filter, register_alias
from .kernels import Kernel, KernelFactory
from .sampler import PixelSampler


@dataclass
class GradientFilter(Filter):
    """Base class of the dual-kernel gradient filters.

    Both kernels must have the same shape, otherwise construction fails with
    :class:`InvalidKernelShapeError`.
    """

    kind: ClassVar[FilterKind] = FilterKind.DUAL_KERNEL_GRADIENT

    def __post_init__(self):
        kernel_x, kernel_y = self.build_kernels()
        if kernel_x.shape != kernel_y.shape:
            raise InvalidKernelShapeError(
                f"Gradient kernels differ in shape: {kernel_x.shape} vs {kernel_y.shape}"
            )
        self._kernel_x = kernel_x
        self._kernel_y = kernel_y
        # (dx, dy, weight_x, weight_y) for offsets where either weight is set
        rx, ry = kernel_x.radius_x, kernel_x.radius_y
        self._taps = [
            (col - rx, row - ry, float(kernel_x.weights[row, col]), float(kernel_y.weights[row, col]))
            for row in range(kernel_x.shape[0])
            for col in range(kernel_x.shape[1])
            if kernel_x.weights[row, col] != 0.0 or kernel_y.weights[row, col] != 0.0
        ]

    @abstractmethod
    def build_kernels(self) -> tuple[Kernel, Kernel]:
        """Create the (horizontal, vertical) kernel pair."""

    @property
    def kernels(self) -> tuple[Kernel, Kernel]:
        return self._kernel_x, self._kernel_y

    def evaluate_column(self, sampler: PixelSampler, x: int, ys: np.ndarray) -> np.ndarray:
        sum_x = np.zeros((len(ys), 3), dtype=np.float64)
        sum_y = np.zeros((len(ys), 3), dtype=np.float64)
        for dx, dy, weight_x, weight_y in self._taps:
            neighbors = sampler.neighbors(x, ys, dx, dy)
            sum_x += weight_x * neighbors
            sum_y += weight_y * neighbors
        return clamp_channels(np.sqrt(sum_x * sum_x + sum_y * sum_y))


@register_filter
@dataclass
class GradientMagnitude(GradientFilter):
    """Gradient magnitude of a custom kernel pair.

    Parameters:
        kernel_x: Odd-sized 2-D list, the horizontal derivative
        kernel_y: 2-D list of the same shape, the vertical derivative
    """
    kernel_x: list = field(default_factory=lambda: KernelFactory.sobel()[0].to_list())
    kernel_y: list = field(default_factory=lambda: KernelFactory.sobel()[1].to_list())

    def build_kernels(self) -> tuple[Kernel, Kernel]:
        kernel_x, kernel_y = Kernel(self.kernel_x), Kernel(self.kernel_y)
        self.kernel_x, self.kernel_y = kernel_x.to_list(), kernel_y.to_list()
        return kernel_x, kernel_y


@register_filter
@dataclass
class Sobel(GradientFilter):
    """Sobel edge detection.

    Horizontal kernel [[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]] and its transpose.
    A uniform image yields an all-black result.
    """

    def build_kernels(self) -> tuple[Kernel, Kernel]:
        return KernelFactory.sobel()


@register_filter
@dataclass
class Scharr(GradientFilter):
    """Scharr edge detection.

    Like Sobel with the rotation-invariant weights 3, 10, 3.
    """

    def build_kernels(self) -> tuple[Kernel, Kernel]:
        return KernelFactory.scharr()


@register_filter
@dataclass
class Prewitt(GradientFilter):
    """Prewitt edge detection with uniform weights."""

    def build_kernels(self) -> tuple[Kernel, Kernel]:
        return KernelFactory.prewitt()


register_alias('edges', Sobel)
register_alias('gradient', GradientMagnitude)

__all__ = ["GradientFilter", "GradientMagnitude", "Sobel", "Scharr", "Prewitt"]
