# PixelScan Filters - Rank Filters
"""
Order-statistic filters: the output is a rank statistic (median, maximum) of
the values in a square window, computed for each channel independently.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import numpy as np

from pixelscan.errors import InvalidKernelShapeError
from .base import Filter, FilterKind, register_filter, register_alias
from .sampler import PixelSampler


@dataclass
class RankFilter(Filter):
    """Base class of the order-statistic filters.

    Parameters:
        window_size: Odd edge length of the square window (default 3)
    """
    window_size: int = 3

    kind: ClassVar[FilterKind] = FilterKind.ORDER_STATISTIC
    _primary_param: ClassVar[str] = 'window_size'

    def __post_init__(self):
        if (
            not isinstance(self.window_size, int)
            or isinstance(self.window_size, bool)
            or self.window_size < 1
            or self.window_size % 2 == 0
        ):
            raise InvalidKernelShapeError(
                f"{self.type} window_size has to be a positive odd integer, got {self.window_size!r}"
            )

    @property
    def radius(self) -> int:
        return self.window_size // 2

    def gather(self, sampler: PixelSampler, x: int, ys: np.ndarray) -> np.ndarray:
        """Collect the window of every row, shape (window_size², len(ys), 3)."""
        r = self.radius
        return np.stack([
            sampler.neighbors(x, ys, dx, dy)
            for dx in range(-r, r + 1)
            for dy in range(-r, r + 1)
        ])


@register_filter
@dataclass
class Median(RankFilter):
    """Median filter for noise reduction.

    Each channel takes the middle value of the sorted window.

    Example:
        'median 5' or 'median(window_size=3)'
    """

    def evaluate_column(self, sampler: PixelSampler, x: int, ys: np.ndarray) -> np.ndarray:
        window = np.sort(self.gather(sampler, x, ys), axis=0)
        return window[window.shape[0] // 2].astype(np.uint8)


@register_filter
@dataclass
class Maximum(RankFilter):
    """Maximum filter (grayscale dilation).

    Each channel takes the largest value of the window, which spreads bright
    structures such as edges into a glow.
    """

    def evaluate_column(self, sampler: PixelSampler, x: int, ys: np.ndarray) -> np.ndarray:
        return self.gather(sampler, x, ys).max(axis=0).astype(np.uint8)


register_alias('max', Maximum)
register_alias('dilate', Maximum)

__all__ = ["RankFilter", "Median", "Maximum"]
