# PixelScan Filters - Point Operations
"""
Point filters: each destination pixel depends on the source pixel at the same
coordinate only.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from typing import ClassVar

import numpy as np

from pixelscan.color import clamp_channels, intensity
from .base import Filter, FilterKind, register_filter, register_alias
from .sampler import PixelSampler


@dataclass
class PointFilter(Filter):
    """Base class of filters mapping one source pixel to one destination pixel."""

    kind: ClassVar[FilterKind] = FilterKind.POINT

    def evaluate_column(self, sampler: PixelSampler, x: int, ys: np.ndarray) -> np.ndarray:
        return self.map_colors(sampler.column(x, ys))

    @abstractmethod
    def map_colors(self, colors: np.ndarray) -> np.ndarray:
        """Map an int64 array of colors (n, 3) to uint8 results (n, 3)."""


@register_filter
@dataclass
class Invert(PointFilter):
    """Invert colors (negative).

    Every channel c becomes 255 - c. Applying Invert twice restores the image.
    """

    def map_colors(self, colors: np.ndarray) -> np.ndarray:
        return clamp_channels(255 - colors)


@register_filter
@dataclass
class Grayscale(PointFilter):
    """Convert to grayscale.

    All channels are set to the truncated luma 0.299 R + 0.587 G + 0.114 B.
    """

    def map_colors(self, colors: np.ndarray) -> np.ndarray:
        gray = clamp_channels(intensity(colors))
        return np.repeat(gray[:, np.newaxis], 3, axis=1)


@register_filter
@dataclass
class Sepia(PointFilter):
    """Sepia toning.

    Based on the luma I: R = I + 2 * depth, G = I + depth / 2, B = I - depth.

    Parameters:
        depth: Tint strength (default 20)
    """
    depth: int = 20

    _primary_param: ClassVar[str] = 'depth'

    def __post_init__(self):
        self._check_numbers('depth', integer=True)

    def map_colors(self, colors: np.ndarray) -> np.ndarray:
        gray = intensity(colors)
        offsets = np.array([2 * self.depth, int(0.5 * self.depth), -self.depth], dtype=np.int64)
        return clamp_channels(gray[:, np.newaxis] + offsets)


@register_filter
@dataclass
class Brightness(PointFilter):
    """Brighten by adding a constant to every channel.

    Parameters:
        amount: Value added to each channel, negative values darken (default 50)

    Example:
        'brightness 30' or 'brightness(amount=-20)'
    """
    amount: int = 50

    _primary_param: ClassVar[str] = 'amount'

    def __post_init__(self):
        self._check_numbers('amount', integer=True)

    def map_colors(self, colors: np.ndarray) -> np.ndarray:
        return clamp_channels(colors + int(self.amount))


register_alias('gray', Grayscale)
register_alias('grey', Grayscale)
register_alias('negative', Invert)
register_alias('brighten', Brightness)

__all__ = ["PointFilter", "Invert", "Grayscale", "Sepia", "Brightness"]
