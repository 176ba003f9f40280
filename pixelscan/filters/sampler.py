# PixelScan Filters - Pixel Sampler
"""
Neighborhood access over a source image.

Coordinates outside the image are clamped to the nearest edge pixel
(edge replication). Spatial filters never see wrapped or zero-padded values.
The geometric filters that want a fallback color instead of clamping use
:meth:`PixelSampler.fetch_bounded`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from pixelscan.color import Color, BLACK

if TYPE_CHECKING:
    from pixelscan import Image


class PixelSampler:
    """Clamped pixel access over the read-only buffer of an :class:`Image`.

    :param image: The source image
    """

    def __init__(self, image: 'Image'):
        self.pixels: np.ndarray = image.get_pixels()
        self.height, self.width = self.pixels.shape[0:2]

    def clamp_x(self, xs):
        return np.clip(xs, 0, self.width - 1)

    def clamp_y(self, ys):
        return np.clip(ys, 0, self.height - 1)

    def sample(self, x: int, y: int) -> Color:
        """Returns the color at (x, y), clamping both coordinates into the image."""
        x = min(max(x, 0), self.width - 1)
        y = min(max(y, 0), self.height - 1)
        r, g, b = self.pixels[y, x]
        return int(r), int(g), int(b)

    def column(self, x: int, ys: np.ndarray) -> np.ndarray:
        """Returns the pixels of column x at rows ys as int64 array (n, 3)."""
        return self.pixels[self.clamp_y(ys), self.clamp_x(x)].astype(np.int64)

    def neighbors(self, x: int, ys: np.ndarray, dx: int, dy: int) -> np.ndarray:
        """Returns the pixels at (x + dx, ys + dy), clamped, as int64 array (n, 3).

        :param x: The column being evaluated
        :param ys: The rows being evaluated
        :param dx: Horizontal offset of the neighbor
        :param dy: Vertical offset of the neighbor
        """
        return self.pixels[self.clamp_y(ys + dy), self.clamp_x(x + dx)].astype(np.int64)

    def fetch_clamped(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """Gathers arbitrary coordinates with edge replication, uint8 array (n, 3)."""
        return self.pixels[self.clamp_y(ys), self.clamp_x(xs)]

    def fetch_bounded(
        self,
        xs: np.ndarray,
        ys: np.ndarray,
        fallback: Color = BLACK,
    ) -> np.ndarray:
        """Gathers arbitrary coordinates, out-of-bounds ones yield ``fallback``.

        :return: uint8 array (n, 3)
        """
        xs = np.asarray(xs)
        ys = np.asarray(ys)
        inside = (xs >= 0) & (xs < self.width) & (ys >= 0) & (ys < self.height)
        result = np.empty((len(xs), 3), dtype=np.uint8)
        result[:] = fallback
        result[inside] = self.pixels[ys[inside], xs[inside]]
        return result


def sample(image: 'Image', x: int, y: int) -> Color:
    """Returns the color at (x, y) of ``image`` using edge replication."""
    return PixelSampler(image).sample(x, y)


__all__ = ["PixelSampler", "sample"]
