# PixelScan Filters - Geometric Transforms
"""
Geometric filters: each destination pixel copies the source pixel at a mapped
coordinate.

Translate and Rotate return black where the mapped coordinate leaves the
image, Wave and Glass clamp the mapped coordinate into the image instead.
The output always has the size of the source.
"""

from __future__ import annotations

import math
from abc import abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Optional

import numpy as np

from pixelscan.color import BLACK
from .base import Filter, FilterKind, register_filter, register_alias
from .sampler import PixelSampler


@dataclass
class GeometricFilter(Filter):
    """Base class of coordinate-mapping filters."""

    kind: ClassVar[FilterKind] = FilterKind.GEOMETRIC

    def evaluate_column(self, sampler: PixelSampler, x: int, ys: np.ndarray) -> np.ndarray:
        src_x, src_y = self.source_coordinates(sampler, x, ys)
        return self.fetch(sampler, src_x, src_y)

    @abstractmethod
    def source_coordinates(
        self, sampler: PixelSampler, x: int, ys: np.ndarray
    ) -> tuple[np.ndarray, np.ndarray]:
        """Map the destination pixels (x, ys) to integer source coordinates."""

    def fetch(self, sampler: PixelSampler, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        return sampler.fetch_clamped(xs, ys)


@register_filter
@dataclass
class Translate(GeometricFilter):
    """Shift the image content.

    The destination pixel (x, y) shows the source pixel
    (x + offset_x, y + offset_y), uncovered areas become black.

    Parameters:
        offset_x: Horizontal source offset (default 50)
        offset_y: Vertical source offset (default 0)
    """
    offset_x: int = 50
    offset_y: int = 0

    _primary_param: ClassVar[str] = 'offset_x'

    def __post_init__(self):
        self._check_numbers('offset_x', 'offset_y', integer=True)

    def source_coordinates(self, sampler, x, ys):
        xs = np.full(len(ys), x + int(self.offset_x), dtype=np.int64)
        return xs, ys + int(self.offset_y)

    def fetch(self, sampler, xs, ys):
        return sampler.fetch_bounded(xs, ys, BLACK)


@register_filter
@dataclass
class Rotate(GeometricFilter):
    """Rotate around the image center.

    Uses the inverse mapping: relative to the center (w // 2, h // 2) the
    source of (dx, dy) is (dx cos a - dy sin a, dx sin a + dy cos a), truncated
    toward zero. Areas rotated in from outside become black.

    Parameters:
        angle: Rotation angle in radians (default 0.0)

    Example:
        'rotate 1.5708' or 'rot90'
    """
    angle: float = 0.0

    _primary_param: ClassVar[str] = 'angle'

    def __post_init__(self):
        self._check_numbers('angle')

    def source_coordinates(self, sampler, x, ys):
        x0, y0 = sampler.width // 2, sampler.height // 2
        cos_a, sin_a = math.cos(self.angle), math.sin(self.angle)
        dx = float(x - x0)
        dy = (ys - y0).astype(np.float64)
        src_x = np.trunc(dx * cos_a - dy * sin_a).astype(np.int64) + x0
        src_y = np.trunc(dx * sin_a + dy * cos_a).astype(np.int64) + y0
        return src_x, src_y

    def fetch(self, sampler, xs, ys):
        return sampler.fetch_bounded(xs, ys, BLACK)


@register_filter
@dataclass
class Wave(GeometricFilter):
    """Horizontal sine wave displacement.

    The source column is x + trunc(amplitude * sin(2 pi d / period)) with
    d = x for driver 'x' and d = y for driver 'y'. Coordinates are clamped.

    Parameters:
        amplitude: Maximum displacement in pixels (default 20)
        period: Wave length in pixels (default 60)
        driver: 'x' or 'y', the coordinate driving the phase (default 'x')
    """
    amplitude: float = 20
    period: float = 60
    driver: str = 'x'

    _primary_param: ClassVar[str] = 'amplitude'

    def __post_init__(self):
        self._check_numbers('amplitude', 'period')
        if self.driver not in ('x', 'y'):
            raise ValueError(f"Wave driver has to be 'x' or 'y', got {self.driver!r}")
        if self.period == 0:
            raise ValueError("Wave period must not be 0")

    def source_coordinates(self, sampler, x, ys):
        phase = np.full(len(ys), float(x)) if self.driver == 'x' else ys.astype(np.float64)
        shift = np.trunc(self.amplitude * np.sin(2 * np.pi * phase / self.period))
        return x + shift.astype(np.int64), ys


@register_filter
@dataclass
class Glass(GeometricFilter):
    """Frosted glass effect, jitters every pixel by a random offset.

    Both source coordinates are displaced by trunc((r - 0.5) * spread) for
    uniform r in [0, 1), then clamped. The random generator belongs to the
    instance and is reseeded from ``seed`` at the start of every scan, so a
    seeded Glass reproduces its output exactly.

    Parameters:
        spread: Width of the jitter range in pixels (default 10)
        seed: Seed of the generator, None draws fresh entropy (default None)
    """
    spread: float = 10
    seed: Optional[int] = None

    _primary_param: ClassVar[str] = 'spread'

    def __post_init__(self):
        self._check_numbers('spread')
        if self.seed is not None:
            self._check_numbers('seed', integer=True)
        self._rng = np.random.default_rng(self.seed)

    def prepare(self, image) -> None:
        self._rng = np.random.default_rng(self.seed)

    def source_coordinates(self, sampler, x, ys):
        jitter = np.trunc((self._rng.random((len(ys), 2)) - 0.5) * self.spread).astype(np.int64)
        return x + jitter[:, 0], ys + jitter[:, 1]


register_alias('move', Translate)
register_alias('shift', Translate)
register_alias('rot90', Rotate, angle=math.pi / 2)
register_alias('rot180', Rotate, angle=math.pi)
register_alias('wave1', Wave, period=60, driver='x')
register_alias('wave2', Wave, period=30, driver='y')
register_alias('jitter', Glass)

__all__ = ["GeometricFilter", "Translate", "Rotate", "Wave", "Glass"]
