# PixelScan Filters - Kernels
"""
Convolution kernels and the factory building the predefined ones.

Weights are stored row-major: ``weights[dy + radius_y, dx + radius_x]`` is the
weight of the neighbor at offset (dx, dy). Both dimensions are always odd so
the kernel has a well defined center.
"""

from __future__ import annotations

import math
from typing import Iterator, Sequence, Union

import numpy as np

from pixelscan.errors import InvalidKernelShapeError

KernelSource = Union[Sequence[Sequence[float]], np.ndarray]


class Kernel:
    """An immutable, odd-sized 2-D array of weights.

    :param weights: Nested sequence or array of shape (rows, columns)
    """

    def __init__(self, weights: 'KernelSource | Kernel'):
        if isinstance(weights, Kernel):
            array = weights.weights
        else:
            try:
                array = np.array(weights, dtype=np.float64)
            except (TypeError, ValueError) as e:
                raise InvalidKernelShapeError(f"Kernel weights are not numeric: {e}") from e
        if array.ndim != 2 or array.size == 0:
            raise InvalidKernelShapeError(
                f"Kernel has to be a non-empty 2-D array, got shape {array.shape}"
            )
        rows, columns = array.shape
        if rows % 2 == 0 or columns % 2 == 0:
            raise InvalidKernelShapeError(
                f"Kernel dimensions have to be odd, got {columns}x{rows}"
            )
        if not np.all(np.isfinite(array)):
            raise InvalidKernelShapeError("Kernel weights have to be finite")
        array.flags.writeable = False
        self.weights: np.ndarray = array

    @property
    def shape(self) -> tuple[int, int]:
        return self.weights.shape

    @property
    def radius_x(self) -> int:
        return self.weights.shape[1] // 2

    @property
    def radius_y(self) -> int:
        return self.weights.shape[0] // 2

    @property
    def sum(self) -> float:
        """Sum of all weights"""
        return float(self.weights.sum())

    def taps(self) -> Iterator[tuple[int, int, float]]:
        """Yields (dx, dy, weight) of every non-zero weight, row by row."""
        rx, ry = self.radius_x, self.radius_y
        for row in range(self.weights.shape[0]):
            for col in range(self.weights.shape[1]):
                weight = float(self.weights[row, col])
                if weight != 0.0:
                    yield col - rx, row - ry, weight

    def transposed(self) -> 'Kernel':
        return Kernel(self.weights.T)

    def to_list(self) -> list[list[float]]:
        return self.weights.tolist()

    def __eq__(self, other):
        if not isinstance(other, Kernel):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self.weights, other.weights))

    def __repr__(self):
        return f"Kernel({self.to_list()})"


class KernelFactory:
    """Builds the predefined kernels used by the convolution filters."""

    @staticmethod
    def box_blur(size: int = 3) -> Kernel:
        """Uniform ``size x size`` kernel with weights ``1 / size²``."""
        if size < 1:
            raise InvalidKernelShapeError(f"Box size has to be positive, got {size}")
        return Kernel(np.full((size, size), 1.0 / (size * size)))

    @staticmethod
    def gaussian(radius: int = 3, sigma: float = 2.0) -> Kernel:
        """Normalized kernel with weights ``exp(-(i² + j²) / sigma²)``."""
        if radius < 0:
            raise InvalidKernelShapeError(f"Radius has to be >= 0, got {radius}")
        if sigma <= 0:
            raise ValueError(f"sigma has to be positive, got {sigma}")
        size = 2 * radius + 1
        weights = np.empty((size, size), dtype=np.float64)
        for i in range(-radius, radius + 1):
            for j in range(-radius, radius + 1):
                weights[i + radius, j + radius] = math.exp(-(i * i + j * j) / (sigma * sigma))
        return Kernel(weights / weights.sum())

    @staticmethod
    def sharpen() -> Kernel:
        return Kernel([[0, -1, 0], [-1, 5, -1], [0, -1, 0]])

    @staticmethod
    def sharpen_alt() -> Kernel:
        return Kernel([[-1, -1, -1], [-1, 9, -1], [-1, -1, -1]])

    @staticmethod
    def emboss() -> Kernel:
        return Kernel([[0, 1, 0], [1, 0, -1], [0, -1, 0]])

    @staticmethod
    def motion_blur(length: int = 10) -> Kernel:
        """Diagonal streak of ``length`` taps weighted ``1 / length``.

        An even length is placed into the next odd size; the surplus
        diagonal entry stays zero.
        """
        if length < 1:
            raise InvalidKernelShapeError(f"Length has to be positive, got {length}")
        size = length if length % 2 == 1 else length + 1
        weights = np.zeros((size, size), dtype=np.float64)
        for i in range(length):
            weights[i, i] = 1.0 / length
        return Kernel(weights)

    @staticmethod
    def sobel() -> tuple[Kernel, Kernel]:
        return (
            Kernel([[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]]),
            Kernel([[-1, -2, -1], [0, 0, 0], [1, 2, 1]]),
        )

    @staticmethod
    def scharr() -> tuple[Kernel, Kernel]:
        return (
            Kernel([[3, 0, -3], [10, 0, -10], [3, 0, -3]]),
            Kernel([[3, 10, 3], [0, 0, 0], [-3, -10, -3]]),
        )

    @staticmethod
    def prewitt() -> tuple[Kernel, Kernel]:
        return (
            Kernel([[-1, 0, 1], [-1, 0, 1], [-1, 0, 1]]),
            Kernel([[-1, -1, -1], [0, 0, 0], [1, 1, 1]]),
        )

    @classmethod
    def gradient_pair(cls, name: str) -> tuple[Kernel, Kernel]:
        """Returns the (x, y) kernel pair of 'sobel', 'scharr' or 'prewitt'."""
        builders = {
            'sobel': cls.sobel,
            'scharr': cls.scharr,
            'prewitt': cls.prewitt,
        }
        try:
            return builders[name.lower()]()
        except KeyError:
            raise ValueError(
                f"Unknown gradient operator {name!r}, expected one of {sorted(builders)}"
            ) from None


__all__ = ["Kernel", "KernelFactory", "KernelSource"]
