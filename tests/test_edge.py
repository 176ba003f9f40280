"""
Tests for the gradient magnitude filters
"""

import numpy as np
import pytest

from pixelscan import Image, InvalidKernelShapeError
from pixelscan.filters import GradientMagnitude, Sobel, Scharr, Prewitt, Filter, FilterKind, KernelFactory


class TestUniform:
    """A uniform image has no gradient anywhere."""

    @pytest.mark.parametrize("filter", [Sobel(), Scharr(), Prewitt(), GradientMagnitude()])
    def test_uniform_is_black(self, filter, solid_image):
        result = filter.apply(solid_image)
        assert result.size == solid_image.size
        assert np.all(result.get_pixels() == 0)


class TestSobel:
    """Tests for Sobel edge detection."""

    def test_vertical_edge(self, step_image):
        result = Sobel().apply(step_image)
        assert result.pixel(2, 2) == (255, 255, 255)
        assert result.pixel(3, 2) == (255, 255, 255)
        assert result.pixel(0, 2) == (0, 0, 0)
        assert result.pixel(5, 2) == (0, 0, 0)

    def test_magnitude(self):
        """A ramp of 10 per column gives sx = 4 * 20 = 80 and sy = 0."""
        pixels = np.zeros((5, 5, 3), dtype=np.uint8)
        for x in range(5):
            pixels[:, x] = x * 10
        result = Sobel().apply(Image(pixels))
        assert result.pixel(2, 2) == (80, 80, 80)

    def test_diagonal_magnitude_truncated(self):
        """sx = sy = 40 combine to sqrt(3200) = 56.57, truncated to 56."""
        pixels = np.zeros((5, 5, 3), dtype=np.uint8)
        for y in range(5):
            for x in range(5):
                pixels[y, x] = 5 * (x + y)
        result = Sobel().apply(Image(pixels))
        assert result.pixel(2, 2) == (56, 56, 56)

    def test_kind(self):
        assert Sobel().kind == FilterKind.DUAL_KERNEL_GRADIENT
        kernel_x, kernel_y = Sobel().kernels
        assert kernel_x == KernelFactory.sobel()[0]


class TestOtherOperators:
    """Scharr and Prewitt respond to the same edges."""

    def test_scharr_stronger_than_prewitt(self, noise_image):
        scharr = Scharr().apply(noise_image).get_pixels().astype(int)
        prewitt = Prewitt().apply(noise_image).get_pixels().astype(int)
        assert scharr.mean() > prewitt.mean()

    def test_edges_alias(self):
        assert isinstance(Filter.parse('edges'), Sobel)


class TestGradientMagnitude:
    """Custom kernel pairs."""

    def test_default_matches_sobel(self, noise_image):
        assert GradientMagnitude().apply(noise_image) == Sobel().apply(noise_image)

    def test_mismatched_shapes(self):
        with pytest.raises(InvalidKernelShapeError):
            GradientMagnitude(
                kernel_x=[[-1, 0, 1]],
                kernel_y=[[-1], [0], [1]],
            )

    def test_even_kernel(self):
        with pytest.raises(InvalidKernelShapeError):
            GradientMagnitude(kernel_x=[[-1, 1]], kernel_y=[[-1, 1]])

    def test_horizontal_only(self, step_image):
        result = GradientMagnitude(kernel_x=[[-1, 0, 1]], kernel_y=[[0, 0, 0]]).apply(step_image)
        assert result.pixel(2, 0) == (255, 255, 255)
        assert result.pixel(1, 0) == (0, 0, 0)


@pytest.mark.parametrize("filter", [Sobel(), Scharr(), Prewitt()])
def test_evaluate_matches_scan(filter, noise_image):
    result = filter.apply(noise_image)
    for x, y in [(0, 0), (12, 9), (23, 17)]:
        assert filter.evaluate(noise_image, x, y) == result.pixel(x, y)
