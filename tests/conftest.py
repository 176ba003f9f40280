"""
Pytest fixtures for PixelScan tests
"""

import numpy as np
import pytest

from pixelscan import Image


@pytest.fixture
def gradient_image() -> Image:
    """
    A 64x16 image whose red channel encodes the column and green the row,
    so every pixel tells where it came from.
    """
    pixels = np.zeros((16, 64, 3), dtype=np.uint8)
    for x in range(64):
        pixels[:, x, 0] = x * 4
    for y in range(16):
        pixels[y, :, 1] = y * 16
    pixels[:, :, 2] = 77
    return Image(pixels)


@pytest.fixture
def noise_image() -> Image:
    """A reproducible 24x18 random image."""
    rng = np.random.default_rng(1234)
    return Image(rng.integers(0, 256, size=(18, 24, 3), dtype=np.uint8))


@pytest.fixture
def solid_image() -> Image:
    """A 12x10 image filled with a single color."""
    return Image(size=(12, 10), bg_color=(100, 150, 200))


@pytest.fixture
def step_image() -> Image:
    """A 6x5 image, the left three columns black, the right three white."""
    pixels = np.zeros((5, 6, 3), dtype=np.uint8)
    pixels[:, 3:] = 255
    return Image(pixels)


@pytest.fixture
def png_file(tmp_path, gradient_image):
    """The gradient image stored as PNG file."""
    path = tmp_path / "gradient.png"
    gradient_image.save(path)
    return path
