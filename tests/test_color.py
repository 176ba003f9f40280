"""
Tests the color helpers
"""

import numpy as np
import pytest

from pixelscan import clamp, clamp_channels, intensity, luminance, to_color


def test_clamp():
    """
    Tests clamping of scalars
    """
    assert clamp(-5) == 0
    assert clamp(300) == 255
    assert clamp(17) == 17
    assert clamp(5, 0, 3) == 3


def test_clamp_channels():
    """
    Tests that floats are truncated toward zero before clamping
    """
    result = clamp_channels(np.array([-0.7, 0.9, 12.99, 254.5, 255.9, 1000.0]))
    assert result.dtype == np.uint8
    assert result.tolist() == [0, 0, 12, 254, 255, 255]
    assert clamp_channels(np.array([-20, 40, 400])).tolist() == [0, 40, 255]


def test_intensity():
    """
    Tests the truncated luma
    """
    assert intensity((255, 255, 255)) == 255
    assert intensity((0, 0, 0)) == 0
    assert intensity((10, 20, 30)) == 18
    assert intensity(np.array([[255, 0, 0], [0, 255, 0]])).tolist() == [76, 149]
    assert luminance((10, 20, 30)) == pytest.approx(18.15)


def test_to_color():
    """
    Tests the conversion of color representations
    """
    assert to_color((1, 2, 3)) == (1, 2, 3)
    assert to_color(np.array([4, 5, 6], dtype=np.uint8)) == (4, 5, 6)
    assert to_color("#AABBCC") == (170, 187, 204)
    assert to_color("#fff") == (255, 255, 255)
    with pytest.raises(ValueError):
        to_color("whatever")
    with pytest.raises(ValueError):
        to_color((1, 2))
    with pytest.raises(ValueError):
        to_color((1, 2, 256))
