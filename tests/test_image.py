"""
Tests the features of the pixelscan.image.Image class
"""

import numpy as np
import pytest

from pixelscan import Image, ImageIOError


def test_blank_image():
    """
    Tests creating a blank image of a given size and color
    """
    image = Image(size=(4, 3), bg_color=(1, 2, 3))
    assert image.size == (4, 3)
    assert image.get_size() == (4, 3)
    assert image.width == 4 and image.height == 3
    assert image.get_pixels().shape == (3, 4, 3)
    assert image.pixel(3, 2) == (1, 2, 3)
    assert Image(size=(2, 2)).pixel(0, 0) == (0, 0, 0)
    assert Image(size=(2, 2), bg_color="#ff8000").pixel(1, 1) == (255, 128, 0)


def test_invalid_sources():
    """
    Tests that unusable sources are rejected
    """
    with pytest.raises(ValueError):
        Image()
    with pytest.raises(ValueError):
        Image(np.zeros((2, 2), dtype=np.uint8))
    with pytest.raises(ValueError):
        Image(np.full((2, 2, 3), 300))
    with pytest.raises(ValueError):
        # noinspection PyTypeChecker
        Image(12)


def test_immutable(gradient_image):
    """
    Tests that neither the pixels nor the attributes of an image can change
    """
    with pytest.raises(ValueError):
        gradient_image.get_pixels()[0, 0] = (1, 2, 3)
    with pytest.raises(ValueError):
        gradient_image.width = 5


def test_array_is_copied():
    """
    Tests that later changes of the source array do not leak into the image
    """
    pixels = np.zeros((2, 2, 3), dtype=np.uint8)
    image = Image(pixels)
    pixels[0, 0] = 255
    assert image.pixel(0, 0) == (0, 0, 0)


def test_pixel_access(gradient_image):
    """
    Tests reading single pixels
    """
    assert gradient_image.pixel(5, 2) == (20, 32, 77)
    with pytest.raises(IndexError):
        gradient_image.pixel(64, 0)
    with pytest.raises(IndexError):
        gradient_image.pixel(0, -1)


def test_empty():
    """
    Tests images without pixels
    """
    assert Image(size=(0, 5)).is_empty
    assert not Image(size=(1, 1)).is_empty


def test_copy_and_equality(gradient_image):
    """
    Tests copies, equality and hashes
    """
    duplicate = gradient_image.copy()
    assert duplicate == gradient_image
    assert duplicate.get_hash() == gradient_image.get_hash()
    assert duplicate != Image(size=(64, 16))
    assert str(gradient_image) == "Image (64x16 RGB)"


def test_encode_decode(gradient_image):
    """
    Tests lossless PNG and BMP encoding and lossy JPEG encoding
    """
    for filetype in ("png", "bmp"):
        data = gradient_image.encode(filetype)
        assert Image.decode(data) == gradient_image
    jpeg = Image.decode(gradient_image.encode("jpg", quality=95))
    assert jpeg.size == gradient_image.size
    difference = np.abs(jpeg.get_pixels().astype(int) - gradient_image.get_pixels().astype(int))
    assert difference.mean() < 8
    with pytest.raises(ImageIOError):
        gradient_image.encode("tiff")


def test_save_and_load(tmp_path, gradient_image):
    """
    Tests storing an image on disk and loading it again
    """
    target = tmp_path / "image.png"
    gradient_image.save(target)
    assert Image.load(target) == gradient_image
    assert Image(str(target)) == gradient_image
    with pytest.raises(ImageIOError):
        gradient_image.save(tmp_path / "no_extension")


def test_io_errors(tmp_path):
    """
    Tests that unreadable or damaged data raises ImageIOError
    """
    missing = tmp_path / "missing.png"
    with pytest.raises(ImageIOError) as error:
        Image.load(missing)
    assert error.value.path == str(missing)
    assert isinstance(error.value, OSError)
    with pytest.raises(ImageIOError):
        Image.decode(b"definitely not an image")
    damaged = Image(size=(8, 8)).encode("png")[:40]
    with pytest.raises(ImageIOError):
        Image.decode(damaged)


def test_pil_conversion(gradient_image):
    """
    Tests the conversion from and to PIL
    """
    pil_image = gradient_image.to_pil()
    assert pil_image.size == (64, 16)
    assert pil_image.mode == "RGB"
    assert Image(pil_image) == gradient_image
    assert Image(pil_image.convert("L")).pixel(0, 0)[0] == pil_image.convert("L").getpixel((0, 0))
