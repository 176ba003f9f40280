"""
Implements the class :class:`.Image` which holds the RGB pixel grid every
filter reads from and every scan produces.

Images are immutable: the pixel buffer is flagged read-only and the geometry
attributes can not be reassigned. Decoding and encoding of PNG, JPEG and BMP
files is delegated to Pillow.
"""

from __future__ import annotations

import hashlib
import io
import logging
import os
from pathlib import Path
from typing import Union

import PIL.Image
import filetype
import numpy as np

from .color import Color, ColorTypes, BLACK, to_color
from .errors import ImageIOError

logger = logging.getLogger(__name__)

SUPPORTED_IMAGE_FILETYPES = ["png", "bmp", "jpg", "jpeg"]
"List of image file types which can be read and written"

SUPPORTED_IMAGE_FILETYPE_SET = set(SUPPORTED_IMAGE_FILETYPES)

SUPPORTED_MIME_TYPES = {"image/png", "image/jpeg", "image/bmp", "image/x-ms-bmp"}

ImageSourceTypes = Union[str, Path, np.ndarray, bytes, PIL.Image.Image, "Image"]
"The valid source types for creating an image"


class Image:
    """
    An immutable ``height x width`` grid of 8-bit RGB pixels.

    The pixels are kept as a C-contiguous numpy array of shape
    ``(height, width, 3)`` which can be accessed via :meth:`get_pixels`.
    """

    def __init__(
        self,
        source: ImageSourceTypes | None = None,
        size: tuple[int, int] | None = None,
        bg_color: ColorTypes | None = None,
    ):
        """
        :param source: The image source. Either a file name, encoded image
            bytes, a numpy array of shape (height, width, 3), a PIL image or
            another :class:`Image`.
        :param size: The size (width, height) of a new blank image - if no
            source is passed.
        :param bg_color: The fill color of a new blank image, black by default

        Raises a ValueError if the source is not usable and an
        :class:`ImageIOError` if a file or encoded data can not be decoded.
        """
        if source is None:
            if size is None:
                raise ValueError("Either a source or a size has to be passed")
            width, height = int(size[0]), int(size[1])
            if width < 0 or height < 0:
                raise ValueError(f"Invalid image size: {size}")
            color = to_color(bg_color) if bg_color is not None else BLACK
            pixels = np.empty((height, width, 3), dtype=np.uint8)
            pixels[:, :] = color
        elif size is not None:
            raise ValueError("Source and size may not be passed at the same time")
        elif isinstance(source, Image):
            pixels = source._pixels
        elif isinstance(source, np.ndarray):
            pixels = self._pixels_from_array(source, copy=True)
        elif isinstance(source, PIL.Image.Image):
            pixels = np.asarray(source.convert("RGB"), dtype=np.uint8).copy()
        elif isinstance(source, (bytes, bytearray)):
            pixels = self._decode_pixels(bytes(source))
        elif isinstance(source, (str, Path)):
            pixels = self._decode_pixels(_read_file(str(source)), path=str(source))
        else:
            raise ValueError(f"Unsupported image source: {type(source).__name__}")
        self._assign(pixels)

    def _assign(self, pixels: np.ndarray) -> None:
        pixels.flags.writeable = False
        self.__dict__["_pixels"] = pixels
        self.__dict__["height"] = pixels.shape[0]
        self.__dict__["width"] = pixels.shape[1]

    def __setattr__(self, key, value):
        raise ValueError(f"{key} can not be modified after initialization")

    @staticmethod
    def _pixels_from_array(array: np.ndarray, copy: bool) -> np.ndarray:
        if array.ndim != 3 or array.shape[2] != 3:
            raise ValueError(
                f"Expected an array of shape (height, width, 3), got {array.shape}"
            )
        if array.dtype != np.uint8:
            if array.size and (array.min() < 0 or array.max() > 255):
                raise ValueError("Pixel values have to be in the range [0, 255]")
            return np.ascontiguousarray(array, dtype=np.uint8)
        if copy or not array.flags.c_contiguous:
            return np.array(array, dtype=np.uint8, order="C", copy=True)
        return array

    @staticmethod
    def _decode_pixels(data: bytes, path: str | None = None) -> np.ndarray:
        mime = filetype.guess_mime(data)
        if mime not in SUPPORTED_MIME_TYPES:
            raise ImageIOError(
                f"Unsupported or unrecognized image data ({mime or 'unknown'})", path
            )
        try:
            with PIL.Image.open(io.BytesIO(data)) as pil_image:
                pil_image.load()
                pixels = np.asarray(pil_image.convert("RGB"), dtype=np.uint8).copy()
        except (OSError, ValueError, SyntaxError, EOFError, PIL.Image.DecompressionBombError) as e:
            raise ImageIOError(f"Invalid or damaged image data ({e})", path) from e
        logger.debug("Decoded %s image of size %dx%d", mime, pixels.shape[1], pixels.shape[0])
        return pixels

    @classmethod
    def from_array(cls, array: np.ndarray, copy: bool = True) -> Image:
        """
        Creates an image from a numpy array of shape (height, width, 3).

        :param array: The pixel data
        :param copy: If False a C-contiguous uint8 array is taken over directly
            and flagged read-only, so the caller must not keep writing to it.
        :return: The image
        """
        image = cls.__new__(cls)
        image._assign(cls._pixels_from_array(array, copy=copy))
        return image

    @classmethod
    def load(cls, path: str | Path) -> Image:
        """
        Loads a PNG, JPEG or BMP file.

        :param path: The file name
        :return: The image
        """
        return cls(Path(path))

    @classmethod
    def decode(cls, data: bytes) -> Image:
        """
        Decodes encoded PNG, JPEG or BMP data.

        :param data: The file's content
        :return: The image
        """
        return cls(data)

    @property
    def size(self) -> tuple[int, int]:
        """
        The image's size in pixels as tuple (width, height)
        """
        return self.width, self.height

    def get_size(self) -> tuple[int, int]:
        """
        Returns the image's size in pixels

        :return: The size as tuple (width, height)
        """
        return self.size

    @property
    def is_empty(self) -> bool:
        """True if the image has no pixels at all"""
        return self.width == 0 or self.height == 0

    def get_pixels(self) -> np.ndarray:
        """
        Returns the image's pixel data as read-only :class:`np.ndarray` of
        shape (height, width, 3).
        """
        return self._pixels

    @property
    def pixels(self) -> np.ndarray:
        return self._pixels

    def pixel(self, x: int, y: int) -> Color:
        """
        Returns the color at the given coordinate.

        :param x: The column, 0 <= x < width
        :param y: The row, 0 <= y < height
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) out of bounds for {self.width}x{self.height}")
        r, g, b = self._pixels[y, x]
        return int(r), int(g), int(b)

    def copy(self) -> Image:
        """
        Creates an independent copy of this image.
        """
        return Image.from_array(self._pixels, copy=True)

    def to_pil(self) -> PIL.Image.Image:
        """
        Converts the image to a PIL image object

        :return: The PIL image
        """
        return PIL.Image.fromarray(np.array(self._pixels))

    def encode(self, filetype: str = "png", quality: int = 90) -> bytes:
        """
        Compresses the image and returns the encoded file's data.

        :param filetype: "png", "jpg"/"jpeg" or "bmp"
        :param quality: JPEG quality between 0 and 100
        :return: The encoded data
        """
        filetype = filetype.lstrip(".").lower()
        if filetype == "jpg":
            filetype = "jpeg"
        if filetype not in SUPPORTED_IMAGE_FILETYPE_SET:
            raise ImageIOError(f"Unsupported file type {filetype!r}")
        if self.is_empty:
            raise ImageIOError("An empty image can not be encoded")
        parameters = {}
        if filetype == "jpeg":
            if not 0 <= quality <= 100:
                raise ValueError("quality has to be between 0 and 100")
            parameters["quality"] = quality
        output_stream = io.BytesIO()
        try:
            self.to_pil().save(output_stream, format=filetype, **parameters)
        except (OSError, ValueError) as e:
            raise ImageIOError(f"Encoding as {filetype} failed ({e})") from e
        return output_stream.getvalue()

    def save(self, target: str | Path, quality: int = 90) -> None:
        """
        Saves the image to disk, the format is derived from the extension.

        :param target: The file name
        :param quality: JPEG quality between 0 and 100
        """
        target = str(target)
        extension = os.path.splitext(target)[1]
        if not extension:
            raise ImageIOError("Missing file extension", target)
        try:
            data = self.encode(filetype=extension, quality=quality)
        except ImageIOError as e:
            raise ImageIOError(str(e), target) from e
        try:
            with open(target, "wb") as output_file:
                output_file.write(data)
        except OSError as e:
            raise ImageIOError(f"Could not write file ({e.strerror})", target) from e
        logger.debug("Saved %s (%d bytes)", target, len(data))

    def get_hash(self) -> str:
        """
        Returns a hash uniquely identifying the image's content

        :return: The image's hash
        """
        digest = hashlib.md5(self._pixels.tobytes())
        digest.update(f"{self.width}x{self.height}".encode())
        return digest.hexdigest()

    def __eq__(self, other):
        if not isinstance(other, Image):
            return NotImplemented
        return self.size == other.size and bool(np.array_equal(self._pixels, other._pixels))

    def __str__(self):
        return f"Image ({self.width}x{self.height} RGB)"

    __repr__ = __str__


def _read_file(path: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise ImageIOError(f"Could not read file ({e.strerror})", path) from e


__all__ = ["Image", "ImageSourceTypes", "SUPPORTED_IMAGE_FILETYPES"]
