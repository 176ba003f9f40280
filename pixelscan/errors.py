"""
Exceptions raised by PixelScan.

The classes derive from the builtin exception types the library used to raise
directly, so ``except ValueError`` / ``except OSError`` keeps working.
"""

from __future__ import annotations


class PixelScanError(Exception):
    """Base class of all PixelScan errors."""


class InvalidKernelShapeError(PixelScanError, ValueError):
    """A kernel or window is not odd-sized or a kernel pair does not match."""


class EmptyImageError(PixelScanError, ValueError):
    """An image with zero width or height was passed to a scan."""


class ImageIOError(PixelScanError, OSError):
    """An image could not be read, decoded, encoded or written.

    :param message: Human readable reason
    :param path: The file involved, if any
    """

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        if path:
            message = f"{message}: {path}"
        super().__init__(message)


__all__ = [
    "PixelScanError",
    "InvalidKernelShapeError",
    "EmptyImageError",
    "ImageIOError",
]
