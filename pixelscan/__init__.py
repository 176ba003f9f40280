"""
PixelScan - Cancellable per-pixel image filters with progress reporting
"""

__version__ = "0.1.0"

from .errors import PixelScanError, InvalidKernelShapeError, EmptyImageError, ImageIOError
from .color import Color, ColorTypes, BLACK, WHITE, clamp, clamp_channels, intensity, luminance, to_color
from .image import Image, ImageSourceTypes, SUPPORTED_IMAGE_FILETYPES
from .filters import (
    Filter,
    FilterPipeline,
    ScanExecutor,
    ScanResult,
    ScanStatus,
    CancellationToken,
    create_pipeline,
)

__all__ = [
    "__version__",
    # Errors
    "PixelScanError",
    "InvalidKernelShapeError",
    "EmptyImageError",
    "ImageIOError",
    # Colors
    "Color",
    "ColorTypes",
    "BLACK",
    "WHITE",
    "clamp",
    "clamp_channels",
    "intensity",
    "luminance",
    "to_color",
    # Image
    "Image",
    "ImageSourceTypes",
    "SUPPORTED_IMAGE_FILETYPES",
    # Filters
    "Filter",
    "FilterPipeline",
    "ScanExecutor",
    "ScanResult",
    "ScanStatus",
    "CancellationToken",
    "create_pipeline",
]
