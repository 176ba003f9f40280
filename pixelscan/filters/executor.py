# PixelScan Filters - Scan Executor
"""
Drives a filter over every pixel of an image.

The scan walks the image column by column. After each column it reports the
overall progress and polls the cancellation query, so cancellation is
observed within one column and progress callbacks are bounded by the image
width. A cancelled scan discards its partially written buffer; the caller
only ever receives a complete image or a cancelled result.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

import numpy as np

from pixelscan.errors import EmptyImageError
from pixelscan.image import Image
from .sampler import PixelSampler

if TYPE_CHECKING:
    from .base import Filter

logger = logging.getLogger(__name__)

ProgressSink = Callable[[int], None]
"Receives integer percentages in [0, 100]"

CancelQuery = Callable[[], bool]
"Returns True once the running operation shall stop"


class ScanStatus(Enum):
    """Outcome of a scan."""
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


@dataclass(frozen=True)
class ScanResult:
    """Result of a scan or pipeline run.

    :param status: Whether the scan completed or was cancelled
    :param image: The produced image, always None if cancelled
    :param columns_processed: Number of columns computed before the scan ended
    :param elapsed_ms: Wall clock time spent in milliseconds
    """
    status: ScanStatus
    image: 'Image | None' = None
    columns_processed: int = 0
    elapsed_ms: float = 0.0

    def __post_init__(self):
        if self.status == ScanStatus.CANCELLED and self.image is not None:
            raise ValueError("A cancelled result can not carry an image")
        if self.status == ScanStatus.COMPLETED and self.image is None:
            raise ValueError("A completed result requires an image")

    @property
    def completed(self) -> bool:
        return self.status == ScanStatus.COMPLETED

    @property
    def cancelled(self) -> bool:
        return self.status == ScanStatus.CANCELLED

    @classmethod
    def cancelled_result(cls, columns_processed: int = 0, elapsed_ms: float = 0.0) -> 'ScanResult':
        return cls(ScanStatus.CANCELLED, None, columns_processed, elapsed_ms)


class CancellationToken:
    """Thread-safe cancellation flag.

    The token is callable and returns whether cancellation was requested, so
    it can be passed wherever a cancellation query is expected::

        token = CancellationToken()
        worker = threading.Thread(target=lambda: Median(5).run(image, cancel=token))
        worker.start()
        token.cancel()
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    def reset(self) -> None:
        """Clear a previous cancellation request."""
        self._event.clear()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def __call__(self) -> bool:
        return self._event.is_set()


class ProgressReporter:
    """Forwards percentages to a sink, keeping them monotonic.

    Values are clamped to [0, 100]; values not larger than the last reported
    one are dropped. :meth:`reset` starts a new operation at 0.

    :param sink: Receives the filtered values, may be None
    """

    def __init__(self, sink: ProgressSink | None = None):
        self._sink = sink
        self.value: int = -1
        "The last reported value, -1 if nothing was reported yet"

    def reset(self) -> None:
        self.value = 0
        if self._sink is not None:
            self._sink(0)

    def __call__(self, value: int) -> None:
        value = min(max(int(value), 0), 100)
        if value <= self.value:
            return
        self.value = value
        if self._sink is not None:
            self._sink(value)


class ScanExecutor:
    """Applies a filter to every pixel of an image, column by column."""

    def run(
        self,
        filter: 'Filter',
        image: 'Image',
        progress: ProgressSink | None = None,
        cancel: CancelQuery | None = None,
        progress_offset: int = 0,
        progress_scale: int = 100,
    ) -> ScanResult:
        """Scan ``image`` with ``filter`` into a new image.

        After column x has been computed ``progress`` receives
        ``progress_offset + int((x + 1) / width * progress_scale)``, then
        ``cancel`` is polled.

        :param filter: The filter to evaluate
        :param image: The source image, never modified
        :param progress: Optional progress sink
        :param cancel: Optional cancellation query
        :param progress_offset: Progress value at the start of this scan
        :param progress_scale: Share of the overall progress this scan covers
        :returns: The completed or cancelled result
        """
        if image.is_empty:
            raise EmptyImageError(
                f"Can not apply {filter.type} to an empty image ({image.width}x{image.height})"
            )
        start = time.perf_counter()
        width, height = image.size
        logger.debug("Scanning %s with %s", image, filter.type)

        if cancel is not None and cancel():
            logger.debug("%s cancelled before the first column", filter.type)
            return ScanResult.cancelled_result(0, _elapsed_ms(start))

        filter.prepare(image)
        sampler = PixelSampler(image)
        ys = np.arange(height)
        target = np.empty((height, width, 3), dtype=np.uint8)

        for x in range(width):
            target[:, x] = filter.evaluate_column(sampler, x, ys)
            if progress is not None:
                progress(progress_offset + int((x + 1) / width * progress_scale))
            if cancel is not None and cancel():
                del target
                logger.debug("%s cancelled after %d of %d columns", filter.type, x + 1, width)
                return ScanResult.cancelled_result(x + 1, _elapsed_ms(start))

        elapsed = _elapsed_ms(start)
        logger.debug("%s finished in %.1f ms", filter.type, elapsed)
        return ScanResult(
            ScanStatus.COMPLETED,
            Image.from_array(target, copy=False),
            width,
            elapsed,
        )


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0


__all__ = [
    "ScanExecutor",
    "ScanResult",
    "ScanStatus",
    "CancellationToken",
    "ProgressReporter",
    "ProgressSink",
    "CancelQuery",
]
