"""
Tests for the scan executor, progress reporting and cancellation
"""

import threading

import pytest

from pixelscan import Image, EmptyImageError
from pixelscan.filters import (
    Invert,
    Median,
    ScanExecutor,
    ScanResult,
    ScanStatus,
    CancellationToken,
    ProgressReporter,
)


class TestScanExecutor:
    """Tests for column-wise scanning."""

    def test_completed_result(self, noise_image):
        result = ScanExecutor().run(Invert(), noise_image)
        assert result.completed
        assert not result.cancelled
        assert result.status == ScanStatus.COMPLETED
        assert result.columns_processed == noise_image.width
        assert result.elapsed_ms >= 0.0
        assert result.image.size == noise_image.size

    def test_progress_per_column(self):
        image = Image(size=(10, 3))
        values = []
        ScanExecutor().run(Invert(), image, progress=values.append)
        assert values == [10, 20, 30, 40, 50, 60, 70, 80, 90, 100]

    def test_progress_offset_and_scale(self):
        image = Image(size=(7, 2))
        values = []
        ScanExecutor().run(Invert(), image, progress=values.append, progress_offset=33, progress_scale=33)
        assert values == sorted(values)
        assert values[0] >= 33
        assert values[-1] == 66

    def test_cancel_after_columns(self, noise_image):
        """Cancelling after 3 of 24 columns returns no image at all."""
        reported = []

        def cancel():
            return len(reported) >= 3

        result = ScanExecutor().run(Invert(), noise_image, progress=reported.append, cancel=cancel)
        assert result.cancelled
        assert result.status == ScanStatus.CANCELLED
        assert result.image is None
        assert result.columns_processed == 3

    def test_cancel_before_start(self, noise_image):
        token = CancellationToken()
        token.cancel()
        values = []
        result = ScanExecutor().run(Median(), noise_image, progress=values.append, cancel=token)
        assert result.cancelled
        assert result.columns_processed == 0
        assert values == []

    def test_cancel_polled_once_per_column(self):
        image = Image(size=(5, 40))
        polls = []

        def cancel():
            polls.append(1)
            return False

        ScanExecutor().run(Invert(), image, cancel=cancel)
        # one poll before the first column and one after each column
        assert len(polls) == 6

    def test_empty_image(self):
        with pytest.raises(EmptyImageError):
            ScanExecutor().run(Invert(), Image(size=(0, 4)))
        with pytest.raises(ValueError):
            Invert().run(Image(size=(4, 0)))

    def test_source_not_modified(self, noise_image):
        before = noise_image.copy()
        ScanExecutor().run(Median(), noise_image)
        assert noise_image == before


class TestFilterRun:
    """Filter.run is a top-level operation."""

    def test_progress_starts_at_zero_and_ends_at_100(self, noise_image):
        values = []
        result = Median().run(noise_image, progress=values.append)
        assert result.completed
        assert values[0] == 0
        assert values[-1] == 100
        assert values == sorted(set(values))

    def test_progress_restarts(self, noise_image):
        values = []
        Invert().run(noise_image, progress=values.append)
        Invert().run(noise_image, progress=values.append)
        assert values.count(0) == 2
        assert values.count(100) == 2

    def test_cancel_from_other_thread(self):
        image = Image(size=(200, 50))
        token = CancellationToken()
        started = threading.Event()

        def progress(value):
            started.set()
            if value >= 10:
                # wait until the other thread requested cancellation
                assert token_set.wait(5)

        token_set = threading.Event()

        def canceller():
            started.wait(5)
            token.cancel()
            token_set.set()

        thread = threading.Thread(target=canceller)
        thread.start()
        result = Median().run(image, progress=progress, cancel=token)
        thread.join()
        assert result.cancelled
        assert result.image is None
        assert result.columns_processed < image.width

    def test_apply_returns_image(self, noise_image):
        assert isinstance(Invert()(noise_image), Image)


class TestCancellationToken:

    def test_flag(self):
        token = CancellationToken()
        assert not token.is_cancelled
        assert token() is False
        token.cancel()
        assert token.is_cancelled
        assert token() is True
        token.reset()
        assert not token()


class TestProgressReporter:

    def test_monotonic_and_clamped(self):
        values = []
        reporter = ProgressReporter(values.append)
        for value in (5, 5, 3, 10, 150, 99):
            reporter(value)
        assert values == [5, 10, 100]
        assert reporter.value == 100

    def test_reset(self):
        values = []
        reporter = ProgressReporter(values.append)
        reporter(40)
        reporter.reset()
        reporter(20)
        assert values == [40, 0, 20]

    def test_without_sink(self):
        reporter = ProgressReporter()
        reporter(50)
        assert reporter.value == 50


class TestScanResult:

    def test_cancelled_without_image(self, noise_image):
        with pytest.raises(ValueError):
            ScanResult(ScanStatus.CANCELLED, noise_image)
        with pytest.raises(ValueError):
            ScanResult(ScanStatus.COMPLETED, None)
        result = ScanResult.cancelled_result(4, 1.5)
        assert result.cancelled and result.columns_processed == 4
