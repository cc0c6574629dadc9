"""Tests for progress tracking module."""

from unittest.mock import MagicMock, patch

from sideloader.core.models import TransferProgress
from sideloader.core.progress_tracker import ProgressTracker


class TestProgressTracker:
    """Test progress tracking functionality."""

    def test_init(self):
        tracker = ProgressTracker()
        assert tracker.start_time is None
        assert tracker.total_bytes == 0
        assert tracker.transferred_bytes == 0
        assert tracker.current_speed == 0.0

    def test_start_tracking(self):
        tracker = ProgressTracker()
        with patch('time.time', return_value=1000.0):
            tracker.start_tracking(1024)

        assert tracker.start_time == 1000.0
        assert tracker.total_bytes == 1024
        assert tracker.transferred_bytes == 0

    def test_update_computes_speed(self):
        tracker = ProgressTracker()
        with patch('time.time', return_value=1000.0):
            tracker.start_tracking(1024)
        with patch('time.time', return_value=1001.0):
            tracker.update(TransferProgress(512, 1024, "main.obb"))

        assert tracker.transferred_bytes == 512
        assert tracker.current_speed == 512.0
        assert tracker.current_file == "main.obb"

    def test_update_zero_time_elapsed(self):
        tracker = ProgressTracker()
        with patch('time.time', return_value=1000.0):
            tracker.start_tracking(1024)
            tracker.update(TransferProgress(512, 1024, "main.obb"))

        assert tracker.transferred_bytes == 512
        assert tracker.current_speed == 0.0

    def test_update_clamps_to_total(self):
        tracker = ProgressTracker()
        tracker.start_tracking(100)
        tracker.update(TransferProgress(150, 100, "main.obb"))
        assert tracker.transferred_bytes == 100

    def test_on_transfer_progress_starts_tracking(self):
        tracker = ProgressTracker()
        progress = MagicMock()
        tracker.set_progress_callback(progress)

        tracker.on_transfer_progress(0, 200, "a.obb")
        tracker.on_transfer_progress(50, 200, "a.obb")

        assert tracker.total_bytes == 200
        assert [c.args[0] for c in progress.call_args_list] == [0, 25]

    def test_status_line(self):
        tracker = ProgressTracker()
        status = MagicMock()
        tracker.set_status_callback(status)

        with patch('time.time', return_value=1000.0):
            tracker.on_transfer_progress(100, 400, "main.obb")

        status.assert_called_with("Copying main.obb: 25%")

    def test_get_progress_percentage(self):
        tracker = ProgressTracker()
        assert tracker.get_progress_percentage() == 0.0
        tracker.total_bytes = 1000
        tracker.transferred_bytes = 250
        assert tracker.get_progress_percentage() == 25.0

    def test_estimate_time_remaining(self):
        tracker = ProgressTracker()
        tracker.total_bytes = 1000
        tracker.transferred_bytes = 250
        tracker.current_speed = 125.0
        assert tracker.estimate_time_remaining() == 6

    def test_estimate_time_remaining_no_speed(self):
        tracker = ProgressTracker()
        tracker.total_bytes = 1000
        tracker.transferred_bytes = 250
        assert tracker.estimate_time_remaining() == 0

    def test_reset(self):
        tracker = ProgressTracker()
        tracker.start_tracking(1000)
        tracker.update(TransferProgress(500, 1000, "x"))
        tracker.reset()
        assert tracker.start_time is None
        assert tracker.total_bytes == 0
        assert tracker.transferred_bytes == 0
        assert tracker.current_file == ""

    def test_format_speed(self):
        tracker = ProgressTracker()
        tracker.current_speed = 512.0
        assert tracker.format_speed() == "512.0 B/s"
        tracker.current_speed = 1536.0
        assert tracker.format_speed() == "1.5 KB/s"
        tracker.current_speed = 2097152.0
        assert tracker.format_speed() == "2.0 MB/s"

    def test_format_time(self):
        tracker = ProgressTracker()
        assert tracker.format_time(30) == "00:30"
        assert tracker.format_time(150) == "02:30"
        assert tracker.format_time(3661) == "01:01:01"

    def test_describe_with_speed(self):
        tracker = ProgressTracker()
        tracker.total_bytes = 1000
        tracker.transferred_bytes = 500
        tracker.current_speed = 100.0
        tracker.current_file = "main.obb"
        assert tracker.describe() == "Copying main.obb: 50% (100.0 B/s, 00:05 left)"
