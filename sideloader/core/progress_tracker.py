"""
Progress tracking utilities for OBB pushes.
Turns byte snapshots into percentage, speed and time-remaining figures for the UI.
"""

import time
from typing import Callable, Optional

from .models import TransferProgress


class ProgressTracker:
    """Derives display figures from the transfer tracker's callbacks.

    Pass ``tracker.on_transfer_progress`` as the ``on_progress`` callback of
    a push; the tracker forwards a percentage and a status line.
    """

    def __init__(self):
        self.progress_callback: Optional[Callable[[int], None]] = None
        self.status_callback: Optional[Callable[[str], None]] = None

        self.start_time: Optional[float] = None
        self.last_update_time: Optional[float] = None
        self.total_bytes: int = 0
        self.transferred_bytes: int = 0
        self.current_speed: float = 0.0
        self.current_file: str = ""

    def set_progress_callback(self, callback: Callable[[int], None]):
        """Set callback function for progress updates."""
        self.progress_callback = callback

    def set_status_callback(self, callback: Callable[[str], None]):
        """Set callback function for status updates."""
        self.status_callback = callback

    def start_tracking(self, total_bytes: int) -> None:
        self.start_time = time.time()
        self.last_update_time = self.start_time
        self.total_bytes = max(0, int(total_bytes))
        self.transferred_bytes = 0
        self.current_speed = 0.0
        self.current_file = ""

    def on_transfer_progress(self, bytes_transferred: int, total_bytes: int, current_file: str) -> None:
        """Progress callback for ``TransferTracker.copy_with_progress``."""
        if self.start_time is None or total_bytes != self.total_bytes:
            self.start_tracking(total_bytes)
        self.update(TransferProgress(bytes_transferred, total_bytes, current_file))

    def update(self, snapshot: TransferProgress) -> None:
        """Record a snapshot and recompute the transfer speed."""
        now = time.time()
        new_transferred = max(0, int(snapshot.bytes_transferred))
        if self.total_bytes > 0:
            new_transferred = min(new_transferred, self.total_bytes)

        elapsed = 0.0
        if self.last_update_time is not None:
            elapsed = max(0.0, now - self.last_update_time)
        delta = new_transferred - self.transferred_bytes
        if elapsed > 0 and delta > 0:
            self.current_speed = float(delta) / elapsed
            self.last_update_time = now

        self.transferred_bytes = new_transferred
        self.current_file = snapshot.current_file

        if self.progress_callback:
            self.progress_callback(int(self.get_progress_percentage()))
        if self.status_callback:
            self.status_callback(self.describe())

    def get_progress_percentage(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        pct = (self.transferred_bytes / self.total_bytes) * 100.0
        return float(min(100.0, max(0.0, pct)))

    def estimate_time_remaining(self) -> int:
        if self.total_bytes <= 0 or self.transferred_bytes >= self.total_bytes:
            return 0
        if self.current_speed <= 0:
            return 0
        return int((self.total_bytes - self.transferred_bytes) / self.current_speed)

    def reset(self) -> None:
        self.start_time = None
        self.last_update_time = None
        self.total_bytes = 0
        self.transferred_bytes = 0
        self.current_speed = 0.0
        self.current_file = ""

    def format_speed(self) -> str:
        bps = float(self.current_speed)
        if bps < 1024:
            return f"{bps:.1f} B/s"
        kbps = bps / 1024.0
        if kbps < 1024:
            return f"{kbps:.1f} KB/s"
        return f"{kbps / 1024.0:.1f} MB/s"

    def format_time(self, seconds: int) -> str:
        seconds = max(0, seconds)
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        secs = seconds % 60
        if hours > 0:
            return f"{hours:02d}:{minutes:02d}:{secs:02d}"
        return f"{minutes:02d}:{secs:02d}"

    def describe(self) -> str:
        """One-line status such as ``Copying main.obb: 42% (3.1 MB/s, 00:12 left)``."""
        pct = int(self.get_progress_percentage())
        line = f"Copying {self.current_file}: {pct}%"
        if self.current_speed > 0:
            line += f" ({self.format_speed()}, {self.format_time(self.estimate_time_remaining())} left)"
        return line
