"""
Byte-level progress for pushes.
Sizes a file or folder and pushes it file by file, reporting cumulative bytes.
"""

import logging
import os
from typing import Callable, Iterator, List, Optional

from .models import CommandResult, TransferProgress

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


def _log_walk_error(error: OSError) -> None:
    logger.error(f"Error calculating directory size: {error}")


def iter_files(path: str) -> Iterator[str]:
    """Every file under ``path`` in a stable order.

    The same traversal feeds sizing and copying so their totals agree.
    Unreadable directories are logged and skipped.
    """
    for dirpath, dirnames, filenames in os.walk(path, onerror=_log_walk_error):
        dirnames.sort()
        for name in sorted(filenames):
            yield os.path.join(dirpath, name)


def file_size(path: str) -> int:
    try:
        return os.path.getsize(path)
    except OSError as e:
        logger.error(f"Cannot read size of {path}: {e}")
        return 0


def compute_total_size(path: str) -> int:
    """Bytes in a file, or in every file of a folder tree; 0 if missing."""
    if os.path.isfile(path):
        return file_size(path)
    if not os.path.isdir(path):
        return 0
    return sum(file_size(f) for f in iter_files(path))


def remote_destination(source_dir: str, file_path: str, dest_root: str) -> str:
    """Device path for ``file_path``, keeping the source folder's own name."""
    relative = os.path.relpath(file_path, source_dir).replace(os.sep, "/")
    folder = os.path.basename(os.path.normpath(source_dir))
    return f"{dest_root.rstrip('/')}/{folder}/{relative}"


class TransferTracker:
    """Pushes files through a bridge and reports bytes sent so far.

    ``bridge`` is anything with ``push(local, remote) -> CommandResult``.
    A failed push still counts its bytes: progress is best-effort and the
    total never shrinks.
    """

    def __init__(self, bridge):
        self.bridge = bridge
        self.last: Optional[TransferProgress] = None

    def compute_total_size(self, path: str) -> int:
        return compute_total_size(path)

    def _report(self, on_progress: Optional[ProgressCallback],
                transferred: int, total: int, name: str) -> None:
        self.last = TransferProgress(transferred, total, name)
        if on_progress:
            on_progress(transferred, total, name)

    def copy_with_progress(self, source_path: str, dest_path: str, total_size: int,
                           on_progress: Optional[ProgressCallback] = None) -> CommandResult:
        """Push ``source_path`` to ``dest_path`` with two callbacks per file."""
        result = CommandResult()
        transferred = 0

        if os.path.isfile(source_path):
            name = os.path.basename(source_path)
            self._report(on_progress, 0, total_size, name)
            result += self.bridge.push(source_path, dest_path)
            transferred += file_size(source_path)
            self._report(on_progress, transferred, total_size, name)
        elif os.path.isdir(source_path):
            files: List[str] = list(iter_files(source_path))
            logger.info(f"Pushing {len(files)} files ({total_size} bytes) from {os.path.basename(source_path)}")
            for file_path in files:
                name = os.path.basename(file_path)
                self._report(on_progress, transferred, total_size, name)
                result += self.bridge.push(file_path, remote_destination(source_path, file_path, dest_path))
                transferred += file_size(file_path)
                self._report(on_progress, transferred, total_size, name)
        else:
            logger.warning(f"Nothing to push at {source_path}")

        return result
