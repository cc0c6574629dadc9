"""
Value types shared by the command pipeline.
Command transcripts, transfer snapshots and failure signals.
"""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class CommandResult:
    """Captured stdout/stderr of one bridge command.

    Results add together so a multi-step operation can keep a single
    transcript: outputs are appended to outputs and errors to errors.
    """

    output: str = ""
    error: str = ""

    def __add__(self, other: "CommandResult") -> "CommandResult":
        if not isinstance(other, CommandResult):
            return NotImplemented
        return CommandResult(self.output + other.output, self.error + other.error)

    @property
    def combined(self) -> str:
        return self.output + self.error


@dataclass(frozen=True)
class TransferProgress:
    """Snapshot of a push in flight."""

    bytes_transferred: int
    total_bytes: int
    current_file: str

    @property
    def percentage(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        return min(100.0, max(0.0, self.bytes_transferred * 100.0 / self.total_bytes))


class FailureSignal(Enum):
    NONE = "none"
    OFFLINE = "offline"
    INSUFFICIENT_STORAGE = "insufficient_storage"
    SIGNATURE_MISMATCH = "signature_mismatch"
    AUTHORIZATION_MISSING = "authorization_missing"
    ASSET_PATH_INVALID = "asset_path_invalid"


@dataclass(frozen=True)
class StorageInfo:
    """Device storage figures in kilobytes, as reported by ``df``."""

    total_kb: int = 0
    used_kb: int = 0
    free_kb: int = 0

    @staticmethod
    def _gb(kb: int) -> float:
        return (kb // 1000) / 1000

    def describe(self) -> str:
        return (
            f"Total space: {self._gb(self.total_kb):.2f}GB\n"
            f"Used space: {self._gb(self.used_kb):.2f}GB\n"
            f"Free space: {self._gb(self.free_kb):.2f}GB"
        )
