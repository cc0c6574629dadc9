"""
Sideloader - Package Initialization
Exposes the command pipeline used to install APKs and push OBB data.
"""

from .core.adb_bridge import AdbBridge
from .core.install_orchestrator import (
    Answer,
    InstallOrchestrator,
    InstallOutcome,
    InstallState,
)
from .core.models import CommandResult, FailureSignal, TransferProgress
from .core.output_classifier import classify
from .core.process_runner import ProcessRunner
from .core.session import DeviceSession
from .core.settings import SettingsStore
from .core.transfer_tracker import TransferTracker, compute_total_size

__version__ = "0.1.0"

__all__ = [
    "AdbBridge",
    "Answer",
    "CommandResult",
    "DeviceSession",
    "FailureSignal",
    "InstallOrchestrator",
    "InstallOutcome",
    "InstallState",
    "ProcessRunner",
    "SettingsStore",
    "TransferProgress",
    "TransferTracker",
    "classify",
    "compute_total_size",
]
