"""
ADB command surface.
Builds the bridge's command strings and runs them against the session's device.
"""

import logging
import os
import posixpath
import re
from typing import Callable, List, Optional

from .models import CommandResult, FailureSignal, StorageInfo
from .output_classifier import AuthorizationWarningGate
from .platform_tools import get_adb_binary_path
from .process_runner import ProcessRunner
from .session import DeviceSession
from .transfer_tracker import TransferTracker
from ..utils.security_utils import quote_path, sanitize_android_path, validate_package_name

logger = logging.getLogger(__name__)

# Milliseconds allowed for commands that may hang on an unreachable address
CONNECT_TIMEOUT_MS = 3000

DEVICE_DATA_ROOT = "/sdcard/Android/data"
DEVICE_OBB_ROOT = "/sdcard/Android/obb"

# Error text of a command refused before it reached the bridge
REJECTED_PREFIX = "Command failed validation"

_STORAGE_MOUNTS = ("/dev/fuse", "/data/media")
_LEADING_ADB = re.compile(r'^\s*adb(\.exe)?\s+', re.IGNORECASE)


class AdbBridge:
    """Issues bridge commands for one device session.

    Every call returns a CommandResult; nothing here raises on a failed
    command.
    """

    def __init__(self, session: Optional[DeviceSession] = None,
                 runner: Optional[ProcessRunner] = None,
                 settings=None,
                 adb_path: Optional[str] = None):
        self.session = session or DeviceSession()
        self.runner = runner or ProcessRunner()
        self.settings = settings
        self._adb_path = adb_path
        self.auth_gate = AuthorizationWarningGate(settings) if settings is not None else None
        self.warning_callback: Optional[Callable[[FailureSignal], None]] = None

    @property
    def adb_path(self) -> str:
        if self._adb_path:
            return self._adb_path
        if self.settings is not None and self.settings.adb_path:
            return self.settings.adb_path
        folder = self.settings.adb_folder if self.settings is not None else None
        return get_adb_binary_path(folder)

    @property
    def working_directory(self) -> Optional[str]:
        folder = os.path.dirname(self.adb_path)
        return folder if os.path.isdir(folder) else None

    def set_warning_callback(self, callback: Callable[[FailureSignal], None]) -> None:
        self.warning_callback = callback

    def build_arguments(self, command: str) -> str:
        """Strip a typed ``adb`` prefix and add the device selector."""
        command = _LEADING_ADB.sub("", command).strip()
        selector = " ".join(self.session.target_args())
        return f"{selector} {command}" if selector else command

    def run(self, command: str, timeout: Optional[int] = None) -> CommandResult:
        """Run one bridge command.

        Connection commands get ``CONNECT_TIMEOUT_MS`` unless a timeout is
        given; everything else runs to completion.
        """
        if timeout is None and "connect" in command:
            timeout = CONNECT_TIMEOUT_MS
        result = self.runner.run(
            self.adb_path,
            self.build_arguments(command),
            self.working_directory,
            timeout,
        )
        if self.auth_gate is not None and self.auth_gate.check(result):
            if self.warning_callback:
                self.warning_callback(FailureSignal.AUTHORIZATION_MISSING)
        return result

    def run_checked(self, build: Callable[[], str]) -> CommandResult:
        """Run the command ``build`` returns, or report why it was rejected.

        Validation errors come back as a failed CommandResult so callers
        handle them like any other bridge failure.
        """
        try:
            command = build()
        except ValueError as e:
            return self._rejected(e)
        return self.run(command)

    @staticmethod
    def _rejected(error: ValueError) -> CommandResult:
        logger.error(f"Rejected bridge command: {error}")
        return CommandResult("", f"{REJECTED_PREFIX}: {error}")

    # --- commands -----------------------------------------------------------

    def install(self, apk_path: str) -> CommandResult:
        return self.run_checked(lambda: f"install -g {quote_path(apk_path)}")

    def uninstall_package(self, package: str) -> CommandResult:
        return self.run_checked(lambda: f"shell pm uninstall {validate_package_name(package)}")

    def pull(self, remote_path: str, local_path: str) -> CommandResult:
        return self.run_checked(lambda: f"pull {quote_path(remote_path)} {quote_path(local_path)}")

    def push(self, local_path: str, remote_path: str) -> CommandResult:
        return self.run_checked(lambda: f"push {quote_path(local_path)} {quote_path(remote_path)}")

    def kill_server(self) -> CommandResult:
        return self.run("kill-server")

    def devices(self) -> CommandResult:
        return self.run("devices")

    def connect(self, address: str) -> CommandResult:
        return self.run(f"connect {address}")

    def reconnect(self) -> CommandResult:
        """Restart the bridge server and list devices again."""
        return self.kill_server() + self.devices()

    def list_devices(self) -> List[str]:
        """Serials of attached devices in the ``device`` state."""
        devices = []
        for line in self.devices().output.splitlines()[1:]:
            parts = line.strip().split("\t")
            if len(parts) == 2 and parts[1] == "device":
                devices.append(parts[0])
        return devices

    def get_available_space(self) -> StorageInfo:
        """Parse ``shell df`` for the shared-storage mount."""
        for line in self.run("shell df").output.split("\n"):
            if not line.startswith(_STORAGE_MOUNTS):
                continue
            fields = line.split()
            if len(fields) < 4:
                continue
            try:
                return StorageInfo(int(fields[1]), int(fields[2]), int(fields[3]))
            except ValueError:
                logger.warning(f"Unparseable df line: {line.strip()}")
        return StorageInfo()

    def reset_remote_folder(self, remote_path: str) -> CommandResult:
        """Empty a device folder. Paths with shell metacharacters are rejected."""
        def build():
            quoted = quote_path(sanitize_android_path(remote_path))
            return f"shell rm -rf {quoted} && mkdir {quoted}"
        return self.run_checked(build)

    def copy_obb(self, path: str,
                 on_progress: Optional[Callable[[int, int, str], None]] = None) -> CommandResult:
        """Replace the device's OBB folder for a package with ``path``.

        The folder must be named after the package (it has to contain a
        dot). With a progress callback, files are pushed one at a time.
        """
        folder = os.path.basename(os.path.normpath(path))
        if "." not in folder:
            return CommandResult("No OBB Folder found")

        remote_folder = posixpath.join(DEVICE_OBB_ROOT, folder)
        try:
            sanitize_android_path(remote_folder)
        except ValueError as e:
            return self._rejected(e)

        tracker = TransferTracker(self)
        total = tracker.compute_total_size(path) if on_progress else 0

        result = self.reset_remote_folder(remote_folder)
        if on_progress and os.path.isdir(path):
            result += tracker.copy_with_progress(path, DEVICE_OBB_ROOT, total, on_progress)
        else:
            result += self.push(path, DEVICE_OBB_ROOT)
        return result
