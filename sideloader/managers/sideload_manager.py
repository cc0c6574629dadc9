"""
Sideload Manager Module
Connects the install pipeline to a Tkinter window: work runs on a background
thread, dialogs and status updates run on the UI thread.
"""

import threading
import tkinter as tk
from tkinter import messagebox
from typing import Callable, Optional

from ..core.adb_bridge import AdbBridge
from ..core.install_orchestrator import Answer, InstallOrchestrator, InstallOutcome
from ..core.models import FailureSignal
from ..core.output_classifier import describe
from ..core.platform_tools import download_and_extract_adb, is_adb_available
from ..core.progress_tracker import ProgressTracker
from ..core.session import DeviceSession
from ..core.settings import SettingsStore


class SideloadManager:
    """Runs installs and OBB copies for the GUI."""

    def __init__(self, parent_window: tk.Tk, status_callback: Optional[Callable[[str], None]] = None,
                 settings: Optional[SettingsStore] = None):
        """Initialize the sideload manager.

        Args:
            parent_window: The main window instance
            status_callback: Callback function for status updates
            settings: Settings store, loaded from the user config dir if omitted
        """
        self.parent = parent_window
        self.status_callback = status_callback
        self.settings = settings or SettingsStore()
        self.session = DeviceSession()
        self.bridge = AdbBridge(self.session, settings=self.settings)
        self.orchestrator = InstallOrchestrator(self.bridge, self.settings)
        self.progress_tracker = ProgressTracker()
        self.worker: Optional[threading.Thread] = None

        self.bridge.set_warning_callback(self._on_bridge_warning)
        self.orchestrator.set_status_callback(self._update_status)
        self.progress_tracker.set_status_callback(self._update_status)

    # --- setup --------------------------------------------------------------

    def initialize_adb(self) -> bool:
        """Make sure the bridge binary exists, downloading it if needed."""
        folder = self.settings.adb_folder
        if is_adb_available(folder):
            return True
        self._update_status("ADB not found locally. Downloading...")
        if download_and_extract_adb(folder) and is_adb_available(folder):
            self._update_status("ADB downloaded and ready.")
            return True
        self._update_status("Failed to download Android Debug Bridge tools.")
        messagebox.showerror("Error", "Failed to download ADB tools.")
        return False

    def connect_device(self, device_id: Optional[str] = None) -> Optional[str]:
        """Select ``device_id`` or the first attached device."""
        if device_id is None:
            devices = self.bridge.list_devices()
            device_id = devices[0] if devices else None
        if not device_id:
            self.session.clear()
            self._update_status("No devices detected.")
            return None
        self.session.select_device(device_id)
        self._update_status(f"Device detected: {device_id}")
        return device_id

    def disconnect_device(self) -> None:
        self.session.clear()

    # --- background work ----------------------------------------------------

    def is_busy(self) -> bool:
        return self.worker is not None and self.worker.is_alive()

    def _reject_if_busy(self) -> bool:
        if self.is_busy():
            self._update_status("Another operation is still running.")
            return True
        return False

    def _start(self, target: Callable[[], None]) -> bool:
        if self._reject_if_busy():
            return False
        self.worker = threading.Thread(target=target, daemon=True)
        self.worker.start()
        return True

    def sideload(self, apk_path: str, package: str,
                 completion_callback: Optional[Callable[[InstallOutcome], None]] = None) -> bool:
        """Install ``apk_path`` for ``package`` on a worker thread.

        The session is left untouched while another operation is running,
        and the running flow keeps the package it started with.
        """
        if self._reject_if_busy():
            return False
        self.session.set_package(package)
        package = self.session.current_package

        def work():
            outcome = self.orchestrator.run(apk_path, self._ask_on_ui_thread, package)
            if outcome.notice:
                self._call_on_ui_thread(lambda: messagebox.showinfo(*outcome.notice))
            if completion_callback:
                self._call_on_ui_thread(lambda: completion_callback(outcome))

        return self._start(work)

    def copy_obb(self, obb_path: str,
                 completion_callback: Optional[Callable[[object], None]] = None) -> bool:
        """Push an OBB folder on a worker thread with byte progress."""
        def work():
            self.progress_tracker.reset()
            result = self.bridge.copy_obb(obb_path, self.progress_tracker.on_transfer_progress)
            if completion_callback:
                self._call_on_ui_thread(lambda: completion_callback(result))

        return self._start(work)

    # --- UI thread marshalling ----------------------------------------------

    def _call_on_ui_thread(self, func: Callable[[], None]) -> None:
        self.parent.after(0, func)

    def _ask_on_ui_thread(self, title: str, message: str) -> Answer:
        """Show a Yes/No/Cancel dialog from a worker thread and wait for it."""
        done = threading.Event()
        reply = {}

        def ask():
            try:
                reply["value"] = messagebox.askyesnocancel(title, message)
            finally:
                done.set()

        self._call_on_ui_thread(ask)
        done.wait()
        return self._to_answer(reply.get("value"))

    @staticmethod
    def _to_answer(value: Optional[bool]) -> Answer:
        if value is True:
            return Answer.YES
        if value is False:
            return Answer.NO
        return Answer.CANCEL

    def _on_bridge_warning(self, signal: FailureSignal) -> None:
        notice = describe(signal)
        if notice:
            self._call_on_ui_thread(lambda: messagebox.showwarning(*notice))

    def _update_status(self, message: str) -> None:
        """Update status through callback if available."""
        if self.status_callback:
            self._call_on_ui_thread(lambda: self.status_callback(message))
