"""
APK install orchestration.
Runs an install and, when an in-place upgrade is rejected, backs up the app's
data, reinstalls it and restores the data.

The orchestrator never talks to a UI toolkit. When it needs the user it
returns an outcome carrying a DecisionRequest; the caller asks however it
likes and passes the answer to ``resolve``.
"""

import logging
import os
import posixpath
import shutil
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, Tuple

from .adb_bridge import DEVICE_DATA_ROOT, AdbBridge
from .models import CommandResult, FailureSignal
from .output_classifier import classify, describe, has_failure

logger = logging.getLogger(__name__)


class InstallState(Enum):
    INSTALLING = "installing"
    SUCCESS = "success"
    FAILED = "failed"
    AWAITING_USER_DECISION = "awaiting_user_decision"
    BACKING_UP = "backing_up"
    UNINSTALLING = "uninstalling"
    REINSTALLING = "reinstalling"
    RESTORING_DATA = "restoring_data"
    DONE = "done"
    CANCELLED = "cancelled"


class DecisionKind(Enum):
    DEVICE_OFFLINE = "device_offline"
    CONFIRM_REINSTALL = "confirm_reinstall"


class Answer(Enum):
    YES = "yes"
    NO = "no"
    CANCEL = "cancel"
    OK = "ok"


@dataclass(frozen=True)
class DecisionRequest:
    kind: DecisionKind
    title: str
    message: str
    choices: Tuple[Answer, ...]


@dataclass(frozen=True)
class InstallOutcome:
    """Where an install attempt stopped and what it printed."""

    state: InstallState
    result: CommandResult
    apk_path: str
    signal: FailureSignal = FailureSignal.NONE
    package: str = ""
    decision: Optional[DecisionRequest] = None
    notice: Optional[Tuple[str, str]] = None

    @property
    def needs_decision(self) -> bool:
        return self.state is InstallState.AWAITING_USER_DECISION

    @property
    def succeeded(self) -> bool:
        return self.state in (InstallState.SUCCESS, InstallState.DONE)


OFFLINE_DECISION = DecisionRequest(
    DecisionKind.DEVICE_OFFLINE,
    "Device offline.",
    "Device is offline. Press Yes to reconnect, or if you don't wish to connect "
    "and just want to download the game (requires unchecking \"Delete games after "
    "install\" from settings menu) then press No.",
    (Answer.YES, Answer.NO, Answer.CANCEL),
)

REINSTALL_DECISION = DecisionRequest(
    DecisionKind.CONFIRM_REINSTALL,
    "In place upgrade failed.",
    "In place upgrade has failed. The app can attempt to backup your save data and "
    "reinstall the game automatically, however some games do not store their saves "
    "in an accessible location (less than 5%). Continue with reinstall?",
    (Answer.OK, Answer.CANCEL),
)

AskYesNoCancel = Callable[[str, str], Answer]

# A Yes/No/Cancel dialog answers the OK/Cancel prompt with YES
CONFIRM_ANSWERS = (Answer.OK, Answer.YES)


class InstallOrchestrator:
    """Drives install, uninstall and the backup-reinstall recovery flow.

    Commands run strictly one after another on the calling thread; call
    from a worker thread when a UI is attached.
    """

    def __init__(self, bridge: AdbBridge, settings,
                 status_callback: Optional[Callable[[str], None]] = None,
                 backup_dir: Optional[str] = None):
        self.bridge = bridge
        self.settings = settings
        self.status_callback = status_callback
        self._backup_dir = backup_dir
        self.state: Optional[InstallState] = None

    @property
    def session(self):
        return self.bridge.session

    @property
    def backup_dir(self) -> str:
        return self._backup_dir or self.settings.get("backup_dir") or os.getcwd()

    def set_status_callback(self, callback: Callable[[str], None]) -> None:
        self.status_callback = callback

    def _update_status(self, message: str) -> None:
        if self.status_callback:
            self.status_callback(message)

    def _enter(self, state: InstallState) -> None:
        logger.debug(f"Install state: {self.state} -> {state}")
        self.state = state

    def _finish(self, outcome: InstallOutcome) -> InstallOutcome:
        self._enter(outcome.state)
        return outcome

    # --- entry points -------------------------------------------------------

    def install(self, apk_path: str, package: Optional[str] = None) -> InstallOutcome:
        """Install an APK, stopping early if a user decision is needed.

        ``package`` defaults to the session's current package and is fixed
        for the rest of the flow, including any reinstall.
        """
        package = package or self.session.current_package
        self._enter(InstallState.INSTALLING)
        result = self.bridge.install(apk_path)

        if not has_failure(result):
            self._update_status("")
            return self._finish(InstallOutcome(InstallState.SUCCESS, result, apk_path, package=package))

        logger.info(result.combined)
        signal = classify(result)
        outcome = InstallOutcome(InstallState.FAILED, result, apk_path, signal, package=package)

        if signal is FailureSignal.OFFLINE and not self.settings.no_device_mode:
            return self._finish(replace(outcome, state=InstallState.AWAITING_USER_DECISION,
                                        decision=OFFLINE_DECISION))

        if signal is FailureSignal.SIGNATURE_MISMATCH:
            if self.settings.auto_reinstall:
                return self.reinstall(apk_path, package)
            return self._finish(replace(outcome, state=InstallState.AWAITING_USER_DECISION,
                                        decision=REINSTALL_DECISION))

        notice = describe(signal)
        if notice and signal is not FailureSignal.AUTHORIZATION_MISSING:
            logger.warning(notice[1])
            outcome = replace(outcome, notice=notice)
        else:
            logger.error(f"Install failed ({signal.value}): {result.combined}")

        self._update_status("")
        return self._finish(outcome)

    def resolve(self, outcome: InstallOutcome, answer: Answer) -> InstallOutcome:
        """Continue an outcome that was waiting on the user."""
        if not outcome.needs_decision or outcome.decision is None:
            raise ValueError(f"Outcome in state {outcome.state.value} is not awaiting a decision")

        kind = outcome.decision.kind
        if kind is DecisionKind.CONFIRM_REINSTALL:
            if answer in CONFIRM_ANSWERS:
                return self.reinstall(outcome.apk_path, outcome.package)
            logger.info("Reinstall cancelled by user")
            return self._finish(replace(outcome, state=InstallState.CANCELLED, decision=None))

        result = outcome.result
        if answer is Answer.YES:
            self._update_status("Reconnecting device...")
            result += self.bridge.reconnect()
        logger.error(f"Install failed, device offline ({answer.value}): {outcome.apk_path}")
        self._update_status("")
        return self._finish(replace(outcome, state=InstallState.FAILED, result=result, decision=None))

    def run(self, apk_path: str, ask: AskYesNoCancel, package: Optional[str] = None) -> InstallOutcome:
        """Install and answer any decision through ``ask(title, message)``."""
        outcome = self.install(apk_path, package)
        while outcome.needs_decision:
            answer = ask(outcome.decision.title, outcome.decision.message)
            outcome = self.resolve(outcome, answer)
        return outcome

    def uninstall(self, package: Optional[str] = None) -> CommandResult:
        package = package or self.session.current_package
        self._update_status("Uninstalling game...")
        return self.bridge.uninstall_package(package)

    # --- recovery -----------------------------------------------------------

    def reinstall(self, apk_path: str, package: Optional[str] = None) -> InstallOutcome:
        """Back up app data, uninstall, reinstall and restore the data.

        The returned transcript holds only the reinstall step. Steps are not
        rolled back if a later one fails.
        """
        package = package or self.session.current_package
        if not package:
            logger.error("Cannot reinstall: no current package selected")
            self._update_status("")
            return self._finish(InstallOutcome(InstallState.FAILED, CommandResult(), apk_path,
                                               FailureSignal.SIGNATURE_MISMATCH, package=package))

        result = CommandResult()
        backup_root = self.backup_dir
        local_copy = os.path.join(backup_root, package)

        self._update_status("Performing reinstall, please wait...")
        self.bridge.kill_server()
        self.bridge.devices()

        self._enter(InstallState.BACKING_UP)
        try:
            os.makedirs(backup_root, exist_ok=True)
        except OSError as e:
            logger.error(f"Cannot create backup directory {backup_root}: {e}")
        # Many apps keep no readable data here; a failed pull is expected
        self.bridge.pull(posixpath.join(DEVICE_DATA_ROOT, package), backup_root)

        self._enter(InstallState.UNINSTALLING)
        self.uninstall(package)

        self._enter(InstallState.REINSTALLING)
        self._update_status("Reinstalling game...")
        result += self.bridge.install(apk_path)

        self._enter(InstallState.RESTORING_DATA)
        self._update_status("Restoring save data...")
        self.bridge.push(local_copy, DEVICE_DATA_ROOT + "/")
        self.remove_backup(local_copy)

        self._update_status("")
        return self._finish(InstallOutcome(InstallState.DONE, result, apk_path,
                                           FailureSignal.SIGNATURE_MISMATCH, package=package))

    def remove_backup(self, path: str) -> bool:
        """Delete a pulled data folder, never the working or backup directory."""
        resolved = os.path.realpath(path)
        protected = {os.path.realpath(os.getcwd()), os.path.realpath(self.backup_dir)}
        if resolved in protected:
            logger.error(f"Refusing to delete {path}: resolves to a protected directory")
            return False
        if not os.path.isdir(resolved):
            return False
        try:
            shutil.rmtree(resolved)
            return True
        except OSError as e:
            logger.error(f"Failed to delete backup {path}: {e}")
            return False
