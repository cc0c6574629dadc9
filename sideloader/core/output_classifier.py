"""
Bridge output classification.
Maps the bridge's human-readable messages to failure signals.

Every literal the bridge is known to print lives in this module, so a changed
upstream message only needs an update here.
"""

import logging
from typing import Optional, Tuple

from .models import CommandResult, FailureSignal

logger = logging.getLogger(__name__)

# Present (any case) in an install transcript when the attempt did not succeed
FAILURE_MARKER = "failed"

AUTHORIZATION_MARKER = "ADB_VENDOR_KEYS"

# (signal, alternatives); an alternative matches when all of its substrings
# appear. Rows are checked top to bottom and the first hit wins.
# "failed to install" is broad and also catches unrelated install failures.
FAILURE_PATTERNS: Tuple[Tuple[FailureSignal, Tuple[Tuple[str, ...], ...]], ...] = (
    (FailureSignal.INSUFFICIENT_STORAGE, (
        ("not enough storage space",),
        ("INSTALL_FAILED_INSUFFICIENT_STORAGE",),
    )),
    (FailureSignal.ASSET_PATH_INVALID, (
        ("Asset path", "is neither a directory nor file"),
    )),
    (FailureSignal.OFFLINE, (
        ("offline",),
    )),
    (FailureSignal.SIGNATURE_MISMATCH, (
        ("signatures do not match",),
        ("INSTALL_FAILED_VERSION_DOWNGRADE",),
        ("failed to install",),
    )),
    (FailureSignal.AUTHORIZATION_MISSING, (
        (AUTHORIZATION_MARKER,),
    )),
)


def classify(result: CommandResult) -> FailureSignal:
    """Return the single failure signal a result's text indicates."""
    text = result.combined
    for signal, alternatives in FAILURE_PATTERNS:
        for substrings in alternatives:
            if all(s in text for s in substrings):
                return signal
    return FailureSignal.NONE


def has_failure(result: CommandResult) -> bool:
    """Whether an install transcript reports a failure of any kind."""
    return FAILURE_MARKER in result.combined.lower()


def needs_authorization_warning(result: CommandResult) -> bool:
    """Checked on every command regardless of what ``classify`` returns."""
    return AUTHORIZATION_MARKER in result.error


class AuthorizationWarningGate:
    """Lets the USB-debugging authorization warning through once per session.

    The "already warned" flag lives in the settings store; ``reset`` arms
    the warning again.
    """

    def __init__(self, settings):
        self.settings = settings

    def check(self, result: CommandResult) -> bool:
        """True if the caller should show the warning for this result."""
        if not needs_authorization_warning(result):
            return False
        if self.settings.adb_debug_warned:
            return False
        self.settings.adb_debug_warned = True
        self.settings.save()
        logger.warning("Bridge reports missing USB debugging authorization")
        return True

    def reset(self) -> None:
        self.settings.adb_debug_warned = False
        self.settings.save()


def describe(signal: FailureSignal) -> Optional[Tuple[str, str]]:
    """Title and message shown to the user for informational signals."""
    return NOTICES.get(signal)


NOTICES = {
    FailureSignal.INSUFFICIENT_STORAGE: (
        "Not enough storage",
        "There is not enough room on your device to install this package. "
        "Please clear AT LEAST 2x the amount of the app you are trying to install.",
    ),
    FailureSignal.ASSET_PATH_INVALID: (
        "Asset path error",
        "The specified path might not exist or be accessible.",
    ),
    FailureSignal.AUTHORIZATION_MISSING: (
        "ADB Debugging not enabled.",
        "On your headset, click on the Notifications Bell, and then select "
        "the USB Detected notification to enable Connections.",
    ),
}
