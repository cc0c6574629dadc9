#!/usr/bin/env python3
"""
Sideloader - Command line entry point
Installs an APK (and optionally its OBB folder) without the GUI.
"""

import argparse
import logging
import sys

from .core.adb_bridge import AdbBridge
from .core.install_orchestrator import Answer, InstallOrchestrator
from .core.platform_tools import download_and_extract_adb, is_adb_available
from .core.progress_tracker import ProgressTracker
from .core.session import DeviceSession
from .core.settings import SettingsStore
from .utils.log_setup import setup_logging

_ANSWERS = {"y": Answer.YES, "yes": Answer.YES, "n": Answer.NO, "no": Answer.NO}


def ask_console(title: str, message: str) -> Answer:
    """Console stand-in for the Yes/No/Cancel dialog."""
    print(f"\n{title}\n{message}")
    reply = input("[y]es / [n]o / [c]ancel: ").strip().lower()
    return _ANSWERS.get(reply, Answer.CANCEL)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sideloader", description=__doc__)
    parser.add_argument("apk", help="APK file to install")
    parser.add_argument("--package", required=True, help="Application id, e.g. com.example.game")
    parser.add_argument("--obb", help="OBB folder to push after the install")
    parser.add_argument("--device", help="Device serial or host:port")
    parser.add_argument("--auto-reinstall", action="store_true",
                        help="Reinstall without asking when an upgrade is rejected")
    parser.add_argument("--verbose", action="store_true")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    settings = SettingsStore()
    if args.auto_reinstall:
        settings.auto_reinstall = True
    if not is_adb_available(settings.adb_folder) and not download_and_extract_adb(settings.adb_folder):
        print("Failed to download ADB tools.", file=sys.stderr)
        return 2

    session = DeviceSession(args.device, args.package)
    bridge = AdbBridge(session, settings=settings)
    orchestrator = InstallOrchestrator(bridge, settings, status_callback=print)

    outcome = orchestrator.run(args.apk, ask_console)
    if outcome.notice:
        print("\n".join(outcome.notice), file=sys.stderr)
    if not outcome.succeeded:
        return 1

    if args.obb:
        tracker = ProgressTracker()
        tracker.set_status_callback(print)
        bridge.copy_obb(args.obb, tracker.on_transfer_progress)
    return 0


if __name__ == "__main__":
    sys.exit(main())
