"""
Platform-specific utilities for the sideloader.
Handles platform detection and where the bridge binary lives.
"""

import os
import sys

from platformdirs import user_data_dir

APP_NAME = "sideloader"


def get_platform_type() -> str:
    """Get the current platform type."""
    return sys.platform


def is_windows() -> bool:
    """Check if running on Windows."""
    return sys.platform.startswith("win")


def is_linux() -> bool:
    """Check if running on Linux."""
    return sys.platform.startswith("linux")


def is_macos() -> bool:
    """Check if running on macOS."""
    return sys.platform.startswith("darwin")


def get_adb_binary_name() -> str:
    """Get the ADB binary name for current platform."""
    if is_windows():
        return "adb.exe"
    return "adb"


def get_data_directory() -> str:
    """Per-user directory for downloaded tools and backups."""
    return user_data_dir(APP_NAME)


def get_platform_tools_directory() -> str:
    """Directory the platform-tools archive is unpacked into."""
    return os.path.join(get_data_directory(), "platform-tools")
