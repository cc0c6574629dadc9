"""
Security utilities for input sanitization and validation.
Keeps device serials, package names and quoted paths from breaking out of
the single argument string handed to the bridge.
"""

import re

# Pre-compiled regex patterns for performance
_DEVICE_ID_PATTERN = re.compile(r'^[a-zA-Z0-9.:_-]+$')
_PACKAGE_NAME_PATTERN = re.compile(r'^[A-Za-z][A-Za-z0-9_]*(\.[A-Za-z0-9_]+)+$')
_DANGEROUS_PATH_PATTERN = re.compile(r'[;|&`\n\r]|\$[({]|&&|\|\||>>')


def validate_device_id(device_id: str) -> str:
    """Validate an Android device ID.

    Args:
        device_id: Device serial or ``host:port`` string from ADB

    Returns:
        Validated device ID

    Raises:
        ValueError: If the device ID is invalid
    """
    if not device_id:
        raise ValueError("Device ID cannot be empty")

    # Serials and network addresses only use alphanumerics, dots, colons,
    # underscores and hyphens
    if not _DEVICE_ID_PATTERN.match(device_id):
        raise ValueError("Device ID contains invalid characters")

    return device_id


def validate_package_name(package: str) -> str:
    """Validate an Android application id such as ``com.example.game``.

    Raises:
        ValueError: If the name is empty or not a dotted Java-style identifier
    """
    if not package:
        raise ValueError("Package name cannot be empty")

    package = package.strip()
    if not _PACKAGE_NAME_PATTERN.match(package):
        raise ValueError(f"Invalid package name: {package}")

    return package


def sanitize_android_path(path: str) -> str:
    """Sanitize an Android device path to prevent command injection.

    Args:
        path: Android device path

    Returns:
        Sanitized path

    Raises:
        ValueError: If the path contains dangerous patterns
    """
    if not path:
        raise ValueError("Path cannot be empty")

    path = path.strip()

    if '\x00' in path:
        raise ValueError("Path contains null byte")

    # Paths are wrapped in double quotes on the command line, so a stray
    # quote would end the argument early
    if '"' in path:
        raise ValueError("Path contains a double quote")

    match = _DANGEROUS_PATH_PATTERN.search(path)
    if match:
        raise ValueError(f"Path contains dangerous pattern: {match.group()}")

    return path


def quote_path(path: str) -> str:
    """Wrap a path in double quotes for the bridge argument string."""
    if '"' in path:
        raise ValueError("Path contains a double quote")
    return f'"{path}"'
