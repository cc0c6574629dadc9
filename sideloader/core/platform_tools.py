"""
ADB platform tools management.
Downloads and unpacks Google's platform-tools when no bridge binary is present.
"""

import logging
import os
import shutil
import tempfile
import zipfile
from typing import Optional

import requests

from .platform_utils import (
    get_adb_binary_name,
    get_platform_tools_directory,
    is_linux,
    is_macos,
    is_windows,
)

logger = logging.getLogger(__name__)

PLATFORM_TOOLS_URLS = {
    "windows": "https://dl.google.com/android/repository/platform-tools-latest-windows.zip",
    "linux": "https://dl.google.com/android/repository/platform-tools-latest-linux.zip",
    "darwin": "https://dl.google.com/android/repository/platform-tools-latest-darwin.zip",
}
TRUSTED_URL_PREFIX = "https://dl.google.com/android/"

MAX_DOWNLOAD_BYTES = 200 * 1024 * 1024
MAX_EXTRACTED_BYTES = 500 * 1024 * 1024
DOWNLOAD_TIMEOUT = 30


class PlatformToolsError(RuntimeError):
    """Raised when platform-tools cannot be downloaded or unpacked."""


def get_download_url() -> str:
    if is_windows():
        return PLATFORM_TOOLS_URLS["windows"]
    if is_linux():
        return PLATFORM_TOOLS_URLS["linux"]
    if is_macos():
        return PLATFORM_TOOLS_URLS["darwin"]
    raise PlatformToolsError("Unsupported platform for platform-tools download")


def download_archive(url: str, destination: str) -> str:
    """Stream the platform-tools zip to ``destination``.

    Rejects redirects away from Google's host and archives over the size cap.
    """
    resp = requests.get(url, stream=True, timeout=DOWNLOAD_TIMEOUT, allow_redirects=True)
    resp.raise_for_status()

    if not resp.url.startswith(TRUSTED_URL_PREFIX):
        raise PlatformToolsError(f"Redirect to untrusted domain: {resp.url}")

    downloaded = 0
    with open(destination, "wb") as fh:
        for chunk in resp.iter_content(chunk_size=8192):
            if not chunk:
                continue
            downloaded += len(chunk)
            if downloaded > MAX_DOWNLOAD_BYTES:
                raise PlatformToolsError("Downloaded file exceeds maximum size limit")
            fh.write(chunk)

    logger.info(f"Downloaded {downloaded} bytes from {url}")
    return destination


def extract_archive(zip_path: str, target_dir: str) -> None:
    """Unpack the archive into ``target_dir`` after size and traversal checks."""
    if not zipfile.is_zipfile(zip_path):
        raise PlatformToolsError("Downloaded file is not a valid zip archive")

    root = os.path.abspath(target_dir)
    with zipfile.ZipFile(zip_path, "r") as zf:
        entries = zf.infolist()
        if sum(info.file_size for info in entries) > MAX_EXTRACTED_BYTES:
            raise PlatformToolsError("Zip archive uncompressed size exceeds safety limit")
        for info in entries:
            resolved = os.path.abspath(os.path.join(root, info.filename))
            if resolved != root and not resolved.startswith(root + os.sep):
                raise PlatformToolsError(f"Zip contains path traversal: {info.filename}")
        zf.extractall(root)


def ensure_platform_tools(tools_dir: Optional[str] = None) -> str:
    """Return the bridge binary path, downloading platform-tools if needed.

    The zip's top-level ``platform-tools`` folder becomes ``tools_dir``.
    The previous install is kept as ``<tools_dir>.bak`` until the new one
    is in place.
    """
    tools_dir = tools_dir or get_platform_tools_directory()
    adb_path = os.path.join(tools_dir, get_adb_binary_name())
    if os.path.isfile(adb_path):
        return adb_path

    logger.info(f"Bridge binary not found at {adb_path}, downloading platform-tools")
    os.makedirs(os.path.dirname(tools_dir) or ".", exist_ok=True)
    tmp_dir = tempfile.mkdtemp(prefix="platform-tools-")
    try:
        zip_path = download_archive(get_download_url(), os.path.join(tmp_dir, "platform-tools.zip"))
        extract_archive(zip_path, tmp_dir)

        extracted = os.path.join(tmp_dir, "platform-tools")
        if not os.path.isdir(extracted):
            raise PlatformToolsError("Platform-tools not found in archive")

        if os.path.isdir(tools_dir):
            backup = f"{tools_dir}.bak"
            shutil.rmtree(backup, ignore_errors=True)
            shutil.move(tools_dir, backup)
        shutil.move(extracted, tools_dir)

        if os.name == "posix" and os.path.isfile(adb_path):
            os.chmod(adb_path, 0o755)
        return adb_path
    finally:
        shutil.rmtree(tmp_dir, ignore_errors=True)


def get_adb_binary_path(tools_dir: Optional[str] = None) -> str:
    """Path the bridge binary is expected at; does not download."""
    return os.path.join(tools_dir or get_platform_tools_directory(), get_adb_binary_name())


def is_adb_available(tools_dir: Optional[str] = None) -> bool:
    """Check if ADB binary is available."""
    return os.path.isfile(get_adb_binary_path(tools_dir))


def download_and_extract_adb(tools_dir: Optional[str] = None) -> bool:
    """Download platform-tools, reporting failure instead of raising."""
    try:
        return os.path.isfile(ensure_platform_tools(tools_dir))
    except (PlatformToolsError, requests.RequestException, zipfile.BadZipFile, OSError) as e:
        logger.error(f"Failed to install platform-tools: {e}")
        return False
