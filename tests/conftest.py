"""Pytest configuration and fixtures."""

import os
import sys
from unittest.mock import MagicMock

import pytest

# Make the package importable without installing it
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from sideloader.core.models import CommandResult
from sideloader.core.settings import SettingsStore


@pytest.fixture
def temp_directory(tmp_path):
    """Create a temporary directory for testing."""
    return str(tmp_path)


@pytest.fixture
def settings(tmp_path):
    """Settings store backed by a file in a temp directory."""
    store = SettingsStore(str(tmp_path / "config" / "settings.json"))
    store.backup_dir = str(tmp_path / "backups")
    return store


@pytest.fixture
def mock_bridge():
    """Bridge double whose commands all succeed with empty output."""
    bridge = MagicMock()
    for name in ("install", "uninstall_package", "pull", "push", "kill_server", "devices", "reconnect"):
        getattr(bridge, name).return_value = CommandResult()
    bridge.session.current_package = "com.example.game"
    return bridge


@pytest.fixture
def obb_tree(tmp_path):
    """A small OBB-like folder with nested files of known sizes."""
    root = tmp_path / "com.example.game"
    (root / "sub").mkdir(parents=True)
    (root / "main.1.com.example.game.obb").write_bytes(b"a" * 100)
    (root / "patch.1.com.example.game.obb").write_bytes(b"b" * 50)
    (root / "sub" / "extra.bin").write_bytes(b"c" * 7)
    return root
