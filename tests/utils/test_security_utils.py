"""Tests for security utilities."""

import pytest

from sideloader.utils.security_utils import (
    quote_path,
    sanitize_android_path,
    validate_device_id,
    validate_package_name,
)


class TestValidateDeviceId:
    """Test device ID validation."""

    @pytest.mark.parametrize("device_id", [
        "emulator-5554",
        "1WMHH0000000",
        "192.168.1.20:5555",
        "adb-R58M_1._adb-tls-connect",
    ])
    def test_valid(self, device_id):
        assert validate_device_id(device_id) == device_id

    def test_empty(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            validate_device_id("")

    @pytest.mark.parametrize("device_id", ["abc;reboot", "abc def", "$(id)", "a|b"])
    def test_invalid_characters(self, device_id):
        with pytest.raises(ValueError, match="invalid characters"):
            validate_device_id(device_id)


class TestValidatePackageName:
    @pytest.mark.parametrize("package", ["com.example.game", "com.Studio_1.Game2", "a.b"])
    def test_valid(self, package):
        assert validate_package_name(package) == package

    def test_strips_whitespace(self):
        assert validate_package_name("  com.example.game\n") == "com.example.game"

    def test_empty(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            validate_package_name("")

    @pytest.mark.parametrize("package", ["game", "1com.example", "com..example", "com.example;id", "com/example"])
    def test_invalid(self, package):
        with pytest.raises(ValueError, match="Invalid package name"):
            validate_package_name(package)


class TestSanitizeAndroidPath:
    def test_valid(self):
        assert sanitize_android_path(" /sdcard/Android/obb/com.example.game ") == \
            "/sdcard/Android/obb/com.example.game"

    def test_spaces_allowed(self):
        assert sanitize_android_path("/sdcard/My Games") == "/sdcard/My Games"

    def test_empty(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            sanitize_android_path("")

    def test_null_byte(self):
        with pytest.raises(ValueError, match="null byte"):
            sanitize_android_path("/sdcard/\x00x")

    def test_quote(self):
        with pytest.raises(ValueError, match="double quote"):
            sanitize_android_path('/sdcard/"x')

    @pytest.mark.parametrize("path", ["/sdcard; rm -rf /", "/sdcard && reboot", "/sdcard/$(id)", "/a`id`", "/a >> /b"])
    def test_dangerous(self, path):
        with pytest.raises(ValueError):
            sanitize_android_path(path)


class TestQuotePath:
    def test_wraps(self):
        assert quote_path("/home/me/My Games/game.apk") == '"/home/me/My Games/game.apk"'

    def test_rejects_quote(self):
        with pytest.raises(ValueError):
            quote_path('/home/"me"/game.apk')
