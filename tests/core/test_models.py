"""Tests for pipeline value types."""

import pytest

from sideloader.core.models import CommandResult, StorageInfo, TransferProgress


class TestCommandResult:
    def test_defaults_empty(self):
        result = CommandResult()
        assert result.output == ""
        assert result.error == ""

    def test_addition_keeps_order(self):
        combined = CommandResult("one\n", "e1\n") + CommandResult("two\n", "e2\n")
        assert combined == CommandResult("one\ntwo\n", "e1\ne2\n")

    def test_addition_does_not_mutate(self):
        first = CommandResult("a", "b")
        _ = first + CommandResult("c", "d")
        assert first == CommandResult("a", "b")

    def test_add_non_result_raises(self):
        with pytest.raises(TypeError):
            CommandResult() + "text"

    def test_combined(self):
        assert CommandResult("out", "err").combined == "outerr"

    def test_frozen(self):
        with pytest.raises(AttributeError):
            CommandResult().output = "x"


class TestTransferProgress:
    def test_percentage(self):
        assert TransferProgress(25, 100, "a.obb").percentage == 25.0

    def test_percentage_no_total(self):
        assert TransferProgress(10, 0, "a.obb").percentage == 0.0


class TestStorageInfo:
    def test_describe(self):
        info = StorageInfo(total_kb=118_000_000, used_kb=18_500_000, free_kb=99_500_000)
        assert info.describe() == (
            "Total space: 118.00GB\nUsed space: 18.50GB\nFree space: 99.50GB"
        )
