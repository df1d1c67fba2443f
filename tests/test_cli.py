"""Tests for app/cli.py - argument handling."""

from unittest.mock import patch

import pytest

from mbusb.app import cli
from mbusb.exceptions import (
    DeviceValidationError,
    InvalidArgumentError,
    MissingDeviceError,
)


class TestWantsHelp:
    @pytest.mark.parametrize("argv", [[], ["-h"], ["--help"], ["-h", "/dev/sdb"]])
    def test_help_requested(self, argv):
        assert cli.wants_help(argv) is True

    @pytest.mark.parametrize("argv", [["/dev/sdb"], ["/dev/sdb", "--help"], ["sdb"]])
    def test_help_not_requested(self, argv):
        assert cli.wants_help(argv) is False


class TestFormatUsage:
    def test_usage_text(self):
        usage = cli.format_usage()

        assert usage.startswith("usage: mbusb")
        assert "device" in usage
        assert "-h, --help" in usage
        assert "Script to prepare multiboot USB drive" in usage


class TestParseDeviceArgument:
    """Tests for parse_device_argument()."""

    def test_character_device_is_rejected(self):
        with pytest.raises(DeviceValidationError) as exc_info:
            cli.parse_device_argument(["/dev/null"])

        assert str(exc_info.value) == "/dev/null is not a valid device."
        assert exc_info.value.exit_code == 1

    def test_non_dev_argument_is_rejected(self):
        with pytest.raises(InvalidArgumentError, match="sdb is not a valid argument"):
            cli.parse_device_argument(["sdb"])

    def test_flag_after_device_is_rejected(self):
        with patch("mbusb.app.cli.is_block_device", return_value=True):
            with pytest.raises(InvalidArgumentError):
                cli.parse_device_argument(["/dev/sdb", "--force"])

    def test_no_arguments(self):
        with pytest.raises(MissingDeviceError):
            cli.parse_device_argument([])

    @patch("mbusb.app.cli.is_block_device", return_value=True)
    def test_block_device_is_returned(self, mock_is_block):
        assert cli.parse_device_argument(["/dev/sdb"]) == "/dev/sdb"
        mock_is_block.assert_called_once_with("/dev/sdb")

    @patch("mbusb.app.cli.is_block_device", return_value=True)
    def test_last_valid_device_wins(self, mock_is_block):
        assert cli.parse_device_argument(["/dev/sdb", "/dev/sdc"]) == "/dev/sdc"

    @patch("mbusb.app.cli.is_block_device")
    def test_arguments_validated_left_to_right(self, mock_is_block):
        mock_is_block.side_effect = lambda path: path == "/dev/sdb"

        with pytest.raises(DeviceValidationError) as exc_info:
            cli.parse_device_argument(["/dev/sdb", "/dev/null", "/dev/sdc"])

        assert exc_info.value.device == "/dev/null"
