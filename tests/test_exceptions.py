"""Tests for the exception hierarchy and its exit codes."""

import signal
from pathlib import Path

import pytest

from mbusb.exceptions import (
    AbortError,
    AmbiguousVendorDirectoryError,
    BootloaderInstallError,
    ConfirmationDeclinedError,
    DeviceValidationError,
    FetchError,
    FormatOperationError,
    InstallerNotFoundError,
    InvalidArgumentError,
    MbusbError,
    MissingDeviceError,
    MissingInputError,
    MountError,
    PartitionNotFoundError,
    PrivilegeError,
    ProvisionError,
    StagingError,
    TerminatedError,
    UsageError,
    VendorDirectoryError,
    VendorDirectoryNotFoundError,
)


class TestExitCodes:
    """Exit code carried by each exception family."""

    @pytest.mark.parametrize(
        "error, code",
        [
            (InvalidArgumentError("sdb"), 1),
            (DeviceValidationError("/dev/null"), 1),
            (MissingDeviceError(), 1),
            (MissingInputError(Path("/src"), ["mbusb.cfg"]), 1),
            (PrivilegeError("sudo not found"), 2),
            (InstallerNotFoundError(["grub2-install", "grub-install"]), 3),
            (ConfirmationDeclinedError("/dev/sdb", "first"), 3),
            (PartitionNotFoundError("/dev/sdb", "^/dev/sdbp?1$"), 10),
            (FormatOperationError("mkfs failed"), 10),
            (MountError("mount failed"), 10),
            (BootloaderInstallError("i386-pc", "boom"), 10),
            (VendorDirectoryNotFoundError(Path("/mnt/boot"), "grub*"), 10),
            (StagingError("copy failed"), 10),
            (FetchError("404"), 10),
        ],
    )
    def test_exit_code(self, error, code):
        assert error.exit_code == code

    def test_base_error_defaults_to_ten(self):
        assert MbusbError("unexpected").exit_code == 10

    def test_terminated_error_uses_signal_number(self):
        error = TerminatedError(signal.SIGTERM)

        assert error.exit_code == 128 + signal.SIGTERM
        assert "SIGTERM" in str(error)

    def test_terminated_error_exit_code_is_per_instance(self):
        assert TerminatedError(signal.SIGINT).exit_code == 130
        assert TerminatedError(signal.SIGHUP).exit_code == 129


class TestHierarchy:
    """Grouping used by the entry point's error handling."""

    def test_usage_errors(self):
        for error in (
            InvalidArgumentError("x"),
            DeviceValidationError("/dev/x"),
            MissingDeviceError(),
            MissingInputError(Path("."), ["mbusb.d"]),
        ):
            assert isinstance(error, UsageError)

    def test_abort_errors(self):
        assert isinstance(InstallerNotFoundError([]), AbortError)
        assert isinstance(ConfirmationDeclinedError("/dev/sdb", "second"), AbortError)

    def test_vendor_directory_errors_are_provision_errors(self):
        error = AmbiguousVendorDirectoryError(
            Path("/mnt/boot"), [Path("/mnt/boot/grub"), Path("/mnt/boot/grub2")]
        )
        assert isinstance(error, VendorDirectoryError)
        assert isinstance(error, ProvisionError)

    def test_everything_derives_from_base(self):
        assert issubclass(TerminatedError, MbusbError)
        assert issubclass(PrivilegeError, MbusbError)
        assert issubclass(FetchError, ProvisionError)


class TestMessages:
    """User-facing messages."""

    def test_invalid_argument_message(self):
        assert str(InvalidArgumentError("sdb")) == "sdb is not a valid argument."

    def test_invalid_device_message(self):
        assert str(DeviceValidationError("/dev/null")) == "/dev/null is not a valid device."

    def test_missing_device_shows_usage(self):
        error = MissingDeviceError()
        assert error.show_usage is True
        assert "No device" in str(error)

    def test_other_usage_errors_do_not_show_usage(self):
        assert InvalidArgumentError("sdb").show_usage is False

    def test_partition_not_found_names_device_and_pattern(self):
        error = PartitionNotFoundError("/dev/sdb", r"^/dev/sdbp?1$")

        assert "/dev/sdb" in str(error)
        assert r"^/dev/sdbp?1$" in str(error)
        assert error.device == "/dev/sdb"

    def test_missing_input_lists_names(self):
        error = MissingInputError(Path("/src"), ["mbusb.cfg", "mbusb.d"])

        assert error.missing == ["mbusb.cfg", "mbusb.d"]
        assert "mbusb.cfg, mbusb.d" in str(error)

    def test_ambiguous_vendor_directory_lists_matches(self):
        matches = [Path("/mnt/boot/grub"), Path("/mnt/boot/grub2")]
        error = AmbiguousVendorDirectoryError(Path("/mnt/boot"), matches)

        assert error.matches == matches
        assert "grub, grub2" in str(error)

    def test_fetch_error_keeps_url(self):
        error = FetchError("failed", url="https://example.invalid/a.tar.gz")
        assert error.url == "https://example.invalid/a.tar.gz"

    def test_declined_records_stage(self):
        error = ConfirmationDeclinedError("/dev/sdb", "second")
        assert error.stage == "second"
        assert error.device == "/dev/sdb"
