"""Exceptions raised while preparing a multiboot USB drive.

Every exception carries the process exit code that ``mbusb.main`` returns
when it escapes the pipeline, so the exit-code contract lives in one place.

Exception Hierarchy:
    MbusbError (base, exit 10)
        ├── UsageError (exit 1)
        │   ├── InvalidArgumentError
        │   ├── DeviceValidationError
        │   ├── MissingDeviceError
        │   └── MissingInputError
        ├── PrivilegeError (exit 2)
        ├── AbortError (exit 3)
        │   ├── InstallerNotFoundError
        │   └── ConfirmationDeclinedError
        ├── ProvisionError (exit 10)
        │   ├── PartitionNotFoundError
        │   ├── FormatOperationError
        │   ├── MountError
        │   ├── BootloaderInstallError
        │   ├── VendorDirectoryError
        │   │   ├── VendorDirectoryNotFoundError
        │   │   └── AmbiguousVendorDirectoryError
        │   ├── StagingError
        │   └── FetchError
        └── TerminatedError (exit 128 + signal number)

Usage:
    from mbusb.exceptions import PartitionNotFoundError

    if not matches:
        raise PartitionNotFoundError(device, pattern)
"""

from __future__ import annotations

import signal
from pathlib import Path
from typing import Iterable, Sequence


class MbusbError(Exception):
    """Base exception for all mbusb failures."""

    exit_code = 10


class UsageError(MbusbError):
    """Bad or missing command line arguments."""

    exit_code = 1
    show_usage = False


class InvalidArgumentError(UsageError):
    """Argument is not a device path."""

    def __init__(self, argument: str):
        self.argument = argument
        super().__init__(f"{argument} is not a valid argument.")


class DeviceValidationError(UsageError):
    """Device path does not name a block device."""

    def __init__(self, device: str):
        self.device = device
        super().__init__(f"{device} is not a valid device.")


class MissingDeviceError(UsageError):
    """No device argument was supplied."""

    show_usage = True

    def __init__(self):
        super().__init__("No device was provided.")


class MissingInputError(UsageError):
    """Local configuration inputs are missing from the source directory."""

    def __init__(self, source_dir: Path, missing: Sequence[str]):
        self.source_dir = source_dir
        self.missing = list(missing)
        super().__init__(
            f"Missing required files in {source_dir}: {', '.join(self.missing)}"
        )


class PrivilegeError(MbusbError):
    """Could not re-run with elevated privileges."""

    exit_code = 2

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to gain root privileges: {reason}")


class AbortError(MbusbError):
    """Run stopped before any destructive action."""

    exit_code = 3


class InstallerNotFoundError(AbortError):
    """None of the GRUB installer binaries is on the search path."""

    def __init__(self, providers: Iterable[str]):
        self.providers = list(providers)
        super().__init__(
            f"No GRUB installer found (tried: {', '.join(self.providers)})"
        )


class ConfirmationDeclinedError(AbortError):
    """User did not confirm the device wipe."""

    def __init__(self, device: str, stage: str):
        self.device = device
        self.stage = stage
        super().__init__(f"Wipe of {device} declined at {stage}")


class ProvisionError(MbusbError):
    """Base exception for failures from partitioning onward."""

    exit_code = 10


class PartitionNotFoundError(ProvisionError):
    """Partition node did not appear after partitioning."""

    def __init__(self, device: str, pattern: str):
        self.device = device
        self.pattern = pattern
        super().__init__(
            f"There is no partition of {device} in your system "
            f"(looked for /dev entries matching {pattern})"
        )


class FormatOperationError(ProvisionError):
    """Creating the filesystem failed."""

    def __init__(self, message: str, partition: str | None = None):
        self.partition = partition
        super().__init__(message)


class MountError(ProvisionError):
    """Creating the mount point or mounting the partition failed."""

    def __init__(self, message: str, partition: str | None = None):
        self.partition = partition
        super().__init__(message)


class BootloaderInstallError(ProvisionError):
    """grub-install failed for one of the targets."""

    def __init__(self, target: str, message: str):
        self.target = target
        super().__init__(f"GRUB install for {target} failed: {message}")


class VendorDirectoryError(ProvisionError):
    """Base exception for the GRUB vendor directory lookup."""

    def __init__(self, message: str, boot_dir: Path, matches: Sequence[Path] = ()):
        self.boot_dir = boot_dir
        self.matches = list(matches)
        super().__init__(message)


class VendorDirectoryNotFoundError(VendorDirectoryError):
    """No GRUB directory was created under the boot directory."""

    def __init__(self, boot_dir: Path, pattern: str):
        super().__init__(
            f"No directory matching {pattern} under {boot_dir}", boot_dir
        )


class AmbiguousVendorDirectoryError(VendorDirectoryError):
    """More than one GRUB directory exists under the boot directory."""

    def __init__(self, boot_dir: Path, matches: Sequence[Path]):
        names = ", ".join(path.name for path in matches)
        super().__init__(
            f"Several GRUB directories under {boot_dir}: {names}", boot_dir, matches
        )


class StagingError(ProvisionError):
    """Copying configuration files onto the drive failed."""


class FetchError(ProvisionError):
    """Downloading or extracting the boot helper archive failed."""

    def __init__(self, message: str, url: str | None = None):
        self.url = url
        super().__init__(message)


class TerminatedError(MbusbError):
    """A termination signal arrived while the pipeline was running."""

    def __init__(self, signum: int):
        self.signum = signum
        self.exit_code = 128 + signum
        try:
            name = signal.Signals(signum).name
        except ValueError:
            name = str(signum)
        super().__init__(f"Terminated by {name}")
