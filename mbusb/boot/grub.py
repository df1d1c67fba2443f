"""GRUB installation for UEFI and BIOS boot, and vendor directory lookup.

Distributions ship the installer as ``grub2-install`` or ``grub-install``
and create the matching ``boot/grub2`` or ``boot/grub`` directory. The
installer is resolved once from a prioritized provider list; the directory it
created is found afterwards with an explicit lookup that reports no match and
several matches as different errors.
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Sequence, Tuple

from mbusb.exceptions import (
    AmbiguousVendorDirectoryError,
    BootloaderInstallError,
    InstallerNotFoundError,
    VendorDirectoryNotFoundError,
)
from mbusb.logging import LoggerFactory
from mbusb.storage.devices import run_command


log = LoggerFactory.for_boot()

GRUB_INSTALL_PROVIDERS: Tuple[str, ...] = ("grub2-install", "grub-install")
EFI_TARGET = "x86_64-efi"
BIOS_TARGET = "i386-pc"
VENDOR_DIR_PATTERN = "grub*"


@dataclass(frozen=True)
class GrubInstaller:
    name: str
    path: str

    def efi_command(
        self, efi_dir: Path, boot_dir: Path, target: str = EFI_TARGET
    ) -> List[str]:
        return [
            self.path,
            f"--target={target}",
            f"--efi-directory={efi_dir}",
            f"--boot-directory={boot_dir}",
            "--removable",
            "--recheck",
        ]

    def bios_command(
        self, device: str, boot_dir: Path, target: str = BIOS_TARGET
    ) -> List[str]:
        return [
            self.path,
            f"--target={target}",
            f"--boot-directory={boot_dir}",
            "--recheck",
            device,
        ]


def resolve_grub_installer(
    providers: Sequence[str] = GRUB_INSTALL_PROVIDERS,
) -> GrubInstaller:
    """Return the first provider found on PATH.

    Raises:
        InstallerNotFoundError: If none of the providers is installed
    """
    for name in providers:
        path = shutil.which(name)
        if path:
            log.debug(f"Using GRUB installer {path}")
            return GrubInstaller(name=name, path=path)
    raise InstallerNotFoundError(providers)


def _run_install(command: List[str], target: str) -> None:
    try:
        run_command(command)
    except subprocess.CalledProcessError as error:
        stderr_output = (error.stderr or "").strip() or f"exit code {error.returncode}"
        raise BootloaderInstallError(target, stderr_output) from error
    except OSError as error:
        raise BootloaderInstallError(target, str(error)) from error


def install_efi(
    installer: GrubInstaller,
    mount_dir: Path,
    boot_dir: Path,
    target: str = EFI_TARGET,
) -> None:
    """Install removable-media EFI images into ``mount_dir``."""
    log.info(f"Installing GRUB for {target}")
    _run_install(installer.efi_command(mount_dir, boot_dir, target), target)


def install_bios(
    installer: GrubInstaller,
    device: str,
    boot_dir: Path,
    target: str = BIOS_TARGET,
) -> None:
    """Install GRUB into the MBR of the whole ``device``."""
    log.info(f"Installing GRUB for {target} on {device}")
    _run_install(installer.bios_command(device, boot_dir, target), target)


class LookupStatus(Enum):
    FOUND = "found"
    NONE = "none"
    MULTIPLE = "multiple"


@dataclass(frozen=True)
class VendorDirLookup:
    boot_dir: Path
    pattern: str
    matches: Tuple[Path, ...]

    @property
    def status(self) -> LookupStatus:
        if not self.matches:
            return LookupStatus.NONE
        if len(self.matches) > 1:
            return LookupStatus.MULTIPLE
        return LookupStatus.FOUND


def lookup_vendor_dir(boot_dir: Path, pattern: str = VENDOR_DIR_PATTERN) -> VendorDirLookup:
    matches = tuple(sorted(path for path in boot_dir.glob(pattern) if path.is_dir()))
    return VendorDirLookup(boot_dir=boot_dir, pattern=pattern, matches=matches)


def require_vendor_dir(boot_dir: Path, pattern: str = VENDOR_DIR_PATTERN) -> Path:
    """Return the single GRUB directory under ``boot_dir``.

    Raises:
        VendorDirectoryNotFoundError: If there is none
        AmbiguousVendorDirectoryError: If there are several
    """
    lookup = lookup_vendor_dir(boot_dir, pattern)
    if lookup.status is LookupStatus.NONE:
        raise VendorDirectoryNotFoundError(boot_dir, pattern)
    if lookup.status is LookupStatus.MULTIPLE:
        raise AmbiguousVendorDirectoryError(boot_dir, lookup.matches)
    return lookup.matches[0]
