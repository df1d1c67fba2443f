"""Copy the boot menu configuration onto the mounted drive.

Local inputs (read from the source directory, normally the working
directory):
    mbusb.cfg          main menu, sourced by grub.cfg
    mbusb.d/           per-distribution menu fragments
    grub.cfg.example   default GRUB configuration

Resulting layout under the boot directory:
    isos/
    <grub vendor dir>/mbusb.cfg
    <grub vendor dir>/mbusb.d/
    <grub vendor dir>/grub.cfg.example
    <grub vendor dir>/grub.cfg          (copy of grub.cfg.example)

Files are copied without permission bits or timestamps, which FAT cannot
store.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List

from mbusb.boot.grub import require_vendor_dir
from mbusb.exceptions import MissingInputError, StagingError
from mbusb.logging import LoggerFactory


log = LoggerFactory.for_boot()

MAIN_CONFIG = "mbusb.cfg"
CONFIG_FRAGMENTS_DIR = "mbusb.d"
EXAMPLE_CONFIG = "grub.cfg.example"
GRUB_CONFIG = "grub.cfg"
ISOS_DIR = "isos"

REQUIRED_INPUTS = (MAIN_CONFIG, CONFIG_FRAGMENTS_DIR, EXAMPLE_CONFIG)


def missing_inputs(source_dir: Path) -> List[str]:
    missing = []
    for name in REQUIRED_INPUTS:
        path = source_dir / name
        exists = path.is_dir() if name == CONFIG_FRAGMENTS_DIR else path.is_file()
        if not exists:
            missing.append(name)
    return missing


def check_local_inputs(source_dir: Path) -> None:
    """Fail before anything destructive when the inputs are not there.

    Raises:
        MissingInputError: If any required input is missing
    """
    missing = missing_inputs(source_dir)
    if missing:
        raise MissingInputError(source_dir, missing)


def _copy_tree(source: Path, destination: Path) -> None:
    # Contents only. shutil.copytree also copies directory modes, which vfat
    # rejects with EPERM when they do not match the mount's dmask.
    destination.mkdir(exist_ok=True)
    for entry in sorted(source.rglob("*")):
        target = destination / entry.relative_to(source)
        if entry.is_dir():
            target.mkdir(parents=True, exist_ok=True)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(entry, target)


def stage_boot_files(source_dir: Path, boot_dir: Path) -> Path:
    """Create the ISO directory and copy the menu configuration.

    Args:
        source_dir: Directory holding the local inputs
        boot_dir: Boot directory on the mounted drive

    Returns:
        The GRUB vendor directory the files were copied into

    Raises:
        StagingError: If a directory cannot be created or a copy fails
        VendorDirectoryError: If the GRUB directory lookup is not unique
    """
    try:
        (boot_dir / ISOS_DIR).mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise StagingError(f"Failed to create {boot_dir / ISOS_DIR}: {error}") from error

    vendor_dir = require_vendor_dir(boot_dir)
    log.info(f"Copying configuration into {vendor_dir}")

    try:
        shutil.copyfile(source_dir / MAIN_CONFIG, vendor_dir / MAIN_CONFIG)
        _copy_tree(source_dir / CONFIG_FRAGMENTS_DIR, vendor_dir / CONFIG_FRAGMENTS_DIR)
        shutil.copyfile(source_dir / EXAMPLE_CONFIG, vendor_dir / EXAMPLE_CONFIG)
        shutil.copyfile(vendor_dir / EXAMPLE_CONFIG, vendor_dir / GRUB_CONFIG)
    except OSError as error:
        raise StagingError(f"Failed to copy configuration into {vendor_dir}: {error}") from error

    return vendor_dir
