"""The destructive part of a run, from partitioning to the memdisk fetch.

Stages, in order:
    1. Partition the whole device (failures tolerated, see storage.partition)
    2. Find the new partition node
    3. Create a FAT filesystem on it
    4. Mount it on a temporary directory (released on every exit path)
    5. Install GRUB for UEFI, then for BIOS
    6. Stage the menu configuration and the isos/ directory
    7. Fetch memdisk into the GRUB directory

Any exception stops the run; the mount registered on ``context.cleanup`` is
released while it unwinds. There is no rollback: a failure leaves the device
partially provisioned.
"""

from __future__ import annotations

from mbusb.app.context import RunContext
from mbusb.boot.grub import install_bios, install_efi
from mbusb.boot.staging import stage_boot_files
from mbusb.config import settings
from mbusb.logging import operation_context
from mbusb.services.fetch import fetch_archive_member
from mbusb.storage.devices import find_partition
from mbusb.storage.format import format_partition
from mbusb.storage.mount import temporary_mount
from mbusb.storage.partition import PartitionRequest, apply_partition_request


def provision_device(context: RunContext) -> None:
    with operation_context("provision", device=context.device) as log, context.cleanup:
        apply_partition_request(PartitionRequest(context.device))

        context.partition = find_partition(context.device)
        format_partition(context.partition)

        context.mount_dir = context.cleanup.enter_context(
            temporary_mount(context.partition, owner=context.invoking_user)
        )
        boot_dir = context.boot_dir

        install_efi(
            context.installer,
            context.mount_dir,
            boot_dir,
            settings.get_setting("efi_target", "x86_64-efi"),
        )
        install_bios(
            context.installer,
            context.device,
            boot_dir,
            settings.get_setting("bios_target", "i386-pc"),
        )

        vendor_dir = stage_boot_files(context.source_dir, boot_dir)

        fetch_archive_member(
            settings.get_setting("syslinux_url", settings.DEFAULT_SYSLINUX_URL),
            settings.get_setting("memdisk_member", settings.DEFAULT_MEMDISK_MEMBER),
            vendor_dir,
            strip=settings.get_int(
                "memdisk_strip_components", settings.DEFAULT_MEMDISK_STRIP_COMPONENTS
            ),
            timeout_seconds=settings.get_int(
                "fetch_timeout_seconds", settings.DEFAULT_FETCH_TIMEOUT_SECONDS
            ),
        )
        log.info(f"{context.device} is ready, copy ISO images to {boot_dir.relative_to(context.mount_dir)}/isos")
