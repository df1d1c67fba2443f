"""Block device helpers: command runner, device checks and partition lookup.

Everything that touches the target device goes through ``run_command`` so
each external tool invocation is logged before it runs, which gives a trace
of the destructive steps in the console and in ``operations.log``.

Operations:
    - run_command(): Run an external tool with logging
    - is_block_device(): Check that a path names a block special file
    - list_device_nodes(): Paths of /dev entries that start with a device path
    - unmount_device_partitions(): Force-unmount everything under a device
    - partition_pattern(): Regex matching a device's numbered partition node
    - find_partition(): Locate the partition node after partitioning

Partition Naming:
    /dev/sdb     -> /dev/sdb1
    /dev/nvme0n1 -> /dev/nvme0n1p1
    /dev/mmcblk0 -> /dev/mmcblk0p1
"""

import contextlib
import os
import re
import stat
import subprocess
from typing import List

from mbusb.exceptions import PartitionNotFoundError
from mbusb.logging import LoggerFactory

DEV_DIR = "/dev"

log = LoggerFactory.for_storage()


def run_command(command, check=True, log_output=True, log_command=True):
    if log_command:
        log.info("+ {}", " ".join(command))
    try:
        result = subprocess.run(command, check=check, text=True, capture_output=True)
    except subprocess.CalledProcessError as error:
        log.debug("Command failed: {}", " ".join(command))
        if error.stdout:
            log.debug("stdout: {}", error.stdout.strip())
        if error.stderr:
            log.debug("stderr: {}", error.stderr.strip())
        raise
    if result.stdout and (log_output or result.returncode != 0):
        log.debug("stdout: {}", result.stdout.strip())
    if result.stderr and (log_output or result.returncode != 0):
        log.debug("stderr: {}", result.stderr.strip())
    return result


def is_block_device(path: str) -> bool:
    try:
        return stat.S_ISBLK(os.stat(path).st_mode)
    except OSError:
        return False


def list_device_nodes(device: str, dev_dir: str = DEV_DIR) -> List[str]:
    """Return /dev paths whose full path starts with ``device``, sorted."""
    try:
        names = os.listdir(dev_dir)
    except OSError:
        return []
    paths = [os.path.join(dev_dir, name) for name in names]
    return sorted(path for path in paths if path.startswith(device))


def unmount_device_partitions(device: str) -> None:
    """Force-unmount the device and every partition node under it.

    Best-effort: unmount failures and a missing ``umount`` are ignored.
    """
    nodes = list_device_nodes(device)
    if not nodes:
        return
    with contextlib.suppress(OSError):
        run_command(["umount", "-f", *nodes], check=False)


def partition_pattern(device: str, number: int = 1) -> str:
    return rf"^{re.escape(device)}p?{number}$"


def find_partition(device: str, number: int = 1, dev_dir: str = DEV_DIR) -> str:
    """Find the partition node for ``device`` after partitioning.

    Args:
        device: Device path (e.g., /dev/sdb)
        number: Partition number
        dev_dir: Directory holding device nodes

    Returns:
        Partition path (e.g., /dev/sdb1)

    Raises:
        PartitionNotFoundError: If no /dev entry matches
    """
    pattern = partition_pattern(device, number)
    regex = re.compile(pattern)
    matches = [path for path in list_device_nodes(device, dev_dir) if regex.match(path)]
    if not matches:
        raise PartitionNotFoundError(device, pattern)
    partition = matches[0]
    log.debug(f"Partition node found: {partition}")
    return partition
