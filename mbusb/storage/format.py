"""FAT filesystem creation on the new partition."""

import subprocess
from typing import List

from mbusb.exceptions import FormatOperationError
from mbusb.logging import LoggerFactory
from mbusb.storage.devices import run_command


log = LoggerFactory.for_storage()


def _validate_partition_path(partition_path: str) -> bool:
    """Validate that partition path starts with /dev/."""
    return partition_path.startswith("/dev/")


def build_format_command(partition_path: str) -> List[str]:
    return ["mkfs.vfat", partition_path]


def format_partition(partition_path: str) -> None:
    """Create a FAT filesystem on ``partition_path``.

    Args:
        partition_path: Partition path (e.g., /dev/sdb1)

    Raises:
        FormatOperationError: If the path is invalid or mkfs.vfat fails
    """
    if not _validate_partition_path(partition_path):
        raise FormatOperationError(
            f"Invalid partition path: {partition_path}", partition_path
        )

    command = build_format_command(partition_path)
    try:
        run_command(command)
    except subprocess.CalledProcessError as error:
        stderr_output = (error.stderr or "").strip() or "no error message"
        raise FormatOperationError(
            f"mkfs.vfat failed on {partition_path} (code {error.returncode}): {stderr_output}",
            partition_path,
        ) from error
    except OSError as error:
        raise FormatOperationError(
            f"mkfs.vfat could not run: {error}", partition_path
        ) from error

    log.info(f"Formatted {partition_path} as vfat")
