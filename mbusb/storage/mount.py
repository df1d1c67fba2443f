"""Temporary mount point handling with guaranteed release.

``temporary_mount()`` creates a uniquely named directory, mounts the new
partition on it and, on every exit path, hands ownership of the written files
back to the invoking user, force-unmounts and removes the directory.

Release steps are best-effort: a FAT filesystem rejects chown, the partition
may already be unmounted, and none of that should mask the error that is
unwinding the run.

Example:
    >>> with temporary_mount("/dev/sdb1", owner="alice") as mount_dir:
    ...     (mount_dir / "boot").mkdir()
"""

from __future__ import annotations

import contextlib
import subprocess
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from mbusb.app.signals import deferred_termination_signals
from mbusb.exceptions import MountError
from mbusb.logging import LoggerFactory
from mbusb.storage.devices import run_command


log = LoggerFactory.for_storage()

MOUNT_DIR_PREFIX = "mbusb."


def create_mount_dir(parent: Optional[Path] = None) -> Path:
    try:
        return Path(tempfile.mkdtemp(prefix=MOUNT_DIR_PREFIX, dir=parent))
    except OSError as error:
        raise MountError(f"Failed to create mount directory: {error}") from error


def mount_partition(partition: str, mount_dir: Path) -> None:
    """Mount ``partition`` on ``mount_dir``.

    Raises:
        MountError: If mount fails or cannot run
    """
    try:
        run_command(["mount", partition, str(mount_dir)])
    except subprocess.CalledProcessError as error:
        stderr_output = (error.stderr or "").strip()
        raise MountError(
            f"Failed to mount {partition} to {mount_dir}: {stderr_output}", partition
        ) from error
    except OSError as error:
        raise MountError(f"mount could not run: {error}", partition) from error


def restore_ownership(mount_dir: Path, owner: str) -> None:
    """Recursively chown the mount directory's contents to ``owner``."""
    try:
        children = sorted(str(child) for child in mount_dir.iterdir())
    except OSError as error:
        log.debug(f"Skipping ownership restore, cannot list {mount_dir}: {error}")
        return
    if not children:
        return
    try:
        result = run_command(["chown", "-R", owner, *children], check=False)
    except OSError as error:
        log.debug(f"chown could not run: {error}")
        return
    if result.returncode != 0:
        log.debug(f"Ownership restore on {mount_dir} failed (ignored)")


def release_mount(mount_dir: Path, owner: Optional[str] = None) -> None:
    """Restore ownership, force-unmount and remove ``mount_dir``.

    Termination signals stay pending until every step has run.
    """
    with deferred_termination_signals():
        if owner:
            restore_ownership(mount_dir, owner)

        with contextlib.suppress(OSError):
            run_command(["umount", "-f", str(mount_dir)], check=False, log_output=False)

        if mount_dir.is_dir():
            try:
                mount_dir.rmdir()
            except OSError as error:
                log.debug(f"Could not remove mount directory {mount_dir}: {error}")


@contextmanager
def temporary_mount(
    partition: str,
    *,
    owner: Optional[str] = None,
    parent: Optional[Path] = None,
) -> Iterator[Path]:
    """Mount ``partition`` on a fresh temporary directory for the block.

    Args:
        partition: Partition node (e.g., /dev/sdb1)
        owner: User that receives ownership of the written files on release
        parent: Directory in which the mount point is created

    Yields:
        Path of the mount directory

    Raises:
        MountError: If the directory cannot be created or mount fails
    """
    mount_dir = create_mount_dir(parent)
    try:
        mount_partition(partition, mount_dir)
        log.debug(f"Mounted {partition} at {mount_dir}")
        yield mount_dir
    finally:
        release_mount(mount_dir, owner)
