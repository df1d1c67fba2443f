"""Whole-disk partitioning through parted.

The wanted layout is described by a ``PartitionRequest`` and applied as a
sequence of non-interactive ``parted -s`` commands. Each command's outcome is
recorded in a ``PartitionResult``.

Failures here do not abort the run: some partitioners report a non-zero
status even though the table was written. The partition lookup that follows
(``devices.find_partition``) is what decides whether partitioning worked, so
a bad table can slip through until formatting or mounting fails.

Layout:
    - MBR (msdos) partition table, replacing whatever was there
    - One primary partition from 1MiB to the end of the disk
    - FAT32 partition type hint
"""

from __future__ import annotations

import contextlib
import shutil
import subprocess
from dataclasses import dataclass, field
from typing import List

from mbusb.logging import LoggerFactory
from mbusb.storage.devices import run_command


log = LoggerFactory.for_storage()


@dataclass(frozen=True)
class PartitionRequest:
    device: str
    table: str = "msdos"
    partition_type: str = "primary"
    filesystem_hint: str = "fat32"
    start: str = "1MiB"
    end: str = "100%"

    def commands(self) -> List[List[str]]:
        """parted invocations that clear the table, create the partition and print it."""
        return [
            ["parted", "-s", self.device, "mklabel", self.table],
            [
                "parted",
                "-s",
                self.device,
                "mkpart",
                self.partition_type,
                self.filesystem_hint,
                self.start,
                self.end,
            ],
            ["parted", "-s", self.device, "unit", "MiB", "print"],
        ]


@dataclass(frozen=True)
class CommandOutcome:
    command: List[str]
    returncode: int
    output: str = ""


@dataclass
class PartitionResult:
    request: PartitionRequest
    outcomes: List[CommandOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return bool(self.outcomes) and all(
            outcome.returncode == 0 for outcome in self.outcomes
        )

    @property
    def table(self) -> str:
        """Output of the final print command, if it ran."""
        if self.outcomes and self.outcomes[-1].command[-1] == "print":
            return self.outcomes[-1].output
        return ""


def _settle(device: str) -> None:
    """Ask the kernel to re-read the partition table, best-effort."""
    for cmd in (
        ["sync"],
        ["partprobe", device],
        ["udevadm", "settle", "--timeout=10"],
    ):
        if shutil.which(cmd[0]):
            with contextlib.suppress(subprocess.CalledProcessError, OSError):
                run_command(cmd, check=False, log_output=False)


def apply_partition_request(request: PartitionRequest) -> PartitionResult:
    """Apply ``request`` to its device, tolerating partitioner failures.

    Returns:
        PartitionResult with one outcome per command that could be started
    """
    result = PartitionResult(request)
    for command in request.commands():
        try:
            completed = run_command(command, check=False)
        except OSError as error:
            log.warning(f"Partitioning step could not run ({error}), continuing")
            break
        output = (completed.stdout or "").strip()
        result.outcomes.append(CommandOutcome(command, completed.returncode, output))
        if completed.returncode != 0:
            stderr_msg = (completed.stderr or "").strip() or "no error message"
            log.warning(
                "parted exited with {} ({}), continuing",
                completed.returncode,
                stderr_msg,
            )

    if result.table:
        log.info("Partition table of {}:\n{}", request.device, result.table)
    if not result.ok:
        log.warning(
            "Partitioning of {} reported errors; relying on partition lookup",
            request.device,
        )
    _settle(request.device)
    return result
