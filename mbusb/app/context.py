from __future__ import annotations

from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from mbusb.boot.grub import GrubInstaller
from mbusb.config.settings import DEFAULT_BOOT_SUBDIR


@dataclass
class RunContext:
    device: str
    installer: GrubInstaller
    source_dir: Path
    invoking_user: Optional[str] = None
    partition: Optional[str] = None
    mount_dir: Optional[Path] = None
    boot_subdir: str = DEFAULT_BOOT_SUBDIR
    cleanup: ExitStack = field(default_factory=ExitStack)

    @property
    def boot_dir(self) -> Path:
        if self.mount_dir is None:
            raise RuntimeError("Partition is not mounted yet")
        return self.mount_dir / self.boot_subdir
