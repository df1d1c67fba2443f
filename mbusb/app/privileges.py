"""Root privilege checks and the invoking user behind sudo."""

from __future__ import annotations

import os
import sys
from typing import Mapping, Optional, Sequence

from mbusb.exceptions import PrivilegeError
from mbusb.storage.devices import run_command


def is_root() -> bool:
    return os.geteuid() == 0


def import_path() -> str:
    """This interpreter's module search path, as a PYTHONPATH value."""
    return os.pathsep.join(entry for entry in sys.path if entry)


def elevation_command(argv: Sequence[str]) -> list[str]:
    # sudo resets HOME and PYTHONPATH, which hides a per-user install from root
    return [
        "sudo",
        "-k",
        "--",
        "env",
        f"PYTHONPATH={import_path()}",
        sys.executable,
        "-m",
        "mbusb",
        *argv,
    ]


def ensure_root(argv: Sequence[str], prog: str = "mbusb") -> None:
    """Return when already root, otherwise replace this process with sudo.

    Raises:
        PrivilegeError: If sudo cannot be executed
    """
    if is_root():
        return
    print(f"{prog}: This program must be run as root. Using sudo...", file=sys.stderr)
    command = elevation_command(argv)
    try:
        os.execvp(command[0], command)
    except OSError as error:
        raise PrivilegeError(str(error)) from error


def resolve_invoking_user(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Name of the user that ran sudo, falling back to ``who -m``."""
    environ = os.environ if environ is None else environ
    if "SUDO_USER" in environ:
        return environ["SUDO_USER"] or None
    try:
        result = run_command(["who", "-m"], check=False, log_command=False)
    except OSError:
        return None
    fields = (result.stdout or "").split()
    return fields[0] if fields else None
