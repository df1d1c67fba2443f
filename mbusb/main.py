"""Entry point: prepare a multiboot USB drive.

Exit codes:
    0    success, or usage requested
    1    bad arguments, not a block device, missing local inputs
    2    could not gain root privileges
    3    confirmation declined, or no GRUB installer found (no output)
    10   any failure from partitioning onward
    128+N  terminated by signal N
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

from mbusb.app import cli
from mbusb.app.confirm import confirm_device_wipe
from mbusb.app.context import RunContext
from mbusb.app.privileges import ensure_root, resolve_invoking_user
from mbusb.app.signals import handle_termination_signals
from mbusb.boot.grub import resolve_grub_installer
from mbusb.boot.staging import check_local_inputs
from mbusb.config import settings
from mbusb.exceptions import (
    AbortError,
    MbusbError,
    PrivilegeError,
    ProvisionError,
    TerminatedError,
    UsageError,
)
from mbusb.logging import LoggerFactory, setup_logging
from mbusb.services.provisioning import provision_device
from mbusb.storage.devices import unmount_device_partitions

log = LoggerFactory.for_system()


def run(
    device: str,
    *,
    source_dir: Optional[Path] = None,
    input_func: Callable[[str], str] = input,
) -> None:
    """Run the pipeline for ``device`` after argument validation.

    Raises:
        MbusbError: Subclass matching the first failure
    """
    installer = resolve_grub_installer()
    context = RunContext(
        device=device,
        installer=installer,
        source_dir=source_dir or Path.cwd(),
        invoking_user=resolve_invoking_user(),
        boot_subdir=settings.get_setting("boot_subdir", settings.DEFAULT_BOOT_SUBDIR),
    )
    check_local_inputs(context.source_dir)

    with handle_termination_signals():
        unmount_device_partitions(device)
        confirm_device_wipe(device, input_func=input_func)
        provision_device(context)


def main(argv: Optional[Sequence[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    if cli.wants_help(argv):
        print(cli.format_usage(), end="")
        return 0

    try:
        ensure_root(argv, prog=cli.PROG_NAME)
        device = cli.parse_device_argument(argv)
    except (PrivilegeError, UsageError) as error:
        print(f"{cli.PROG_NAME}: {error}", file=sys.stderr)
        if getattr(error, "show_usage", False):
            print(cli.format_usage(), end="")
        return error.exit_code

    setup_logging(debug=settings.debug_enabled())

    try:
        run(device)
    except AbortError as error:
        log.debug(str(error))
        return error.exit_code
    except UsageError as error:
        print(f"{cli.PROG_NAME}: {error}", file=sys.stderr)
        return error.exit_code
    except ProvisionError as error:
        # Already reported by the provisioning operation
        return error.exit_code
    except TerminatedError as error:
        log.warning(str(error))
        return error.exit_code
    except MbusbError as error:
        log.error(str(error))
        return error.exit_code
    except Exception as error:
        log.opt(exception=error).error(f"Unexpected error: {error}")
        return ProvisionError.exit_code

    log.success(f"Multiboot USB drive created on {device}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
