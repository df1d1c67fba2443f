"""Command line surface: ``mbusb [-h|--help] device``."""

from __future__ import annotations

import argparse
from typing import Sequence

from mbusb.exceptions import (
    DeviceValidationError,
    InvalidArgumentError,
    MissingDeviceError,
)
from mbusb.storage.devices import is_block_device

PROG_NAME = "mbusb"
HELP_FLAGS = ("-h", "--help")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG_NAME,
        description="Script to prepare multiboot USB drive",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument(
        "device",
        help="Device to modify (e.g. /dev/sdb)",
    )
    parser.add_argument(
        "-h",
        "--help",
        action="help",
        help="Display this message",
    )
    return parser


def format_usage() -> str:
    return build_parser().format_help()


def wants_help(argv: Sequence[str]) -> bool:
    return not argv or argv[0] in HELP_FLAGS


def parse_device_argument(argv: Sequence[str]) -> str:
    """Validate arguments left to right and return the device.

    Every argument must be a /dev path naming a block device; when several
    are given the last one is used.

    Raises:
        InvalidArgumentError: Argument outside /dev
        DeviceValidationError: /dev path that is not a block device
        MissingDeviceError: No device argument at all
    """
    device = None
    for argument in argv:
        if not argument.startswith("/dev/"):
            raise InvalidArgumentError(argument)
        if not is_block_device(argument):
            raise DeviceValidationError(argument)
        device = argument
    if device is None:
        raise MissingDeviceError()
    return device
