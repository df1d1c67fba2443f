"""Two-step confirmation before the device is wiped.

Stages run strictly in order, FIRST then SECOND; a non-affirmative answer at
either one stops the run. There is no re-prompting.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable

from mbusb.exceptions import ConfirmationDeclinedError
from mbusb.logging import LoggerFactory

log = LoggerFactory.for_system()

AFFIRMATIVE_ANSWERS = frozenset({"y", "yes"})


class ConfirmationStage(Enum):
    FIRST = "Are you sure you want to use {device}? [y/N] "
    SECOND = "THIS WILL DELETE ALL DATA ON THE DEVICE. Are you sure? [y/N] "

    def prompt(self, device: str) -> str:
        return self.value.format(device=device)


def is_affirmative(answer: str) -> bool:
    return answer.strip().lower() in AFFIRMATIVE_ANSWERS


def confirm_device_wipe(
    device: str, input_func: Callable[[str], str] = input
) -> None:
    """Ask both questions for ``device``.

    Raises:
        ConfirmationDeclinedError: On the first non-affirmative answer
    """
    for stage in ConfirmationStage:
        try:
            answer = input_func(stage.prompt(device))
        except EOFError:
            answer = ""
        if not is_affirmative(answer):
            log.debug(f"Confirmation declined at {stage.name.lower()} prompt")
            raise ConfirmationDeclinedError(device, stage.name.lower())
