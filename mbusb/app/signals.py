"""Turn termination signals into an exception so cleanup code runs."""

from __future__ import annotations

import signal
from contextlib import contextmanager
from typing import Iterator, Sequence

from mbusb.exceptions import TerminatedError

TERMINATION_SIGNALS = (signal.SIGHUP, signal.SIGINT, signal.SIGTERM)


def _raise_terminated(signum, frame) -> None:
    raise TerminatedError(signum)


@contextmanager
def handle_termination_signals(
    signals: Sequence[signal.Signals] = TERMINATION_SIGNALS,
) -> Iterator[None]:
    """Raise ``TerminatedError`` on SIGHUP/SIGINT/SIGTERM inside the block.

    Previous handlers are restored on exit.
    """
    previous = {}
    for signum in signals:
        previous[signum] = signal.signal(signum, _raise_terminated)
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


@contextmanager
def deferred_termination_signals(
    signals: Sequence[signal.Signals] = TERMINATION_SIGNALS,
) -> Iterator[None]:
    """Hold termination signals pending until the block has finished.

    A signal that arrives inside the block is delivered once the previous
    mask is restored, so its handler runs after the block, not halfway
    through it.
    """
    previous_mask = signal.pthread_sigmask(signal.SIG_BLOCK, signals)
    try:
        yield
    finally:
        signal.pthread_sigmask(signal.SIG_SETMASK, previous_mask)
