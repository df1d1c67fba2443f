from __future__ import annotations

import os
import sys
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loguru import Logger

from loguru import logger

DEFAULT_LOG_DIR = Path(
    os.environ.get(
        "MBUSB_LOG_DIR",
        Path.home() / ".local" / "state" / "mbusb" / "logs",
    )
)


def setup_logging(
    *,
    debug: bool = False,
    log_dir: Path | None = None,
) -> Logger:
    """
    Setup console and file logging for a run.

    Logging Tiers:
    - ERROR: Failed stage, the run is aborted
    - SUCCESS/INFO: Stages and every external command as it is started
    - DEBUG: Command output, best-effort cleanup failures

    Log Files:
    - operations.log: INFO+ events (7 day retention)
    - debug.log: DEBUG+ events when debugging is enabled (3 day retention)

    Args:
        debug: Enable DEBUG level logging
        log_dir: Custom log directory (defaults to ~/.local/state/mbusb/logs)
    """
    logger.remove()
    logger.configure(extra={"job_id": "-", "tags": [], "source": "mbusb"})

    console_level = "DEBUG" if debug else "INFO"

    # Console (stderr) keeps prompts on stdout readable
    logger.add(
        sys.stderr,
        level=console_level,
        backtrace=False,
        diagnose=False,
        colorize=True,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[source]: <8}</cyan> | "
            "{message}"
        ),
    )

    log_dir = log_dir or DEFAULT_LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_dir / "operations.log",
        level="INFO",
        rotation="5 MB",
        retention="7 days",
        compression="zip",
        backtrace=False,
        diagnose=False,
        format=(
            "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
            "{level: <8} | "
            "{extra[source]: <8} | "
            "{extra[job_id]: <18} | "
            "{message}"
        ),
    )

    if debug:
        logger.add(
            log_dir / "debug.log",
            level="DEBUG",
            rotation="10 MB",
            retention="3 days",
            compression="zip",
            backtrace=True,
            diagnose=True,
            format=(
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
                "{level: <8} | "
                "{extra[source]: <8} | "
                "{extra[job_id]: <18} | "
                "{extra[tags]} | "
                "{message}"
            ),
        )

    return logger


@contextmanager
def operation_context(operation: str, **details):
    """
    Context manager for tracking a long-running operation with timing.

    Logs the operation start, completion and failure with its duration.

    Args:
        operation: Operation name (e.g., "provision")
        **details: Operation-specific details to log

    Yields:
        Logger bound with job_id and operation context

    Example:
        with operation_context("provision", device="/dev/sdb") as log:
            log.info("Partitioning")
    """
    job_id = f"{operation}-{uuid.uuid4().hex[:8]}"

    with logger.contextualize(job_id=job_id, operation=operation, **details):
        start_time = time.time()
        log = logger.bind(source=operation, job_id=job_id, tags=[operation])

        log.info(f"{operation.capitalize()} started", **details)

        try:
            yield log
            duration = time.time() - start_time
            log.success(
                f"{operation.capitalize()} completed",
                duration_seconds=round(duration, 2),
            )
        except Exception as e:
            duration = time.time() - start_time
            log.error(
                f"{operation.capitalize()} failed: {{error}}",
                error=str(e),
                error_type=type(e).__name__,
                duration_seconds=round(duration, 2),
            )
            raise


class LoggerFactory:
    """
    Factory for creating domain-specific loggers.

    Each factory method returns a logger pre-configured with the source and
    tags of its domain.
    """

    @staticmethod
    def for_system() -> Logger:
        """Logger for startup, privileges and prompts."""
        return logger.bind(source="system", tags=["system"])

    @staticmethod
    def for_storage() -> Logger:
        """Logger for partitioning, formatting and mounting."""
        return logger.bind(source="storage", tags=["storage"])

    @staticmethod
    def for_boot() -> Logger:
        """Logger for GRUB installation and file staging."""
        return logger.bind(source="boot", tags=["boot"])

    @staticmethod
    def for_fetch() -> Logger:
        """Logger for downloading the boot helper archive."""
        return logger.bind(source="fetch", tags=["fetch", "network"])
