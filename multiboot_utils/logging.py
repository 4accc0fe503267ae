from __future__ import annotations

import os
import sys
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from loguru import Logger

from loguru import logger


DEFAULT_LOG_DIR_ENV = "MULTIBOOT_UTILS_LOG_DIR"

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[source]: <24}</cyan> | "
    "{message}"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
    "{level: <8} | "
    "{extra[source]: <24} | "
    "{extra[job_id]: <20} | "
    "{message}"
)


def resolve_log_dir(log_dir: Path | str | None = None) -> Path | None:
    """Return the log directory to use, or None when file logging is off."""
    if log_dir:
        return Path(log_dir)
    env_dir = os.environ.get(DEFAULT_LOG_DIR_ENV)
    if env_dir:
        return Path(env_dir)
    return None


def setup_logging(
    *,
    debug: bool = False,
    trace: bool = False,
    log_dir: Path | str | None = None,
) -> Logger:
    """
    Setup console logging plus optional file sinks.

    Logging Tiers:
    - ERROR: Action failures reported by the dispatcher
    - WARNING: Skipped catalog records, skipped archive entries
    - INFO: Action progress
    - DEBUG: Property values, archive entry names, switch outcomes
    - TRACE: Per-chunk archive writes

    Log Files (only when a log directory is configured):
    - operations.log: INFO+ events (7 day retention)
    - debug.log: DEBUG+ events when debug is enabled (3 day retention)

    Args:
        debug: Enable DEBUG level logging
        trace: Enable TRACE level logging (very verbose)
        log_dir: Directory for log files; falls back to $MULTIBOOT_UTILS_LOG_DIR
    """
    logger.remove()
    logger.configure(extra={"job_id": "-", "tags": [], "source": "APP"})

    if trace:
        console_level = "TRACE"
    elif debug:
        console_level = "DEBUG"
    else:
        console_level = "INFO"

    logger.add(
        sys.stderr,
        level=console_level,
        backtrace=False,
        diagnose=False,
        colorize=None,
        format=CONSOLE_FORMAT,
    )

    resolved_dir = resolve_log_dir(log_dir)
    if resolved_dir is None:
        return logger

    resolved_dir.mkdir(parents=True, exist_ok=True)

    logger.add(
        resolved_dir / "operations.log",
        level="INFO",
        rotation="5 MB",
        retention="7 days",
        backtrace=False,
        diagnose=False,
        format=FILE_FORMAT,
    )

    if debug or trace:
        logger.add(
            resolved_dir / "debug.log",
            level="TRACE" if trace else "DEBUG",
            rotation="10 MB",
            retention="3 days",
            backtrace=True,
            diagnose=True,
            format=FILE_FORMAT + " | {extra[tags]}",
        )

    return logger


def get_logger(
    *,
    job_id: str | None = None,
    tags: Iterable[str] | None = None,
    source: str | None = None,
) -> Logger:
    """
    Get a logger with bound context.

    Args:
        job_id: Job identifier for tracking operations
        tags: Tags for filtering (e.g., ["device", "catalog"])
        source: Source component (e.g., module name)

    Returns:
        Logger with bound context
    """
    extras: dict[str, object] = {}
    if job_id is not None:
        extras["job_id"] = job_id
    if tags is not None:
        extras["tags"] = list(tags)
    if source is not None:
        extras["source"] = source
    return logger.bind(**extras)


@contextmanager
def operation_context(operation: str, **details):
    """
    Context manager for tracking an action with automatic timing.

    Logs operation start, completion, and failure with duration.

    Example:
        with operation_context("switch", rom_id="dual") as log:
            log.debug("Resolving device")
    """
    job_id = f"{operation}-{uuid.uuid4().hex[:8]}"

    with logger.contextualize(job_id=job_id, operation=operation, **details):
        start_time = time.time()
        log = logger.bind(source=operation, job_id=job_id, tags=[operation])

        log.info(f"{operation.capitalize()} started", **details)

        try:
            yield log
            duration = time.time() - start_time
            log.debug(
                f"{operation.capitalize()} finished",
                duration_seconds=round(duration, 2),
            )
        except Exception as e:
            duration = time.time() - start_time
            log.bind(
                error_type=type(e).__name__,
                duration_seconds=round(duration, 2),
            ).error("{} failed: {}", operation.capitalize(), e)
            raise


class LoggerFactory:
    """
    Factory for creating domain-specific loggers with automatic context.
    """

    @staticmethod
    def for_device() -> Logger:
        """Logger for device catalog loading and hardware matching."""
        return logger.bind(source="device", tags=["device", "catalog"])

    @staticmethod
    def for_switch(rom_id: str | None = None) -> Logger:
        """Logger for ROM switching."""
        return logger.bind(source="switch", tags=["switch", "boot"], rom_id=rom_id)

    @staticmethod
    def for_wipe(rom_id: str | None = None) -> Logger:
        """Logger for wipe operations."""
        return logger.bind(source="wipe", tags=["wipe"], rom_id=rom_id)

    @staticmethod
    def for_installer(job_id: str | None = None) -> Logger:
        """Logger for installer archive generation."""
        if job_id is None:
            job_id = f"generate-{uuid.uuid4().hex[:8]}"
        return logger.bind(
            job_id=job_id, source="installer", tags=["installer", "archive"]
        )

    @staticmethod
    def for_system() -> Logger:
        """Logger for startup, configuration and dispatch."""
        return logger.bind(source="system", tags=["system"])
