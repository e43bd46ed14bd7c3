"""Loguru setup for the readiness monitor and the wait-for-ready CLI."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

PACKAGE = "bootready"
LOG_FILE_NAME = "bootready.jsonl"

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <7}</level> | "
    "<cyan>{extra[component]}</cyan> - "
    "<level>{message}</level>"
)
_CONSOLE_DEBUG_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <7}</level> | "
    "thread={thread.name} | "
    "<cyan>{extra[component]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
_VERBOSE_LEVELS = {"TRACE", "DEBUG"}


def component_name(name: str | None) -> str:
    """Map a module ``__name__`` or short name onto the ``bootready.*`` namespace."""

    if not name:
        return PACKAGE
    if name == PACKAGE or name.startswith(f"{PACKAGE}."):
        return name
    return f"{PACKAGE}.{name}"


def configure_logging(log_dir: Path | str | None = None, level: str = "INFO") -> None:
    """Send readable lines to stderr and, with ``log_dir``, JSON records to a file.

    Waits poll on the caller's thread while configuration events arrive on
    notifier threads, so verbose levels add the thread name and call site.
    """

    level = level.upper()
    logger.remove()
    logger.configure(extra={"component": PACKAGE})
    logger.add(
        sys.stderr,
        format=_CONSOLE_DEBUG_FORMAT if level in _VERBOSE_LEVELS else _CONSOLE_FORMAT,
        colorize=sys.stderr.isatty(),
        level=level,
        backtrace=False,
        diagnose=False,
    )
    if log_dir is not None:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        logger.add(
            path / LOG_FILE_NAME,
            serialize=True,
            rotation="10 MB",
            retention=5,
            level=level,
            backtrace=False,
            diagnose=False,
        )


def get_logger(name: str | None = None):
    """Return a logger bound to a ``bootready.*`` component."""

    return logger.bind(component=component_name(name))
