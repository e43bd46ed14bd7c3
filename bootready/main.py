"""bootready CLI entrypoint."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from pydantic import ValidationError

from .bindings import RuntimeFactoryError, load_bindings
from .config import MonitorConfig, load_config
from .errors import SystemMonitorError
from .logging_utils import configure_logging, get_logger
from .monitor import SystemMonitor
from .observability.metrics import MetricsServer

EXIT_OK = 0
EXIT_NOT_READY = 1
EXIT_CONFIG_ERROR = 2

logger = get_logger("cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Runtime readiness tools")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional path to a bootready YAML config.",
    )
    parser.add_argument("--log-level", default=None)
    parser.add_argument("--log-dir", type=Path, default=None)
    subparsers = parser.add_subparsers(dest="command", required=True)
    ready = subparsers.add_parser(
        "wait-for-ready",
        help="Wait for the system to be in a ready state for operations.",
    )
    ready.add_argument(
        "--max-wait",
        type=float,
        default=None,
        help="Seconds to wait for all modules (default: modules.max_wait_s).",
    )
    return parser.parse_args(argv)


def _wait_for_ready(config: MonitorConfig, max_wait: float | None) -> int:
    if not config.runtime.factory:
        logger.error("No runtime factory configured (runtime.factory or BOOTREADY_RUNTIME_FACTORY)")
        return EXIT_CONFIG_ERROR
    try:
        bindings = load_bindings(config.runtime.factory)
    except RuntimeFactoryError as exc:
        logger.error("Cannot build runtime bindings: {}", exc)
        return EXIT_CONFIG_ERROR
    MetricsServer(config.observability).start()
    monitor = SystemMonitor(bindings, config)
    try:
        monitor.wait_for_modules(max_wait=max_wait)
    except SystemMonitorError as exc:
        logger.error("System is not ready: {}", exc)
        return EXIT_NOT_READY
    logger.info("System is ready")
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        config = load_config(args.config)
    except (OSError, ValueError, ValidationError) as exc:
        configure_logging(args.log_dir, args.log_level or "INFO")
        logger.error("Invalid configuration: {}", exc)
        return EXIT_CONFIG_ERROR
    configure_logging(
        args.log_dir or config.logging.log_dir,
        (args.log_level or config.logging.level).upper(),
    )
    if args.command == "wait-for-ready":
        return _wait_for_ready(config, args.max_wait)
    return EXIT_CONFIG_ERROR
