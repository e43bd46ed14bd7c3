"""Readiness monitor for modular, plugin-based runtimes."""

from __future__ import annotations

from .config import MonitorConfig, load_config
from .errors import (
    MutationError,
    ResolutionError,
    SystemMonitorError,
    TerminalStateError,
    WaitInterruptedError,
    WaitTimeoutError,
)
from .logging_utils import configure_logging
from .monitor import SystemMonitor
from .protocols import RuntimeBindings
from .waiting import WaitEngine

__all__ = [
    "MonitorConfig",
    "MutationError",
    "ResolutionError",
    "RuntimeBindings",
    "SystemMonitor",
    "SystemMonitorError",
    "TerminalStateError",
    "WaitEngine",
    "WaitInterruptedError",
    "WaitTimeoutError",
    "configure_logging",
    "load_config",
]
