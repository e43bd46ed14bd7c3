"""Readiness monitor error types."""

from __future__ import annotations

from typing import Sequence


class SystemMonitorError(RuntimeError):
    """Base error for every readiness and mutation failure."""


class ResolutionError(SystemMonitorError):
    """A feature, registry query or identifier could not be resolved."""


class MutationError(SystemMonitorError):
    """The runtime rejected an install/uninstall/start/stop/create/update call."""


class TerminalStateError(SystemMonitorError):
    """A module entered an unrecoverable state while being awaited."""

    def __init__(self, message: str, diagnostics: Sequence[str] | None = None) -> None:
        super().__init__(message)
        self.diagnostics = list(diagnostics or ())


class WaitTimeoutError(SystemMonitorError):
    """The awaited condition did not hold within the allotted time."""

    def __init__(self, message: str, diagnostics: Sequence[str] | None = None) -> None:
        super().__init__(message)
        self.diagnostics = list(diagnostics or ())


class WaitInterruptedError(SystemMonitorError):
    """The waiting thread was interrupted before the condition was decided."""
