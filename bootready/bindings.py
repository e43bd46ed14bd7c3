"""Resolve the runtime collaborators from a configured factory entrypoint."""

from __future__ import annotations

import importlib
from typing import Any

from .protocols import RuntimeBindings


class RuntimeFactoryError(RuntimeError):
    """The configured runtime factory could not produce bindings."""


def load_entrypoint(entrypoint: str) -> Any:
    if not entrypoint:
        raise RuntimeFactoryError("Missing runtime factory entrypoint")
    module_name, _, attr = entrypoint.partition(":")
    if not module_name or not attr:
        raise RuntimeFactoryError(f"Invalid entrypoint '{entrypoint}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise RuntimeFactoryError(f"Cannot import runtime factory module '{module_name}'") from exc
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise RuntimeFactoryError(f"'{module_name}' has no attribute '{attr}'") from exc


def load_bindings(entrypoint: str) -> RuntimeBindings:
    factory = load_entrypoint(entrypoint)
    if not callable(factory):
        raise RuntimeFactoryError(f"Runtime factory '{entrypoint}' is not callable")
    try:
        bindings = factory()
    except Exception as exc:
        raise RuntimeFactoryError(f"Runtime factory '{entrypoint}' failed: {exc}") from exc
    if not isinstance(bindings, RuntimeBindings):
        raise RuntimeFactoryError(
            f"Runtime factory '{entrypoint}' returned {type(bindings).__name__}, "
            "expected RuntimeBindings"
        )
    return bindings
