"""Scoped configuration-update listener."""

from __future__ import annotations

import threading

from .logging_utils import get_logger
from .models import ConfigurationEvent, ConfigurationEventType
from .protocols import EventBus, Registration


class ConfigurationUpdateListener:
    """Record whether an UPDATED event for one pid has been delivered.

    Events arrive on the runtime's notifier threads while the flag is read by
    the polling thread; the flag is a ``threading.Event``. Use it as a context
    manager: entering registers it on the bus and leaving unregisters it exactly
    once, whichever way the block exits.
    """

    def __init__(self, events: EventBus, pid: str) -> None:
        self._events = events
        self._pid = pid
        self._updated = threading.Event()
        self._lock = threading.Lock()
        self._registration: Registration | None = None
        self._log = get_logger(__name__)

    @property
    def pid(self) -> str:
        return self._pid

    def configuration_event(self, event: ConfigurationEvent) -> None:
        if event.pid == self._pid and event.type is ConfigurationEventType.UPDATED:
            self._log.debug("Observed configuration update for [{}]", self._pid)
            self._updated.set()

    def is_updated(self) -> bool:
        return self._updated.is_set()

    def register(self) -> None:
        with self._lock:
            if self._registration is not None:
                raise RuntimeError(f"Listener for [{self._pid}] is already registered")
            self._registration = self._events.register_listener(self.configuration_event)

    def unregister(self) -> None:
        with self._lock:
            registration, self._registration = self._registration, None
        if registration is not None:
            registration.unregister()

    def __enter__(self) -> "ConfigurationUpdateListener":
        self.register()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unregister()
