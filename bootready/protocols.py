"""Protocols for the runtime collaborators the monitor drives."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Protocol

from .models import (
    ConfigurationEvent,
    Feature,
    FeatureState,
    InstallOption,
    Module,
    ServiceKind,
    ServiceRef,
)

ConfigurationHandler = Callable[[ConfigurationEvent], None]


class ModuleRegistry(Protocol):
    def list_modules(self) -> list[Module]: ...

    def start(self, name: str) -> None: ...

    def stop(self, name: str) -> None: ...


class FeatureService(Protocol):
    def get_features(self, name: str) -> list[Feature]: ...

    def is_installed(self, feature: Feature) -> bool: ...

    def install_features(self, names: set[str], options: set[InstallOption]) -> None: ...

    def uninstall_features(self, names: set[str], options: set[InstallOption]) -> None: ...

    def get_state(self, key: str) -> FeatureState: ...


class ConfigurationHandle(Protocol):
    @property
    def pid(self) -> str: ...

    def update(self, properties: Mapping[str, Any]) -> None: ...


class ConfigurationStore(Protocol):
    def create_factory_configuration(self, factory_pid: str) -> ConfigurationHandle: ...

    def get_configuration(self, pid: str) -> ConfigurationHandle: ...


class Registration(Protocol):
    def unregister(self) -> None: ...


class EventBus(Protocol):
    def register_listener(self, handler: ConfigurationHandler) -> Registration: ...


class ServiceRegistry(Protocol):
    def find(self, kind: ServiceKind, filter_expr: str) -> Iterable[ServiceRef]: ...


@dataclass(frozen=True)
class RuntimeBindings:
    modules: ModuleRegistry
    features: FeatureService
    configuration: ConfigurationStore
    events: EventBus
    services: ServiceRegistry
