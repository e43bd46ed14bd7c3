"""Runtime entity models observed by the readiness monitor."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

FRAGMENT_HOST_HEADER = "Fragment-Host"
MODULE_NAME_HEADER = "Bundle-Name"

SERVICE_PID = "service.pid"
SERVICE_FACTORY_PID = "service.factoryPid"


class ModuleState(str, Enum):
    UNINSTALLED = "UNINSTALLED"
    INSTALLED = "INSTALLED"
    RESOLVED = "RESOLVED"
    STARTING = "STARTING"
    STOPPING = "STOPPING"
    ACTIVE = "ACTIVE"
    FAILURE = "FAILURE"


class FeatureState(str, Enum):
    INSTALLED = "Installed"
    RESOLVED = "Resolved"
    STARTED = "Started"
    UNINSTALLED = "Uninstalled"
    UNKNOWN = "Unknown"


class ConfigurationEventType(str, Enum):
    UPDATED = "UPDATED"
    DELETED = "DELETED"
    LOCATION_CHANGED = "LOCATION_CHANGED"


class ServiceKind(str, Enum):
    MANAGED_SERVICE = "managed_service"
    MANAGED_SERVICE_FACTORY = "managed_service_factory"


class InstallOption(str, Enum):
    NO_AUTO_REFRESH = "NoAutoRefreshBundles"


class ReadinessOutcome(str, Enum):
    READY = "ready"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


@dataclass(frozen=True)
class Module:
    name: str
    state: ModuleState
    version: str = "0.0.0"
    is_fragment: bool = False
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.headers.get(MODULE_NAME_HEADER) or self.name

    @property
    def attaches_to_host(self) -> bool:
        return self.is_fragment or self.headers.get(FRAGMENT_HOST_HEADER) is not None


@dataclass(frozen=True)
class Feature:
    name: str
    version: str

    @property
    def key(self) -> str:
        return f"{self.name}/{self.version}"


@dataclass(frozen=True)
class ServiceRef:
    kind: ServiceKind
    properties: Mapping[str, Any] = field(default_factory=dict)

    def get_property(self, key: str) -> Any:
        return self.properties.get(key)


@dataclass(frozen=True)
class ConfigurationEvent:
    pid: str
    type: ConfigurationEventType
    factory_pid: str | None = None


@dataclass(frozen=True)
class WaitResult:
    outcome: ReadinessOutcome
    elapsed_s: float
    attempts: int
    cause: BaseException | None = None

    @property
    def ready(self) -> bool:
        return self.outcome is ReadinessOutcome.READY
