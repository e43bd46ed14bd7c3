"""Read-only view over the runtime collaborators."""

from __future__ import annotations

from .errors import ResolutionError
from .models import (
    SERVICE_FACTORY_PID,
    SERVICE_PID,
    Feature,
    FeatureState,
    Module,
    ServiceKind,
    ServiceRef,
)
from .protocols import FeatureService, ModuleRegistry, ServiceRegistry

ALL_SERVICES_FILTER = f"({SERVICE_PID}=*)"
ALL_SERVICE_FACTORIES_FILTER = f"({SERVICE_FACTORY_PID}=*)"


class StateQuery:
    def __init__(
        self,
        modules: ModuleRegistry,
        features: FeatureService,
        services: ServiceRegistry,
    ) -> None:
        self._modules = modules
        self._features = features
        self._services = services

    def list_modules(self) -> list[Module]:
        try:
            return list(self._modules.list_modules())
        except Exception as exc:
            raise ResolutionError("Failed to retrieve modules from system.") from exc

    def module_names(self) -> set[str]:
        return {module.name for module in self.list_modules()}

    def managed_services(self) -> list[ServiceRef]:
        try:
            return list(self._services.find(ServiceKind.MANAGED_SERVICE, ALL_SERVICES_FILTER))
        except Exception as exc:
            raise ResolutionError("Failed to retrieve managed services from system.") from exc

    def managed_service_factories(self) -> list[ServiceRef]:
        try:
            return list(
                self._services.find(
                    ServiceKind.MANAGED_SERVICE_FACTORY, ALL_SERVICE_FACTORIES_FILTER
                )
            )
        except Exception as exc:
            raise ResolutionError(
                "Failed to retrieve managed service factories from system."
            ) from exc

    def resolve_features(self, names: list[str]) -> list[Feature]:
        resolved: list[Feature] = []
        for name in names:
            try:
                matches = list(self._features.get_features(name))
            except Exception as exc:
                raise ResolutionError(f"Failed to retrieve feature [{name}]") from exc
            if not matches:
                raise ResolutionError(f"Failed to retrieve feature [{name}]")
            resolved.extend(matches)
        return resolved

    def is_installed(self, feature: Feature) -> bool:
        try:
            return bool(self._features.is_installed(feature))
        except Exception as exc:
            raise ResolutionError(
                f"Failed to read install status of feature [{feature.key}]"
            ) from exc

    def feature_state(self, feature: Feature) -> FeatureState:
        try:
            return self._features.get_state(feature.key)
        except Exception as exc:
            raise ResolutionError(f"Failed to read state of feature [{feature.key}]") from exc
