"""System readiness facade."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

from .config import MonitorConfig, WaitConfig
from .errors import MutationError, SystemMonitorError, WaitInterruptedError, WaitTimeoutError
from .listener import ConfigurationUpdateListener
from .logging_utils import get_logger
from .models import Feature, FeatureState, InstallOption, ModuleState
from .observability.metrics import record_mutation
from .protocols import ConfigurationHandle, RuntimeBindings
from .readiness import (
    FeatureReadiness,
    ModuleReadiness,
    ServiceAvailability,
    features_to_install,
    features_to_uninstall,
)
from .readiness.features import features_as_string
from .readiness.modules import inactive_module_report, log_inactive_modules
from .state_query import StateQuery
from .waiting import Predicate, WaitEngine

NO_AUTO_REFRESH = {InstallOption.NO_AUTO_REFRESH}


class SystemMonitor:
    """Mutate the runtime and block until the result is observably ready.

    Every operation accepts an optional ``max_wait`` in seconds; when omitted
    the default for its concern (modules, features or services) from
    ``MonitorConfig`` applies, and a negative value counts as 0. Failures
    surface as ``SystemMonitorError`` subclasses; nothing returns a partial
    result.
    """

    def __init__(
        self,
        bindings: RuntimeBindings,
        config: MonitorConfig | None = None,
        *,
        engine: WaitEngine | None = None,
    ) -> None:
        self._bindings = bindings
        self._config = config or MonitorConfig()
        self._engine = engine or WaitEngine()
        self._query = StateQuery(bindings.modules, bindings.features, bindings.services)
        self._log = get_logger(__name__)

    @property
    def config(self) -> MonitorConfig:
        return self._config

    @property
    def query(self) -> StateQuery:
        return self._query

    # Managed configuration

    def create_managed_factory_service(
        self,
        factory_pid: str,
        properties: Mapping[str, Any],
        *,
        max_wait: float | None = None,
    ) -> ConfigurationHandle:
        """Create a factory configuration, push ``properties`` and wait for the factory.

        No update event is awaited for creation; readiness is judged by the
        factory being registered. A configuration that fails its first update
        is left in place.
        """
        self._log.debug("Creating managed service of factory pid [{}]", factory_pid)
        try:
            created = self._bindings.configuration.create_factory_configuration(factory_pid)
        except Exception as exc:
            record_mutation("create_configuration", False)
            raise MutationError(
                "Failed to initialize managed service factory configuration with pid of: "
                f"{factory_pid}"
            ) from exc
        self._log.debug(
            "Created factory configuration with pid of [{}]. Now updating configuration "
            "with properties.",
            created.pid,
        )
        try:
            created.update(dict(properties))
        except Exception as exc:
            record_mutation("create_configuration", False)
            raise MutationError(
                "Failed to update created managed service factory configuration with pid of "
                f"[{factory_pid}]"
            ) from exc
        record_mutation("create_configuration", True)
        self._log.debug("Updated factory configuration with pid of [{}].", created.pid)
        self.wait_for_service_availability(factory_pid, max_wait=max_wait)
        return created

    def update_managed_service(
        self,
        service_pid: str,
        properties: Mapping[str, Any],
        *,
        max_wait: float | None = None,
    ) -> None:
        """Wait for ``service_pid``, update it and wait until the update is delivered."""
        budget = self._budget(max_wait, self._config.services)
        self.wait_for_service_availability(service_pid, max_wait=budget)

        with ConfigurationUpdateListener(self._bindings.events, service_pid) as listener:
            self._log.debug("Updating configuration of service with pid [{}].", service_pid)
            try:
                self._bindings.configuration.get_configuration(service_pid).update(
                    dict(properties)
                )
            except Exception as exc:
                record_mutation("update_configuration", False)
                raise MutationError(
                    f"Failed to update managed service configuration with pid of [{service_pid}]"
                ) from exc
            record_mutation("update_configuration", True)
            self._log.debug("Updated configuration of service with pid [{}].", service_pid)
            updated = self._await(
                listener.is_updated,
                budget,
                self._config.services.poll_interval_s,
                target="service_update",
                interrupted=(
                    f"Interrupted while waiting for service with pid of [{service_pid}] "
                    "to be updated."
                ),
            )

        if not updated:
            raise WaitTimeoutError(
                f"Managed service [{service_pid}] failed to update within {budget} s."
            )

    def wait_for_service_availability(
        self, service_pid: str, *, max_wait: float | None = None
    ) -> None:
        budget = self._budget(max_wait, self._config.services)
        availability = ServiceAvailability(
            self._query,
            service_pid,
            requery_each_poll=self._config.services.requery_each_poll,
        )
        self._log.info("Waiting for service with pid [{}] to be registered", service_pid)
        available = self._await(
            availability,
            budget,
            self._config.services.poll_interval_s,
            target="service",
            interrupted=(
                f"Interrupted while waiting for service with pid of [{service_pid}] "
                "to become available."
            ),
        )
        if not available:
            raise WaitTimeoutError(
                f"Managed service [{service_pid}] failed to appear after {budget} s."
            )

    # Features

    def install_features(
        self, feature: str, *additional_features: str, max_wait: float | None = None
    ) -> None:
        """Install the named features and wait until they are started and modules active.

        ``max_wait`` bounds the feature-state wait only. The follow-up wait over
        every known module always uses the configured ``modules.max_wait_s``.
        """
        features = self._query.resolve_features([feature, *additional_features])
        to_install = features_to_install(self._query, features)
        if to_install:
            self._log.info(
                "Installing the following features: [{}]", ", ".join(sorted(to_install))
            )
            self._mutate_features(
                "install_features",
                self._bindings.features.install_features,
                to_install,
                "Failed to install features",
            )
            self._log.debug("Finished installing features.")
        else:
            self._log.debug("Requested features are already installed.")
        self._wait_for_features(features, FeatureState.STARTED, max_wait)

    def uninstall_features(
        self, feature: str, *additional_features: str, max_wait: float | None = None
    ) -> None:
        """Uninstall the named features and wait until they are gone and modules settle.

        As with ``install_features``, the trailing module wait uses
        ``modules.max_wait_s`` whatever ``max_wait`` is.
        """
        features = self._query.resolve_features([feature, *additional_features])
        to_uninstall = features_to_uninstall(self._query, features)
        if to_uninstall:
            self._log.info(
                "Uninstalling the following features: [{}]", ", ".join(sorted(to_uninstall))
            )
            self._mutate_features(
                "uninstall_features",
                self._bindings.features.uninstall_features,
                to_uninstall,
                "Failed to uninstall features",
            )
        else:
            self._log.debug("Requested features are not installed.")
        self._wait_for_features(features, FeatureState.UNINSTALLED, max_wait)

    def wait_for_features(
        self,
        expected_state: FeatureState,
        feature: str,
        *additional_features: str,
        max_wait: float | None = None,
    ) -> None:
        """Wait for the named features to reach ``expected_state``, then for all modules.

        The module wait uses ``modules.max_wait_s``, not ``max_wait``.
        """
        features = self._query.resolve_features([feature, *additional_features])
        self._wait_for_features(features, expected_state, max_wait)

    # Modules

    def start_modules(
        self, name: str, *additional_names: str, max_wait: float | None = None
    ) -> None:
        """Start the named modules and wait until they are active."""
        names = {name, *additional_names}
        self._mutate_modules(names, "start", self._bindings.modules.start)
        self._wait_for_modules(names, max_wait, ModuleState.ACTIVE)

    def stop_modules(
        self, name: str, *additional_names: str, max_wait: float | None = None
    ) -> None:
        """Stop the named modules and wait until they are back at RESOLVED."""
        names = {name, *additional_names}
        self._mutate_modules(names, "stop", self._bindings.modules.stop)
        self._wait_for_modules(names, max_wait, ModuleState.RESOLVED)

    def wait_for_modules(self, *names: str, max_wait: float | None = None) -> None:
        """Wait for the named modules, or every known module when none are named."""
        self._wait_for_modules(names, max_wait, ModuleState.ACTIVE)

    def _wait_for_modules(
        self, names: Iterable[str], max_wait: float | None, expected: ModuleState
    ) -> None:
        budget = self._budget(max_wait, self._config.modules)
        readiness = ModuleReadiness(self._query, names, expected=expected)
        self._log.debug("Waiting for {} modules to become available.", len(readiness.names))
        ready = self._await(
            readiness,
            budget,
            self._config.modules.poll_interval_s,
            target="modules",
            interrupted=f"Interrupted while waiting for modules to reach {expected.value} state.",
        )
        if not ready:
            report = self._inactive_report()
            log_inactive_modules(report)
            raise WaitTimeoutError(
                f"Modules failed to reach {expected.value} within: {budget} s.", report
            )

    def _mutate_modules(
        self, names: set[str], operation: str, action: Callable[[str], None]
    ) -> None:
        known = self._query.module_names()
        missing = names - known
        if missing:
            self._log.warning(
                "Cannot {} unknown modules [{}]", operation, ", ".join(sorted(missing))
            )
        for module_name in sorted(names & known):
            self._log.debug("Requesting {} of module [{}]", operation, module_name)
            try:
                action(module_name)
            except Exception as exc:
                record_mutation(f"{operation}_module", False)
                raise MutationError(f"Failed to {operation} module [{module_name}]") from exc
            record_mutation(f"{operation}_module", True)

    def _mutate_features(
        self,
        operation: str,
        action: Callable[[set[str], set[InstallOption]], None],
        names: set[str],
        failure: str,
    ) -> None:
        try:
            action(set(names), set(NO_AUTO_REFRESH))
        except Exception as exc:
            record_mutation(operation, False)
            raise MutationError(f"{failure} [{','.join(sorted(names))}]") from exc
        record_mutation(operation, True)

    def _wait_for_features(
        self, features: list[Feature], expected: FeatureState, max_wait: float | None
    ) -> None:
        budget = self._budget(max_wait, self._config.features)
        readiness = FeatureReadiness(self._query, features, expected)
        done = self._await(
            readiness,
            budget,
            self._config.features.poll_interval_s,
            target="features",
            interrupted=(
                f"Interrupted while waiting for features [{features_as_string(features)}] "
                "to become available."
            ),
        )
        if not done:
            raise WaitTimeoutError(
                f"Features [{features_as_string(readiness.pending)}] failed to reach state "
                f"[{expected.value}] within {budget} s."
            )
        self.wait_for_modules()

    def _await(
        self,
        predicate: Predicate,
        max_wait: float,
        poll_interval: float,
        *,
        target: str,
        interrupted: str,
    ) -> bool:
        try:
            return self._engine.wait(predicate, max_wait, poll_interval, target=target)
        except SystemMonitorError:
            raise
        except Exception as exc:
            raise WaitInterruptedError(interrupted) from exc

    def _inactive_report(self) -> list[str]:
        try:
            return inactive_module_report(self._query.list_modules())
        except SystemMonitorError as exc:
            self._log.warning("Cannot list inactive modules: {}", exc)
            return [f"<module listing unavailable: {exc}>"]

    def _budget(self, max_wait: float | None, section: WaitConfig) -> float:
        if max_wait is None:
            return section.max_wait_s
        if max_wait < 0:
            self._log.warning("Negative max_wait {} treated as 0", max_wait)
            return 0.0
        return float(max_wait)
