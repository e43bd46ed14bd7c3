"""In-memory stand-ins for the runtime collaborators."""

from __future__ import annotations

import dataclasses
import itertools
import threading
from typing import Any, Callable, Iterable, Mapping

from bootready.models import (
    ConfigurationEvent,
    ConfigurationEventType,
    Feature,
    FeatureState,
    InstallOption,
    Module,
    ModuleState,
    ServiceKind,
    ServiceRef,
)
from bootready.protocols import RuntimeBindings


class FakeClock:
    """Monotonic clock whose sleep advances time instead of blocking."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []
        self.on_sleep: Callable[[float], None] | None = None

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        if self.on_sleep is not None:
            self.on_sleep(self.now)


class FakeModuleRegistry:
    def __init__(self, modules: Iterable[Module] = ()) -> None:
        self._modules: dict[str, Module] = {module.name: module for module in modules}
        self.started: list[str] = []
        self.stopped: list[str] = []
        self.reject: set[str] = set()
        self.start_state = ModuleState.ACTIVE
        self.list_calls = 0
        self.list_error: Exception | None = None

    def list_modules(self) -> list[Module]:
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return list(self._modules.values())

    def add(self, module: Module) -> None:
        self._modules[module.name] = module

    def set_state(self, name: str, state: ModuleState) -> None:
        self._modules[name] = dataclasses.replace(self._modules[name], state=state)

    def state_of(self, name: str) -> ModuleState:
        return self._modules[name].state

    def start(self, name: str) -> None:
        if name in self.reject:
            raise RuntimeError(f"start rejected for {name}")
        self.started.append(name)
        self.set_state(name, self.start_state)

    def stop(self, name: str) -> None:
        if name in self.reject:
            raise RuntimeError(f"stop rejected for {name}")
        self.stopped.append(name)
        self.set_state(name, ModuleState.RESOLVED)


class FakeFeatureService:
    def __init__(
        self,
        catalog: Mapping[str, list[Feature]] | None = None,
        *,
        installed: Iterable[str] = (),
        states: Mapping[str, FeatureState] | None = None,
    ) -> None:
        self.catalog = dict(catalog or {})
        self.installed = set(installed)
        self.states: dict[str, FeatureState] = dict(states or {})
        self.install_calls: list[tuple[set[str], set[InstallOption]]] = []
        self.uninstall_calls: list[tuple[set[str], set[InstallOption]]] = []
        self.fail_install = False
        self.settle_on_install = True
        self.read_error: Exception | None = None

    def get_features(self, name: str) -> list[Feature]:
        if name not in self.catalog:
            raise KeyError(name)
        return list(self.catalog[name])

    def is_installed(self, feature: Feature) -> bool:
        if self.read_error is not None:
            raise self.read_error
        return feature.name in self.installed

    def install_features(self, names: set[str], options: set[InstallOption]) -> None:
        self.install_calls.append((set(names), set(options)))
        if self.fail_install:
            raise RuntimeError("install rejected")
        for name in names:
            self.installed.add(name)
            if self.settle_on_install:
                for feature in self.catalog[name]:
                    self.states[feature.key] = FeatureState.STARTED

    def uninstall_features(self, names: set[str], options: set[InstallOption]) -> None:
        self.uninstall_calls.append((set(names), set(options)))
        for name in names:
            self.installed.discard(name)
            for feature in self.catalog[name]:
                self.states[feature.key] = FeatureState.UNINSTALLED

    def get_state(self, key: str) -> FeatureState:
        if self.read_error is not None:
            raise self.read_error
        return self.states.get(key, FeatureState.UNINSTALLED)


class FakeRegistration:
    def __init__(self, bus: "FakeEventBus", handler: Callable[[ConfigurationEvent], None]) -> None:
        self._bus = bus
        self.handler = handler
        self.unregister_calls = 0

    def unregister(self) -> None:
        self.unregister_calls += 1
        self._bus.remove(self.handler)


class FakeEventBus:
    def __init__(self) -> None:
        self._handlers: list[Callable[[ConfigurationEvent], None]] = []
        self._lock = threading.Lock()
        self.registrations: list[FakeRegistration] = []

    def register_listener(self, handler: Callable[[ConfigurationEvent], None]) -> FakeRegistration:
        with self._lock:
            self._handlers.append(handler)
            registration = FakeRegistration(self, handler)
            self.registrations.append(registration)
        return registration

    def remove(self, handler: Callable[[ConfigurationEvent], None]) -> None:
        with self._lock:
            self._handlers = [h for h in self._handlers if h is not handler]

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._handlers)

    def publish(self, event: ConfigurationEvent) -> None:
        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            handler(event)

    def publish_async(self, event: ConfigurationEvent, delay_s: float = 0.0) -> threading.Thread:
        def _deliver() -> None:
            if delay_s:
                threading.Event().wait(delay_s)
            self.publish(event)

        thread = threading.Thread(target=_deliver, name="config-notifier", daemon=True)
        thread.start()
        return thread


class FakeConfiguration:
    def __init__(self, store: "FakeConfigurationStore", pid: str, factory_pid: str | None = None) -> None:
        self._store = store
        self._pid = pid
        self.factory_pid = factory_pid
        self.updates: list[dict[str, Any]] = []

    @property
    def pid(self) -> str:
        return self._pid

    def update(self, properties: Mapping[str, Any]) -> None:
        if self._store.fail_update:
            raise OSError("configuration store unavailable")
        self.updates.append(dict(properties))
        self._store.after_update(self)


class FakeConfigurationStore:
    def __init__(self, events: FakeEventBus) -> None:
        self._events = events
        self._counter = itertools.count()
        self.configurations: dict[str, FakeConfiguration] = {}
        self.fail_create = False
        self.fail_update = False
        self.notify = "sync"
        self.notify_delay_s = 0.0

    def create_factory_configuration(self, factory_pid: str) -> FakeConfiguration:
        if self.fail_create:
            raise OSError("cannot create configuration")
        pid = f"{factory_pid}.{next(self._counter)}"
        config = FakeConfiguration(self, pid, factory_pid)
        self.configurations[pid] = config
        return config

    def get_configuration(self, pid: str) -> FakeConfiguration:
        return self.configurations.setdefault(pid, FakeConfiguration(self, pid))

    def after_update(self, config: FakeConfiguration) -> None:
        event = ConfigurationEvent(config.pid, ConfigurationEventType.UPDATED, config.factory_pid)
        if self.notify == "sync":
            self._events.publish(event)
        elif self.notify == "async":
            self._events.publish_async(event, self.notify_delay_s)


class FakeServiceRegistry:
    def __init__(self, refs: Iterable[ServiceRef] = ()) -> None:
        self.refs = list(refs)
        self.find_calls: list[tuple[ServiceKind, str]] = []
        self.fail = False

    def register_service(self, pid: str) -> None:
        self.refs.append(ServiceRef(ServiceKind.MANAGED_SERVICE, {"service.pid": pid}))

    def register_factory(self, factory_pid: str) -> None:
        self.refs.append(
            ServiceRef(ServiceKind.MANAGED_SERVICE_FACTORY, {"service.factoryPid": factory_pid})
        )

    def find(self, kind: ServiceKind, filter_expr: str) -> list[ServiceRef]:
        self.find_calls.append((kind, filter_expr))
        if self.fail:
            raise ValueError(f"invalid filter {filter_expr}")
        key = filter_expr.strip("()").split("=", 1)[0]
        return [ref for ref in self.refs if ref.kind is kind and key in ref.properties]


class FakeRuntime:
    def __init__(self) -> None:
        self.modules = FakeModuleRegistry()
        self.features = FakeFeatureService()
        self.events = FakeEventBus()
        self.configuration = FakeConfigurationStore(self.events)
        self.services = FakeServiceRegistry()

    @property
    def bindings(self) -> RuntimeBindings:
        return RuntimeBindings(
            modules=self.modules,
            features=self.features,
            configuration=self.configuration,
            events=self.events,
            services=self.services,
        )


def module(
    name: str,
    state: ModuleState = ModuleState.ACTIVE,
    *,
    fragment: bool = False,
    headers: Mapping[str, str] | None = None,
) -> Module:
    return Module(
        name=name,
        state=state,
        version="1.0.0",
        is_fragment=fragment,
        headers=dict(headers or {"Bundle-Name": name.title()}),
    )


def build_ready_runtime() -> RuntimeBindings:
    runtime = FakeRuntime()
    runtime.modules.add(module("core"))
    runtime.modules.add(module("core.fragment", ModuleState.RESOLVED, fragment=True))
    return runtime.bindings


def build_failed_runtime() -> RuntimeBindings:
    runtime = FakeRuntime()
    runtime.modules.add(module("core"))
    runtime.modules.add(module("broken", ModuleState.FAILURE))
    return runtime.bindings


def not_a_factory() -> str:
    return "nope"


def build_unreachable_runtime() -> RuntimeBindings:
    runtime = FakeRuntime()
    runtime.modules.list_error = ConnectionError("down")
    return runtime.bindings


def build_exploding_runtime() -> RuntimeBindings:
    raise ConnectionError("runtime socket refused")
