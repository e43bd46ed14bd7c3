from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
TESTS = Path(__file__).resolve().parent
for path in (ROOT, TESTS):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from bootready.config import FeaturesConfig, ModulesConfig, MonitorConfig, ServicesConfig  # noqa: E402
from bootready.monitor import SystemMonitor  # noqa: E402
from bootready.waiting import WaitEngine  # noqa: E402
from runtime_fakes import FakeClock, FakeRuntime  # noqa: E402


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine(clock: FakeClock) -> WaitEngine:
    return WaitEngine(clock=clock, sleep=clock.sleep)


@pytest.fixture
def runtime() -> FakeRuntime:
    return FakeRuntime()


@pytest.fixture
def monitor_config() -> MonitorConfig:
    return MonitorConfig(
        modules=ModulesConfig(max_wait_s=10.0, poll_interval_s=1.0),
        features=FeaturesConfig(max_wait_s=10.0, poll_interval_s=0.5),
        services=ServicesConfig(max_wait_s=10.0, poll_interval_s=0.5),
    )


@pytest.fixture
def monitor(runtime: FakeRuntime, monitor_config: MonitorConfig, engine: WaitEngine) -> SystemMonitor:
    return SystemMonitor(runtime.bindings, monitor_config, engine=engine)
