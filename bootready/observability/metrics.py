"""Prometheus metrics for readiness waits and runtime mutations."""

from __future__ import annotations

import threading

from prometheus_client import Counter, Histogram, start_http_server

from ..config import ObservabilityConfig
from ..logging_utils import get_logger

waits_total = Counter(
    "bootready_waits_total",
    "Completed readiness waits by target kind and outcome",
    ["target", "outcome"],
)
wait_seconds = Histogram(
    "bootready_wait_seconds",
    "Wall-clock time spent in readiness waits",
    ["target"],
    buckets=(0.01, 0.1, 0.5, 1, 5, 15, 30, 60, 120, 300, 600),
)
mutations_total = Counter(
    "bootready_mutations_total",
    "Runtime mutation calls by operation and result",
    ["operation", "result"],
)


class MetricsServer:
    """Expose readiness metrics over HTTP when a port is configured."""

    def __init__(self, config: ObservabilityConfig) -> None:
        self._config = config
        self._log = get_logger(__name__)
        self._started = threading.Event()

    @property
    def enabled(self) -> bool:
        return self._config.metrics_port is not None

    def start(self) -> None:
        if not self.enabled or self._started.is_set():
            return
        start_http_server(self._config.metrics_port)
        self._started.set()
        self._log.info("Prometheus exporter listening on {}", self._config.metrics_port)


def record_mutation(operation: str, ok: bool) -> None:
    mutations_total.labels(operation, "ok" if ok else "error").inc()
