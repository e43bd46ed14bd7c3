"""Bounded polling primitive shared by every readiness wait."""

from __future__ import annotations

import time
from typing import Callable

from .errors import SystemMonitorError
from .logging_utils import get_logger
from .models import ReadinessOutcome, WaitResult
from .observability.metrics import wait_seconds, waits_total

Predicate = Callable[[], bool]


class WaitEngine:
    """Evaluate a predicate until it holds or a deadline passes.

    The first evaluation happens immediately and a predicate that already holds
    returns without sleeping. Elapsed time is measured from the first entry on a
    monotonic clock, so at least one evaluation happens even when ``max_wait``
    is zero. ``SystemMonitorError`` raised by the predicate is terminal: it ends
    the wait at once with a ``FAILED`` outcome and is never retried. Anything
    else escapes untouched so the caller can decide how to report it.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._clock = clock
        self._sleep = sleep
        self._log = get_logger(__name__)

    def run(
        self,
        predicate: Predicate,
        max_wait: float,
        poll_interval: float,
        *,
        target: str = "condition",
    ) -> WaitResult:
        start = self._clock()
        attempts = 0
        self._log.trace(
            "Waiting for {} (max wait {:.3f}s, poll interval {:.3f}s)",
            target,
            max_wait,
            poll_interval,
        )
        while True:
            attempts += 1
            try:
                met = predicate()
            except SystemMonitorError as exc:
                result = WaitResult(
                    ReadinessOutcome.FAILED, self._clock() - start, attempts, cause=exc
                )
                self._record(target, result)
                return result
            if met:
                result = WaitResult(ReadinessOutcome.READY, self._clock() - start, attempts)
                self._record(target, result)
                return result
            self._log.trace("{} not met; sleeping {:.3f}s", target, poll_interval)
            self._sleep(poll_interval)
            if self._clock() - start > max_wait:
                break
        result = WaitResult(ReadinessOutcome.TIMED_OUT, self._clock() - start, attempts)
        self._record(target, result)
        return result

    def wait(
        self,
        predicate: Predicate,
        max_wait: float,
        poll_interval: float,
        *,
        target: str = "condition",
    ) -> bool:
        result = self.run(predicate, max_wait, poll_interval, target=target)
        if result.outcome is ReadinessOutcome.FAILED and result.cause is not None:
            raise result.cause
        return result.ready

    def _record(self, target: str, result: WaitResult) -> None:
        waits_total.labels(target, result.outcome.value).inc()
        wait_seconds.labels(target).observe(result.elapsed_s)
        if result.outcome is ReadinessOutcome.TIMED_OUT:
            self._log.warning(
                "{} not met within {:.3f}s after {} attempts",
                target,
                result.elapsed_s,
                result.attempts,
            )
        else:
            self._log.debug(
                "{} finished as {} after {:.3f}s ({} attempts)",
                target,
                result.outcome.value,
                result.elapsed_s,
                result.attempts,
            )


def wait(predicate: Predicate, max_wait: float, poll_interval: float) -> bool:
    """Module-level convenience around a default ``WaitEngine``."""

    return WaitEngine().wait(predicate, max_wait, poll_interval)
