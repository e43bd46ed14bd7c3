"""Module activation readiness."""

from __future__ import annotations

from typing import Iterable

from ..errors import TerminalStateError
from ..logging_utils import get_logger
from ..models import Module, ModuleState
from ..state_query import StateQuery

_log = get_logger(__name__)


class ModuleReadiness:
    """Predicate that holds once every module in scope reached its target state.

    The scope is fixed at construction: explicit names, or every module the
    runtime knows about at that moment. Fragments are judged against RESOLVED,
    everything else against ``expected``. A non-fragment in FAILURE raises
    ``TerminalStateError`` instead of reporting "not yet".
    """

    def __init__(
        self,
        query: StateQuery,
        names: Iterable[str] | None = None,
        *,
        expected: ModuleState = ModuleState.ACTIVE,
    ) -> None:
        self._query = query
        selected = frozenset(names or ())
        self._names = selected if selected else frozenset(query.module_names())
        self._expected = expected
        self.pending: list[Module] = []

    @property
    def names(self) -> frozenset[str]:
        return self._names

    @property
    def expected(self) -> ModuleState:
        return self._expected

    def __call__(self) -> bool:
        snapshot = self._query.list_modules()
        pending: list[Module] = []
        for module in snapshot:
            if module.name not in self._names:
                continue
            if module.is_fragment:
                if module.state is not ModuleState.RESOLVED:
                    _log.debug(
                        "Fragment [{}] not ready with state [{}]",
                        module.display_name,
                        module.state.value,
                    )
                    pending.append(module)
                continue
            if module.state is ModuleState.FAILURE:
                report = inactive_module_report(snapshot)
                log_inactive_modules(report)
                raise TerminalStateError(
                    f"Module [{module.display_name}] failed to start up.", report
                )
            if module.state is not self._expected:
                _log.debug(
                    "Module [{}] not ready with state [{}]",
                    module.display_name,
                    module.state.value,
                )
                pending.append(module)
        self.pending = pending
        if pending:
            _log.info(
                "Waiting for {} of {} modules to reach [{}]",
                len(pending),
                len(self._names),
                self._expected.value,
            )
        return not pending


def inactive_module_report(modules: Iterable[Module]) -> list[str]:
    """Describe every non-active module that is not attached to a host."""

    lines: list[str] = []
    for module in modules:
        if module.state is ModuleState.ACTIVE or module.attaches_to_host:
            continue
        headers = ", ".join(f"{key}={value}" for key, value in module.headers.items())
        lines.append(
            f"Module: {module.name}_v{module.version} | {module.state.value}\n"
            f"\tHeaders: [ {headers} ]"
        )
    return lines


def log_inactive_modules(report: list[str]) -> None:
    _log.error("Listing inactive modules")
    for line in report:
        _log.error("\n\t{}", line)
