"""Managed service availability."""

from __future__ import annotations

from ..logging_utils import get_logger
from ..models import SERVICE_FACTORY_PID, SERVICE_PID, ServiceRef
from ..state_query import StateQuery

_log = get_logger(__name__)


class ServiceAvailability:
    """Predicate that holds once ``pid`` is registered as a managed service or factory.

    Registry references are captured once, when the predicate is built, and
    every poll matches against that snapshot; a service registered afterwards
    is only seen with ``requery_each_poll``.
    """

    def __init__(self, query: StateQuery, pid: str, *, requery_each_poll: bool = False) -> None:
        self._query = query
        self._pid = pid
        self._requery = requery_each_poll
        self._service_refs: list[ServiceRef] = query.managed_services()
        self._factory_refs: list[ServiceRef] = query.managed_service_factories()

    @property
    def pid(self) -> str:
        return self._pid

    def __call__(self) -> bool:
        if self._requery:
            self._service_refs = self._query.managed_services()
            self._factory_refs = self._query.managed_service_factories()
        _log.debug("Waiting for service with pid [{}] to be registered", self._pid)
        return any(
            ref.get_property(SERVICE_PID) == self._pid for ref in self._service_refs
        ) or any(ref.get_property(SERVICE_FACTORY_PID) == self._pid for ref in self._factory_refs)
