"""Feature state readiness."""

from __future__ import annotations

from ..logging_utils import get_logger
from ..models import Feature, FeatureState
from ..state_query import StateQuery

_log = get_logger(__name__)


class FeatureReadiness:
    def __init__(self, query: StateQuery, features: list[Feature], expected: FeatureState) -> None:
        self._query = query
        self._features = list(features)
        self._expected = expected
        self.pending: list[Feature] = []

    @property
    def expected(self) -> FeatureState:
        return self._expected

    def __call__(self) -> bool:
        pending = [
            feature
            for feature in self._features
            if self._query.feature_state(feature) != self._expected
        ]
        self.pending = pending
        if pending:
            _log.info(
                "Waiting for features [{}] to reach expected state of [{}].",
                features_as_string(pending),
                self._expected.value,
            )
        return not pending


def features_to_install(query: StateQuery, features: list[Feature]) -> set[str]:
    return {feature.name for feature in features if not query.is_installed(feature)}


def features_to_uninstall(query: StateQuery, features: list[Feature]) -> set[str]:
    return {feature.name for feature in features if query.is_installed(feature)}


def features_as_string(features: list[Feature]) -> str:
    return ",".join(feature.name for feature in features)
