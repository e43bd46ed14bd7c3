"""Readiness predicates for modules, features and managed services."""

from __future__ import annotations

from .features import FeatureReadiness, features_to_install, features_to_uninstall
from .modules import ModuleReadiness, inactive_module_report
from .services import ServiceAvailability

__all__ = [
    "FeatureReadiness",
    "ModuleReadiness",
    "ServiceAvailability",
    "features_to_install",
    "features_to_uninstall",
    "inactive_module_report",
]
