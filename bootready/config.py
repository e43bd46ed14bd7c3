"""Configuration loading and validation using Pydantic models."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_MAX_WAIT_S = 600.0

ENV_LOG_LEVEL = "BOOTREADY_LOG_LEVEL"
ENV_MAX_WAIT = "BOOTREADY_MAX_WAIT_S"
ENV_RUNTIME_FACTORY = "BOOTREADY_RUNTIME_FACTORY"


class WaitConfig(BaseModel):
    max_wait_s: float = Field(
        DEFAULT_MAX_WAIT_S,
        ge=0,
        description="Default upper bound for a wait when the caller passes none.",
    )
    poll_interval_s: float = Field(
        5.0,
        gt=0,
        description="Sleep between two evaluations of a readiness predicate.",
    )


class ServicesConfig(WaitConfig):
    poll_interval_s: float = Field(0.005, gt=0)
    requery_each_poll: bool = Field(
        False,
        description=(
            "Re-query the service registry on every poll instead of matching "
            "against the snapshot taken when the wait started."
        ),
    )


class FeaturesConfig(WaitConfig):
    poll_interval_s: float = Field(0.005, gt=0)


class ModulesConfig(WaitConfig):
    poll_interval_s: float = Field(5.0, gt=0)


class RuntimeConfig(BaseModel):
    factory: Optional[str] = Field(
        None,
        description="module:callable returning the RuntimeBindings to monitor.",
    )

    @field_validator("factory")
    @classmethod
    def _validate_factory(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        module_name, _, attr = value.partition(":")
        if not module_name or not attr:
            raise ValueError(f"Runtime factory must look like 'module:callable', got {value!r}")
        return value


class LoggingConfig(BaseModel):
    level: str = Field("INFO")
    log_dir: Optional[Path] = None


class ObservabilityConfig(BaseModel):
    metrics_port: Optional[int] = Field(None, ge=1024, le=65535)


class MonitorConfig(BaseModel):
    modules: ModulesConfig = ModulesConfig()
    features: FeaturesConfig = FeaturesConfig()
    services: ServicesConfig = ServicesConfig()
    runtime: RuntimeConfig = RuntimeConfig()
    logging: LoggingConfig = LoggingConfig()
    observability: ObservabilityConfig = ObservabilityConfig()


def load_config(path: Path | str | None = None, env: Mapping[str, str] | None = None) -> MonitorConfig:
    """Load YAML configuration from disk and apply environment overrides."""

    data: dict = {}
    if path is not None:
        config_path = Path(path)
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    config = MonitorConfig.model_validate(data)
    return apply_env_overrides(config, env if env is not None else os.environ)


def apply_env_overrides(config: MonitorConfig, env: Mapping[str, str]) -> MonitorConfig:
    updates: dict = {}
    level = env.get(ENV_LOG_LEVEL)
    if level:
        updates["logging"] = config.logging.model_copy(update={"level": level.upper()})
    factory = env.get(ENV_RUNTIME_FACTORY)
    if factory:
        updates["runtime"] = RuntimeConfig(factory=factory)
    max_wait_raw = env.get(ENV_MAX_WAIT)
    if max_wait_raw:
        try:
            max_wait = float(max_wait_raw)
        except ValueError as exc:
            raise ValueError(f"{ENV_MAX_WAIT} must be a number, got {max_wait_raw!r}") from exc
        for section in ("modules", "features", "services"):
            current = getattr(config, section)
            updates[section] = current.model_copy(update={"max_wait_s": max_wait})
    if not updates:
        return config
    return config.model_copy(update=updates)
