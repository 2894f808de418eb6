"""Configuration loading for the launch readiness engine."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from .exceptions import ConfigurationError

TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ReadinessThresholds:
    """Canonical decision table for the overall launch verdict.

    Rules are evaluated in order, first match wins:

    1. ``readiness_score < not_ready_below`` -> NOT_READY
    2. any failing check whose issue blocks launch -> NOT_READY, whatever the toggles
    3. any failing check and ``failures_block_launch`` -> NOT_READY
    4. any failing check, any warning, or ``readiness_score < ready_at_least`` -> CONDITIONAL
    5. otherwise -> READY

    ``recommendation_score`` only selects recommendation text.
    """

    not_ready_below: int = 70
    ready_at_least: int = 85
    failures_block_launch: bool = True
    recommendation_score: int = 95

    def __post_init__(self) -> None:
        for name in ("not_ready_below", "ready_at_least", "recommendation_score"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ConfigurationError(f"{name} must be between 0 and 100, got {value}")
        if self.not_ready_below > self.ready_at_least:
            raise ConfigurationError(
                "not_ready_below cannot exceed ready_at_least "
                f"({self.not_ready_below} > {self.ready_at_least})"
            )

    @classmethod
    def full_report(cls) -> "ReadinessThresholds":
        """Score-gated table used for the full multi-probe launch report."""

        return cls()

    @classmethod
    def issues_only(cls) -> "ReadinessThresholds":
        """Verdict driven purely by failing checks and warnings."""

        return cls(not_ready_below=0, ready_at_least=0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "not_ready_below": self.not_ready_below,
            "ready_at_least": self.ready_at_least,
            "failures_block_launch": self.failures_block_launch,
            "recommendation_score": self.recommendation_score,
        }


THRESHOLD_PRESETS = {
    "full_report": ReadinessThresholds.full_report,
    "issues_only": ReadinessThresholds.issues_only,
}


@dataclass(frozen=True)
class EngineConfig:
    """Resolved configuration for one launch readiness run."""

    environment: str = "test"
    thresholds: ReadinessThresholds = field(default_factory=ReadinessThresholds)
    probe_timeout_seconds: Optional[float] = None
    parallel: bool = False
    metrics_buffer_size: int = 1000
    enable_otel: bool = False

    def __post_init__(self) -> None:
        if self.probe_timeout_seconds is not None and self.probe_timeout_seconds <= 0:
            raise ConfigurationError("probe_timeout_seconds must be positive")
        if self.metrics_buffer_size <= 0:
            raise ConfigurationError("metrics_buffer_size must be positive")


def _as_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc


def _as_float(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_VALUES


def _parse_thresholds(data: Optional[Mapping[str, Any]]) -> ReadinessThresholds:
    if not data:
        return ReadinessThresholds()
    preset = data.get("preset")
    if preset is not None:
        if preset not in THRESHOLD_PRESETS:
            raise ConfigurationError(
                f"Unknown threshold preset '{preset}'; expected one of {sorted(THRESHOLD_PRESETS)}"
            )
        base = THRESHOLD_PRESETS[preset]()
    else:
        base = ReadinessThresholds()
    updates: dict[str, Any] = {}
    for name in ("not_ready_below", "ready_at_least", "recommendation_score"):
        if data.get(name) is not None:
            updates[name] = _as_int(data[name], name)
    if data.get("failures_block_launch") is not None:
        updates["failures_block_launch"] = _as_bool(data["failures_block_launch"])
    return replace(base, **updates) if updates else base


def _load_file_config(path: Path) -> EngineConfig:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid configuration file {path}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")
    timeout = data.get("probe_timeout_seconds")
    return EngineConfig(
        environment=str(data.get("environment", "test")),
        thresholds=_parse_thresholds(data.get("thresholds")),
        probe_timeout_seconds=_as_float(timeout, "probe_timeout_seconds") if timeout is not None else None,
        parallel=_as_bool(data.get("parallel", False)),
        metrics_buffer_size=_as_int(data.get("metrics_buffer_size", 1000), "metrics_buffer_size"),
        enable_otel=_as_bool(data.get("enable_otel", False)),
    )


def _apply_env_overrides(config: EngineConfig, env: Mapping[str, str]) -> EngineConfig:
    updated = config
    if env.get("LR_ENVIRONMENT"):
        updated = replace(updated, environment=env["LR_ENVIRONMENT"])
    if env.get("LR_PROBE_TIMEOUT"):
        updated = replace(
            updated, probe_timeout_seconds=_as_float(env["LR_PROBE_TIMEOUT"], "LR_PROBE_TIMEOUT")
        )
    if env.get("LR_PARALLEL"):
        updated = replace(updated, parallel=_as_bool(env["LR_PARALLEL"]))
    if env.get("LR_ENABLE_OTEL"):
        updated = replace(updated, enable_otel=_as_bool(env["LR_ENABLE_OTEL"]))

    thresholds = updated.thresholds
    if env.get("LR_NOT_READY_BELOW"):
        thresholds = replace(
            thresholds, not_ready_below=_as_int(env["LR_NOT_READY_BELOW"], "LR_NOT_READY_BELOW")
        )
    if env.get("LR_READY_AT_LEAST"):
        thresholds = replace(
            thresholds, ready_at_least=_as_int(env["LR_READY_AT_LEAST"], "LR_READY_AT_LEAST")
        )
    if thresholds is not updated.thresholds:
        updated = replace(updated, thresholds=thresholds)
    return updated


def _apply_overrides(config: EngineConfig, overrides: Mapping[str, Any]) -> EngineConfig:
    updated = config
    if overrides.get("environment"):
        updated = replace(updated, environment=str(overrides["environment"]))
    if overrides.get("probe_timeout_seconds") is not None:
        updated = replace(
            updated,
            probe_timeout_seconds=_as_float(overrides["probe_timeout_seconds"], "probe_timeout_seconds"),
        )
    if overrides.get("parallel"):
        updated = replace(updated, parallel=True)
    if overrides.get("preset"):
        preset = overrides["preset"]
        if preset not in THRESHOLD_PRESETS:
            raise ConfigurationError(f"Unknown threshold preset '{preset}'")
        updated = replace(updated, thresholds=THRESHOLD_PRESETS[preset]())
    return updated


def load_engine_config(
    config_path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> EngineConfig:
    """Resolve engine configuration from file, environment, then explicit overrides."""

    env = os.environ if env is None else env
    path = config_path or (Path(env["LR_CONFIG"]) if env.get("LR_CONFIG") else None)
    if path is not None:
        path = Path(path).expanduser()
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")
        config = _load_file_config(path)
    else:
        config = EngineConfig()
    config = _apply_env_overrides(config, env)
    return _apply_overrides(config, overrides or {})


__all__ = [
    "EngineConfig",
    "ReadinessThresholds",
    "THRESHOLD_PRESETS",
    "load_engine_config",
]
