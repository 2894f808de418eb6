"""Custom exceptions for the launch readiness engine."""

from __future__ import annotations


class LaunchReadinessError(RuntimeError):
    """Base exception for launch readiness failures."""


class ConfigurationError(LaunchReadinessError):
    """Raised when engine configuration or structural input is invalid."""


class NoTestsExecutedError(ConfigurationError):
    """Raised when an assessment is requested over zero executed checks."""

    def __init__(self, message: str = "No tests executed; cannot compute readiness score") -> None:
        super().__init__(message)


class ProbeError(LaunchReadinessError):
    """Raised when a probe crashes or returns results the engine cannot read."""

    def __init__(self, probe_name: str, message: str) -> None:
        super().__init__(f"{probe_name}: {message}")
        self.probe_name = probe_name
        self.reason = message


class ProbeTimeoutError(ProbeError):
    """Raised when a probe does not resolve within its timeout."""

    def __init__(self, probe_name: str, timeout_seconds: float) -> None:
        super().__init__(probe_name, f"timed out after {timeout_seconds:g}s")
        self.timeout_seconds = timeout_seconds


class PlanError(LaunchReadinessError):
    """Raised when launch task templates form an invalid dependency graph."""


__all__ = [
    "ConfigurationError",
    "LaunchReadinessError",
    "NoTestsExecutedError",
    "PlanError",
    "ProbeError",
    "ProbeTimeoutError",
]
