"""Metric emission for launch readiness runs."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from opentelemetry import metrics as otel_metrics

from .models import TestStatus

NAMESPACE = "launch_readiness"


@dataclass(frozen=True)
class MetricPoint:
    """Represents a single metric measurement."""

    name: str
    value: float
    tags: Mapping[str, str] = field(default_factory=dict)


class MetricsEmitter:
    """Telemetry emitter for readiness metrics.

    Records histograms through the global OpenTelemetry meter provider when
    enabled, otherwise keeps the most recent ``buffer_size`` points in memory.
    """

    def __init__(
        self,
        namespace: str = NAMESPACE,
        *,
        enable_otel: bool = False,
        buffer_size: int = 1000,
    ) -> None:
        self._namespace = namespace
        self._buffer: deque[MetricPoint] = deque(maxlen=buffer_size)
        self._meter: Optional[otel_metrics.Meter] = (
            otel_metrics.get_meter_provider().get_meter(namespace) if enable_otel else None
        )
        self._recorders: dict[str, otel_metrics.Histogram] = {}

    @property
    def namespace(self) -> str:
        return self._namespace

    def emit(self, name: str, value: float, **tags: str) -> None:
        if self._meter is not None:
            recorder = self._recorders.get(name)
            if recorder is None:
                recorder = self._meter.create_histogram(f"{self._namespace}.{name}")
                self._recorders[name] = recorder
            recorder.record(value, tags)
            return
        self._buffer.append(MetricPoint(name=name, value=value, tags=tags))

    def emit_report(self, report: Any) -> None:
        """Record the standard per-run and per-suite measurements of a launch report."""

        assessment = report.assessment
        environment = assessment.environment
        self.emit("readiness_score", float(assessment.readiness_score), environment=environment)
        self.emit(
            "run_duration_ms",
            float(assessment.duration_ms),
            environment=environment,
            status=assessment.overall_status.value,
        )
        self.emit("issues", float(len(report.issues)), environment=environment)
        self.emit(
            "blocking_issues",
            float(sum(1 for issue in report.issues if issue.blocks_launch)),
            environment=environment,
        )
        for suite in assessment.test_suites:
            self.emit("suite_duration_ms", float(suite.duration_ms), suite=suite.name, status=suite.status.value)
            self.emit("suite_failures", float(suite.count(TestStatus.FAIL)), suite=suite.name)

    def flush(self) -> Sequence[MetricPoint]:
        data = tuple(self._buffer)
        self._buffer.clear()
        return data


__all__ = ["MetricPoint", "MetricsEmitter", "NAMESPACE"]
