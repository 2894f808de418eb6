"""Orchestrates a launch readiness run end to end."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from contextlib import nullcontext
from typing import Iterable, Optional

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode, Tracer

from .aggregator import aggregate
from .classifier import classify
from .config import EngineConfig
from .exceptions import ConfigurationError
from .metrics import NAMESPACE, MetricsEmitter
from .models import OverallStatus
from .planner import plan
from .probes import Tester
from .report import LaunchReport, build_launch_report
from .risk import assess_risk
from .runner import SuiteRunner

logger = logging.getLogger(__name__)


def exit_code(status: OverallStatus) -> int:
    """Process exit code for a verdict: 0 only when READY."""

    return 0 if status is OverallStatus.READY else 1


class LaunchReadinessPipeline:
    """Runs probes and turns their suites into a :class:`LaunchReport`."""

    def __init__(
        self,
        probes: Iterable[Tester],
        *,
        config: Optional[EngineConfig] = None,
        metrics_emitter: Optional[MetricsEmitter] = None,
        tracer: Optional[Tracer] = None,
    ) -> None:
        self._probes = tuple(probes)
        if not self._probes:
            raise ConfigurationError("At least one probe is required for a launch readiness run")
        self._config = config or EngineConfig()
        self._metrics = metrics_emitter or MetricsEmitter(
            enable_otel=self._config.enable_otel,
            buffer_size=self._config.metrics_buffer_size,
        )
        if tracer is None and self._config.enable_otel:
            tracer = trace.get_tracer(NAMESPACE)
        self._tracer = tracer
        self._runner = SuiteRunner(timeout_seconds=self._config.probe_timeout_seconds, tracer=tracer)

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def metrics(self) -> MetricsEmitter:
        return self._metrics

    async def run_async(self) -> LaunchReport:
        run_id = uuid.uuid4().hex
        span_context = (
            self._tracer.start_as_current_span(
                "readiness.run",
                attributes={
                    "readiness.run_id": run_id,
                    "readiness.environment": self._config.environment,
                    "readiness.probes": len(self._probes),
                },
            )
            if self._tracer
            else nullcontext()
        )
        logger.info(
            "readiness.run.start",
            extra={
                "run_id": run_id,
                "environment": self._config.environment,
                "probe_count": len(self._probes),
                "parallel": self._config.parallel,
            },
        )
        with span_context as span:
            started = time.perf_counter()
            suites = await self._runner.run_all_async(self._probes, parallel=self._config.parallel)
            duration_ms = int(round((time.perf_counter() - started) * 1000))
            assessment = aggregate(
                suites,
                environment=self._config.environment,
                thresholds=self._config.thresholds,
                duration_ms=duration_ms,
            )
            issues = classify(assessment.test_suites)
            report = build_launch_report(assessment, issues, assess_risk(issues), plan(issues))
            if span is not None:
                span.set_attribute("readiness.score", assessment.readiness_score)
                span.set_attribute("readiness.status", assessment.overall_status.value)
                span.set_attribute("readiness.issues", len(issues))
                if assessment.overall_status is OverallStatus.NOT_READY:
                    span.set_status(Status(StatusCode.ERROR, description="launch not ready"))
                else:
                    span.set_status(Status(StatusCode.OK))
        self._metrics.emit_report(report)
        logger.info(
            "readiness.run.complete",
            extra={
                "run_id": run_id,
                "overall_status": assessment.overall_status.value,
                "readiness_score": assessment.readiness_score,
                "launch_recommendation": report.launch_recommendation.value,
                "overall_risk": report.risk.overall_risk.value,
                "duration_ms": duration_ms,
            },
        )
        return report

    def run(self) -> LaunchReport:
        return asyncio.run(self.run_async())


__all__ = ["LaunchReadinessPipeline", "exit_code"]
