"""Fold probe suites into a launch assessment."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence, Union

from .config import ReadinessThresholds
from .exceptions import NoTestsExecutedError
from .models import (
    LaunchAssessment,
    OverallStatus,
    TestStatus,
    TestSuite,
    derive_suite_status,
)
from .classifier import is_blocking
from .runner import failed_suite

logger = logging.getLogger(__name__)

SuiteOutcome = Union[TestSuite, BaseException]


def readiness_score(passed: int, total: int) -> int:
    """Return ``round(100 * passed / total)`` with halves rounded up."""

    if total <= 0:
        raise NoTestsExecutedError()
    if not 0 <= passed <= total:
        raise ValueError(f"passed count {passed} outside 0..{total}")
    return (200 * passed + total) // (2 * total)


def decide_status(
    score: int,
    *,
    has_failures: bool,
    has_warnings: bool,
    thresholds: ReadinessThresholds,
    has_blocking: bool = False,
) -> OverallStatus:
    """Apply the canonical decision table documented on :class:`ReadinessThresholds`."""

    if score < thresholds.not_ready_below:
        return OverallStatus.NOT_READY
    if has_blocking:
        return OverallStatus.NOT_READY
    if has_failures and thresholds.failures_block_launch:
        return OverallStatus.NOT_READY
    if has_failures or has_warnings or score < thresholds.ready_at_least:
        return OverallStatus.CONDITIONAL
    return OverallStatus.READY


def _recommendations(
    score: int,
    critical_issues: Sequence[str],
    warnings: Sequence[str],
    thresholds: ReadinessThresholds,
) -> tuple[str, ...]:
    recommendations: list[str] = []
    if score < thresholds.recommendation_score:
        recommendations.append("Address failing tests before launch")
    if warnings:
        recommendations.append("Review and resolve warnings for optimal launch")
    if score >= thresholds.recommendation_score and not critical_issues:
        recommendations.append("System appears ready for launch")
    return tuple(recommendations)


def _normalise(outcomes: Sequence[SuiteOutcome]) -> tuple[TestSuite, ...]:
    suites: list[TestSuite] = []
    for index, outcome in enumerate(outcomes):
        if isinstance(outcome, TestSuite):
            suites.append(outcome)
            continue
        name = f"Suite {index + 1}"
        logger.warning(
            "readiness.suite.degraded",
            extra={"suite": name, "error": repr(outcome)},
        )
        suites.append(failed_suite(name, outcome))
    return tuple(suites)


def aggregate(
    suites: Sequence[SuiteOutcome],
    *,
    environment: str = "unknown",
    thresholds: Optional[ReadinessThresholds] = None,
    duration_ms: Optional[int] = None,
) -> LaunchAssessment:
    """Build a :class:`LaunchAssessment` from all suites of a run.

    Entries that are exceptions rather than suites are degraded to a single
    FAIL result so aggregation never raises for a crashed probe. Zero suites,
    or suites with zero results between them, raise :class:`NoTestsExecutedError`.
    """

    thresholds = thresholds or ReadinessThresholds()
    normalised = _normalise(suites)
    if not normalised:
        raise NoTestsExecutedError("No test suites were provided; cannot assess launch readiness")

    critical_issues: list[str] = []
    warnings: list[str] = []
    blocking = 0
    total = 0
    passed = 0
    for suite in normalised:
        total += suite.total
        passed += suite.count(TestStatus.PASS)
        for result in suite.results:
            if result.status is TestStatus.FAIL:
                critical_issues.append(f"{suite.name}: {result.message}")
                blocking += is_blocking(suite, result)
            elif result.status is TestStatus.WARNING:
                warnings.append(f"{suite.name}: {result.message}")

    score = readiness_score(passed, total)
    status = decide_status(
        score,
        has_failures=bool(critical_issues),
        has_warnings=bool(warnings),
        thresholds=thresholds,
        has_blocking=bool(blocking),
    )
    assessment = LaunchAssessment(
        overall_status=status,
        readiness_score=score,
        test_suites=normalised,
        critical_issues=tuple(critical_issues),
        warnings=tuple(warnings),
        recommendations=_recommendations(score, critical_issues, warnings, thresholds),
        environment=environment,
        duration_ms=duration_ms if duration_ms is not None else sum(s.duration_ms for s in normalised),
        timestamp=datetime.now(timezone.utc),
    )
    logger.info(
        "readiness.assessment",
        extra={
            "overall_status": status.value,
            "readiness_score": score,
            "total_tests": total,
            "critical_issues": len(critical_issues),
            "blocking_failures": blocking,
            "warning_count": len(warnings),
        },
    )
    return assessment


__all__ = ["aggregate", "decide_status", "derive_suite_status", "readiness_score"]
