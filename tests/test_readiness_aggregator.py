from __future__ import annotations

import pytest

from LaunchReadiness.readiness.aggregator import aggregate, decide_status, readiness_score
from LaunchReadiness.readiness.config import ReadinessThresholds
from LaunchReadiness.readiness.exceptions import ConfigurationError, NoTestsExecutedError
from LaunchReadiness.readiness.models import (
    ChecklistDetails,
    OverallStatus,
    Severity,
    SuiteStatus,
    TestResult,
    TestStatus,
    TestSuite,
)


def _suite(name: str, *statuses: TestStatus, duration_ms: int = 0) -> TestSuite:
    results = tuple(
        TestResult(name=f"{name} {index}", status=status, message=f"{name} check {index}")
        for index, status in enumerate(statuses)
    )
    return TestSuite(name=name, results=results, duration_ms=duration_ms)


def test_single_failure_surfaces_as_critical_issue() -> None:
    assessment = aggregate([_suite("Checkout", TestStatus.PASS, TestStatus.PASS, TestStatus.FAIL)])
    assert assessment.test_suites[0].status is SuiteStatus.FAIL
    assert assessment.critical_issues == ("Checkout: Checkout check 2",)
    assert assessment.readiness_score == 67
    assert assessment.overall_status is OverallStatus.NOT_READY


def test_skipped_results_count_against_score() -> None:
    assessment = aggregate(
        [
            _suite("Smoke", TestStatus.PASS, TestStatus.PASS, TestStatus.PASS),
            _suite("Mobile", TestStatus.SKIP, TestStatus.SKIP),
        ]
    )
    assert assessment.readiness_score == 60
    assert assessment.overall_status is OverallStatus.NOT_READY
    assert assessment.total_tests == 5
    assert assessment.skipped_tests == 2


def test_issues_only_thresholds_ignore_score() -> None:
    assessment = aggregate(
        [
            _suite("Smoke", TestStatus.PASS, TestStatus.PASS, TestStatus.PASS),
            _suite("Mobile", TestStatus.SKIP, TestStatus.SKIP),
        ],
        thresholds=ReadinessThresholds.issues_only(),
    )
    assert assessment.readiness_score == 60
    assert assessment.overall_status is OverallStatus.READY


def test_zero_suites_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        aggregate([])


def test_suites_without_results_cannot_be_scored() -> None:
    with pytest.raises(NoTestsExecutedError):
        aggregate([_suite("Empty")])


@pytest.mark.parametrize(
    ("passed", "total", "expected"),
    [(0, 4, 0), (4, 4, 100), (1, 8, 13), (2, 3, 67), (1, 3, 33), (1, 200, 1)],
)
def test_readiness_score_rounding(passed: int, total: int, expected: int) -> None:
    assert readiness_score(passed, total) == expected


def test_readiness_score_bounds_checked() -> None:
    with pytest.raises(NoTestsExecutedError):
        readiness_score(0, 0)
    with pytest.raises(ValueError):
        readiness_score(5, 4)


@pytest.mark.parametrize(
    ("score", "failures", "warnings", "expected"),
    [
        (60, False, False, OverallStatus.NOT_READY),
        (90, True, False, OverallStatus.NOT_READY),
        (90, False, True, OverallStatus.CONDITIONAL),
        (80, False, False, OverallStatus.CONDITIONAL),
        (100, False, False, OverallStatus.READY),
    ],
)
def test_decision_table(score: int, failures: bool, warnings: bool, expected: OverallStatus) -> None:
    status = decide_status(
        score,
        has_failures=failures,
        has_warnings=warnings,
        thresholds=ReadinessThresholds.full_report(),
    )
    assert status is expected


def test_failures_downgrade_to_conditional_when_not_blocking() -> None:
    thresholds = ReadinessThresholds(failures_block_launch=False)
    assert decide_status(90, has_failures=True, has_warnings=False, thresholds=thresholds) is OverallStatus.CONDITIONAL


def test_blocking_failure_is_not_ready_even_when_failures_do_not_block() -> None:
    thresholds = ReadinessThresholds(failures_block_launch=False)
    status = decide_status(95, has_failures=True, has_warnings=False, thresholds=thresholds, has_blocking=True)
    assert status is OverallStatus.NOT_READY


def test_blocking_checklist_item_forces_not_ready() -> None:
    results = [TestResult(name=f"item {index}", status=TestStatus.PASS) for index in range(19)]
    results.append(
        TestResult(
            name="Privacy policy published",
            status=TestStatus.FAIL,
            details=ChecklistDetails(category="Legal", priority=Severity.HIGH, blocks_launch=True),
        )
    )
    thresholds = ReadinessThresholds(failures_block_launch=False)
    blocking = aggregate([TestSuite(name="Launch checklist", results=tuple(results))], thresholds=thresholds)
    assert blocking.readiness_score == 95
    assert blocking.overall_status is OverallStatus.NOT_READY

    results[-1] = TestResult(
        name="Privacy policy published",
        status=TestStatus.FAIL,
        details=ChecklistDetails(category="Legal", priority=Severity.HIGH, blocks_launch=False),
    )
    plain = aggregate([TestSuite(name="Launch checklist", results=tuple(results))], thresholds=thresholds)
    assert plain.overall_status is OverallStatus.CONDITIONAL


def test_crashed_suite_entries_are_degraded() -> None:
    assessment = aggregate([_suite("Smoke", TestStatus.PASS), RuntimeError("worker died")])
    degraded = assessment.test_suites[1]
    assert degraded.name == "Suite 2"
    assert degraded.status is SuiteStatus.FAIL
    assert "worker died" in degraded.results[0].message
    assert assessment.overall_status is OverallStatus.NOT_READY


def test_recommendations_and_duration() -> None:
    ready = aggregate([_suite("Smoke", TestStatus.PASS, TestStatus.PASS, duration_ms=40), _suite("API", TestStatus.PASS, duration_ms=2)])
    assert ready.overall_status is OverallStatus.READY
    assert ready.recommendations == ("System appears ready for launch",)
    assert ready.duration_ms == 42

    warned = aggregate([_suite("Smoke", TestStatus.PASS, TestStatus.WARNING)], duration_ms=7)
    assert "Review and resolve warnings for optimal launch" in warned.recommendations
    assert "Address failing tests before launch" in warned.recommendations
    assert warned.duration_ms == 7


def test_assessment_to_dict_contains_summary() -> None:
    payload = aggregate([_suite("Smoke", TestStatus.PASS, TestStatus.FAIL)], environment="staging").to_dict()
    assert payload["environment"] == "staging"
    assert payload["summary"] == {
        "total": 2,
        "passed": 1,
        "failed": 1,
        "warning": 0,
        "skipped": 0,
        "pending": 0,
    }
    assert payload["test_suites"][0]["status"] == "FAIL"
