from __future__ import annotations

from datetime import datetime, timezone

import pytest

from LaunchReadiness.readiness.exceptions import PlanError
from LaunchReadiness.readiness.models import (
    AccessibilityDetails,
    ChecklistDetails,
    DetailKind,
    DocumentationDetails,
    GenericDetails,
    LaunchPlan,
    LaunchTask,
    OverallStatus,
    LaunchRecommendation,
    ProbeCategory,
    SecurityDetails,
    Severity,
    SuiteStatus,
    TestResult,
    TestStatus,
    TestSuite,
    UxDetails,
    derive_suite_status,
    parse_details,
)


def _results(*statuses: TestStatus) -> tuple[TestResult, ...]:
    return tuple(TestResult(name=f"check {index}", status=status) for index, status in enumerate(statuses))


def test_suite_status_precedence() -> None:
    assert derive_suite_status(_results(TestStatus.PASS, TestStatus.WARNING, TestStatus.FAIL)) is SuiteStatus.FAIL
    assert derive_suite_status(_results(TestStatus.PASS, TestStatus.WARNING, TestStatus.SKIP)) is SuiteStatus.WARNING
    assert derive_suite_status(_results(TestStatus.SKIP, TestStatus.SKIP)) is SuiteStatus.SKIP
    assert derive_suite_status(_results(TestStatus.SKIP, TestStatus.PENDING)) is SuiteStatus.SKIP
    assert derive_suite_status(_results(TestStatus.PASS, TestStatus.SKIP)) is SuiteStatus.PASS
    assert derive_suite_status(()) is SuiteStatus.SKIP


def test_suite_with_one_failure_fails() -> None:
    suite = TestSuite(name="Checkout", results=_results(TestStatus.PASS, TestStatus.PASS, TestStatus.FAIL))
    assert suite.status is SuiteStatus.FAIL
    assert suite.total == 3
    assert suite.count(TestStatus.PASS) == 2
    assert [result.name for result in suite.results_with(TestStatus.FAIL)] == ["check 2"]


def test_result_rejects_missing_status_and_negative_duration() -> None:
    with pytest.raises(ValueError):
        TestResult(name="broken", status=None)  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        TestResult(name="broken", status=TestStatus.PASS, duration_ms=-1)


def test_result_status_is_coerced_from_string() -> None:
    result = TestResult(name="lowercase", status="warning")  # type: ignore[arg-type]
    assert result.status is TestStatus.WARNING


def test_result_from_dict_parses_timestamp_and_details() -> None:
    result = TestResult.from_dict(
        {
            "name": "Keyboard navigation",
            "status": "fail",
            "message": "Focus trapped in modal",
            "duration_ms": 120,
            "timestamp": "2026-01-05T10:00:00Z",
            "details": {"violations": [{"id": "focus-trap", "impact": "Critical"}]},
        }
    )
    assert result.status is TestStatus.FAIL
    assert result.timestamp == datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc)
    assert isinstance(result.details, AccessibilityDetails)
    assert result.details.violations[0].impact == "critical"


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"violations": []}, AccessibilityDetails),
        ({"usability_score": 4}, UxDetails),
        ({"category": "Legal", "priority": "high", "blocks_launch": True}, ChecklistDetails),
        ({"document_type": "API guide", "completeness": 40}, DocumentationDetails),
        ({"severity": "high"}, SecurityDetails),
        ({"vendor": "acme"}, GenericDetails),
        ({"kind": "security", "usability_score": 2}, SecurityDetails),
    ],
)
def test_parse_details_dispatch(payload: dict, expected: type) -> None:
    assert isinstance(parse_details(payload), expected)


def test_parse_details_rejects_unknown_kind() -> None:
    with pytest.raises(ValueError):
        parse_details({"kind": "telepathy"})


def test_result_to_dict_tags_detail_kind() -> None:
    result = TestResult(
        name="SQL injection",
        status=TestStatus.FAIL,
        details=SecurityDetails(severity="high", vulnerability_type="injection"),
    )
    payload = result.to_dict()
    assert payload["status"] == "FAIL"
    assert payload["details"]["kind"] == DetailKind.SECURITY.value
    assert payload["details"]["vulnerability_type"] == "injection"


def test_category_labels_and_recommendation_mapping() -> None:
    assert ProbeCategory.UX.label == "User Experience"
    assert ProbeCategory.LAUNCH_CHECKLIST.label == "Launch Readiness"
    assert OverallStatus.READY.recommendation is LaunchRecommendation.GO
    assert OverallStatus.CONDITIONAL.recommendation is LaunchRecommendation.GO_WITH_CONDITIONS
    assert OverallStatus.NOT_READY.recommendation is LaunchRecommendation.NO_GO
    assert Severity.CRITICAL.rank < Severity.LOW.rank


def _task(task_id: str, *dependencies: str) -> LaunchTask:
    return LaunchTask(
        id=task_id,
        task=task_id,
        owner="Team",
        priority=Severity.MEDIUM,
        estimated_time="1 day",
        dependencies=frozenset(dependencies),
    )


def test_launch_plan_orders_dependencies_first() -> None:
    plan = LaunchPlan(prelaunch=(_task("C", "B"), _task("B", "A"), _task("A")))
    assert [task.id for task in plan.ordered()] == ["A", "B", "C"]
    assert plan.get("B") is not None
    assert plan.get("missing") is None


def test_launch_plan_rejects_cycles() -> None:
    plan = LaunchPlan(prelaunch=(_task("A", "B"), _task("B", "A")))
    with pytest.raises(PlanError):
        plan.ordered()
