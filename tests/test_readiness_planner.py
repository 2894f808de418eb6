from __future__ import annotations

import pytest

from LaunchReadiness.readiness.exceptions import PlanError
from LaunchReadiness.readiness.models import QAIssue, Severity, TaskStatus
from LaunchReadiness.readiness.planner import (
    LAUNCH_DAY_TEMPLATES,
    POST_LAUNCH_TEMPLATES,
    PRELAUNCH_TEMPLATES,
    TaskTemplate,
    plan,
    validate_templates,
)


def _issue(issue_id: str, category: str, severity: Severity, blocks_launch: bool = False) -> QAIssue:
    return QAIssue(
        id=issue_id,
        title=issue_id,
        category=category,
        severity=severity,
        description="",
        impact="",
        recommendation="",
        blocks_launch=blocks_launch,
        estimated_effort="1-2 days",
        source_suite="Suite",
        source_test=issue_id,
    )


def test_default_templates_form_a_valid_dag() -> None:
    validate_templates(PRELAUNCH_TEMPLATES + LAUNCH_DAY_TEMPLATES + POST_LAUNCH_TEMPLATES)
    launch_plan = plan([])
    ordered = [task.id for task in launch_plan.ordered()]
    assert len(ordered) == len(launch_plan.tasks) == 17
    for task in launch_plan.tasks:
        for dependency in task.dependencies:
            assert ordered.index(dependency) < ordered.index(task.id)


def test_clean_run_completes_issue_linked_tasks_with_completed_dependencies() -> None:
    launch_plan = plan([])
    for task_id in ("PRE-001", "PRE-002", "PRE-006", "PRE-007"):
        task = launch_plan.get(task_id)
        assert task is not None and task.status is TaskStatus.COMPLETED
        assert task.issue_ids == ()
    assert launch_plan.get("LAUNCH-001").status is TaskStatus.NOT_STARTED
    assert launch_plan.get("PRE-005").status is TaskStatus.NOT_STARTED


def test_task_waiting_on_open_work_is_not_completed() -> None:
    launch_plan = plan([])
    for task_id in ("PRE-004", "POST-002"):
        task = launch_plan.get(task_id)
        assert task.status is TaskStatus.NOT_STARTED
        assert task.issue_ids == ()
    for task in launch_plan.tasks:
        if task.status is TaskStatus.COMPLETED:
            assert all(launch_plan.get(dep).status is TaskStatus.COMPLETED for dep in task.dependencies)


def test_security_audit_stays_open_while_critical_issues_remain() -> None:
    launch_plan = plan([_issue("UX-1", "User Experience", Severity.CRITICAL, blocks_launch=True)])
    assert launch_plan.get("PRE-001").issue_ids == ("UX-1",)
    pre_002 = launch_plan.get("PRE-002")
    assert pre_002.issue_ids == ()
    assert pre_002.status is TaskStatus.NOT_STARTED
    assert launch_plan.get("PRE-006").status is TaskStatus.COMPLETED


def test_open_issues_are_attached_to_tasks() -> None:
    issues = [
        _issue("SEC-1", "Security", Severity.CRITICAL, blocks_launch=True),
        _issue("ACC-1", "Accessibility", Severity.HIGH),
        _issue("LR-1", "Legal", Severity.HIGH, blocks_launch=True),
        _issue("LR-2", "Legal", Severity.LOW),
    ]
    launch_plan = plan(issues)
    assert launch_plan.get("PRE-001").issue_ids == ("SEC-1",)
    assert launch_plan.get("PRE-002").issue_ids == ("SEC-1",)
    assert launch_plan.get("PRE-006").issue_ids == ("ACC-1",)
    assert launch_plan.get("PRE-007").issue_ids == ("LR-1",)
    assert launch_plan.get("POST-002").issue_ids == ("ACC-1", "LR-1")
    assert launch_plan.get("PRE-004").issue_ids == ()
    assert all(
        launch_plan.get(task_id).status is TaskStatus.NOT_STARTED
        for task_id in ("PRE-001", "PRE-002", "PRE-004", "PRE-006", "PRE-007", "POST-002")
    )


def _template(task_id: str, *dependencies: str) -> TaskTemplate:
    return TaskTemplate(
        id=task_id,
        task=task_id,
        owner="Team",
        priority=Severity.LOW,
        estimated_time="1 day",
        dependencies=frozenset(dependencies),
    )


def test_unknown_dependency_is_rejected() -> None:
    with pytest.raises(PlanError, match="unknown"):
        plan([], prelaunch=(_template("A", "Z"),), launch_day=(), post_launch=())


def test_cycle_is_rejected() -> None:
    with pytest.raises(PlanError, match="cycle"):
        validate_templates((_template("A", "C"), _template("B", "A"), _template("C", "B")))


def test_duplicate_ids_are_rejected() -> None:
    with pytest.raises(PlanError, match="Duplicate"):
        validate_templates((_template("A"), _template("A")))


def test_plan_serialises_dependencies_sorted() -> None:
    payload = plan([]).to_dict()
    pre_003 = next(task for task in payload["prelaunch"] if task["id"] == "PRE-003")
    assert pre_003["dependencies"] == ["PRE-001", "PRE-002", "PRE-007"]
    assert pre_003["priority"] == "CRITICAL"
