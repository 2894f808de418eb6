"""Launch task planning from classified issues."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Sequence

from .exceptions import PlanError
from .models import LaunchPlan, LaunchTask, QAIssue, Severity, TaskStatus

logger = logging.getLogger(__name__)

IssueClass = Callable[[QAIssue], bool]


def _critical(issue: QAIssue) -> bool:
    return issue.severity is Severity.CRITICAL


def _security(issue: QAIssue) -> bool:
    return issue.category == "Security"


def _user_experience(issue: QAIssue) -> bool:
    return issue.category == "User Experience"


def _accessibility(issue: QAIssue) -> bool:
    return issue.category == "Accessibility"


def _blocking_checklist(issue: QAIssue) -> bool:
    return issue.blocks_launch and issue.id.startswith("LR-")


def _high_priority(issue: QAIssue) -> bool:
    return issue.severity is Severity.HIGH


@dataclass(frozen=True)
class TaskTemplate:
    """Static description of a launch task.

    When ``issue_class`` is set the task tracks that class of open issues and
    is COMPLETED once none remain.
    """

    id: str
    task: str
    owner: str
    priority: Severity
    estimated_time: str
    dependencies: frozenset[str] = field(default_factory=frozenset)
    issue_class: Optional[IssueClass] = None

    def instantiate(self, issues: Sequence[QAIssue]) -> LaunchTask:
        if self.issue_class is None:
            status, issue_ids = TaskStatus.NOT_STARTED, ()
        else:
            issue_ids = tuple(issue.id for issue in issues if self.issue_class(issue))
            status = TaskStatus.NOT_STARTED if issue_ids else TaskStatus.COMPLETED
        return LaunchTask(
            id=self.id,
            task=self.task,
            owner=self.owner,
            priority=self.priority,
            estimated_time=self.estimated_time,
            dependencies=self.dependencies,
            status=status,
            issue_ids=issue_ids,
        )


def _template(
    id: str,
    task: str,
    owner: str,
    priority: Severity,
    estimated_time: str,
    *dependencies: str,
    issue_class: Optional[IssueClass] = None,
) -> TaskTemplate:
    return TaskTemplate(
        id=id,
        task=task,
        owner=owner,
        priority=priority,
        estimated_time=estimated_time,
        dependencies=frozenset(dependencies),
        issue_class=issue_class,
    )


PRELAUNCH_TEMPLATES: tuple[TaskTemplate, ...] = (
    _template("PRE-001", "Resolve all critical issues", "Development Team", Severity.CRITICAL, "1-2 weeks",
              issue_class=_critical),
    _template("PRE-002", "Complete final security audit", "Security Team", Severity.CRITICAL, "3-5 days",
              "PRE-001", issue_class=_security),
    _template("PRE-003", "Finalize production deployment", "DevOps Team", Severity.CRITICAL, "2-3 days",
              "PRE-001", "PRE-002", "PRE-007"),
    _template("PRE-004", "Complete user acceptance testing", "QA Team", Severity.HIGH, "1 week",
              "PRE-003", issue_class=_user_experience),
    _template("PRE-005", "Train support team", "Support Manager", Severity.HIGH, "2-3 days", "PRE-004"),
    _template("PRE-006", "Remediate accessibility violations", "Accessibility Team", Severity.HIGH, "3-5 days",
              issue_class=_accessibility),
    _template("PRE-007", "Complete blocking launch checklist items", "Project Manager", Severity.CRITICAL,
              "1-3 days", issue_class=_blocking_checklist),
)

LAUNCH_DAY_TEMPLATES: tuple[TaskTemplate, ...] = (
    _template("LAUNCH-001", "Deploy to production", "DevOps Team", Severity.CRITICAL, "2-4 hours",
              "PRE-005", "PRE-006"),
    _template("LAUNCH-002", "Verify all systems operational", "QA Team", Severity.CRITICAL, "1-2 hours",
              "LAUNCH-001"),
    _template("LAUNCH-003", "Enable monitoring and alerting", "DevOps Team", Severity.CRITICAL, "30 minutes",
              "LAUNCH-001"),
    _template("LAUNCH-004", "Activate support channels", "Support Team", Severity.HIGH, "15 minutes",
              "LAUNCH-002"),
    _template("LAUNCH-005", "Send launch announcements", "Marketing Team", Severity.MEDIUM, "1 hour",
              "LAUNCH-002"),
)

POST_LAUNCH_TEMPLATES: tuple[TaskTemplate, ...] = (
    _template("POST-001", "Monitor system performance (24h)", "DevOps Team", Severity.CRITICAL, "24 hours",
              "LAUNCH-003"),
    _template("POST-002", "Address high-priority issues", "Development Team", Severity.HIGH, "1-2 weeks",
              "LAUNCH-002", issue_class=_high_priority),
    _template("POST-003", "Collect and analyze user feedback", "Product Team", Severity.HIGH, "1 week",
              "LAUNCH-004"),
    _template("POST-004", "Conduct post-launch retrospective", "Project Manager", Severity.MEDIUM, "2 hours",
              "POST-001"),
    _template("POST-005", "Plan next iteration improvements", "Product Team", Severity.MEDIUM, "1 week",
              "POST-003", "POST-004"),
)


def validate_templates(templates: Sequence[TaskTemplate]) -> None:
    """Raise :class:`PlanError` for duplicate ids, unknown dependencies or cycles."""

    ids = [template.id for template in templates]
    duplicates = sorted({task_id for task_id in ids if ids.count(task_id) > 1})
    if duplicates:
        raise PlanError(f"Duplicate task ids: {', '.join(duplicates)}")
    known = set(ids)
    for template in templates:
        unknown = sorted(template.dependencies - known)
        if unknown:
            raise PlanError(f"Task {template.id} depends on unknown tasks: {', '.join(unknown)}")

    visiting: set[str] = set()
    done: set[str] = set()
    graph = {template.id: template.dependencies for template in templates}

    def visit(task_id: str, trail: tuple[str, ...]) -> None:
        if task_id in done:
            return
        if task_id in visiting:
            cycle = trail[trail.index(task_id):] + (task_id,)
            raise PlanError(f"Dependency cycle: {' -> '.join(cycle)}")
        visiting.add(task_id)
        for dependency in sorted(graph[task_id]):
            visit(dependency, trail + (task_id,))
        visiting.discard(task_id)
        done.add(task_id)

    for task_id in ids:
        visit(task_id, ())


def _settle(launch_plan: LaunchPlan) -> LaunchPlan:
    completed: set[str] = set()
    settled: dict[str, LaunchTask] = {}
    for task in launch_plan.ordered():
        if task.status is TaskStatus.COMPLETED and not task.dependencies <= completed:
            task = replace(task, status=TaskStatus.NOT_STARTED)
        if task.status is TaskStatus.COMPLETED:
            completed.add(task.id)
        settled[task.id] = task
    return LaunchPlan(
        prelaunch=tuple(settled[task.id] for task in launch_plan.prelaunch),
        launch_day=tuple(settled[task.id] for task in launch_plan.launch_day),
        post_launch=tuple(settled[task.id] for task in launch_plan.post_launch),
    )


def plan(
    issues: Sequence[QAIssue],
    *,
    prelaunch: Sequence[TaskTemplate] = PRELAUNCH_TEMPLATES,
    launch_day: Sequence[TaskTemplate] = LAUNCH_DAY_TEMPLATES,
    post_launch: Sequence[TaskTemplate] = POST_LAUNCH_TEMPLATES,
) -> LaunchPlan:
    """Instantiate the phase templates against ``issues``.

    A task is only COMPLETED when its own issue class is clear and every task
    it depends on is COMPLETED as well.
    """

    validate_templates(tuple(prelaunch) + tuple(launch_day) + tuple(post_launch))
    launch_plan = _settle(
        LaunchPlan(
            prelaunch=tuple(template.instantiate(issues) for template in prelaunch),
            launch_day=tuple(template.instantiate(issues) for template in launch_day),
            post_launch=tuple(template.instantiate(issues) for template in post_launch),
        )
    )
    logger.info(
        "readiness.plan.built",
        extra={
            "task_count": len(launch_plan.tasks),
            "open_tasks": sum(1 for task in launch_plan.tasks if task.status is not TaskStatus.COMPLETED),
        },
    )
    return launch_plan


__all__ = [
    "LAUNCH_DAY_TEMPLATES",
    "POST_LAUNCH_TEMPLATES",
    "PRELAUNCH_TEMPLATES",
    "TaskTemplate",
    "plan",
    "validate_templates",
]
