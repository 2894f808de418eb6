"""Full launch report combining assessment, issues, risk and plan."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Sequence

from .models import (
    LaunchAssessment,
    LaunchPlan,
    LaunchRecommendation,
    OverallStatus,
    QAIssue,
    RiskAssessment,
    Severity,
    _serialise,
    _utcnow,
)

CRITICAL_ACTIONS = (
    "🚨 CRITICAL: Do not launch until all critical issues are resolved",
    "Focus all resources on resolving critical blockers",
    "Conduct emergency team meetings to address critical issues",
    "Consider delaying launch if critical issues cannot be resolved quickly",
)

SECURITY_ACTIONS = (
    "Conduct immediate security review and penetration testing",
    "Implement security fixes before any launch consideration",
)

HIGH_PRIORITY_ACTIONS = (
    "Address all high-priority issues within 2 weeks of launch",
    "Implement monitoring for high-priority areas",
    "Create user communication plan for known issues",
)

OPERATIONAL_ACTIONS = (
    "Implement comprehensive monitoring and alerting",
    "Prepare incident response procedures",
    "Train support team on common issues and solutions",
    "Set up user feedback collection mechanisms",
)

LONG_TERM_ACTIONS = (
    "Establish regular security audits and penetration testing",
    "Implement continuous accessibility testing",
    "Set up automated performance monitoring",
    "Create user research program for ongoing UX improvements",
    "Establish regular code quality reviews",
    "Implement automated testing for all critical user journeys",
)


@dataclass(frozen=True)
class ReportRecommendations:
    immediate: tuple[str, ...] = ()
    short_term: tuple[str, ...] = ()
    long_term: tuple[str, ...] = ()


@dataclass(frozen=True)
class LaunchReport:
    """Everything a release manager needs for the go/no-go call."""

    assessment: LaunchAssessment
    launch_recommendation: LaunchRecommendation
    critical_issues: tuple[QAIssue, ...]
    high_priority_issues: tuple[QAIssue, ...]
    other_issues: tuple[QAIssue, ...]
    recommendations: ReportRecommendations
    risk: RiskAssessment
    plan: LaunchPlan
    generated_at: datetime = field(default_factory=_utcnow)

    @property
    def overall_status(self) -> OverallStatus:
        return self.assessment.overall_status

    @property
    def issues(self) -> tuple[QAIssue, ...]:
        return self.critical_issues + self.high_priority_issues + self.other_issues

    def execution_summary(self) -> dict[str, Any]:
        assessment = self.assessment
        return {
            "total_tests": assessment.total_tests,
            "passed_tests": assessment.passed_tests,
            "failed_tests": assessment.failed_tests,
            "warning_tests": assessment.warning_tests,
            "skipped_tests": assessment.skipped_tests,
            "pending_tests": assessment.pending_tests,
            "readiness_score": assessment.readiness_score,
            "overall_status": assessment.overall_status.value,
            "launch_recommendation": self.launch_recommendation.value,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated_at": self.generated_at.isoformat(),
            "execution_summary": self.execution_summary(),
            "assessment": self.assessment.to_dict(),
            "critical_issues": [issue.to_dict() for issue in self.critical_issues],
            "high_priority_issues": [issue.to_dict() for issue in self.high_priority_issues],
            "other_issues": [issue.to_dict() for issue in self.other_issues],
            "recommendations": _serialise(self.recommendations),
            "risk_assessment": self.risk.to_dict(),
            "launch_plan": self.plan.to_dict(),
        }


def _is_critical(issue: QAIssue) -> bool:
    return issue.severity is Severity.CRITICAL or issue.blocks_launch


def tiered_recommendations(
    critical: Sequence[QAIssue],
    high_priority: Sequence[QAIssue],
) -> ReportRecommendations:
    immediate: list[str] = []
    if critical:
        immediate.extend(CRITICAL_ACTIONS)
    if any(issue.category == "Security" for issue in critical):
        immediate.extend(SECURITY_ACTIONS)
    short_term: list[str] = []
    if high_priority:
        short_term.extend(HIGH_PRIORITY_ACTIONS)
    short_term.extend(OPERATIONAL_ACTIONS)
    return ReportRecommendations(
        immediate=tuple(immediate),
        short_term=tuple(short_term),
        long_term=LONG_TERM_ACTIONS,
    )


def launch_recommendation(assessment: LaunchAssessment, issues: Sequence[QAIssue]) -> LaunchRecommendation:
    """Map the verdict to go/no-go; any launch-blocking issue forces NO_GO."""

    if any(issue.blocks_launch for issue in issues):
        return LaunchRecommendation.NO_GO
    return assessment.overall_status.recommendation


def build_launch_report(
    assessment: LaunchAssessment,
    issues: Sequence[QAIssue],
    risk: RiskAssessment,
    plan: LaunchPlan,
) -> LaunchReport:
    critical = tuple(issue for issue in issues if _is_critical(issue))
    high_priority = tuple(
        issue
        for issue in issues
        if not _is_critical(issue) and issue.severity in (Severity.HIGH, Severity.MEDIUM)
    )
    other = tuple(issue for issue in issues if issue not in critical and issue not in high_priority)
    return LaunchReport(
        assessment=assessment,
        launch_recommendation=launch_recommendation(assessment, issues),
        critical_issues=critical,
        high_priority_issues=high_priority,
        other_issues=other,
        recommendations=tiered_recommendations(critical, high_priority),
        risk=risk,
        plan=plan,
    )


__all__ = [
    "LONG_TERM_ACTIONS",
    "LaunchReport",
    "ReportRecommendations",
    "build_launch_report",
    "launch_recommendation",
    "tiered_recommendations",
]
