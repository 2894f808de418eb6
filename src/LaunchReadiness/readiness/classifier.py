"""Classify failing results into normalised launch issues."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Optional

from .models import (
    AccessibilityDetails,
    CategoryDetails,
    ChecklistDetails,
    DetailKind,
    DocumentationDetails,
    QAIssue,
    SecurityDetails,
    Severity,
    TestResult,
    TestStatus,
    TestSuite,
    UxDetails,
)

logger = logging.getLogger(__name__)

EFFORT_BY_SEVERITY: Mapping[Severity, str] = {
    Severity.CRITICAL: "1-3 days",
    Severity.HIGH: "2-5 days",
    Severity.MEDIUM: "1-2 days",
    Severity.LOW: "2-4 hours",
}


def estimate_effort(severity: Severity) -> str:
    return EFFORT_BY_SEVERITY[severity]


@dataclass(frozen=True)
class _Draft:
    """Issue fields before an id is assigned."""

    prefix: str
    category: str
    severity: Severity
    description: str
    impact: str
    recommendation: str
    blocks_launch: bool
    estimated_effort: str


def _description(result: TestResult, fallback: str) -> str:
    return result.message or fallback


def _classify_checklist(suite: TestSuite, result: TestResult, details: ChecklistDetails) -> _Draft:
    severity = details.priority
    return _Draft(
        prefix="LR",
        category=details.category,
        severity=severity,
        description=_description(result, "Launch readiness check failed"),
        impact="Blocks product launch" if details.blocks_launch else "Delays launch readiness",
        recommendation=f"Complete {result.name} before launch",
        blocks_launch=details.blocks_launch,
        estimated_effort=details.estimated_fix_time or estimate_effort(severity),
    )


def map_security_severity(raw: Optional[str]) -> Severity:
    """Map a scanner severity (any case) onto the issue scale, defaulting to LOW."""

    if not raw:
        return Severity.LOW
    try:
        return Severity(raw.strip().upper())
    except ValueError:
        return Severity.LOW


def _classify_security(suite: TestSuite, result: TestResult, details: SecurityDetails) -> _Draft:
    severity = map_security_severity(details.severity)
    impact = (
        f"Security vulnerability: {details.vulnerability_type}"
        if details.vulnerability_type
        else "Security risk"
    )
    return _Draft(
        prefix="SEC",
        category="Security",
        severity=severity,
        description=_description(result, "Security test failed"),
        impact=impact,
        recommendation="Address security issue immediately",
        blocks_launch=severity is Severity.CRITICAL,
        estimated_effort=estimate_effort(severity),
    )


def _classify_accessibility(suite: TestSuite, result: TestResult, details: AccessibilityDetails) -> _Draft:
    worst_is_critical = any(violation.impact == "critical" for violation in details.violations)
    severity = Severity.CRITICAL if worst_is_critical else Severity.HIGH
    return _Draft(
        prefix="ACC",
        category="Accessibility",
        severity=severity,
        description=_description(result, "Accessibility test failed"),
        impact="Prevents users with disabilities from using the platform",
        recommendation=f"Fix accessibility violations to meet WCAG {details.wcag_level} standards",
        blocks_launch=False,
        estimated_effort=estimate_effort(severity),
    )


def ux_severity(usability_score: float) -> Severity:
    if usability_score < 3:
        return Severity.CRITICAL
    if usability_score < 6:
        return Severity.HIGH
    return Severity.MEDIUM


def _classify_ux(suite: TestSuite, result: TestResult, details: UxDetails) -> _Draft:
    severity = ux_severity(details.usability_score)
    return _Draft(
        prefix="UX",
        category="User Experience",
        severity=severity,
        description=_description(result, "UX test failed"),
        impact="Negatively impacts user experience and adoption",
        recommendation=details.recommendations[0] if details.recommendations else "Improve user experience",
        blocks_launch=severity is Severity.CRITICAL,
        estimated_effort=estimate_effort(severity),
    )


def documentation_severity(completeness: float) -> Severity:
    if completeness < 50:
        return Severity.HIGH
    if completeness < 80:
        return Severity.MEDIUM
    return Severity.LOW


def _classify_documentation(suite: TestSuite, result: TestResult, details: DocumentationDetails) -> _Draft:
    severity = documentation_severity(details.completeness)
    subject = details.document_type or result.name
    return _Draft(
        prefix="DOC",
        category="Documentation",
        severity=severity,
        description=_description(result, "Documentation audit failed"),
        impact=f"Users and support staff lack reliable {subject} guidance",
        recommendation=f"Bring {subject} documentation to full completeness ({details.completeness:g}% today)",
        blocks_launch=False,
        estimated_effort=estimate_effort(severity),
    )


def _classify_unmatched(suite: TestSuite, result: TestResult, details: Optional[CategoryDetails]) -> _Draft:
    return _Draft(
        prefix="QA",
        category=suite.category.label,
        severity=Severity.LOW,
        description=_description(result, "Check failed without category-specific details"),
        impact=f"Failing {suite.category.label.lower()} check in {suite.name}",
        recommendation=f"Investigate and fix {result.name}",
        blocks_launch=False,
        estimated_effort=estimate_effort(Severity.LOW),
    )


Handler = Callable[[TestSuite, TestResult, CategoryDetails], _Draft]

HANDLERS: Mapping[DetailKind, Handler] = {
    DetailKind.LAUNCH_CHECKLIST: _classify_checklist,
    DetailKind.SECURITY: _classify_security,
    DetailKind.ACCESSIBILITY: _classify_accessibility,
    DetailKind.UX: _classify_ux,
    DetailKind.DOCUMENTATION: _classify_documentation,
    DetailKind.GENERIC: _classify_unmatched,
}


def _draft_for(suite: TestSuite, result: TestResult) -> _Draft:
    details = result.details
    if details is None:
        return _classify_unmatched(suite, result, None)
    return HANDLERS[details.kind](suite, result, details)


def is_blocking(suite: TestSuite, result: TestResult) -> bool:
    """True when ``result`` is a failure whose issue would block launch."""

    return result.status is TestStatus.FAIL and _draft_for(suite, result).blocks_launch


def classify(suites: Iterable[TestSuite]) -> list[QAIssue]:
    """Return one :class:`QAIssue` per FAIL result, in suite then result order.

    Ids are ``<PREFIX>-<n>`` with ``n`` counting from 1 within each prefix.
    """

    counters: Counter[str] = Counter()
    issues: list[QAIssue] = []
    for suite in suites:
        for result in suite.results:
            if result.status is not TestStatus.FAIL:
                continue
            draft = _draft_for(suite, result)
            counters[draft.prefix] += 1
            issues.append(
                QAIssue(
                    id=f"{draft.prefix}-{counters[draft.prefix]}",
                    title=result.name,
                    category=draft.category,
                    severity=draft.severity,
                    description=draft.description,
                    impact=draft.impact,
                    recommendation=draft.recommendation,
                    blocks_launch=draft.blocks_launch,
                    estimated_effort=draft.estimated_effort,
                    source_suite=suite.name,
                    source_test=result.name,
                )
            )
    if issues:
        logger.info(
            "readiness.issues.classified",
            extra={
                "issue_count": len(issues),
                "blocking": sum(1 for issue in issues if issue.blocks_launch),
                "by_prefix": dict(counters),
            },
        )
    return issues


__all__ = [
    "EFFORT_BY_SEVERITY",
    "HANDLERS",
    "classify",
    "documentation_severity",
    "estimate_effort",
    "is_blocking",
    "map_security_severity",
    "ux_severity",
]
