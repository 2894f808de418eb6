"""Launch risk assessment derived from classified issues."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

from .models import Likelihood, QAIssue, RiskAssessment, RiskFactor, RiskLevel, Severity

MITIGATION_STRATEGIES = (
    "Implement comprehensive monitoring and alerting",
    "Prepare rapid response team for launch day",
    "Create detailed rollback procedures",
    "Set up real-time performance monitoring",
    "Establish clear escalation procedures",
    "Prepare user communication templates for issues",
)

CONTINGENCY_PLANS = (
    "Rollback to previous stable version if critical issues arise",
    "Implement feature flags to disable problematic features",
    "Scale infrastructure automatically based on load",
    "Activate backup payment processing if primary fails",
    "Deploy hotfixes rapidly through automated pipeline",
    "Communicate transparently with users about any issues",
)


def _mentions(issue: QAIssue, keyword: str) -> bool:
    return keyword in f"{issue.category} {issue.title}".lower()


@dataclass(frozen=True)
class RiskFactorTemplate:
    """Catalogue entry describing how one risk axis is evaluated."""

    factor: str
    impact: Likelihood
    baseline: Likelihood
    mitigation: str
    matches: Callable[[QAIssue], bool]


RISK_CATALOGUE: tuple[RiskFactorTemplate, ...] = (
    RiskFactorTemplate(
        factor="Critical Issues Remaining",
        impact=Likelihood.HIGH,
        baseline=Likelihood.LOW,
        mitigation="Resolve all critical issues before launch",
        matches=lambda issue: issue.severity is Severity.CRITICAL,
    ),
    RiskFactorTemplate(
        factor="Security Vulnerabilities",
        impact=Likelihood.HIGH,
        baseline=Likelihood.LOW,
        mitigation="Complete security audit and penetration testing",
        matches=lambda issue: issue.category == "Security",
    ),
    RiskFactorTemplate(
        factor="Payment System Issues",
        impact=Likelihood.HIGH,
        baseline=Likelihood.LOW,
        mitigation="Thorough payment system testing and monitoring",
        matches=lambda issue: _mentions(issue, "payment"),
    ),
    RiskFactorTemplate(
        factor="User Experience Problems",
        impact=Likelihood.MEDIUM,
        baseline=Likelihood.MEDIUM,
        mitigation="User testing and UX improvements",
        matches=lambda issue: issue.category == "User Experience",
    ),
    RiskFactorTemplate(
        factor="Performance Issues Under Load",
        impact=Likelihood.HIGH,
        baseline=Likelihood.LOW,
        mitigation="Load testing and performance optimization",
        matches=lambda issue: _mentions(issue, "performance"),
    ),
)


def risk_level(probability: Likelihood, impact: Likelihood, *, critical_present: bool = False) -> RiskLevel:
    """Combine probability and impact, escalating when a matching issue is critical."""

    if critical_present:
        return RiskLevel.CRITICAL
    exposure = probability.score * impact.score
    if exposure >= 6:
        return RiskLevel.HIGH
    if exposure >= 4:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def overall_risk(factors: Iterable[RiskFactor]) -> RiskLevel:
    """Reduce factor levels to one overall level; independent of factor order."""

    levels = [factor.risk_level for factor in factors]
    if RiskLevel.CRITICAL in levels:
        return RiskLevel.CRITICAL
    high = levels.count(RiskLevel.HIGH)
    if high >= 2:
        return RiskLevel.HIGH
    if high == 1:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def _evaluate(template: RiskFactorTemplate, issues: Sequence[QAIssue]) -> RiskFactor:
    matching = [issue for issue in issues if template.matches(issue)]
    probability = Likelihood.HIGH if matching else template.baseline
    return RiskFactor(
        factor=template.factor,
        probability=probability,
        impact=template.impact,
        risk_level=risk_level(
            probability,
            template.impact,
            critical_present=any(issue.severity is Severity.CRITICAL for issue in matching),
        ),
        mitigation=template.mitigation,
        issue_ids=tuple(issue.id for issue in matching),
    )


def assess_risk(
    issues: Sequence[QAIssue],
    catalogue: Sequence[RiskFactorTemplate] = RISK_CATALOGUE,
) -> RiskAssessment:
    """Evaluate every catalogue entry against the issue list."""

    factors = tuple(_evaluate(template, issues) for template in catalogue)
    return RiskAssessment(
        overall_risk=overall_risk(factors),
        risk_factors=factors,
        mitigation_strategies=MITIGATION_STRATEGIES,
        contingency_plans=CONTINGENCY_PLANS,
    )


__all__ = [
    "CONTINGENCY_PLANS",
    "MITIGATION_STRATEGIES",
    "RISK_CATALOGUE",
    "RiskFactorTemplate",
    "assess_risk",
    "overall_risk",
    "risk_level",
]
