"""Data models for launch readiness assessment."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, ClassVar, Iterable, Iterator, Mapping, Optional, Sequence, Union

from .exceptions import PlanError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _serialise(value: Any) -> Any:
    """Convert models into JSON-serialisable structures."""

    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        payload: dict[str, Any] = {}
        kind = getattr(type(value), "kind", None)
        if isinstance(kind, DetailKind):
            payload["kind"] = kind.value
        for item in fields(value):
            payload[item.name] = _serialise(getattr(value, item.name))
        return payload
    if isinstance(value, Mapping):
        return {str(key): _serialise(item) for key, item in value.items()}
    if isinstance(value, (frozenset, set)):
        return sorted(_serialise(item) for item in value)
    if isinstance(value, (list, tuple)):
        return [_serialise(item) for item in value]
    return value


class TestStatus(str, Enum):
    """Outcome of a single check."""

    __test__ = False

    PASS = "PASS"
    FAIL = "FAIL"
    WARNING = "WARNING"
    SKIP = "SKIP"
    PENDING = "PENDING"


class SuiteStatus(str, Enum):
    """Aggregate status of a probe suite."""

    PASS = "PASS"
    FAIL = "FAIL"
    WARNING = "WARNING"
    SKIP = "SKIP"


class ProbeCategory(str, Enum):
    """Probe categories contributing to a launch assessment."""

    USER_TIER = "user_tier"
    WORKFLOW = "workflow"
    ACCESSIBILITY = "accessibility"
    SECURITY = "security"
    MOBILE = "mobile"
    PERFORMANCE = "performance"
    INTEGRATION = "integration"
    DATA_VALIDATION = "data_validation"
    DOCUMENTATION = "documentation"
    UX = "ux"
    LAUNCH_CHECKLIST = "launch_checklist"
    OTHER = "other"

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS = {
    ProbeCategory.USER_TIER: "User Tier",
    ProbeCategory.WORKFLOW: "Workflow",
    ProbeCategory.ACCESSIBILITY: "Accessibility",
    ProbeCategory.SECURITY: "Security",
    ProbeCategory.MOBILE: "Mobile",
    ProbeCategory.PERFORMANCE: "Performance",
    ProbeCategory.INTEGRATION: "Integration",
    ProbeCategory.DATA_VALIDATION: "Data Validation",
    ProbeCategory.DOCUMENTATION: "Documentation",
    ProbeCategory.UX: "User Experience",
    ProbeCategory.LAUNCH_CHECKLIST: "Launch Readiness",
    ProbeCategory.OTHER: "General",
}


class DetailKind(str, Enum):
    """Discriminant for category-specific result payloads."""

    LAUNCH_CHECKLIST = "launch_checklist"
    SECURITY = "security"
    ACCESSIBILITY = "accessibility"
    UX = "ux"
    DOCUMENTATION = "documentation"
    GENERIC = "generic"


class Severity(str, Enum):
    """Unified issue severity scale."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.CRITICAL: 0, Severity.HIGH: 1, Severity.MEDIUM: 2, Severity.LOW: 3}


class Likelihood(str, Enum):
    """Three-level scale used for risk probability and impact."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def score(self) -> int:
        return {"LOW": 1, "MEDIUM": 2, "HIGH": 3}[self.value]


class RiskLevel(str, Enum):
    """Four-level risk scale."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class LaunchRecommendation(str, Enum):
    """Go/no-go verdict used by the full launch report."""

    GO = "GO"
    GO_WITH_CONDITIONS = "GO_WITH_CONDITIONS"
    NO_GO = "NO_GO"


class OverallStatus(str, Enum):
    """Overall launch readiness verdict."""

    READY = "READY"
    CONDITIONAL = "CONDITIONAL"
    NOT_READY = "NOT_READY"

    @property
    def recommendation(self) -> LaunchRecommendation:
        return {
            OverallStatus.READY: LaunchRecommendation.GO,
            OverallStatus.CONDITIONAL: LaunchRecommendation.GO_WITH_CONDITIONS,
            OverallStatus.NOT_READY: LaunchRecommendation.NO_GO,
        }[self]


class TaskStatus(str, Enum):
    """Progress of a launch task."""

    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


# ---------------------------------------------------------------------------
# Category payloads
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChecklistDetails:
    """Launch checklist item with an explicit blocking flag."""

    kind: ClassVar[DetailKind] = DetailKind.LAUNCH_CHECKLIST

    category: str
    priority: Severity
    blocks_launch: bool = False
    estimated_fix_time: str = ""


@dataclass(frozen=True)
class SecurityDetails:
    """Security scan finding."""

    kind: ClassVar[DetailKind] = DetailKind.SECURITY

    severity: Optional[str] = None
    vulnerability_type: Optional[str] = None
    cve: Optional[str] = None


@dataclass(frozen=True)
class AccessibilityViolation:
    """Single accessibility rule violation."""

    id: str
    impact: str
    description: str = ""
    help_url: Optional[str] = None


@dataclass(frozen=True)
class AccessibilityDetails:
    """Accessibility scan result listing rule violations."""

    kind: ClassVar[DetailKind] = DetailKind.ACCESSIBILITY

    violations: tuple[AccessibilityViolation, ...] = ()
    wcag_level: str = "AA"


@dataclass(frozen=True)
class UxDetails:
    """Usability finding with a 0-10 usability score."""

    kind: ClassVar[DetailKind] = DetailKind.UX

    usability_score: float
    user_flow: str = ""
    interaction_type: str = ""
    recommendations: tuple[str, ...] = ()


@dataclass(frozen=True)
class DocumentationDetails:
    """Documentation audit scores on a 0-100 scale."""

    kind: ClassVar[DetailKind] = DetailKind.DOCUMENTATION

    document_type: str
    completeness: float
    accuracy: Optional[float] = None
    clarity: Optional[float] = None


@dataclass(frozen=True)
class GenericDetails:
    """Opaque payload for categories without a classification rule."""

    kind: ClassVar[DetailKind] = DetailKind.GENERIC

    payload: Mapping[str, Any] = field(default_factory=dict)


CategoryDetails = Union[
    ChecklistDetails,
    SecurityDetails,
    AccessibilityDetails,
    UxDetails,
    DocumentationDetails,
    GenericDetails,
]


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _parse_checklist(payload: Mapping[str, Any]) -> ChecklistDetails:
    return ChecklistDetails(
        category=str(payload.get("category", ProbeCategory.LAUNCH_CHECKLIST.label)),
        priority=Severity(str(payload.get("priority", "MEDIUM")).strip().upper()),
        blocks_launch=bool(payload.get("blocks_launch", False)),
        estimated_fix_time=str(payload.get("estimated_fix_time", "") or ""),
    )


def _parse_security(payload: Mapping[str, Any]) -> SecurityDetails:
    return SecurityDetails(
        severity=_optional_str(payload.get("severity")),
        vulnerability_type=_optional_str(payload.get("vulnerability_type")),
        cve=_optional_str(payload.get("cve")),
    )


def _parse_accessibility(payload: Mapping[str, Any]) -> AccessibilityDetails:
    violations = tuple(
        AccessibilityViolation(
            id=str(item.get("id", "")),
            impact=str(item.get("impact", "minor")).strip().lower(),
            description=str(item.get("description", "")),
            help_url=_optional_str(item.get("help_url")),
        )
        for item in payload.get("violations") or ()
    )
    return AccessibilityDetails(violations=violations, wcag_level=str(payload.get("wcag_level", "AA")))


def _parse_ux(payload: Mapping[str, Any]) -> UxDetails:
    return UxDetails(
        usability_score=float(payload["usability_score"]),
        user_flow=str(payload.get("user_flow", "")),
        interaction_type=str(payload.get("interaction_type", "")),
        recommendations=tuple(str(item) for item in payload.get("recommendations") or ()),
    )


def _parse_documentation(payload: Mapping[str, Any]) -> DocumentationDetails:
    return DocumentationDetails(
        document_type=str(payload.get("document_type", "")),
        completeness=float(payload["completeness"]),
        accuracy=_optional_float(payload.get("accuracy")),
        clarity=_optional_float(payload.get("clarity")),
    )


def _parse_generic(payload: Mapping[str, Any]) -> GenericDetails:
    return GenericDetails(payload={key: value for key, value in payload.items() if key != "kind"})


_DETAIL_PARSERS: Mapping[DetailKind, Callable[[Mapping[str, Any]], CategoryDetails]] = {
    DetailKind.LAUNCH_CHECKLIST: _parse_checklist,
    DetailKind.SECURITY: _parse_security,
    DetailKind.ACCESSIBILITY: _parse_accessibility,
    DetailKind.UX: _parse_ux,
    DetailKind.DOCUMENTATION: _parse_documentation,
    DetailKind.GENERIC: _parse_generic,
}


def _infer_kind(payload: Mapping[str, Any]) -> DetailKind:
    if "violations" in payload:
        return DetailKind.ACCESSIBILITY
    if "usability_score" in payload:
        return DetailKind.UX
    if "blocks_launch" in payload or "priority" in payload:
        return DetailKind.LAUNCH_CHECKLIST
    if "completeness" in payload:
        return DetailKind.DOCUMENTATION
    if "severity" in payload or "vulnerability_type" in payload:
        return DetailKind.SECURITY
    return DetailKind.GENERIC


def parse_details(payload: Mapping[str, Any]) -> CategoryDetails:
    """Build a typed category payload from a raw mapping.

    An explicit ``kind`` key selects the payload type. Without one, the type
    is inferred from which category-specific field is present.
    """

    raw_kind = payload.get("kind")
    kind = DetailKind(str(raw_kind)) if raw_kind else _infer_kind(payload)
    return _DETAIL_PARSERS[kind](payload)


# ---------------------------------------------------------------------------
# Results and suites
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TestResult:
    """Atomic outcome of one check."""

    __test__: ClassVar[bool] = False

    name: str
    status: TestStatus
    message: str = ""
    duration_ms: int = 0
    timestamp: datetime = field(default_factory=_utcnow)
    details: Optional[CategoryDetails] = None
    metrics: Mapping[str, float | str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.status is None:
            raise ValueError(f"Test result '{self.name}' is missing a status")
        if not isinstance(self.status, TestStatus):
            object.__setattr__(self, "status", TestStatus(str(self.status).upper()))
        if self.duration_ms < 0:
            raise ValueError(f"Test result '{self.name}' has negative duration {self.duration_ms}")

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TestResult":
        """Build a result from a recorded mapping."""

        timestamp = payload.get("timestamp")
        if isinstance(timestamp, str):
            parsed_timestamp = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
        elif isinstance(timestamp, datetime):
            parsed_timestamp = timestamp
        else:
            parsed_timestamp = _utcnow()
        details = payload.get("details")
        return cls(
            name=str(payload["name"]),
            status=TestStatus(str(payload["status"]).upper()),
            message=str(payload.get("message", "")),
            duration_ms=int(payload.get("duration_ms", 0)),
            timestamp=parsed_timestamp,
            details=parse_details(details) if isinstance(details, Mapping) else None,
            metrics=dict(payload.get("metrics") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return _serialise(self)


def derive_suite_status(results: Sequence[TestResult]) -> SuiteStatus:
    """Apply suite status precedence: FAIL, then WARNING, then all-skipped."""

    statuses = [result.status for result in results]
    if TestStatus.FAIL in statuses:
        return SuiteStatus.FAIL
    if TestStatus.WARNING in statuses:
        return SuiteStatus.WARNING
    if all(status in {TestStatus.SKIP, TestStatus.PENDING} for status in statuses):
        return SuiteStatus.SKIP
    return SuiteStatus.PASS


@dataclass(frozen=True)
class TestSuite:
    """Results produced by one probe invocation."""

    __test__: ClassVar[bool] = False

    name: str
    category: ProbeCategory = ProbeCategory.OTHER
    results: tuple[TestResult, ...] = ()
    duration_ms: int = 0
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        object.__setattr__(self, "results", tuple(self.results))
        if self.duration_ms < 0:
            raise ValueError(f"Suite '{self.name}' has negative duration {self.duration_ms}")

    @property
    def status(self) -> SuiteStatus:
        return derive_suite_status(self.results)

    @property
    def total(self) -> int:
        return len(self.results)

    def count(self, status: TestStatus) -> int:
        return sum(1 for result in self.results if result.status is status)

    def results_with(self, status: TestStatus) -> Iterator[TestResult]:
        return (result for result in self.results if result.status is status)

    def to_dict(self) -> dict[str, Any]:
        payload = _serialise(self)
        payload["status"] = self.status.value
        return payload


# ---------------------------------------------------------------------------
# Classified issues, risks and tasks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class QAIssue:
    """Classified, launch-relevant finding traced to one failing result."""

    id: str
    title: str
    category: str
    severity: Severity
    description: str
    impact: str
    recommendation: str
    blocks_launch: bool
    estimated_effort: str
    source_suite: str
    source_test: str

    def to_dict(self) -> dict[str, Any]:
        return _serialise(self)


@dataclass(frozen=True)
class RiskFactor:
    """Named risk axis in the launch risk profile."""

    factor: str
    probability: Likelihood
    impact: Likelihood
    risk_level: RiskLevel
    mitigation: str
    issue_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class RiskAssessment:
    """Launch risk profile derived from classified issues."""

    overall_risk: RiskLevel
    risk_factors: tuple[RiskFactor, ...]
    mitigation_strategies: tuple[str, ...] = ()
    contingency_plans: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return _serialise(self)


@dataclass(frozen=True)
class LaunchTask:
    """Remediation or launch operation unit."""

    id: str
    task: str
    owner: str
    priority: Severity
    estimated_time: str
    dependencies: frozenset[str] = frozenset()
    status: TaskStatus = TaskStatus.NOT_STARTED
    issue_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class LaunchPlan:
    """Launch tasks grouped by phase."""

    prelaunch: tuple[LaunchTask, ...] = ()
    launch_day: tuple[LaunchTask, ...] = ()
    post_launch: tuple[LaunchTask, ...] = ()

    @property
    def tasks(self) -> tuple[LaunchTask, ...]:
        return self.prelaunch + self.launch_day + self.post_launch

    def get(self, task_id: str) -> Optional[LaunchTask]:
        return next((task for task in self.tasks if task.id == task_id), None)

    def ordered(self) -> tuple[LaunchTask, ...]:
        """Return tasks so that every task follows its dependencies."""

        tasks = {task.id: task for task in self.tasks}
        pending = {task_id: set(task.dependencies) for task_id, task in tasks.items()}
        ordered: list[LaunchTask] = []
        ready = deque(task_id for task_id, deps in pending.items() if not deps)
        while ready:
            task_id = ready.popleft()
            ordered.append(tasks[task_id])
            for other_id, deps in pending.items():
                if task_id in deps:
                    deps.discard(task_id)
                    if not deps:
                        ready.append(other_id)
        if len(ordered) != len(tasks):
            unresolved = sorted(set(tasks) - {task.id for task in ordered})
            raise PlanError(f"Launch plan has unresolved dependencies: {', '.join(unresolved)}")
        return tuple(ordered)

    def to_dict(self) -> dict[str, Any]:
        return _serialise(self)


# ---------------------------------------------------------------------------
# Assessment
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LaunchAssessment:
    """Final launch readiness verdict for one run."""

    overall_status: OverallStatus
    readiness_score: int
    test_suites: tuple[TestSuite, ...]
    critical_issues: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()
    environment: str = "unknown"
    duration_ms: int = 0
    timestamp: datetime = field(default_factory=_utcnow)

    def _count(self, status: TestStatus) -> int:
        return sum(suite.count(status) for suite in self.test_suites)

    @property
    def total_tests(self) -> int:
        return sum(suite.total for suite in self.test_suites)

    @property
    def passed_tests(self) -> int:
        return self._count(TestStatus.PASS)

    @property
    def failed_tests(self) -> int:
        return self._count(TestStatus.FAIL)

    @property
    def warning_tests(self) -> int:
        return self._count(TestStatus.WARNING)

    @property
    def skipped_tests(self) -> int:
        return self._count(TestStatus.SKIP)

    @property
    def pending_tests(self) -> int:
        return self._count(TestStatus.PENDING)

    def results(self) -> Iterable[tuple[TestSuite, TestResult]]:
        for suite in self.test_suites:
            for result in suite.results:
                yield suite, result

    def to_dict(self) -> dict[str, Any]:
        payload = _serialise(self)
        payload["test_suites"] = [suite.to_dict() for suite in self.test_suites]
        payload["summary"] = {
            "total": self.total_tests,
            "passed": self.passed_tests,
            "failed": self.failed_tests,
            "warning": self.warning_tests,
            "skipped": self.skipped_tests,
            "pending": self.pending_tests,
        }
        return payload


__all__ = [
    "AccessibilityDetails",
    "AccessibilityViolation",
    "CategoryDetails",
    "ChecklistDetails",
    "DetailKind",
    "DocumentationDetails",
    "GenericDetails",
    "LaunchAssessment",
    "LaunchPlan",
    "LaunchRecommendation",
    "LaunchTask",
    "Likelihood",
    "OverallStatus",
    "ProbeCategory",
    "QAIssue",
    "RiskAssessment",
    "RiskFactor",
    "RiskLevel",
    "SecurityDetails",
    "Severity",
    "SuiteStatus",
    "TaskStatus",
    "TestResult",
    "TestStatus",
    "TestSuite",
    "UxDetails",
    "derive_suite_status",
    "parse_details",
]
