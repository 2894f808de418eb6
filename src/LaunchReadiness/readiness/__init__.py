"""Launch readiness assessment: probes, aggregation, issues, risk and planning."""

from .aggregator import aggregate, decide_status, readiness_score
from .classifier import HANDLERS, classify
from .config import EngineConfig, ReadinessThresholds, load_engine_config
from .exceptions import (
    ConfigurationError,
    LaunchReadinessError,
    NoTestsExecutedError,
    PlanError,
    ProbeError,
    ProbeTimeoutError,
)
from .metrics import MetricPoint, MetricsEmitter
from .models import (
    DetailKind,
    LaunchAssessment,
    LaunchPlan,
    LaunchRecommendation,
    LaunchTask,
    OverallStatus,
    ProbeCategory,
    QAIssue,
    RiskAssessment,
    RiskFactor,
    RiskLevel,
    Severity,
    SuiteStatus,
    TestResult,
    TestStatus,
    TestSuite,
    derive_suite_status,
    parse_details,
)
from .pipeline import LaunchReadinessPipeline, exit_code
from .planner import plan
from .probes import CallableProbe, RecordedProbe, StaticProbe, Tester, load_recorded_probes
from .report import LaunchReport, build_launch_report
from .risk import assess_risk, overall_risk
from .runner import SuiteRunner, run_isolated
from .telemetry import configure_otel

__all__ = [
    "CallableProbe",
    "ConfigurationError",
    "DetailKind",
    "EngineConfig",
    "HANDLERS",
    "LaunchAssessment",
    "LaunchPlan",
    "LaunchReadinessError",
    "LaunchReadinessPipeline",
    "LaunchRecommendation",
    "LaunchReport",
    "LaunchTask",
    "MetricPoint",
    "MetricsEmitter",
    "NoTestsExecutedError",
    "OverallStatus",
    "PlanError",
    "ProbeCategory",
    "ProbeError",
    "ProbeTimeoutError",
    "QAIssue",
    "ReadinessThresholds",
    "RecordedProbe",
    "RiskAssessment",
    "RiskFactor",
    "RiskLevel",
    "Severity",
    "StaticProbe",
    "SuiteRunner",
    "SuiteStatus",
    "TestResult",
    "TestStatus",
    "TestSuite",
    "Tester",
    "aggregate",
    "assess_risk",
    "build_launch_report",
    "classify",
    "configure_otel",
    "decide_status",
    "derive_suite_status",
    "exit_code",
    "load_engine_config",
    "load_recorded_probes",
    "overall_risk",
    "parse_details",
    "plan",
    "readiness_score",
    "run_isolated",
]
