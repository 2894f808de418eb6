from __future__ import annotations

import asyncio
from typing import Sequence

import pytest

from LaunchReadiness.readiness.exceptions import ProbeError, ProbeTimeoutError
from LaunchReadiness.readiness.models import ProbeCategory, SuiteStatus, TestResult, TestStatus
from LaunchReadiness.readiness.probes import CallableProbe, StaticProbe
from LaunchReadiness.readiness.runner import SuiteRunner, failed_suite, run_isolated


def _passing(name: str = "ok") -> TestResult:
    return TestResult(name=name, status=TestStatus.PASS)


def test_run_isolated_captures_value_and_errors() -> None:
    ok = asyncio.run(run_isolated("probe", lambda: 42))
    assert ok.ok and ok.value == 42

    def boom() -> int:
        raise RuntimeError("database unreachable")

    failed = asyncio.run(run_isolated("probe", boom))
    assert not failed.ok
    assert isinstance(failed.error, ProbeError)
    assert failed.error.probe_name == "probe"
    assert "database unreachable" in failed.error.reason


def test_run_isolated_times_out_awaitables() -> None:
    async def slow() -> int:
        await asyncio.sleep(5)
        return 1

    outcome = asyncio.run(run_isolated("slow", slow, timeout=0.01))
    assert isinstance(outcome.error, ProbeTimeoutError)


def test_sync_probe_crash_becomes_failed_suite() -> None:
    def crash() -> Sequence[TestResult]:
        raise ValueError("fixture missing")

    suite = SuiteRunner().run(CallableProbe(name="Payments", func=crash, category=ProbeCategory.INTEGRATION))
    assert suite.name == "Payments"
    assert suite.category is ProbeCategory.INTEGRATION
    assert suite.status is SuiteStatus.FAIL
    assert suite.total == 1
    result = suite.results[0]
    assert result.name == "Payments execution"
    assert result.message.startswith("Probe failed: ")
    assert "fixture missing" in result.message
    assert result.duration_ms == 0


def test_async_probe_crash_and_timeout_are_isolated() -> None:
    async def crash() -> Sequence[TestResult]:
        raise RuntimeError("browser closed")

    async def hang() -> Sequence[TestResult]:
        await asyncio.sleep(5)
        return [_passing()]

    runner = SuiteRunner(timeout_seconds=0.05)
    suites = runner.run_all(
        [
            CallableProbe(name="Crashing", func=crash),
            CallableProbe(name="Hanging", func=hang),
            StaticProbe(name="Healthy", results=[_passing()]),
        ]
    )
    assert [suite.name for suite in suites] == ["Crashing", "Hanging", "Healthy"]
    assert [suite.status for suite in suites] == [SuiteStatus.FAIL, SuiteStatus.FAIL, SuiteStatus.PASS]
    assert "timed out" in suites[1].results[0].message


def test_probe_returning_mappings_is_coerced() -> None:
    probe = CallableProbe(name="Recorded", func=lambda: [{"name": "a", "status": "PASS"}])
    suite = SuiteRunner().run(probe)
    assert suite.results[0].status is TestStatus.PASS


@pytest.mark.parametrize("outcome", [None, "PASS", {"name": "a"}, [object()]])
def test_invalid_probe_output_fails_suite(outcome: object) -> None:
    suite = SuiteRunner().run(CallableProbe(name="Odd", func=lambda: outcome))
    assert suite.status is SuiteStatus.FAIL
    assert suite.results[0].name == "Odd execution"


def test_parallel_mode_preserves_input_order() -> None:
    def delayed(name: str, delay: float) -> CallableProbe:
        async def run() -> Sequence[TestResult]:
            await asyncio.sleep(delay)
            return [_passing(name)]

        return CallableProbe(name=name, func=run)

    probes = [delayed("first", 0.05), delayed("second", 0.0), delayed("third", 0.02)]
    suites = SuiteRunner().run_all(probes, parallel=True)
    assert [suite.name for suite in suites] == ["first", "second", "third"]


def test_empty_probe_yields_skip_suite() -> None:
    suite = SuiteRunner().run(StaticProbe(name="Nothing"))
    assert suite.total == 0
    assert suite.status is SuiteStatus.SKIP


def test_failed_suite_uses_probe_reason() -> None:
    suite = failed_suite("Docs", ProbeError("Docs", "index missing"))
    assert suite.results[0].message == "Probe failed: index missing"


def test_duration_uses_injected_clock() -> None:
    ticks = iter([10.0, 10.25])
    runner = SuiteRunner(clock=lambda: next(ticks))
    suite = runner.run(StaticProbe(name="Timed", results=[_passing()]))
    assert suite.duration_ms == 250


class SmokeCheck:
    def run(self) -> Sequence[TestResult]:
        return [_passing("homepage")]


def test_nameless_tester_is_named_after_its_class() -> None:
    suite = SuiteRunner().run(SmokeCheck())
    assert suite.name == "SmokeCheck"
    assert suite.status is SuiteStatus.PASS
    assert suite.results[0].name == "homepage"


def test_own_timeout_is_reported_as_an_ordinary_failure() -> None:
    async def connect() -> Sequence[TestResult]:
        raise asyncio.TimeoutError("connect to api.example.com:443 timed out")

    outcome = asyncio.run(run_isolated("Upstream", connect, timeout=30))
    assert isinstance(outcome.error, ProbeError)
    assert not isinstance(outcome.error, ProbeTimeoutError)
    assert "api.example.com" in outcome.error.reason

    suite = SuiteRunner(timeout_seconds=30).run(CallableProbe(name="Upstream", func=connect))
    message = suite.results[0].message
    assert suite.status is SuiteStatus.FAIL
    assert "api.example.com" in message
    assert "timed out after 30" not in message
