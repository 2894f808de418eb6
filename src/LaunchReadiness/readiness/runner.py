"""Fault-isolated execution of readiness probes."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from contextlib import nullcontext
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Iterable, Mapping, Optional, Sequence, TypeVar, Union

from opentelemetry.trace import Status, StatusCode, Tracer

from .exceptions import ProbeError, ProbeTimeoutError
from .models import ProbeCategory, TestResult, TestStatus, TestSuite
from .probes import Tester

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Isolated(Generic[T]):
    """Either the value an isolated call produced or the error it raised."""

    value: Optional[T] = None
    error: Optional[ProbeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _describe(exc: BaseException) -> str:
    text = str(exc)
    return f"{type(exc).__name__}: {text}" if text else type(exc).__name__


async def _own_timeouts(name: str, awaitable: Awaitable[T]) -> T:
    """Await ``awaitable``, reporting a timeout it raises itself as an ordinary failure."""

    try:
        return await awaitable
    except asyncio.TimeoutError as exc:
        raise ProbeError(name, _describe(exc)) from exc


async def run_isolated(
    name: str,
    fn: Callable[[], Union[T, Awaitable[T]]],
    *,
    timeout: Optional[float] = None,
) -> Isolated[T]:
    """Invoke ``fn`` once, converting any failure into an :class:`Isolated` error.

    Awaitable outcomes are awaited, bounded by ``timeout`` when one is given.
    Only expiry of that bound yields :class:`ProbeTimeoutError`; a timeout the
    awaitable raises on its own keeps its error text.
    """

    try:
        outcome = fn()
        if inspect.isawaitable(outcome):
            try:
                outcome = await asyncio.wait_for(_own_timeouts(name, outcome), timeout)
            except asyncio.TimeoutError:
                return Isolated(error=ProbeTimeoutError(name, timeout))
    except ProbeError as exc:
        return Isolated(error=exc)
    except Exception as exc:
        return Isolated(error=ProbeError(name, _describe(exc)))
    return Isolated(value=outcome)


def _coerce_results(probe_name: str, outcome: Any) -> tuple[TestResult, ...]:
    if isinstance(outcome, (str, bytes, Mapping)) or not isinstance(outcome, Iterable):
        raise ProbeError(probe_name, f"expected a sequence of results, got {type(outcome).__name__}")
    results: list[TestResult] = []
    for index, item in enumerate(outcome):
        if isinstance(item, TestResult):
            results.append(item)
        elif isinstance(item, Mapping):
            try:
                results.append(TestResult.from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                raise ProbeError(probe_name, f"result #{index} is invalid: {_describe(exc)}") from exc
        else:
            raise ProbeError(probe_name, f"result #{index} has unsupported type {type(item).__name__}")
    return tuple(results)


def _probe_category(probe: Any) -> ProbeCategory:
    value = getattr(probe, "category", ProbeCategory.OTHER)
    if isinstance(value, ProbeCategory):
        return value
    try:
        return ProbeCategory(str(value))
    except ValueError:
        return ProbeCategory.OTHER


def failed_suite(
    name: str,
    error: BaseException,
    *,
    category: ProbeCategory = ProbeCategory.OTHER,
    duration_ms: int = 0,
) -> TestSuite:
    """Build a suite holding one synthetic FAIL result for a crashed probe."""

    reason = error.reason if isinstance(error, ProbeError) else _describe(error)
    synthetic = TestResult(
        name=f"{name} execution",
        status=TestStatus.FAIL,
        message=f"Probe failed: {reason}",
        duration_ms=0,
    )
    return TestSuite(name=name, category=category, results=(synthetic,), duration_ms=duration_ms)


class SuiteRunner:
    """Executes probes with fault isolation and timing."""

    def __init__(
        self,
        *,
        timeout_seconds: Optional[float] = None,
        tracer: Optional[Tracer] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._timeout = timeout_seconds
        self._tracer = tracer
        self._clock = clock

    async def _invoke(self, probe: Tester, name: str) -> tuple[TestResult, ...]:
        outcome = probe.run()
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return _coerce_results(name, outcome)

    async def run_async(self, probe: Tester) -> TestSuite:
        name = str(getattr(probe, "name", "") or type(probe).__name__)
        category = _probe_category(probe)
        span_context = (
            self._tracer.start_as_current_span(
                "readiness.suite",
                attributes={"readiness.suite": name, "readiness.category": category.value},
            )
            if self._tracer
            else nullcontext()
        )
        with span_context as span:
            started = self._clock()
            isolated = await run_isolated(name, lambda: self._invoke(probe, name), timeout=self._timeout)
            duration_ms = max(0, int(round((self._clock() - started) * 1000)))
            if isolated.ok:
                suite = TestSuite(
                    name=name,
                    category=category,
                    results=isolated.value or (),
                    duration_ms=duration_ms,
                )
                if not suite.results:
                    logger.warning("readiness.probe.empty", extra={"suite": name})
            else:
                logger.warning(
                    "readiness.probe.failed",
                    extra={"suite": name, "error": str(isolated.error), "duration_ms": duration_ms},
                )
                suite = failed_suite(name, isolated.error, category=category, duration_ms=duration_ms)
            if span is not None:
                span.set_attribute("readiness.duration_ms", duration_ms)
                span.set_attribute("readiness.results", suite.total)
                span.set_attribute("readiness.status", suite.status.value)
                if isolated.ok:
                    span.set_status(Status(StatusCode.OK))
                else:
                    span.set_status(Status(StatusCode.ERROR, description=str(isolated.error)))
        logger.info(
            "readiness.suite.complete",
            extra={
                "suite": name,
                "status": suite.status.value,
                "results": suite.total,
                "duration_ms": suite.duration_ms,
            },
        )
        return suite

    def run(self, probe: Tester) -> TestSuite:
        """Run one probe to completion and return its suite."""

        return asyncio.run(self.run_async(probe))

    async def run_all_async(self, probes: Sequence[Tester], *, parallel: bool = False) -> list[TestSuite]:
        if parallel:
            suites = await asyncio.gather(*(self.run_async(probe) for probe in probes))
            return list(suites)
        return [await self.run_async(probe) for probe in probes]

    def run_all(self, probes: Sequence[Tester], *, parallel: bool = False) -> list[TestSuite]:
        """Run every probe, returning suites in the order the probes were given."""

        return asyncio.run(self.run_all_async(probes, parallel=parallel))


__all__ = ["Isolated", "SuiteRunner", "failed_suite", "run_isolated"]
