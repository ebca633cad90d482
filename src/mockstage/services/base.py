"""
Base mock service machinery.

Provides the per-call pipeline shared by the mock service facades:
latency simulation, scenario error synthesis, request logging and
rolling performance windows.
"""

from __future__ import annotations

import asyncio
import random
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from mockstage.config.models import MockServiceConfig, TestScenario
from mockstage.data.store import ResponseStore
from mockstage.models.responses import MockResponse, ResponseType
from mockstage.utils.metrics import (
    PerformanceSummary,
    PerformanceTracker,
    RequestLog,
    RequestLogEntry,
    StructuredLogger,
)

T = TypeVar("T")


class MockServiceError(Exception):
    """Simulated service failure with a stable machine-readable code.

    Attributes:
        code: Error kind (API_ERROR, TIMEOUT, RATE_LIMIT, ...)
        status_code: HTTP status the real service would have returned
        method: Operation that failed
        scenario: Scenario that produced the error
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int,
        method: str | None = None,
        scenario: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        self.method = method
        self.scenario = scenario


class PreconditionError(ValueError):
    """Raised when call input is structurally invalid, before any simulated work."""

    pass


@dataclass(frozen=True)
class ScenarioError:
    """Error synthesized for a non-success scenario.

    Attributes:
        code: Stable error code
        status_code: HTTP status code
        template: Message template with {method} and {scenario} fields
    """

    code: str
    status_code: int
    template: str

    def build(self, method: str, scenario: str) -> MockServiceError:
        return MockServiceError(
            self.template.format(method=method, scenario=scenario),
            code=self.code,
            status_code=self.status_code,
            method=method,
            scenario=scenario,
        )


SCENARIO_ERRORS: dict[TestScenario, ScenarioError] = {
    TestScenario.API_ERROR: ScenarioError(
        "API_ERROR",
        500,
        "Mock API error in {method}: Simulated server error for testing error handling",
    ),
    TestScenario.TIMEOUT: ScenarioError(
        "TIMEOUT",
        408,
        "Mock timeout in {method}: Simulated request timeout for testing timeout handling",
    ),
    TestScenario.RATE_LIMIT: ScenarioError(
        "RATE_LIMIT",
        429,
        "Mock rate limit in {method}: Simulated rate limit exceeded for testing rate limiting",
    ),
    TestScenario.INVALID_INPUT: ScenarioError(
        "INVALID_INPUT",
        400,
        "Mock invalid input in {method}: Simulated invalid input for testing validation",
    ),
    TestScenario.PARTIAL_RESPONSE: ScenarioError(
        "PARTIAL_RESPONSE",
        206,
        "Mock partial response in {method}: Simulated incomplete response for testing resilience",
    ),
}

UNKNOWN_SCENARIO_ERROR = ScenarioError(
    "UNKNOWN_ERROR",
    500,
    'Mock unknown error in {method}: Unexpected scenario "{scenario}"',
)


def build_scenario_error(scenario: TestScenario | str, method: str) -> MockServiceError:
    """Synthesize the error for a non-success scenario."""
    try:
        template = SCENARIO_ERRORS[TestScenario(scenario)]
    except (KeyError, ValueError):
        template = UNKNOWN_SCENARIO_ERROR
    name = scenario.value if isinstance(scenario, TestScenario) else str(scenario)
    return template.build(method, name)


class MockServiceBase:
    """Shared pipeline for mock service facades.

    Each public operation validates its input, then runs through _call:
    log request, simulate latency, branch on scenario, produce the result,
    record duration. Request logs and performance windows are bounded and
    live for the lifetime of the instance.

    Subclasses set service_name and implement their operations on top of
    _call and _fetch.
    """

    service_name = "mock"

    def __init__(
        self,
        store: ResponseStore,
        config: MockServiceConfig | None = None,
        *,
        log_performance: bool = False,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        json_logs: bool = True,
    ) -> None:
        """Initialize the service.

        Args:
            store: Response store serving fixtures
            config: Service configuration (defaults when None)
            log_performance: Echo call durations to the log
            rng: Random source for simulated latency
            sleep: Awaitable sleep in seconds
            json_logs: Format request records as JSON
        """
        self._store = store
        self._config = config or MockServiceConfig()
        self._log_performance = log_performance
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._request_log = RequestLog()
        self._performance = PerformanceTracker()
        self._last_simulated_latency = 0
        self._structured = StructuredLogger(
            f"mockstage.services.{self.service_name}", json_format=json_logs
        )
        self._structured.set_context(service=self.service_name)

    @property
    def config(self) -> MockServiceConfig:
        """Get service configuration."""
        return self._config

    @property
    def store(self) -> ResponseStore:
        """Get the response store."""
        return self._store

    @property
    def scenario(self) -> TestScenario:
        """Scenario every call follows."""
        return self._config.default_scenario

    # -------------------------------------------------------------------------
    # Call pipeline
    # -------------------------------------------------------------------------

    async def _call(
        self,
        method: str,
        produce: Callable[[], T],
        request: Mapping[str, Any] | None = None,
    ) -> T:
        """Run one operation through the mock pipeline.

        Args:
            method: Operation name used in logs and metrics
            produce: Builds the success result
            request: Key request parameters for the request log

        Returns:
            The produced result

        Raises:
            MockServiceError: If the active scenario is not success
        """
        if self._config.log_requests:
            self._structured.info(
                "Mock request received",
                type=method,
                scenario=self.scenario.value,
                variability=self._config.enable_variability,
                simulate_latency=self._config.simulate_latency,
                **dict(request or {}),
            )

        start = time.perf_counter()
        await self._simulate_latency()

        scenario = self.scenario
        if scenario is not TestScenario.SUCCESS:
            error = self._scenario_error(method)
            self._record_request(method, success=False, error=str(error))
            raise error

        try:
            result = produce()
        except Exception as e:
            self._record_request(
                method,
                success=False,
                latency=self._elapsed_ms(start),
                error=str(e),
            )
            raise

        duration = self._elapsed_ms(start)
        self._record_request(method, success=True, latency=duration)
        self._record_performance(method, duration)
        return result

    def _scenario_error(self, method: str) -> MockServiceError:
        """Error for the active (non-success) scenario."""
        return build_scenario_error(self.scenario, method)

    def _fetch(self, response_type: ResponseType) -> MockResponse:
        """Fetch a success fixture, randomly varied if enabled."""
        if self._config.enable_variability:
            return self._store.get_random_variant(response_type, TestScenario.SUCCESS)
        return self._store.get_response(response_type, TestScenario.SUCCESS)

    async def _simulate_latency(self) -> int:
        """Sleep for a uniform random delay in [min_latency, max_latency] ms."""
        if not self._config.simulate_latency:
            self._last_simulated_latency = 0
            return 0

        latency = self._rng.randint(self._config.min_latency, self._config.max_latency)
        self._last_simulated_latency = latency
        await self._sleep(latency / 1000)
        return latency

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return (time.perf_counter() - start) * 1000

    def _record_request(
        self,
        method: str,
        *,
        success: bool,
        latency: float | None = None,
        error: str | None = None,
    ) -> None:
        entry = RequestLogEntry(
            type=method,
            scenario=self.scenario.value,
            success=success,
            latency=latency,
            error=error,
        )
        self._request_log.append(entry)
        if self._config.log_requests:
            self._structured.log_request(entry)

    def _record_performance(self, method: str, duration_ms: float) -> None:
        self._performance.record(method, duration_ms)
        if self._log_performance:
            self._structured.log_performance(method, duration_ms)

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    def get_request_logs(self) -> list[RequestLogEntry]:
        """Get recorded requests, oldest first (at most 100)."""
        return self._request_log.entries()

    def clear_request_logs(self) -> None:
        """Clear recorded requests."""
        self._request_log.clear()

    def get_performance_metrics(
        self, method: str | None = None
    ) -> PerformanceSummary | dict[str, PerformanceSummary]:
        """Get performance statistics.

        Args:
            method: Operation name, or None for every operation

        Returns:
            One summary for a named method, else summaries keyed by method
        """
        if method is not None:
            return self._performance.summary(method)
        return self._performance.summaries()

    def clear_performance_metrics(self) -> None:
        """Clear all performance windows."""
        self._performance.clear()

    def get_last_simulated_latency(self) -> int:
        """Latency (ms) slept by the most recent call, 0 when disabled."""
        return self._last_simulated_latency
