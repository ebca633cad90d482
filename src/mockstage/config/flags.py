"""
Feature Flag Resolution.

Parses string-typed FF_* flags into booleans, scenarios and a
MockServiceConfig. Misconfiguration never raises here: invalid values are
logged as warnings and replaced by safe defaults, and mock mode is never
enabled in production unless explicitly overridden.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from mockstage.config.environment import (
    ensure_dotenv_loaded,
    get_environment_name,
    is_production,
)
from mockstage.config.models import (
    DEFAULT_MAX_LATENCY,
    DEFAULT_MIN_LATENCY,
    MockServiceConfig,
    TestScenario,
)

logger = logging.getLogger(__name__)


TRUTHY_FLAG_VALUES = frozenset({"1", "true", "yes", "on", "y", "t"})
FALSY_FLAG_VALUES = frozenset({"0", "false", "no", "off", "n", "f"})

# Flag names (environment variable names)
FF_USE_MOCK_API = "FF_USE_MOCK_API"
FF_MOCK_SCENARIO = "FF_MOCK_SCENARIO"
FF_MOCK_VARIABILITY = "FF_MOCK_VARIABILITY"
FF_SIMULATE_LATENCY = "FF_SIMULATE_LATENCY"
FF_MIN_LATENCY = "FF_MIN_LATENCY"
FF_MAX_LATENCY = "FF_MAX_LATENCY"
FF_LOG_MOCK_REQUESTS = "FF_LOG_MOCK_REQUESTS"
FF_STRICT_MOCK_VALIDATION = "FF_STRICT_MOCK_VALIDATION"
FF_LOG_PERFORMANCE = "FF_LOG_PERFORMANCE"
ALLOW_TEST_MODE_IN_PRODUCTION = "ALLOW_TEST_MODE_IN_PRODUCTION"
MOCKSTAGE_CACHE_TTL = "MOCKSTAGE_CACHE_TTL"

ALL_FLAGS = (
    FF_USE_MOCK_API,
    FF_MOCK_SCENARIO,
    FF_MOCK_VARIABILITY,
    FF_SIMULATE_LATENCY,
    FF_MIN_LATENCY,
    FF_MAX_LATENCY,
    FF_LOG_MOCK_REQUESTS,
    FF_STRICT_MOCK_VALIDATION,
    FF_LOG_PERFORMANCE,
    ALLOW_TEST_MODE_IN_PRODUCTION,
    MOCKSTAGE_CACHE_TTL,
)


def parse_flag(raw: str | bool | None) -> bool | None:
    """Parse a raw flag value.

    Returns:
        True/False for recognized tokens, None when unparseable
    """
    if isinstance(raw, bool):
        return raw
    if raw is None:
        return None
    token = str(raw).strip().lower()
    if token in TRUTHY_FLAG_VALUES:
        return True
    if token in FALSY_FLAG_VALUES:
        return False
    return None


def resolve_flag(
    raw: str | bool | None,
    *,
    default: bool | None = None,
    allow_in_production: bool | None = None,
    environ: Mapping[str, str] | None = None,
) -> bool:
    """Resolve a raw flag value to a boolean.

    In a production-like environment the result is always False unless
    allow_in_production is explicitly True.

    Args:
        raw: Raw flag value (string, bool or None)
        default: Fallback when the value is unparseable
        allow_in_production: Permit a True result in production
        environ: Variable mapping used for production detection

    Returns:
        Resolved boolean
    """
    production = is_production(environ)
    if production and allow_in_production is not True:
        return False

    parsed = parse_flag(raw)
    if parsed is not None:
        return parsed

    if default is not None:
        return default
    return not production


def is_test_mode_override_enabled(environ: Mapping[str, str] | None = None) -> bool:
    """Check whether mock mode may run in production (CI against prod builds)."""
    env = os.environ if environ is None else environ
    raw = env.get(ALLOW_TEST_MODE_IN_PRODUCTION)
    if not isinstance(raw, str):
        return False
    return raw.strip().lower() in TRUTHY_FLAG_VALUES


def is_valid_scenario(scenario: Any) -> bool:
    """Check if a scenario name is one of the known TestScenario values."""
    if isinstance(scenario, TestScenario):
        return True
    if not isinstance(scenario, str):
        return False
    return scenario in TestScenario._value2member_map_


def get_valid_scenarios() -> list[str]:
    """List the known scenario names."""
    return [s.value for s in TestScenario]


def normalize_scenario(raw: str | TestScenario | None) -> TestScenario:
    """Normalize a scenario name, falling back to success.

    Args:
        raw: Raw scenario name

    Returns:
        The matching TestScenario, or SUCCESS (with a warning) when unknown
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return TestScenario.SUCCESS
    if isinstance(raw, TestScenario):
        return raw
    if not isinstance(raw, str):
        logger.warning("Invalid mock scenario %r, falling back to 'success'", raw)
        return TestScenario.SUCCESS
    candidate = raw.strip().lower()
    if is_valid_scenario(candidate):
        return TestScenario(candidate)
    logger.warning(
        "Invalid mock scenario %r, falling back to 'success'. Valid scenarios: %s",
        raw,
        ", ".join(get_valid_scenarios()),
    )
    return TestScenario.SUCCESS


@dataclass
class EnvironmentValidation:
    """Result of validating the test environment.

    Attributes:
        errors: Problems that make the configuration unusable
        warnings: Problems that were resolved by falling back
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """True when there are no errors."""
        return not self.errors


class FeatureFlagManager:
    """Resolves mock-mode flags from an environment mapping.

    Construct one per caller and inject it; build a new instance to pick up
    changed variables.

    Usage:
        flags = FeatureFlagManager({"FF_USE_MOCK_API": "true"})
        if flags.is_mock_mode_enabled():
            config = flags.get_mock_service_config()
    """

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        defaults: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the flag manager.

        Args:
            environ: Variable mapping (defaults to os.environ after loading .env)
            defaults: Flag values used when environ does not define them
        """
        if environ is None:
            ensure_dotenv_loaded()
            environ = os.environ
        merged: dict[str, str] = dict(defaults or {})
        merged.update({k: v for k, v in environ.items() if v is not None})
        self._environ = merged

    def get(self, name: str) -> str | None:
        """Get a raw flag value."""
        return self._environ.get(name)

    @property
    def environment_name(self) -> str:
        """Deployment environment name."""
        return get_environment_name(self._environ)

    def is_production(self) -> bool:
        """Check whether the environment is production-like."""
        return is_production(self._environ)

    def is_test_mode_override_enabled(self) -> bool:
        """Check the production escape hatch."""
        return is_test_mode_override_enabled(self._environ)

    def is_mock_mode_enabled(self) -> bool:
        """Check whether calls should be routed to mock services.

        Unset or unparseable values mean disabled; production requires the
        ALLOW_TEST_MODE_IN_PRODUCTION override.
        """
        return resolve_flag(
            self.get(FF_USE_MOCK_API),
            default=False,
            allow_in_production=self.is_test_mode_override_enabled(),
            environ=self._environ,
        )

    def _resolve_option(self, name: str) -> bool:
        return resolve_flag(
            self.get(name),
            default=False,
            allow_in_production=True,
            environ=self._environ,
        )

    def get_scenario(self) -> TestScenario:
        """Get the configured scenario (success when unset or invalid)."""
        return normalize_scenario(self.get(FF_MOCK_SCENARIO))

    def is_strict_validation(self) -> bool:
        """Check whether fixture validation failures should raise."""
        return self._resolve_option(FF_STRICT_MOCK_VALIDATION)

    def is_performance_logging(self) -> bool:
        """Check whether call durations should be echoed to the log."""
        return self._resolve_option(FF_LOG_PERFORMANCE)

    def _parse_latency(self, name: str, default: int) -> int:
        raw = self.get(name)
        if raw is None or not str(raw).strip():
            return default
        try:
            value = int(str(raw).strip())
        except ValueError:
            logger.warning("Invalid %s value %r, using default %d", name, raw, default)
            return default
        if value < 0:
            logger.warning("Negative %s value %r, using default %d", name, raw, default)
            return default
        return value

    def get_cache_ttl(self) -> float:
        """Get the response cache TTL in seconds (0 = never expires)."""
        raw = self.get(MOCKSTAGE_CACHE_TTL)
        if raw is None or not str(raw).strip():
            return 0.0
        try:
            ttl = float(str(raw).strip())
        except ValueError:
            logger.warning("Invalid %s value %r, cache will not expire", MOCKSTAGE_CACHE_TTL, raw)
            return 0.0
        return max(ttl, 0.0)

    def get_mock_service_config(self) -> MockServiceConfig:
        """Build an immutable MockServiceConfig from the flags."""
        min_latency = self._parse_latency(FF_MIN_LATENCY, DEFAULT_MIN_LATENCY)
        max_latency = self._parse_latency(FF_MAX_LATENCY, DEFAULT_MAX_LATENCY)
        if min_latency > max_latency:
            logger.warning(
                "%s (%d) exceeds %s (%d), using %d for both",
                FF_MIN_LATENCY,
                min_latency,
                FF_MAX_LATENCY,
                max_latency,
                min_latency,
            )
            max_latency = min_latency

        return MockServiceConfig(
            default_scenario=self.get_scenario(),
            enable_variability=self._resolve_option(FF_MOCK_VARIABILITY),
            simulate_latency=self._resolve_option(FF_SIMULATE_LATENCY),
            min_latency=min_latency,
            max_latency=max_latency,
            log_requests=self._resolve_option(FF_LOG_MOCK_REQUESTS),
        )

    def get_all_flags(self) -> dict[str, str | None]:
        """Get the raw value of every known flag."""
        return {name: self.get(name) for name in ALL_FLAGS}

    def validate_environment(self) -> EnvironmentValidation:
        """Validate the mock-mode configuration without raising."""
        result = EnvironmentValidation()
        requested = parse_flag(self.get(FF_USE_MOCK_API))

        if self.is_production() and requested and not self.is_test_mode_override_enabled():
            result.errors.append("Mock mode cannot be enabled in production")

        if self.is_mock_mode_enabled():
            scenario = self.get(FF_MOCK_SCENARIO)
            if scenario and not is_valid_scenario(scenario.strip().lower()):
                result.warnings.append(
                    f'Invalid mock scenario "{scenario}". '
                    f"Valid scenarios: {', '.join(get_valid_scenarios())}"
                )

        return result

    def get_mock_mode_status(self) -> dict[str, Any]:
        """Summarize mock mode for diagnostics and API metadata."""
        return {
            "mock_mode": self.is_mock_mode_enabled(),
            "scenario": self.get_scenario().value,
            "environment": self.environment_name,
            "timestamp": datetime.now(UTC).isoformat(),
        }
