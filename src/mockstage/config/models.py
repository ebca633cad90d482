"""
Configuration Data Models.

Defines the mock service configuration and the file-level configuration
schema using Pydantic for validation and type safety.
"""

import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


class TestScenario(str, Enum):
    """Simulated outcome classes for a mock service call."""

    __test__ = False

    SUCCESS = "success"
    API_ERROR = "api_error"
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    INVALID_INPUT = "invalid_input"
    PARTIAL_RESPONSE = "partial_response"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# Latency defaults in milliseconds
DEFAULT_MIN_LATENCY = 500
DEFAULT_MAX_LATENCY = 2000


class MockServiceConfig(BaseModel):
    """Configuration for a single mock service instance.

    Frozen after construction; build a new instance to change settings.

    Attributes:
        default_scenario: Scenario every call follows
        enable_variability: Pick a random fixture variant instead of the first
        simulate_latency: Sleep before answering
        min_latency: Lower latency bound in milliseconds
        max_latency: Upper latency bound in milliseconds
        log_requests: Echo each request to the log
    """

    model_config = ConfigDict(frozen=True)

    default_scenario: TestScenario = Field(
        default=TestScenario.SUCCESS,
        description="Scenario every call follows",
    )
    enable_variability: bool = Field(
        default=False,
        description="Serve a random variant per call",
    )
    simulate_latency: bool = Field(
        default=False,
        description="Simulate network latency",
    )
    min_latency: int = Field(
        default=DEFAULT_MIN_LATENCY,
        ge=0,
        description="Minimum simulated latency (ms)",
    )
    max_latency: int = Field(
        default=DEFAULT_MAX_LATENCY,
        ge=0,
        description="Maximum simulated latency (ms)",
    )
    log_requests: bool = Field(
        default=False,
        description="Log each mock request",
    )

    @field_validator("default_scenario", mode="before")
    @classmethod
    def fallback_unknown_scenario(cls, v: object) -> object:
        """Map unknown scenario names to success instead of failing."""
        if isinstance(v, TestScenario):
            return v
        if v is None or (isinstance(v, str) and not v.strip()):
            return TestScenario.SUCCESS
        if isinstance(v, str) and v.strip().lower() in TestScenario._value2member_map_:
            return TestScenario(v.strip().lower())
        logger.warning(f"Invalid mock scenario {v!r}, falling back to 'success'")
        return TestScenario.SUCCESS

    @model_validator(mode="after")
    def validate_latency_range(self) -> "MockServiceConfig":
        """Ensure the latency bounds are ordered."""
        if self.min_latency > self.max_latency:
            raise ValueError(
                f"min_latency ({self.min_latency}) must not exceed "
                f"max_latency ({self.max_latency})"
            )
        return self


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level
        file: Optional log file path
        json_format: Emit request records as JSON lines
    """

    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Log level",
    )
    file: str | None = Field(
        default=None,
        description="Log file path (optional)",
    )
    json_format: bool = Field(
        default=True,
        description="Use JSON format for structured records",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        """Accept lowercase level names."""
        if isinstance(v, str):
            return v.strip().upper()
        return v


class MockStageConfig(BaseModel):
    """Root configuration loaded from YAML and environment overrides.

    Attributes:
        data_dir: Directory holding fixture files (None = bundled fixtures)
        cache_ttl: Response cache TTL in seconds (0 = never expires)
        logging: Logging configuration
        flags: Default values for FF_* flags, overridden by the environment
    """

    data_dir: str | None = Field(
        default=None,
        description="Fixture directory (bundled fixtures when unset)",
    )
    cache_ttl: float = Field(
        default=0.0,
        ge=0.0,
        description="Response cache TTL in seconds",
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    flags: dict[str, str] = Field(
        default_factory=dict,
        description="Flag defaults keyed by environment variable name",
    )

    @field_validator("flags", mode="before")
    @classmethod
    def stringify_flags(cls, v: object) -> object:
        """YAML parses true/500 natively; flags are strings at the boundary."""
        if isinstance(v, dict):
            return {
                str(k): (str(val).lower() if isinstance(val, bool) else str(val))
                for k, val in v.items()
                if val is not None
            }
        return v
