"""
mockstage - Configuration Management

This module provides configuration management including:
- Feature flag resolution with production safety rules
- Scenario name normalization
- YAML configuration loading and validation
- Environment variable handling via python-dotenv
"""

from mockstage.config.environment import (
    ensure_dotenv_loaded,
    get_environment_name,
    is_production,
)
from mockstage.config.flags import (
    ALL_FLAGS,
    EnvironmentValidation,
    FeatureFlagManager,
    get_valid_scenarios,
    is_test_mode_override_enabled,
    is_valid_scenario,
    normalize_scenario,
    parse_flag,
    resolve_flag,
)
from mockstage.config.loader import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_PATHS,
    ENV_VAR_OVERRIDES,
    ConfigLoader,
    ConfigurationError,
    load_config,
)
from mockstage.config.models import (
    LoggingConfig,
    LogLevel,
    MockServiceConfig,
    MockStageConfig,
    TestScenario,
)

__all__ = [
    # Config models
    "TestScenario",
    "MockServiceConfig",
    "LogLevel",
    "LoggingConfig",
    "MockStageConfig",
    # Flags
    "ALL_FLAGS",
    "FeatureFlagManager",
    "EnvironmentValidation",
    "parse_flag",
    "resolve_flag",
    "is_valid_scenario",
    "get_valid_scenarios",
    "normalize_scenario",
    "is_test_mode_override_enabled",
    # Loader
    "ConfigLoader",
    "ConfigurationError",
    "load_config",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATHS",
    "ENV_VAR_OVERRIDES",
    # Environment
    "ensure_dotenv_loaded",
    "get_environment_name",
    "is_production",
]
