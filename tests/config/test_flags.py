"""Tests for feature flag resolution."""

import logging

import pytest

from mockstage.config import (
    ALL_FLAGS,
    FeatureFlagManager,
    MockServiceConfig,
    TestScenario as Scenario,
    get_valid_scenarios,
    is_production,
    is_test_mode_override_enabled,
    is_valid_scenario,
    normalize_scenario,
    parse_flag,
    resolve_flag,
)

PRODUCTION = {"MOCKSTAGE_ENV": "production"}


class TestParseFlag:
    """Tests for raw flag token parsing."""

    @pytest.mark.parametrize("raw", ["1", "true", "TRUE", " yes ", "on", "y", "t", True])
    def test_truthy_tokens(self, raw):
        """Test recognized truthy tokens."""
        assert parse_flag(raw) is True

    @pytest.mark.parametrize("raw", ["0", "false", "False", "no", " off", "n", "f", False])
    def test_falsy_tokens(self, raw):
        """Test recognized falsy tokens."""
        assert parse_flag(raw) is False

    @pytest.mark.parametrize("raw", [None, "", "bogus", "2", "enabled"])
    def test_unparseable(self, raw):
        """Test unrecognized values parse to None."""
        assert parse_flag(raw) is None


class TestResolveFlag:
    """Tests for resolve_flag."""

    def test_parsed_value_wins(self):
        """Test a parseable value is returned as-is outside production."""
        assert resolve_flag("true", environ={}) is True
        assert resolve_flag("off", default=True, environ={}) is False

    def test_production_forces_false(self):
        """Test production returns False without allow_in_production."""
        assert resolve_flag("true", environ=PRODUCTION) is False
        assert resolve_flag("true", allow_in_production=False, environ=PRODUCTION) is False

    def test_production_allowed_explicitly(self):
        """Test allow_in_production=True lets a True value through."""
        assert resolve_flag("true", allow_in_production=True, environ=PRODUCTION) is True

    def test_unparseable_uses_default(self):
        """Test an unparseable value falls back to the default."""
        assert resolve_flag("bogus", default=True, environ={}) is True
        assert resolve_flag("bogus", default=False, environ={}) is False

    def test_unparseable_without_default(self):
        """Test the fallback is "not production" without a default."""
        assert resolve_flag("bogus", environ={}) is True
        assert resolve_flag(None, allow_in_production=True, environ=PRODUCTION) is False

    def test_bool_passthrough(self):
        """Test booleans pass through unchanged."""
        assert resolve_flag(True, environ={}) is True
        assert resolve_flag(False, default=True, environ={}) is False


class TestEnvironment:
    """Tests for environment detection helpers."""

    @pytest.mark.parametrize(
        "environ,expected",
        [
            ({}, False),
            ({"MOCKSTAGE_ENV": "production"}, True),
            ({"MOCKSTAGE_ENV": "PROD"}, True),
            ({"MOCKSTAGE_ENV": "staging"}, False),
            ({"APP_ENV": "production"}, True),
            ({"MOCKSTAGE_ENV": "development", "APP_ENV": "production"}, False),
        ],
    )
    def test_is_production(self, environ, expected):
        """Test production detection from MOCKSTAGE_ENV then APP_ENV."""
        assert is_production(environ) is expected

    def test_override_flag(self):
        """Test the production escape hatch needs a truthy token."""
        assert is_test_mode_override_enabled({"ALLOW_TEST_MODE_IN_PRODUCTION": "true"})
        assert not is_test_mode_override_enabled({"ALLOW_TEST_MODE_IN_PRODUCTION": "maybe"})
        assert not is_test_mode_override_enabled({})


class TestScenarioNormalization:
    """Tests for scenario validation and normalization."""

    def test_valid_scenarios_listed(self):
        """Test all six scenarios are known."""
        assert get_valid_scenarios() == [
            "success",
            "api_error",
            "timeout",
            "rate_limit",
            "invalid_input",
            "partial_response",
        ]

    def test_is_valid_scenario(self):
        """Test scenario name validation."""
        assert is_valid_scenario("rate_limit")
        assert is_valid_scenario(Scenario.TIMEOUT)
        assert not is_valid_scenario("exploding")
        assert not is_valid_scenario(None)

    def test_normalize_known(self):
        """Test known names normalize case-insensitively."""
        assert normalize_scenario("RATE_LIMIT") is Scenario.RATE_LIMIT
        assert normalize_scenario(" timeout ") is Scenario.TIMEOUT

    def test_normalize_unknown_warns(self, caplog):
        """Test unknown names fall back to success with a warning."""
        with caplog.at_level(logging.WARNING, logger="mockstage.config.flags"):
            assert normalize_scenario("exploding") is Scenario.SUCCESS
        assert "exploding" in caplog.text

    def test_normalize_non_string(self, caplog):
        """Test non-string values fall back to success with a warning."""
        with caplog.at_level(logging.WARNING, logger="mockstage.config.flags"):
            assert normalize_scenario(5) is Scenario.SUCCESS
        assert "5" in caplog.text

    def test_normalize_empty(self):
        """Test empty values are success without a warning."""
        assert normalize_scenario(None) is Scenario.SUCCESS
        assert normalize_scenario("") is Scenario.SUCCESS


class TestFeatureFlagManager:
    """Tests for FeatureFlagManager."""

    def test_mock_mode_disabled_by_default(self):
        """Test mock mode is off when unset or unparseable."""
        assert FeatureFlagManager({}).is_mock_mode_enabled() is False
        assert FeatureFlagManager({"FF_USE_MOCK_API": "bogus"}).is_mock_mode_enabled() is False

    def test_mock_mode_enabled(self):
        """Test mock mode on outside production."""
        flags = FeatureFlagManager({"FF_USE_MOCK_API": "true"})
        assert flags.is_mock_mode_enabled() is True

    def test_mock_mode_blocked_in_production(self):
        """Test production blocks mock mode without the override."""
        flags = FeatureFlagManager({"FF_USE_MOCK_API": "true", **PRODUCTION})
        assert flags.is_mock_mode_enabled() is False

    def test_mock_mode_production_override(self):
        """Test the override allows mock mode in production."""
        flags = FeatureFlagManager(
            {"FF_USE_MOCK_API": "true", "ALLOW_TEST_MODE_IN_PRODUCTION": "true", **PRODUCTION}
        )
        assert flags.is_mock_mode_enabled() is True

    def test_defaults_are_overridden_by_environ(self):
        """Test defaults apply only where environ is silent."""
        flags = FeatureFlagManager(
            {"FF_MOCK_SCENARIO": "timeout"},
            defaults={"FF_MOCK_SCENARIO": "api_error", "FF_USE_MOCK_API": "true"},
        )
        assert flags.get_scenario() is Scenario.TIMEOUT
        assert flags.is_mock_mode_enabled() is True

    def test_service_config_defaults(self):
        """Test the config built from empty flags."""
        config = FeatureFlagManager({}).get_mock_service_config()

        assert isinstance(config, MockServiceConfig)
        assert config.default_scenario is Scenario.SUCCESS
        assert config.enable_variability is False
        assert config.simulate_latency is False
        assert config.min_latency == 500
        assert config.max_latency == 2000
        assert config.log_requests is False

    def test_service_config_from_flags(self):
        """Test every flag reaches the config."""
        flags = FeatureFlagManager(
            {
                "FF_MOCK_SCENARIO": "rate_limit",
                "FF_MOCK_VARIABILITY": "yes",
                "FF_SIMULATE_LATENCY": "1",
                "FF_MIN_LATENCY": "10",
                "FF_MAX_LATENCY": "20",
                "FF_LOG_MOCK_REQUESTS": "on",
            }
        )
        config = flags.get_mock_service_config()

        assert config.default_scenario is Scenario.RATE_LIMIT
        assert config.enable_variability is True
        assert config.simulate_latency is True
        assert (config.min_latency, config.max_latency) == (10, 20)
        assert config.log_requests is True

    def test_invalid_latency_falls_back(self, caplog):
        """Test unparseable or negative latency uses defaults with a warning."""
        flags = FeatureFlagManager({"FF_MIN_LATENCY": "fast", "FF_MAX_LATENCY": "-5"})
        with caplog.at_level(logging.WARNING):
            config = flags.get_mock_service_config()

        assert (config.min_latency, config.max_latency) == (500, 2000)
        assert "FF_MIN_LATENCY" in caplog.text
        assert "FF_MAX_LATENCY" in caplog.text

    def test_min_above_max_is_clamped(self, caplog):
        """Test min > max warns and uses min for both."""
        flags = FeatureFlagManager({"FF_MIN_LATENCY": "300", "FF_MAX_LATENCY": "100"})
        with caplog.at_level(logging.WARNING):
            config = flags.get_mock_service_config()

        assert config.min_latency == 300
        assert config.max_latency == 300
        assert "exceeds" in caplog.text

    def test_service_config_is_frozen(self):
        """Test the config cannot be mutated."""
        config = FeatureFlagManager({}).get_mock_service_config()
        with pytest.raises(Exception):
            config.min_latency = 1

    def test_cache_ttl(self):
        """Test cache TTL parsing."""
        assert FeatureFlagManager({}).get_cache_ttl() == 0.0
        assert FeatureFlagManager({"MOCKSTAGE_CACHE_TTL": "2.5"}).get_cache_ttl() == 2.5
        assert FeatureFlagManager({"MOCKSTAGE_CACHE_TTL": "soon"}).get_cache_ttl() == 0.0

    def test_options_allowed_in_production(self):
        """Test auxiliary options still resolve in production."""
        flags = FeatureFlagManager({"FF_STRICT_MOCK_VALIDATION": "true", **PRODUCTION})
        assert flags.is_strict_validation() is True
        assert flags.is_performance_logging() is False

    def test_get_all_flags(self):
        """Test every known flag is reported."""
        flags = FeatureFlagManager({"FF_USE_MOCK_API": "true"})
        all_flags = flags.get_all_flags()

        assert set(all_flags) == set(ALL_FLAGS)
        assert all_flags["FF_USE_MOCK_API"] == "true"
        assert all_flags["FF_MOCK_SCENARIO"] is None

    def test_validate_environment_production_error(self):
        """Test mock mode requested in production is an error."""
        flags = FeatureFlagManager({"FF_USE_MOCK_API": "true", **PRODUCTION})
        result = flags.validate_environment()

        assert not result.is_valid
        assert "Mock mode cannot be enabled in production" in result.errors

    def test_validate_environment_invalid_scenario_warning(self):
        """Test an invalid scenario is a warning, not an error."""
        flags = FeatureFlagManager({"FF_USE_MOCK_API": "true", "FF_MOCK_SCENARIO": "boom"})
        result = flags.validate_environment()

        assert result.is_valid
        assert len(result.warnings) == 1
        assert "boom" in result.warnings[0]

    def test_mock_mode_status(self):
        """Test the status summary."""
        flags = FeatureFlagManager({"FF_USE_MOCK_API": "true", "FF_MOCK_SCENARIO": "timeout"})
        status = flags.get_mock_mode_status()

        assert status["mock_mode"] is True
        assert status["scenario"] == "timeout"
        assert status["environment"] == "development"
        assert "timestamp" in status
