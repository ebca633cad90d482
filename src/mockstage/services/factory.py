"""
Mock Service Factory.

Builds the response store and mock service facades from a
FeatureFlagManager. Real AI adapters are not part of this package, so the
factory refuses to build services while mock mode is disabled.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from mockstage.config.flags import FeatureFlagManager
from mockstage.config.loader import ConfigurationError
from mockstage.config.models import MockServiceConfig, TestScenario
from mockstage.data.store import FixtureError, ResponseStore
from mockstage.models.responses import ResponseType
from mockstage.services.analysis import MockAIAnalysisService
from mockstage.services.frankenstein import MockFrankensteinService

logger = logging.getLogger(__name__)


class MockServiceFactory:
    """Factory for mock service facades.

    Services are built once per factory and reused. All services share the
    factory's response store.

    Usage:
        factory = MockServiceFactory(FeatureFlagManager())
        analysis = factory.create_analysis_service()
        frankenstein = factory.create_frankenstein_service()
    """

    def __init__(
        self,
        flags: FeatureFlagManager,
        store: ResponseStore | None = None,
        *,
        data_dir: str | Path | None = None,
        json_logs: bool = True,
    ) -> None:
        """Initialize the factory.

        Args:
            flags: Flag manager the configuration is resolved from
            store: Response store to share (built from the flags when None)
            data_dir: Fixture directory for a store built here
            json_logs: Format service request records as JSON
        """
        self._flags = flags
        self._store = store
        self._data_dir = data_dir
        self._json_logs = json_logs
        self._services: dict[str, Any] = {}
        self._verified = False

    @property
    def flags(self) -> FeatureFlagManager:
        return self._flags

    @property
    def store(self) -> ResponseStore:
        """Get the shared response store, building it on first use."""
        if self._store is None:
            self._store = ResponseStore(
                self._data_dir,
                cache_ttl=self._flags.get_cache_ttl(),
                strict=self._flags.is_strict_validation(),
                validate_on_load=not self._flags.is_production(),
            )
        return self._store

    def is_mock_mode_enabled(self) -> bool:
        """Check whether mock services may be built."""
        return self._flags.is_mock_mode_enabled()

    def get_mock_mode_status(self) -> dict[str, Any]:
        """Summarize mock mode for diagnostics."""
        return self._flags.get_mock_mode_status()

    def get_service_config(self) -> MockServiceConfig:
        """Resolve the service configuration from the flags."""
        return self._flags.get_mock_service_config()

    def verify_mock_configuration(self) -> None:
        """Check that every response type has a loadable success scenario.

        Raises:
            ConfigurationError: If mock mode is disabled or fixtures are unusable
        """
        if not self.is_mock_mode_enabled():
            raise ConfigurationError(
                "Mock mode is disabled. Real AI service adapters are not available; "
                "set FF_USE_MOCK_API=true to use mock services."
            )
        if self._verified:
            return

        for response_type in ResponseType:
            try:
                scenarios = self.store.get_available_scenarios(response_type)
            except FixtureError as e:
                raise ConfigurationError(
                    f"Mock configuration verification failed: {response_type.value} "
                    f"mock data cannot be loaded: {e}"
                ) from e
            if TestScenario.SUCCESS.value not in scenarios:
                raise ConfigurationError(
                    f"Mock configuration verification failed: {response_type.value} "
                    f"mock data has no '{TestScenario.SUCCESS.value}' scenario"
                )

        config = self.get_service_config()
        logger.info(
            f"Mock mode verified: scenario={config.default_scenario.value}, "
            f"simulate_latency={config.simulate_latency}, "
            f"latency={config.min_latency}-{config.max_latency}ms"
        )
        self._verified = True

    def _service_kwargs(self) -> dict[str, Any]:
        return {
            "config": self.get_service_config(),
            "log_performance": self._flags.is_performance_logging(),
            "json_logs": self._json_logs,
        }

    def create_analysis_service(self) -> MockAIAnalysisService:
        """Get the mock AI analysis service.

        Raises:
            ConfigurationError: If mock mode is disabled or fixtures are unusable
        """
        self.verify_mock_configuration()
        if "analysis" not in self._services:
            self._services["analysis"] = MockAIAnalysisService(self.store, **self._service_kwargs())
            logger.debug("Created mock AI analysis service")
        return self._services["analysis"]

    def create_frankenstein_service(self) -> MockFrankensteinService:
        """Get the mock Frankenstein service.

        Raises:
            ConfigurationError: If mock mode is disabled or fixtures are unusable
        """
        self.verify_mock_configuration()
        if "frankenstein" not in self._services:
            self._services["frankenstein"] = MockFrankensteinService(
                self.store, **self._service_kwargs()
            )
            logger.debug("Created mock Frankenstein service")
        return self._services["frankenstein"]
