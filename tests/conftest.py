"""
mockstage Test Configuration and Fixtures

This module provides pytest fixtures for testing the mock AI backend.
All fixtures are deterministic: clocks, random sources and sleeps are
injected so no test waits on real time.

Fixture Categories:
- Paths: bundled and test-only fixture directories
- Time: a manually advanced clock and a recording sleep
- Stores: response stores over bundled or temporary fixture data
- Services: mock facades wired to a store with latency disabled
"""

import copy
import json
import random
from pathlib import Path
from typing import Any

import pytest

from mockstage.config import MockServiceConfig, TestScenario
from mockstage.data import BUNDLED_FIXTURES_DIR, ResponseStore
from mockstage.services import MockAIAnalysisService, MockFrankensteinService

# Variables read by FeatureFlagManager / ConfigLoader when environ is not injected
_MOCKSTAGE_ENV_VARS = [
    "FF_USE_MOCK_API",
    "FF_MOCK_SCENARIO",
    "FF_MOCK_VARIABILITY",
    "FF_SIMULATE_LATENCY",
    "FF_MIN_LATENCY",
    "FF_MAX_LATENCY",
    "FF_LOG_MOCK_REQUESTS",
    "FF_STRICT_MOCK_VALIDATION",
    "FF_LOG_PERFORMANCE",
    "ALLOW_TEST_MODE_IN_PRODUCTION",
    "MOCKSTAGE_ENV",
    "APP_ENV",
    "MOCKSTAGE_CONFIG",
    "MOCKSTAGE_DATA_DIR",
    "MOCKSTAGE_CACHE_TTL",
    "MOCKSTAGE_LOG_LEVEL",
    "MOCKSTAGE_LOG_FILE",
    "MOCKSTAGE_LOG_JSON",
]


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Isolate tests from the developer's environment and .env file."""
    import mockstage.config.environment as env_module

    for var in _MOCKSTAGE_ENV_VARS:
        monkeypatch.delenv(var, raising=False)

    # Prevent ensure_dotenv_loaded() from reading a local .env
    monkeypatch.setattr(env_module, "_dotenv_loaded", True)
    yield


# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the test fixtures directory path."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def bundled_dir() -> Path:
    """Return the fixture directory shipped with the package."""
    return BUNDLED_FIXTURES_DIR


def load_bundled(name: str) -> dict[str, Any]:
    """Load a bundled fixture file as a dict."""
    with open(BUNDLED_FIXTURES_DIR / name, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def analyzer_fixture() -> dict[str, Any]:
    """Parsed bundled analyzer fixture file."""
    return load_bundled("analyzer-mocks.json")


@pytest.fixture
def frankenstein_fixture() -> dict[str, Any]:
    """Parsed bundled frankenstein fixture file."""
    return load_bundled("frankenstein-mocks.json")


@pytest.fixture
def frankenstein_success(frankenstein_fixture) -> dict[str, Any]:
    """First frankenstein success variant in on-disk shape."""
    return copy.deepcopy(frankenstein_fixture["scenarios"]["success"][0])


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Temporary copy of the bundled fixtures, safe to modify."""
    target = tmp_path / "fixtures"
    target.mkdir()
    for source in BUNDLED_FIXTURES_DIR.glob("*.json"):
        (target / source.name).write_text(source.read_text(encoding="utf-8"), encoding="utf-8")
    return target


def write_fixture(directory: Path, name: str, document: Any) -> Path:
    """Write a fixture document as JSON and return its path."""
    path = directory / name
    path.write_text(json.dumps(document, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def fixture_writer():
    """Return a helper writing fixture documents as JSON."""
    return write_fixture


# =============================================================================
# Time Fixtures
# =============================================================================


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Awaitable sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def clock() -> FakeClock:
    """Fake monotonic clock."""
    return FakeClock()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    """Sleep that returns immediately and records delays."""
    return RecordingSleep()


# =============================================================================
# Store and Service Fixtures
# =============================================================================


@pytest.fixture
def store(clock) -> ResponseStore:
    """Response store over the bundled fixtures with a fake clock."""
    return ResponseStore(
        cache_ttl=0,
        validate_on_load=True,
        clock=clock,
        rng=random.Random(42),
    )


@pytest.fixture
def service_config() -> MockServiceConfig:
    """Success scenario without latency."""
    return MockServiceConfig(
        default_scenario=TestScenario.SUCCESS,
        simulate_latency=False,
    )


def make_config(**overrides: Any) -> MockServiceConfig:
    """Build a MockServiceConfig with latency disabled unless overridden."""
    values: dict[str, Any] = {"simulate_latency": False}
    values.update(overrides)
    return MockServiceConfig(**values)


@pytest.fixture
def config_factory():
    """Return a MockServiceConfig builder with latency disabled by default."""
    return make_config


@pytest.fixture
def analysis_service(store, service_config, recording_sleep) -> MockAIAnalysisService:
    """Mock analysis service on the success scenario."""
    return MockAIAnalysisService(store, service_config, sleep=recording_sleep)


@pytest.fixture
def frankenstein_service(store, service_config, recording_sleep) -> MockFrankensteinService:
    """Mock Frankenstein service on the success scenario."""
    return MockFrankensteinService(store, service_config, sleep=recording_sleep)
