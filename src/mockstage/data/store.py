"""
Response Store.

Loads fixture files per response type, validates them once on first access
and serves scenario variants through a TTL cache with hit/miss statistics.

Usage:
    store = ResponseStore(cache_ttl=300)
    response = store.get_response(ResponseType.ANALYZER, "success")
    stats = store.get_cache_stats()
"""

from __future__ import annotations

import copy
import json
import logging
import random
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from mockstage.config.environment import is_production
from mockstage.config.models import TestScenario
from mockstage.data.customizer import ResponseCustomizer
from mockstage.models.responses import FIXTURE_FILES, MockResponse, ResponseType
from mockstage.validation.schema import SchemaValidator, ValidationResult

logger = logging.getLogger(__name__)

# Fixtures shipped with the package
BUNDLED_FIXTURES_DIR = Path(__file__).parent / "fixtures"

YAML_SUFFIXES = frozenset({".yaml", ".yml"})


class FixtureError(Exception):
    """Base exception for fixture loading and lookup errors."""

    def __init__(
        self,
        message: str,
        response_type: ResponseType | None = None,
        path: Path | None = None,
    ) -> None:
        super().__init__(message)
        self.response_type = response_type
        self.path = path


class ScenarioNotFoundError(FixtureError):
    """Raised when a scenario is missing from a fixture or has no variants."""

    def __init__(
        self,
        response_type: ResponseType,
        scenario: str,
        available: list[str],
    ) -> None:
        message = (
            f"No mock data found for {response_type.value} scenario '{scenario}'. "
            f"Available scenarios: {', '.join(available) or 'none'}"
        )
        super().__init__(message, response_type=response_type)
        self.scenario = scenario
        self.available = available


class FixtureValidationError(FixtureError):
    """Raised in strict mode when fixture variants fail schema validation."""

    def __init__(
        self,
        response_type: ResponseType,
        errors: list[str],
        path: Path | None = None,
    ) -> None:
        message = f"Mock data validation failed for {response_type.value}:\n" + "\n".join(
            f"  - {error}" for error in errors
        )
        super().__init__(message, response_type=response_type, path=path)
        self.errors = errors


@dataclass
class CacheEntry:
    """Cached response for a type/scenario pair.

    Attributes:
        response: First variant of the scenario
        inserted_at: Clock reading when the entry was stored
    """

    response: MockResponse
    inserted_at: float


@dataclass
class CacheStats:
    """Response cache statistics.

    Attributes:
        hits: Lookups answered from the cache
        misses: Lookups that went to the fixture data
        hit_rate: hits / (hits + misses) as a percentage, 2 decimals
        responses_cached: Entries currently in the cache
        data_files_cached: Fixture files currently loaded
    """

    hits: int = 0
    misses: int = 0
    hit_rate: float = 0.0
    responses_cached: int = 0
    data_files_cached: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hit_rate,
            "responses_cached": self.responses_cached,
            "data_files_cached": self.data_files_cached,
        }


def _scenario_name(scenario: TestScenario | str) -> str:
    return scenario.value if isinstance(scenario, TestScenario) else str(scenario)


class ResponseStore:
    """Serves fixture variants by response type and scenario.

    Fixture files are read lazily, one per type, and validated on first
    access (outside production). Results of get_response are cached under
    "{type}:{scenario}" until the TTL elapses; a TTL of 0 never expires.

    Attributes:
        data_dir: Directory holding the fixture files
        cache_ttl: Cache TTL in seconds
        strict: Raise FixtureValidationError instead of warning
    """

    def __init__(
        self,
        data_dir: str | Path | None = None,
        *,
        cache_ttl: float = 0.0,
        strict: bool = False,
        validate_on_load: bool | None = None,
        validator: SchemaValidator | None = None,
        customizer: ResponseCustomizer | None = None,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            data_dir: Fixture directory (bundled fixtures when None)
            cache_ttl: Cache TTL in seconds, 0 for no expiry
            strict: Raise on validation failures instead of warning
            validate_on_load: Validate fixtures on first load (default:
                everywhere but production)
            validator: Schema validator to use
            customizer: Response customizer to use
            clock: Monotonic clock in seconds
            rng: Random source for variant selection
        """
        if cache_ttl < 0:
            raise ValueError(f"cache_ttl must be >= 0, got {cache_ttl}")

        self.data_dir = Path(data_dir) if data_dir is not None else BUNDLED_FIXTURES_DIR
        self.cache_ttl = float(cache_ttl)
        self.strict = strict
        self.validate_on_load = (
            not is_production() if validate_on_load is None else validate_on_load
        )
        self.validator = validator or SchemaValidator()
        self.customizer = customizer or ResponseCustomizer()
        self._clock = clock
        self._rng = rng or random.Random()

        self._data: dict[ResponseType, dict[str, Any]] = {}
        self._cache: dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get_response(
        self,
        response_type: ResponseType | str,
        scenario: TestScenario | str = TestScenario.SUCCESS,
    ) -> MockResponse:
        """Get the first variant of a scenario, through the cache.

        Args:
            response_type: Response type
            scenario: Scenario name

        Returns:
            A copy of the cached MockResponse

        Raises:
            FixtureError: If the fixture file cannot be loaded
            ScenarioNotFoundError: If the scenario is missing or empty
        """
        response_type = ResponseType(response_type)
        scenario = _scenario_name(scenario)
        cache_key = self._get_cache_key(response_type, scenario)

        if self._is_cache_valid(cache_key):
            self._hits += 1
            logger.debug(f"Cache hit: {cache_key}")
            return copy.deepcopy(self._cache[cache_key].response)

        self._misses += 1
        logger.debug(f"Cache miss: {cache_key}")

        variants = self._get_variants(response_type, scenario)
        response = self._to_response(response_type, scenario, variants[0])
        self._cache[cache_key] = CacheEntry(response=response, inserted_at=self._clock())
        return copy.deepcopy(response)

    def get_random_variant(
        self,
        response_type: ResponseType | str,
        scenario: TestScenario | str = TestScenario.SUCCESS,
    ) -> MockResponse:
        """Pick a uniformly random variant of a scenario.

        Bypasses the response cache and does not touch the hit/miss counters.

        Raises:
            FixtureError: If the fixture file cannot be loaded
            ScenarioNotFoundError: If the scenario is missing or empty
        """
        response_type = ResponseType(response_type)
        scenario = _scenario_name(scenario)
        variants = self._get_variants(response_type, scenario)
        variant = self._rng.choice(variants)
        return self._to_response(response_type, scenario, copy.deepcopy(variant))

    def get_available_scenarios(self, response_type: ResponseType | str) -> list[str]:
        """List the scenarios of a type that have at least one variant."""
        data = self._load(ResponseType(response_type))
        return [name for name, variants in data["scenarios"].items() if variants]

    def _get_variants(self, response_type: ResponseType, scenario: str) -> list[Any]:
        data = self._load(response_type)
        variants = data["scenarios"].get(scenario)
        if not variants:
            raise ScenarioNotFoundError(
                response_type,
                scenario,
                self.get_available_scenarios(response_type),
            )
        return variants

    @staticmethod
    def _to_response(response_type: ResponseType, scenario: str, variant: Any) -> MockResponse:
        if not isinstance(variant, Mapping) or not isinstance(variant.get("data"), Mapping):
            raise FixtureError(
                f"Malformed variant in {response_type.value} scenario '{scenario}'",
                response_type=response_type,
            )
        return MockResponse.from_dict(dict(variant))

    # -------------------------------------------------------------------------
    # Cache
    # -------------------------------------------------------------------------

    @staticmethod
    def _get_cache_key(response_type: ResponseType, scenario: str) -> str:
        return f"{response_type.value}:{scenario}"

    def _is_cache_valid(self, cache_key: str) -> bool:
        """Check if a cache entry exists and has not expired.

        Args:
            cache_key: Cache key to check

        Returns:
            True if the entry is usable
        """
        entry = self._cache.get(cache_key)
        if entry is None:
            return False
        if self.cache_ttl == 0:
            return True
        return self._clock() - entry.inserted_at < self.cache_ttl

    def invalidate_expired_cache(self) -> int:
        """Remove expired cache entries.

        Returns:
            Number of entries removed (always 0 when the TTL is 0)
        """
        if self.cache_ttl == 0:
            return 0

        now = self._clock()
        expired = [
            key
            for key, entry in self._cache.items()
            if now - entry.inserted_at >= self.cache_ttl
        ]
        for key in expired:
            del self._cache[key]

        if expired:
            logger.debug(f"Invalidated {len(expired)} expired cache entries")
        return len(expired)

    def clear_cache(self) -> None:
        """Drop cached responses, loaded fixture files and statistics."""
        self._cache.clear()
        self._data.clear()
        self.reset_cache_stats()

    def reset_cache_stats(self) -> None:
        """Zero the hit and miss counters."""
        self._hits = 0
        self._misses = 0

    def get_cache_stats(self) -> CacheStats:
        """Get cache statistics."""
        total = self._hits + self._misses
        hit_rate = round(self._hits / total * 100, 2) if total else 0.0
        return CacheStats(
            hits=self._hits,
            misses=self._misses,
            hit_rate=hit_rate,
            responses_cached=len(self._cache),
            data_files_cached=len(self._data),
        )

    def _invalidate_type(self, response_type: ResponseType) -> None:
        prefix = f"{response_type.value}:"
        for key in [k for k in self._cache if k.startswith(prefix)]:
            del self._cache[key]

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def _load(self, response_type: ResponseType) -> dict[str, Any]:
        """Load, check and cache the fixture file of a type."""
        if response_type in self._data:
            return self._data[response_type]

        path = self.data_dir / FIXTURE_FILES[response_type]
        if not path.exists():
            raise FixtureError(
                f"Mock data file not found for {response_type.value}: {path}",
                response_type=response_type,
                path=path,
            )

        document = self._read_document(path, response_type)
        self._check_fixture(document, response_type, path)
        self._data[response_type] = document
        logger.debug(f"Loaded {response_type.value} fixtures from {path}")
        return document

    @staticmethod
    def _read_document(path: Path, response_type: ResponseType) -> dict[str, Any]:
        try:
            with open(path, encoding="utf-8") as f:
                if path.suffix.lower() in YAML_SUFFIXES:
                    document = yaml.safe_load(f)
                else:
                    document = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise FixtureError(
                f"Malformed mock data for {response_type.value} in {path}: {e}",
                response_type=response_type,
                path=path,
            ) from e

        if not isinstance(document, dict) or not isinstance(document.get("scenarios"), dict):
            raise FixtureError(
                f"Invalid mock data structure for {response_type.value} in {path}: "
                "missing 'scenarios' mapping",
                response_type=response_type,
                path=path,
            )
        return document

    def _check_fixture(
        self,
        document: dict[str, Any],
        response_type: ResponseType,
        path: Path,
    ) -> None:
        """Validate every variant; raise in strict mode, warn otherwise."""
        if not self.validate_on_load:
            return

        errors = self.validator.collect_errors(document, response_type)
        if not errors:
            return

        if self.strict:
            raise FixtureValidationError(response_type, errors, path=path)

        logger.warning(
            f"Mock data validation found {len(errors)} problem(s) in "
            f"{response_type.value} fixtures ({path}):\n"
            + "\n".join(f"  - {error}" for error in errors)
        )

    def load_custom_test_data(self, path: str | Path) -> ResponseType:
        """Replace a type's fixture data with a custom file.

        The type is inferred from the file name ("custom-analyzer-mocks.json"
        loads analyzer data). JSON and YAML files are accepted. Only the
        cache entries of that type are invalidated.

        Args:
            path: Path to the custom fixture file

        Returns:
            The response type that was replaced

        Raises:
            FixtureError: If the type cannot be inferred or the file is invalid
            FixtureValidationError: In strict mode, if variants fail validation
        """
        path = Path(path)
        name = path.name.lower()
        matches = [t for t in ResponseType if t.value in name]
        if len(matches) != 1:
            raise FixtureError(
                f"Cannot determine response type from filename: {path.name}. "
                f"Expected exactly one of: {', '.join(t.value for t in ResponseType)}",
                path=path,
            )
        response_type = matches[0]

        if not path.exists():
            raise FixtureError(
                f"Custom mock data file not found: {path}",
                response_type=response_type,
                path=path,
            )

        document = self._read_document(path, response_type)
        self._check_fixture(document, response_type, path)

        self._data[response_type] = document
        self._invalidate_type(response_type)
        logger.info(f"Loaded custom {response_type.value} test data from {path}")
        return response_type

    # -------------------------------------------------------------------------
    # Delegation
    # -------------------------------------------------------------------------

    def validate_all_responses(
        self,
        response_type: ResponseType | str,
    ) -> dict[str, list[ValidationResult]]:
        """Validate every variant of a type's fixture data."""
        response_type = ResponseType(response_type)
        return self.validator.validate_all(self._load(response_type), response_type)

    def customize_mock_response(
        self,
        response: MockResponse,
        response_type: ResponseType | str,
        *,
        locale: str | None = None,
        input: Mapping[str, Any] | None = None,
        variant_data: Mapping[str, Any] | None = None,
    ) -> MockResponse:
        """Customize a fixture for one call. See ResponseCustomizer.customize."""
        return self.customizer.customize(
            response,
            response_type,
            locale=locale,
            input=input,
            variant_data=variant_data,
        )
