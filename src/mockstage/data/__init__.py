"""
mockstage - Fixture Data

This module provides the fixture side of the mock backend:
- ResponseStore: lazy, validated fixture loading with a TTL cache
- ResponseCustomizer: locale and input driven response rewriting
"""

from mockstage.data.customizer import (
    ResponseCustomizer,
    deep_clone,
    deep_merge,
)
from mockstage.data.store import (
    BUNDLED_FIXTURES_DIR,
    CacheEntry,
    CacheStats,
    FixtureError,
    FixtureValidationError,
    ResponseStore,
    ScenarioNotFoundError,
)

__all__ = [
    # Store
    "ResponseStore",
    "CacheEntry",
    "CacheStats",
    "BUNDLED_FIXTURES_DIR",
    # Errors
    "FixtureError",
    "ScenarioNotFoundError",
    "FixtureValidationError",
    # Customization
    "ResponseCustomizer",
    "deep_clone",
    "deep_merge",
]
