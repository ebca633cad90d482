"""
mockstage - Data Models

Fixture variant containers and schemas, plus the payloads returned by the
mock services.
"""

from mockstage.models.responses import (
    FIXTURE_FILES,
    RESPONSE_SCHEMAS,
    AnalyzerPayload,
    ErrorPayload,
    FrankensteinPayload,
    HackathonPayload,
    MockResponse,
    MockResponseEnvelope,
    ResponseType,
)
from mockstage.models.results import (
    AIAnalysisResult,
    CategoryRecommendation,
    FrankensteinElement,
    FrankensteinIdeaResult,
    FrankensteinMode,
    HealthCheckResult,
    HealthStatus,
    IdeaComparison,
    Locale,
)

__all__ = [
    # Fixtures
    "ResponseType",
    "MockResponse",
    "MockResponseEnvelope",
    "ErrorPayload",
    "AnalyzerPayload",
    "HackathonPayload",
    "FrankensteinPayload",
    "FIXTURE_FILES",
    "RESPONSE_SCHEMAS",
    # Results
    "Locale",
    "FrankensteinMode",
    "FrankensteinElement",
    "FrankensteinIdeaResult",
    "AIAnalysisResult",
    "IdeaComparison",
    "CategoryRecommendation",
    "HealthStatus",
    "HealthCheckResult",
]
