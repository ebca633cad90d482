"""
mockstage - Mock Service Facades

Scenario-driven stand-ins for the AI services:
- MockAIAnalysisService: idea analysis, hackathon evaluation and helpers
- MockFrankensteinService: idea mashup generation
- MockServiceFactory: builds both from feature flags
"""

from mockstage.services.analysis import (
    DEFAULT_IMPROVEMENT_SUGGESTIONS,
    MockAIAnalysisService,
    convert_to_analysis_result,
)
from mockstage.services.base import (
    SCENARIO_ERRORS,
    MockServiceBase,
    MockServiceError,
    PreconditionError,
    build_scenario_error,
)
from mockstage.services.factory import MockServiceFactory
from mockstage.services.frankenstein import MockFrankensteinService

__all__ = [
    # Base
    "MockServiceBase",
    "MockServiceError",
    "PreconditionError",
    "SCENARIO_ERRORS",
    "build_scenario_error",
    # Facades
    "MockAIAnalysisService",
    "MockFrankensteinService",
    "convert_to_analysis_result",
    "DEFAULT_IMPROVEMENT_SUGGESTIONS",
    # Factory
    "MockServiceFactory",
]
