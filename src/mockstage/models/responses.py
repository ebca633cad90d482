"""
Fixture Response Models.

Defines the response types served by the mock backend, the MockResponse
variant container and the Pydantic schemas each fixture payload must
satisfy.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ResponseType(str, Enum):
    """Kinds of AI responses the mock backend serves."""

    ANALYZER = "analyzer"
    HACKATHON = "hackathon"
    FRANKENSTEIN = "frankenstein"


@dataclass
class MockResponse:
    """A single fixture variant.

    Attributes:
        data: Success payload or {"error", "message"} pair
        status_code: HTTP status code the variant represents
        delay: Optional per-variant delay in milliseconds
    """

    data: dict[str, Any]
    status_code: int = 200
    delay: float | None = None

    @property
    def is_error(self) -> bool:
        """True when data is error-shaped."""
        return isinstance(self.data, dict) and "error" in self.data

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> MockResponse:
        """Build from the on-disk {data, statusCode, delay} shape."""
        return cls(
            data=raw.get("data"),
            status_code=raw.get("statusCode", 200),
            delay=raw.get("delay"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk shape."""
        result: dict[str, Any] = {"data": self.data, "statusCode": self.status_code}
        if self.delay is not None:
            result["delay"] = self.delay
        return result


# =============================================================================
# Envelope and error payload
# =============================================================================


class MockResponseEnvelope(BaseModel):
    """Shape shared by every variant: {data, statusCode, delay?}."""

    data: dict[str, Any]
    statusCode: int = Field(..., ge=100, le=599)
    delay: float | None = Field(default=None, ge=0)


class ErrorPayload(BaseModel):
    """Error-shaped variant data. Success fields are not allowed alongside."""

    model_config = ConfigDict(extra="forbid")

    error: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)


# =============================================================================
# Shared building blocks
# =============================================================================


class ScoringRubricItem(BaseModel):
    name: str = Field(..., min_length=1)
    score: float = Field(..., ge=0, le=100)
    justification: str = Field(..., min_length=1)


class Competitor(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    strengths: list[str]
    weaknesses: list[str]


class TitledItem(BaseModel):
    """Improvement suggestion or next step."""

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)


class MonetizationStrategy(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)


# =============================================================================
# Analyzer
# =============================================================================


class FounderQuestion(BaseModel):
    question: str = Field(..., min_length=1)
    ask: str = Field(..., min_length=1)
    why: str = Field(..., min_length=1)
    source: str = Field(..., min_length=1)
    analysis: str = Field(..., min_length=1)


class SwotAnalysis(BaseModel):
    strengths: list[str]
    weaknesses: list[str]
    opportunities: list[str]
    threats: list[str]


class MarketTrend(BaseModel):
    trend: str = Field(..., min_length=1)
    impact: str = Field(..., min_length=1)


class AnalyzerPayload(BaseModel):
    """Success payload for idea analysis."""

    detailedSummary: str = Field(..., min_length=1)
    founderQuestions: list[FounderQuestion]
    swotAnalysis: SwotAnalysis
    currentMarketTrends: list[MarketTrend]
    scoringRubric: list[ScoringRubricItem]
    competitors: list[Competitor]
    monetizationStrategies: list[MonetizationStrategy]
    improvementSuggestions: list[TitledItem]
    nextSteps: list[TitledItem]
    finalScore: float = Field(..., ge=0, le=100)
    finalScoreExplanation: str = Field(..., min_length=1)
    viabilitySummary: str = Field(..., min_length=1)


# =============================================================================
# Hackathon
# =============================================================================


class CategoryEvaluation(BaseModel):
    category: str = Field(..., min_length=1)
    fitScore: float = Field(..., ge=0, le=10)
    explanation: str = Field(..., min_length=1)
    improvementSuggestions: list[str]


class CategoryAnalysis(BaseModel):
    evaluations: list[CategoryEvaluation]
    bestMatch: str = Field(..., min_length=1)
    bestMatchReason: str = Field(..., min_length=1)


class SubScore(BaseModel):
    score: float = Field(..., ge=0, le=5)
    explanation: str = Field(..., min_length=1)


class CriteriaScore(BaseModel):
    name: str = Field(..., min_length=1)
    score: float = Field(..., ge=0, le=5)
    justification: str = Field(..., min_length=1)
    subScores: dict[str, SubScore]


class CriteriaAnalysis(BaseModel):
    scores: list[CriteriaScore]
    finalScore: float = Field(..., ge=0, le=5)
    finalScoreExplanation: str = Field(..., min_length=1)


class HackathonSpecificAdvice(BaseModel):
    categoryOptimization: list[str]
    kiroIntegrationTips: list[str]
    competitionStrategy: list[str]


class HackathonPayload(BaseModel):
    """Success payload for hackathon project evaluation."""

    detailedSummary: str = Field(..., min_length=1)
    categoryAnalysis: CategoryAnalysis
    criteriaAnalysis: CriteriaAnalysis
    hackathonSpecificAdvice: HackathonSpecificAdvice
    scoringRubric: list[ScoringRubricItem]
    competitors: list[Competitor]
    improvementSuggestions: list[TitledItem]
    nextSteps: list[TitledItem]
    finalScore: float = Field(..., ge=0, le=100)
    finalScoreExplanation: str = Field(..., min_length=1)
    viabilitySummary: str = Field(..., min_length=1)


# =============================================================================
# Frankenstein
# =============================================================================


class FrankensteinMetrics(BaseModel):
    originality_score: float = Field(..., ge=0, le=100)
    feasibility_score: float = Field(..., ge=0, le=100)
    impact_score: float = Field(..., ge=0, le=100)
    scalability_score: float = Field(..., ge=0, le=100)
    wow_factor: float = Field(..., ge=0, le=100)


class FrankensteinPayload(BaseModel):
    """Success payload for Frankenstein idea generation."""

    idea_title: str = Field(..., min_length=1)
    idea_description: str = Field(..., min_length=1)
    core_concept: str = Field(..., min_length=1)
    problem_statement: str = Field(..., min_length=1)
    proposed_solution: str = Field(..., min_length=1)
    unique_value_proposition: str = Field(..., min_length=1)
    target_audience: str = Field(..., min_length=1)
    business_model: str = Field(..., min_length=1)
    growth_strategy: str = Field(..., min_length=1)
    tech_stack_suggestion: str = Field(..., min_length=1)
    risks_and_challenges: str = Field(..., min_length=1)
    metrics: FrankensteinMetrics
    summary: str = Field(..., min_length=1)
    language: Literal["en", "es"]


# Lookup tables keyed by response type
FIXTURE_FILES: dict[ResponseType, str] = {
    ResponseType.ANALYZER: "analyzer-mocks.json",
    ResponseType.HACKATHON: "hackathon-mocks.json",
    ResponseType.FRANKENSTEIN: "frankenstein-mocks.json",
}

RESPONSE_SCHEMAS: dict[ResponseType, type[BaseModel]] = {
    ResponseType.ANALYZER: AnalyzerPayload,
    ResponseType.HACKATHON: HackathonPayload,
    ResponseType.FRANKENSTEIN: FrankensteinPayload,
}
