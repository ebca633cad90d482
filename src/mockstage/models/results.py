"""
Service Result Models.

Payload shapes returned by the mock services. They match the contracts of
the real AI service so callers cannot tell mock from real.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Score = int


class Locale(str, Enum):
    """Supported response languages."""

    EN = "en"
    ES = "es"


class FrankensteinMode(str, Enum):
    """Idea generation modes."""

    COMPANIES = "companies"
    AWS = "aws"


class HealthStatus(str, Enum):
    """Coarse service health."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class FrankensteinElement(BaseModel):
    """A company or technology combined into a Frankenstein idea."""

    name: str = Field(..., min_length=1)
    description: str | None = None


class FrankensteinIdeaMetrics(BaseModel):
    originality_score: float = Field(..., ge=0, le=100)
    feasibility_score: float = Field(..., ge=0, le=100)
    impact_score: float = Field(..., ge=0, le=100)
    scalability_score: float = Field(..., ge=0, le=100)
    wow_factor: float = Field(..., ge=0, le=100)


class FrankensteinIdeaResult(BaseModel):
    """Generated Frankenstein idea."""

    model_config = ConfigDict(extra="allow")

    idea_title: str
    idea_description: str
    core_concept: str
    problem_statement: str
    proposed_solution: str
    unique_value_proposition: str
    target_audience: str
    business_model: str
    growth_strategy: str
    tech_stack_suggestion: str
    risks_and_challenges: str
    metrics: FrankensteinIdeaMetrics
    summary: str
    language: Literal["en", "es"]


class DetailedAnalysis(BaseModel):
    strengths: list[str]
    weaknesses: list[str]
    opportunities: list[str]
    threats: list[str]


class CriteriaScore(BaseModel):
    criteria_name: str
    score: Score = Field(..., ge=0, le=100)
    justification: str


class MarketPotential(BaseModel):
    score: Score = Field(..., ge=0, le=100)
    analysis: str
    target_market: str
    market_size: str


class TechnicalFeasibility(BaseModel):
    score: Score = Field(..., ge=0, le=100)
    analysis: str
    complexity: Literal["low", "medium", "high"]
    required_skills: list[str]


class BusinessViability(BaseModel):
    score: Score = Field(..., ge=0, le=100)
    analysis: str
    revenue_model: list[str]
    competitive_advantage: str


class AIAnalysisResult(BaseModel):
    """Result of an idea or hackathon analysis."""

    score: Score = Field(..., ge=0, le=100)
    summary: str
    detailed_analysis: DetailedAnalysis
    criteria_scores: list[CriteriaScore]
    suggestions: list[str]
    market_potential: MarketPotential
    technical_feasibility: TechnicalFeasibility
    business_viability: BusinessViability
    raw: dict[str, Any] = Field(
        default_factory=dict,
        description="Customized fixture payload the result was built from",
    )


class ComparisonFactor(BaseModel):
    factor: str
    idea1_score: Score
    idea2_score: Score
    winner: Literal["idea1", "idea2", "tie"]


class IdeaComparison(BaseModel):
    winner: Literal["idea1", "idea2", "tie"]
    score_difference: int
    comparison_factors: list[ComparisonFactor]
    recommendation: str


class AlternativeCategory(BaseModel):
    category: str
    confidence: Score = Field(..., ge=0, le=100)
    reason: str


class CategoryRecommendation(BaseModel):
    recommended_category: str
    confidence: Score = Field(..., ge=0, le=100)
    alternative_categories: list[AlternativeCategory]


class HealthCheckResult(BaseModel):
    status: HealthStatus
    latency: float = Field(..., ge=0, description="Call duration in milliseconds")
