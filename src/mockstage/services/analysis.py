"""
Mock AI Analysis Service.

Mirrors the AI analysis service contract (idea analysis, hackathon
evaluation, suggestions, comparison, category recommendation, health
check) with fixture-backed, scenario-driven responses.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Any

from mockstage.config.models import TestScenario
from mockstage.models.responses import ResponseType
from mockstage.models.results import (
    AIAnalysisResult,
    AlternativeCategory,
    BusinessViability,
    CategoryRecommendation,
    ComparisonFactor,
    CriteriaScore,
    DetailedAnalysis,
    HealthCheckResult,
    HealthStatus,
    IdeaComparison,
    Locale,
    MarketPotential,
    TechnicalFeasibility,
)
from mockstage.services.base import MockServiceBase, PreconditionError

DEFAULT_IMPROVEMENT_SUGGESTIONS = [
    "Consider expanding your target market",
    "Strengthen your unique value proposition",
    "Develop a more detailed go-to-market strategy",
]

DEFAULT_CRITERIA_SCORES = [
    CriteriaScore(
        criteria_name="Innovation",
        score=80,
        justification="Innovative approach to problem solving",
    ),
    CriteriaScore(
        criteria_name="Market Fit",
        score=75,
        justification="Good market fit with target audience",
    ),
    CriteriaScore(
        criteria_name="Execution",
        score=70,
        justification="Feasible execution plan",
    ),
]

SCENARIO_HEALTH: dict[TestScenario, HealthStatus] = {
    TestScenario.SUCCESS: HealthStatus.HEALTHY,
    TestScenario.TIMEOUT: HealthStatus.DEGRADED,
    TestScenario.RATE_LIMIT: HealthStatus.DEGRADED,
    TestScenario.API_ERROR: HealthStatus.UNHEALTHY,
    TestScenario.INVALID_INPUT: HealthStatus.UNHEALTHY,
    TestScenario.PARTIAL_RESPONSE: HealthStatus.UNHEALTHY,
}


def _score(value: Any, default: int) -> int:
    """Coerce a fixture number to a 0-100 score; missing or zero means default."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not value:
        return default
    return int(round(max(0, min(100, value))))


def _text(value: Any, default: str) -> str:
    return value if isinstance(value, str) and value else default


def _strings(value: Any, default: list[str]) -> list[str]:
    if isinstance(value, list) and value and all(isinstance(v, str) for v in value):
        return list(value)
    return list(default)


def _extract_criteria_scores(data: Mapping[str, Any]) -> list[CriteriaScore]:
    rubric = data.get("scoringRubric")
    if not isinstance(rubric, list) or not rubric:
        return [score.model_copy() for score in DEFAULT_CRITERIA_SCORES]
    scores = []
    for item in rubric:
        item = item if isinstance(item, Mapping) else {}
        scores.append(
            CriteriaScore(
                criteria_name=_text(item.get("name") or item.get("criteria"), "Unknown"),
                score=_score(item.get("score"), 75),
                justification=_text(item.get("justification"), "Mock justification"),
            )
        )
    return scores


def _extract_suggestions(data: Mapping[str, Any]) -> list[str]:
    suggestions = data.get("suggestions")
    if isinstance(suggestions, list) and suggestions:
        return _strings(suggestions, ["Consider market research"])
    titled = data.get("improvementSuggestions")
    if isinstance(titled, list):
        titles = [
            item["title"]
            for item in titled
            if isinstance(item, Mapping) and isinstance(item.get("title"), str)
        ]
        if titles:
            return titles
    return ["Consider market research"]


def convert_to_analysis_result(data: Mapping[str, Any]) -> AIAnalysisResult:
    """Convert an analyzer or hackathon payload to an AIAnalysisResult.

    Missing fields get fixed defaults so every result is complete.

    Args:
        data: Customized fixture payload

    Returns:
        AIAnalysisResult carrying the payload in raw
    """
    swot = data.get("swotAnalysis")
    swot = swot if isinstance(swot, Mapping) else data

    return AIAnalysisResult(
        score=_score(data.get("finalScore"), 75),
        summary=_text(data.get("detailedSummary"), "Mock analysis summary"),
        detailed_analysis=DetailedAnalysis(
            strengths=_strings(swot.get("strengths"), ["Strong market potential"]),
            weaknesses=_strings(swot.get("weaknesses"), ["Needs more validation"]),
            opportunities=_strings(swot.get("opportunities"), ["Growing market"]),
            threats=_strings(swot.get("threats"), ["Competition"]),
        ),
        criteria_scores=_extract_criteria_scores(data),
        suggestions=_extract_suggestions(data),
        market_potential=MarketPotential(
            score=_score(data.get("marketPotentialScore"), 80),
            analysis=_text(data.get("marketPotentialAnalysis"), "Strong market potential"),
            target_market=_text(data.get("targetMarket"), "General consumers"),
            market_size=_text(data.get("marketSize"), "Large"),
        ),
        technical_feasibility=TechnicalFeasibility(
            score=_score(data.get("technicalFeasibilityScore"), 75),
            analysis=_text(data.get("technicalFeasibilityAnalysis"), "Technically feasible"),
            complexity=(
                data["complexity"]
                if data.get("complexity") in ("low", "medium", "high")
                else "medium"
            ),
            required_skills=_strings(data.get("requiredSkills"), ["Development", "Design"]),
        ),
        business_viability=BusinessViability(
            score=_score(data.get("businessViabilityScore"), 70),
            analysis=_text(data.get("businessViabilityAnalysis"), "Viable business model"),
            revenue_model=_strings(data.get("revenueModel"), ["Subscription"]),
            competitive_advantage=_text(data.get("competitiveAdvantage"), "Unique approach"),
        ),
        raw=dict(data),
    )


def _require_text(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise PreconditionError(f"{name} must be a non-empty string")
    return value


def _require_locale(locale: Locale | str) -> Locale:
    try:
        return Locale(locale)
    except ValueError as e:
        raise PreconditionError(
            f"Invalid locale {locale!r}. Expected one of: {', '.join(loc.value for loc in Locale)}"
        ) from e


class MockAIAnalysisService(MockServiceBase):
    """Fixture-backed stand-in for the AI analysis service.

    Usage:
        service = MockAIAnalysisService(store, config)
        result = await service.analyze_idea("An app that ...", "en")
        health = await service.health_check()
    """

    service_name = "analysis"

    async def analyze_idea(self, idea: str, locale: Locale | str = Locale.EN) -> AIAnalysisResult:
        """Analyze a startup idea.

        Args:
            idea: Idea description
            locale: Response language

        Returns:
            Analysis result built from the analyzer fixture

        Raises:
            PreconditionError: If the input is invalid
            MockServiceError: If the active scenario is not success
        """
        idea = _require_text("idea", idea)
        locale = _require_locale(locale)

        def produce() -> AIAnalysisResult:
            base = self._fetch(ResponseType.ANALYZER)
            customized = self._store.customize_mock_response(
                base,
                ResponseType.ANALYZER,
                locale=locale.value,
                input={"idea": idea},
            )
            return convert_to_analysis_result(customized.data)

        return await self._call(
            "analyze_idea",
            produce,
            request={"locale": locale.value, "idea_length": len(idea)},
        )

    async def analyze_hackathon_project(
        self,
        project_name: str,
        description: str,
        locale: Locale | str = Locale.EN,
    ) -> AIAnalysisResult:
        """Evaluate a hackathon project.

        Args:
            project_name: Project name
            description: Project description
            locale: Response language

        Returns:
            Analysis result built from the hackathon fixture
        """
        project_name = _require_text("project_name", project_name)
        description = _require_text("description", description)
        locale = _require_locale(locale)

        def produce() -> AIAnalysisResult:
            base = self._fetch(ResponseType.HACKATHON)
            customized = self._store.customize_mock_response(
                base,
                ResponseType.HACKATHON,
                locale=locale.value,
                input={"projectName": project_name, "projectDescription": description},
            )
            return convert_to_analysis_result(customized.data)

        return await self._call(
            "analyze_hackathon_project",
            produce,
            request={"locale": locale.value, "project_name": project_name},
        )

    async def get_improvement_suggestions(
        self,
        idea: str,
        current_score: int,
        locale: Locale | str = Locale.EN,
    ) -> list[str]:
        """Get improvement suggestions for an idea.

        Fixture payloads with a "suggestions" list win; otherwise a fixed
        list of generic suggestions is returned.
        """
        _require_text("idea", idea)
        if (
            isinstance(current_score, bool)
            or not isinstance(current_score, (int, float))
            or not 0 <= current_score <= 100
        ):
            raise PreconditionError(f"current_score must be within [0, 100], got {current_score!r}")
        locale = _require_locale(locale)

        def produce() -> list[str]:
            data = self._fetch(ResponseType.ANALYZER).data
            return _strings(data.get("suggestions"), DEFAULT_IMPROVEMENT_SUGGESTIONS)

        return await self._call(
            "get_improvement_suggestions",
            produce,
            request={"locale": locale.value, "current_score": current_score},
        )

    async def compare_ideas(
        self,
        idea1: str,
        idea2: str,
        locale: Locale | str = Locale.EN,
    ) -> IdeaComparison:
        """Compare two ideas. The mock comparison is fixed."""
        _require_text("idea1", idea1)
        _require_text("idea2", idea2)
        locale = _require_locale(locale)

        def produce() -> IdeaComparison:
            return IdeaComparison(
                winner="idea1",
                score_difference=12,
                comparison_factors=[
                    ComparisonFactor(
                        factor="Market Potential", idea1_score=85, idea2_score=72, winner="idea1"
                    ),
                    ComparisonFactor(
                        factor="Technical Feasibility",
                        idea1_score=78,
                        idea2_score=80,
                        winner="idea2",
                    ),
                    ComparisonFactor(
                        factor="Business Viability", idea1_score=82, idea2_score=75, winner="idea1"
                    ),
                ],
                recommendation=(
                    "Idea 1 shows stronger overall potential with better market positioning."
                ),
            )

        return await self._call("compare_ideas", produce, request={"locale": locale.value})

    async def recommend_hackathon_category(
        self,
        project_name: str,
        description: str,
    ) -> CategoryRecommendation:
        """Recommend a hackathon category. The mock recommendation is fixed."""
        project_name = _require_text("project_name", project_name)
        _require_text("description", description)

        def produce() -> CategoryRecommendation:
            return CategoryRecommendation(
                recommended_category="Best Use of AI",
                confidence=88,
                alternative_categories=[
                    AlternativeCategory(
                        category="Most Innovative",
                        confidence=75,
                        reason="Strong innovation in approach",
                    ),
                    AlternativeCategory(
                        category="Best Developer Tool",
                        confidence=68,
                        reason="Useful for developers",
                    ),
                ],
            )

        return await self._call(
            "recommend_hackathon_category",
            produce,
            request={"project_name": project_name},
        )

    async def health_check(self) -> HealthCheckResult:
        """Report coarse health derived from the active scenario.

        Never raises for the scenario: error scenarios map to degraded or
        unhealthy instead.
        """
        start = time.perf_counter()
        await self._simulate_latency()

        status = SCENARIO_HEALTH.get(self.scenario, HealthStatus.HEALTHY)
        duration = self._elapsed_ms(start)
        self._record_request("health_check", success=True, latency=duration)
        self._record_performance("health_check", duration)
        return HealthCheckResult(status=status, latency=duration)
