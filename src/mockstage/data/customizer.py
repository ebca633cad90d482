"""
Response Customization.

Turns a base fixture into a response that reflects the current call:
locale translation, input-driven text substitution, Frankenstein metric
adjustment and deep-merge of caller supplied overrides. Customization is
pure: the input response is deep-copied first and never mutated.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping, Sequence
from typing import Any

from mockstage.models.responses import MockResponse, ResponseType

# Snippet length taken from caller text
SNIPPET_LENGTH = 50

SPANISH_TRANSLATIONS: dict[str, str] = {
    "detailedSummary": "Este concepto muestra un fuerte potencial en el mercado.",
    "viabilitySummary": "Viable con ejecución enfocada.",
    "finalScoreExplanation": "Esta idea muestra un buen potencial con algunos riesgos de ejecución.",
}

METRIC_FIELDS = (
    "originality_score",
    "feasibility_score",
    "impact_score",
    "scalability_score",
    "wow_factor",
)

# Generic tech-stack phrases and their AWS-native replacements, applied in order
AWS_TECH_STACK_REWRITES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"Frontend built with React", re.IGNORECASE), "Frontend using AWS Amplify with React"),
    (re.compile(r"Backend using Node\.js", re.IGNORECASE), "Backend using AWS Lambda with Node.js"),
    (re.compile(r"PostgreSQL", re.IGNORECASE), "Amazon RDS (PostgreSQL) or DynamoDB"),
    (re.compile(r"Redis", re.IGNORECASE), "Amazon ElastiCache"),
    (re.compile(r"Cloud infrastructure on AWS", re.IGNORECASE), "AWS-native architecture leveraging"),
    (re.compile(r"infrastructure", re.IGNORECASE), "AWS infrastructure"),
)

ANALYZER_SUMMARY_PATTERN = re.compile(r"This .* concept")
COMBINES_PATTERN = re.compile(r"combines", re.IGNORECASE)


def deep_clone(value: Any) -> Any:
    """Structural deep copy of a response or payload."""
    return copy.deepcopy(value)


def deep_merge(base: Any, override: Any) -> Any:
    """Deep-merge override into a copy of base.

    Dicts merge key by key recursively; lists and scalars replace the base
    value wholesale. None values in override leave the base value alone.
    A non-dict base or override returns base unchanged.
    """
    if not isinstance(base, Mapping) or not isinstance(override, Mapping):
        return base

    merged = deep_clone(dict(base))
    for key, value in override.items():
        if value is None:
            continue
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        elif isinstance(value, (Mapping, list)):
            merged[key] = deep_clone(value)
        else:
            merged[key] = value
    return merged


def clamp_score(value: float, low: float = 0, high: float = 100) -> float:
    """Clamp a metric into [low, high]."""
    return max(low, min(high, value))


def raise_score(value: float, amount: float) -> float:
    """Add a bonus, capped at 100."""
    return clamp_score(value + amount)


def lower_score(value: float, amount: float, floor: float) -> float:
    """Subtract a penalty without crossing floor.

    A value already below floor is left where it is.
    """
    return clamp_score(max(min(value, floor), value - amount))


def _element_field(element: Any, name: str) -> Any:
    if isinstance(element, Mapping):
        return element.get(name)
    return getattr(element, name, None)


class ResponseCustomizer:
    """Derives call-specific responses from base fixtures.

    Usage:
        customizer = ResponseCustomizer()
        response = customizer.customize(
            base,
            ResponseType.FRANKENSTEIN,
            locale="es",
            input={"elements": [{"name": "Slack"}, {"name": "Trello"}], "mode": "aws"},
        )
    """

    def customize(
        self,
        response: MockResponse,
        response_type: ResponseType | str,
        *,
        locale: str | None = None,
        input: Mapping[str, Any] | None = None,
        variant_data: Mapping[str, Any] | None = None,
    ) -> MockResponse:
        """Customize a fixture for one call.

        Args:
            response: Base fixture variant (not modified)
            response_type: Response type of the fixture
            locale: Response language; only "es" changes text
            input: Call input (idea text, project description, elements, mode)
            variant_data: Override object deep-merged last

        Returns:
            A new MockResponse
        """
        response_type = ResponseType(response_type)
        customized = deep_clone(response)

        if customized.is_error or not isinstance(customized.data, dict):
            return customized

        if locale:
            customized.data = self.apply_locale(customized.data, response_type, locale)

        if input:
            customized.data = self.apply_input(customized.data, response_type, input)

        if variant_data:
            customized.data = deep_merge(customized.data, variant_data)

        return customized

    def apply_locale(
        self,
        data: dict[str, Any],
        response_type: ResponseType,
        locale: str,
    ) -> dict[str, Any]:
        """Apply locale-specific text replacements."""
        if "error" in data or locale != "es":
            return data

        translated = dict(data)
        for key, value in translated.items():
            if isinstance(value, str) and key in SPANISH_TRANSLATIONS:
                translated[key] = SPANISH_TRANSLATIONS[key]

        if response_type is ResponseType.FRANKENSTEIN and "language" in translated:
            translated["language"] = "es"

        return translated

    def apply_input(
        self,
        data: dict[str, Any],
        response_type: ResponseType,
        input: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Apply type-specific input customization."""
        customizers = {
            ResponseType.ANALYZER: self._customize_analyzer,
            ResponseType.HACKATHON: self._customize_hackathon,
            ResponseType.FRANKENSTEIN: self._customize_frankenstein,
        }
        return customizers[response_type](dict(data), input)

    def _customize_analyzer(self, data: dict[str, Any], input: Mapping[str, Any]) -> dict[str, Any]:
        idea = input.get("idea")
        summary = data.get("detailedSummary")
        if isinstance(idea, str) and idea and isinstance(summary, str):
            snippet = idea[:SNIPPET_LENGTH]
            data["detailedSummary"] = ANALYZER_SUMMARY_PATTERN.sub(
                lambda _: f'This "{snippet}..." concept', summary, count=1
            )
        return data

    def _customize_hackathon(self, data: dict[str, Any], input: Mapping[str, Any]) -> dict[str, Any]:
        description = input.get("projectDescription")
        summary = data.get("detailedSummary")
        if isinstance(description, str) and description and isinstance(summary, str):
            snippet = description[:SNIPPET_LENGTH]
            data["detailedSummary"] = f'This "{snippet}..." project {summary[5:]}'
        return data

    def _customize_frankenstein(
        self, data: dict[str, Any], input: Mapping[str, Any]
    ) -> dict[str, Any]:
        elements = input.get("elements")
        metrics = data.get("metrics")
        if isinstance(metrics, dict):
            metrics = dict(metrics)
            data["metrics"] = metrics
        else:
            metrics = None

        if isinstance(elements, Sequence) and not isinstance(elements, str):
            self._apply_elements(data, list(elements), metrics)

        mode = input.get("mode")
        mode = getattr(mode, "value", mode)
        if mode == "aws":
            self._apply_aws_mode(data, metrics)
        elif mode == "companies":
            self._apply_companies_mode(data, elements, metrics)

        if metrics is not None:
            for name in METRIC_FIELDS:
                if isinstance(metrics.get(name), (int, float)):
                    metrics[name] = clamp_score(metrics[name])

        return data

    def _apply_elements(
        self,
        data: dict[str, Any],
        elements: list[Any],
        metrics: dict[str, Any] | None,
    ) -> None:
        names = [n for n in (_element_field(el, "name") for el in elements) if n]
        count = len(elements)

        if names and isinstance(data.get("idea_title"), str):
            if count == 2:
                suffix = "Fusion Platform"
            elif count == 3:
                suffix = "Integration Hub"
            else:
                suffix = "Ecosystem"
            data["idea_title"] = f"{' + '.join(names)} {suffix}"

        if isinstance(data.get("idea_description"), str):
            described = ", ".join(
                str(_element_field(el, "name"))
                for el in elements
                if _element_field(el, "description") and _element_field(el, "name")
            )
            if described:
                data["idea_description"] = COMBINES_PATTERN.sub(
                    lambda _: f"combines {described} to create",
                    data["idea_description"],
                    count=1,
                )

        if metrics is None or not self._has_metrics(metrics):
            return

        # More combined concepts: more novel, harder to execute
        if count == 2:
            metrics["originality_score"] = raise_score(metrics["originality_score"], 5)
            metrics["feasibility_score"] = raise_score(metrics["feasibility_score"], 5)
        elif count == 3:
            metrics["originality_score"] = raise_score(metrics["originality_score"], 10)
            metrics["feasibility_score"] = lower_score(metrics["feasibility_score"], 3, floor=50)
        elif count > 3:
            metrics["originality_score"] = raise_score(metrics["originality_score"], 15)
            metrics["feasibility_score"] = lower_score(metrics["feasibility_score"], 8, floor=40)
            metrics["wow_factor"] = raise_score(metrics["wow_factor"], 10)

    def _apply_aws_mode(self, data: dict[str, Any], metrics: dict[str, Any] | None) -> None:
        tech_stack = data.get("tech_stack_suggestion")
        if isinstance(tech_stack, str):
            for pattern, replacement in AWS_TECH_STACK_REWRITES:
                tech_stack = pattern.sub(replacement, tech_stack, count=1)
            if "AWS" not in tech_stack:
                tech_stack = f"AWS-native architecture: {tech_stack}"
            data["tech_stack_suggestion"] = tech_stack

        if metrics is not None and self._has_metrics(metrics):
            metrics["scalability_score"] = raise_score(metrics["scalability_score"], 12)
            metrics["feasibility_score"] = max(50, raise_score(metrics["feasibility_score"], 5))

        growth = data.get("growth_strategy")
        if isinstance(growth, str) and "cloud" not in growth and "AWS" not in growth:
            data["growth_strategy"] = (
                f"Leverage AWS global infrastructure for rapid scaling. {growth}"
            )

    def _apply_companies_mode(
        self,
        data: dict[str, Any],
        elements: Any,
        metrics: dict[str, Any] | None,
    ) -> None:
        proposition = data.get("unique_value_proposition")
        if (
            isinstance(proposition, str)
            and isinstance(elements, Sequence)
            and not isinstance(elements, str)
            and len(elements) >= 2
        ):
            first_two = [n for n in (_element_field(el, "name") for el in elements[:2]) if n]
            if len(first_two) == 2:
                data["unique_value_proposition"] = (
                    f"Combines the best of {first_two[0]} and {first_two[1]}: {proposition}"
                )

        if metrics is not None and self._has_metrics(metrics):
            metrics["impact_score"] = raise_score(metrics["impact_score"], 8)
            metrics["wow_factor"] = raise_score(metrics["wow_factor"], 5)

    @staticmethod
    def _has_metrics(metrics: Mapping[str, Any]) -> bool:
        return all(isinstance(metrics.get(name), (int, float)) for name in METRIC_FIELDS)
