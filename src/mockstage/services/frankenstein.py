"""
Mock Frankenstein Service.

Serves "Doctor Frankenstein" idea mashups from fixtures, customized with
the combined element names, the generation mode and the response language.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from mockstage.data.store import FixtureError
from mockstage.models.responses import ResponseType
from mockstage.models.results import (
    FrankensteinElement,
    FrankensteinIdeaResult,
    FrankensteinMode,
    Locale,
)
from mockstage.services.base import (
    MockServiceBase,
    MockServiceError,
    PreconditionError,
    build_scenario_error,
)

logger = logging.getLogger(__name__)

MIN_ELEMENTS = 2


def _coerce_elements(
    elements: Sequence[FrankensteinElement | Mapping[str, Any]] | None,
) -> list[FrankensteinElement]:
    if elements is None or isinstance(elements, (str, bytes)):
        raise PreconditionError(
            "At least two elements are required to generate a Frankenstein idea"
        )
    coerced = []
    for element in elements:
        if isinstance(element, FrankensteinElement):
            coerced.append(element)
        elif isinstance(element, Mapping):
            try:
                coerced.append(FrankensteinElement.model_validate(dict(element)))
            except ValueError as e:
                raise PreconditionError(f"Invalid Frankenstein element {element!r}: {e}") from e
        else:
            raise PreconditionError(f"Invalid Frankenstein element {element!r}")
    if len(coerced) < MIN_ELEMENTS:
        raise PreconditionError(
            "At least two elements are required to generate a Frankenstein idea"
        )
    return coerced


class MockFrankensteinService(MockServiceBase):
    """Mock implementation of Frankenstein idea generation.

    Usage:
        service = MockFrankensteinService(store, config)
        idea = await service.generate_frankenstein_idea(
            [{"name": "Slack"}, {"name": "Trello"}], "companies", "en"
        )
    """

    service_name = "frankenstein"

    async def generate_frankenstein_idea(
        self,
        elements: Sequence[FrankensteinElement | Mapping[str, Any]],
        mode: FrankensteinMode | str,
        language: Locale | str,
    ) -> FrankensteinIdeaResult:
        """Generate a mock Frankenstein idea.

        Args:
            elements: Companies or technologies to combine (at least two)
            mode: Generation mode ("companies" or "aws")
            language: Response language ("en" or "es")

        Returns:
            The customized idea

        Raises:
            PreconditionError: If the input is invalid (raised immediately)
            MockServiceError: If the active scenario is not success
        """
        combined = _coerce_elements(elements)
        try:
            mode = FrankensteinMode(mode)
        except ValueError as e:
            raise PreconditionError(
                f"Invalid mode {mode!r}. Expected one of: "
                f"{', '.join(m.value for m in FrankensteinMode)}"
            ) from e
        try:
            language = Locale(language)
        except ValueError as e:
            raise PreconditionError(
                f"Invalid language {language!r}. Expected one of: "
                f"{', '.join(loc.value for loc in Locale)}"
            ) from e

        def produce() -> FrankensteinIdeaResult:
            base = self._fetch(ResponseType.FRANKENSTEIN)
            customized = self._store.customize_mock_response(
                base,
                ResponseType.FRANKENSTEIN,
                locale=language.value,
                input={
                    "elements": [e.model_dump() for e in combined],
                    "mode": mode.value,
                    "language": language.value,
                },
            )
            return FrankensteinIdeaResult.model_validate(customized.data)

        return await self._call(
            "generate_frankenstein_idea",
            produce,
            request={
                "mode": mode.value,
                "language": language.value,
                "element_count": len(combined),
                "elements": ", ".join(e.name for e in combined),
            },
        )

    def _scenario_error(self, method: str) -> MockServiceError:
        """Build the error from the scenario's fixture, falling back to the generic table."""
        scenario = self.scenario.value
        try:
            response = self._store.get_response(ResponseType.FRANKENSTEIN, scenario)
        except FixtureError as e:
            logger.warning(f"No Frankenstein error fixture for '{scenario}', using default: {e}")
            return build_scenario_error(self.scenario, method)

        if not response.is_error:
            return build_scenario_error(self.scenario, method)

        return MockServiceError(
            f"Mock Frankenstein error ({scenario}): {response.data['message']}",
            code=response.data["error"],
            status_code=response.status_code,
            method=method,
            scenario=scenario,
        )
