"""
Fixture Schema Validation.

Structural validation of fixture variants against the per-type Pydantic
schemas. Malformed input never raises: mismatches become itemized
"<field path>: <message>" strings.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ValidationError

from mockstage.models.responses import (
    RESPONSE_SCHEMAS,
    ErrorPayload,
    MockResponse,
    MockResponseEnvelope,
    ResponseType,
)

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Outcome of validating one variant.

    Attributes:
        valid: Whether the variant matches its schema
        errors: Itemized "<path>: <message>" strings
        warnings: Non-fatal observations
    """

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def format_validation_errors(error: ValidationError, prefix: str = "") -> list[str]:
    """Flatten a Pydantic ValidationError into "<path>: <message>" strings."""
    messages = []
    for err in error.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        if prefix:
            loc = f"{prefix}.{loc}" if loc else prefix
        messages.append(f"{loc}: {err.get('msg', 'Invalid value')}")
    return messages


class SchemaValidator:
    """Validates fixture variants against their response-type schema.

    Usage:
        validator = SchemaValidator()
        result = validator.validate(variant, ResponseType.ANALYZER)
        if not result.valid:
            print(result.errors)
    """

    def __init__(self, schemas: dict[ResponseType, type[BaseModel]] | None = None) -> None:
        self._schemas = dict(schemas or RESPONSE_SCHEMAS)

    def get_schema(self, response_type: ResponseType | str) -> type[BaseModel]:
        """Get the success-payload schema for a response type.

        Raises:
            ValueError: If the response type is unknown
        """
        return self._schemas[ResponseType(response_type)]

    def validate(
        self,
        response: MockResponse | dict[str, Any],
        response_type: ResponseType | str,
    ) -> ValidationResult:
        """Validate a single variant.

        Args:
            response: Variant as a MockResponse or the on-disk dict shape
            response_type: Response type selecting the schema

        Returns:
            ValidationResult with itemized errors
        """
        try:
            raw = response.to_dict() if isinstance(response, MockResponse) else response
            if not isinstance(raw, dict):
                return ValidationResult(
                    valid=False,
                    errors=[f"variant: Expected an object, got {type(raw).__name__}"],
                )

            try:
                envelope = MockResponseEnvelope.model_validate(raw)
            except ValidationError as e:
                return ValidationResult(valid=False, errors=format_validation_errors(e))

            data = envelope.data
            schema = ErrorPayload if "error" in data else self.get_schema(response_type)
            try:
                schema.model_validate(data)
            except ValidationError as e:
                return ValidationResult(
                    valid=False, errors=format_validation_errors(e, prefix="data")
                )

            return ValidationResult(valid=True)
        except Exception as e:
            logger.exception("Unexpected error validating %s variant", response_type)
            return ValidationResult(valid=False, errors=[f"Validation failed: {e}"])

    def validate_all(
        self,
        fixture: dict[str, Any],
        response_type: ResponseType | str,
    ) -> dict[str, list[ValidationResult]]:
        """Validate every variant of every scenario in a fixture file.

        Args:
            fixture: Parsed fixture document with a "scenarios" mapping
            response_type: Response type selecting the schema

        Returns:
            Results per scenario, in variant order. Failing variants get a
            "Variant N:" prefix on each error.
        """
        results: dict[str, list[ValidationResult]] = {}
        scenarios = fixture.get("scenarios") or {}

        for scenario, variants in scenarios.items():
            if not variants:
                results[scenario] = [
                    ValidationResult(
                        valid=False,
                        errors=[f"{scenario}: Scenario has no variants"],
                        warnings=[f"Scenario '{scenario}' is empty"],
                    )
                ]
                continue

            scenario_results = []
            for index, variant in enumerate(variants, start=1):
                result = self.validate(variant, response_type)
                if not result.valid:
                    result.errors = [f"Variant {index}: {error}" for error in result.errors]
                scenario_results.append(result)
            results[scenario] = scenario_results

        return results

    def collect_errors(
        self,
        fixture: dict[str, Any],
        response_type: ResponseType | str,
    ) -> list[str]:
        """Collect every error of a fixture file with a [type/scenario/variant-N] prefix."""
        response_type = ResponseType(response_type)
        all_errors: list[str] = []
        scenarios = fixture.get("scenarios") or {}
        for scenario, variants in scenarios.items():
            if not variants:
                all_errors.append(f"[{response_type.value}/{scenario}] Scenario has no variants")
                continue
            for index, variant in enumerate(variants, start=1):
                result = self.validate(variant, response_type)
                if not result.valid:
                    prefix = f"[{response_type.value}/{scenario}/variant-{index}]"
                    all_errors.extend(f"{prefix} {error}" for error in result.errors)
        return all_errors
