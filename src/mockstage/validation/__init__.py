"""
mockstage - Fixture Validation

Schema validation for fixture variants, used at load time by the response
store and offline by the validate command.
"""

from mockstage.validation.schema import (
    SchemaValidator,
    ValidationResult,
    format_validation_errors,
)

__all__ = [
    "SchemaValidator",
    "ValidationResult",
    "format_validation_errors",
]
