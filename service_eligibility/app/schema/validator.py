"""
Structural validation of benefit-schema documents.

Rejects malformed documents before they reach the eligibility engine. Only
the shape is checked here; operator names and operand arity are checked by
the condition evaluator.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from jsonschema import Draft7Validator

from ..rules.models import CriterionCategory

SCALAR_SCHEMA: Dict[str, Any] = {"type": ["string", "number", "boolean"]}

CRITERION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["type", "description", "criteria"],
    "properties": {
        "type": {"type": "string", "enum": [c.value for c in CriterionCategory]},
        "description": {"type": "string"},
        "criteria": {
            "type": "object",
            "required": ["name", "condition", "conditionValues"],
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "condition": {"type": ["string", "object"]},
                "conditionValues": {
                    "oneOf": [
                        SCALAR_SCHEMA,
                        {"type": "array", "items": SCALAR_SCHEMA, "minItems": 1},
                    ]
                },
            },
        },
        "allowedProofs": {"type": "array", "items": {"type": "string"}},
    },
}

CONTENT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["eligibility"],
    "properties": {
        "basicDetails": {"type": "object"},
        "eligibility": {"type": "array", "items": CRITERION_SCHEMA},
    },
}

BENEFIT_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {"id": {"type": ["string", "number", "null"]}},
    "if": {"required": ["en"]},
    "then": {"properties": {"en": CONTENT_SCHEMA}},
    "else": CONTENT_SCHEMA,
}


@dataclass
class ValidationResult:
    """Result of structural validation."""
    is_valid: bool
    errors: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"isValid": self.is_valid, "errors": self.errors}


class BenefitSchemaValidator:
    """JSON-schema validator for benefit-schema documents."""

    def __init__(self, schema: Dict[str, Any] = BENEFIT_SCHEMA):
        Draft7Validator.check_schema(schema)
        self._validator = Draft7Validator(schema)

    def validate(self, document: Any) -> ValidationResult:
        errors = [
            {
                "path": "/" + "/".join(str(part) for part in error.absolute_path),
                "keyword": error.validator,
                "message": error.message,
            }
            for error in sorted(self._validator.iter_errors(document), key=lambda e: [str(part) for part in e.absolute_path])
        ]
        return ValidationResult(is_valid=not errors, errors=errors)
